import logging
from typing import List, Optional

from sqlalchemy import case, insert, literal, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from messagely.auth import PasswordHasher
from messagely.exceptions import ConflictError, NotFoundError
from messagely.models.base import utcnow
from messagely.models.user import User
from messagely.schemas.user import UserCreate, UserProfile, UserSummary, LoginStamp

logger = logging.getLogger("messagely.users")

_PROFILE_COLUMNS = (
    User.username,
    User.first_name,
    User.last_name,
    User.phone,
    User.joined_at,
    User.last_login_at,
)


class UserRepository:
    """Registration, authentication and profile lookups against the users table.

    Storage errors (``sqlalchemy.exc.SQLAlchemyError``) are not caught here and
    reach the caller unchanged.

    ``hasher`` is only needed by :meth:`register` and :meth:`authenticate`.
    """

    def __init__(self, db: AsyncSession, hasher: Optional[PasswordHasher] = None):
        self.db = db
        self.hasher = hasher

    async def register(self, user_data: UserCreate) -> UserProfile:
        hashed_password = await run_in_threadpool(self.hasher.hash, user_data.password)
        try:
            result = await self.db.execute(
                insert(User)
                .values(
                    username=user_data.username,
                    password=hashed_password,
                    first_name=user_data.first_name,
                    last_name=user_data.last_name,
                    phone=user_data.phone,
                )
                .returning(*_PROFILE_COLUMNS)
            )
            row = result.one()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.info(f"Registration rejected, username taken: {user_data.username}")
            raise ConflictError(f"Username already taken: {user_data.username}") from e

        logger.info(f"Registered user: {user_data.username}")
        return UserProfile(**row._mapping)

    async def authenticate(self, username: str, password: str) -> bool:
        """Check a username/password pair.

        Raises NotFoundError for an unknown username, after doing the same
        hashing work a real check would.
        """
        result = await self.db.execute(select(User.password).where(User.username == username))
        digest = result.scalar_one_or_none()
        if digest is None:
            await run_in_threadpool(self.hasher.burn, password)
            logger.info(f"Login attempt for unknown user: {username}")
            raise NotFoundError(f"No such user: {username}")

        is_valid = await run_in_threadpool(self.hasher.verify, password, digest)
        if not is_valid:
            logger.info(f"Wrong password for user: {username}")
        return is_valid

    async def update_login_timestamp(self, username: str) -> LoginStamp:
        now = literal(utcnow(), User.last_login_at.type)
        # never move last_login_at backward
        stamp = case(
            (or_(User.last_login_at.is_(None), User.last_login_at < now), now),
            else_=User.last_login_at,
        )
        result = await self.db.execute(
            update(User)
            .where(User.username == username)
            .values(last_login_at=stamp)
            .returning(User.username, User.last_login_at)
            .execution_options(synchronize_session=False)
        )
        row = result.one_or_none()
        if row is None:
            await self.db.rollback()
            raise NotFoundError(f"No such user: {username}")

        await self.db.commit()
        logger.debug(f"Updated last login for {username}: {row.last_login_at}")
        return LoginStamp(**row._mapping)

    async def get(self, username: str) -> UserProfile:
        result = await self.db.execute(select(*_PROFILE_COLUMNS).where(User.username == username))
        row = result.one_or_none()
        if row is None:
            raise NotFoundError(f"No such user: {username}")
        return UserProfile(**row._mapping)

    async def all(self) -> List[UserSummary]:
        result = await self.db.execute(
            select(User.username, User.first_name, User.last_name, User.phone)
            .order_by(User.username)
        )
        return [UserSummary(**row._mapping) for row in result]
