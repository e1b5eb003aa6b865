import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from messagely.database import get_db
from messagely.repositories.user_repository import UserRepository
from messagely.schemas.user import UserCreate, UserLogin, SessionClaims, Token
from messagely.auth import PasswordHasher, SessionIssuer, get_hasher, get_issuer
from messagely.exceptions import NotFoundError

logger = logging.getLogger("messagely.api.auth")

router = APIRouter()

@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_hasher),
    issuer: SessionIssuer = Depends(get_issuer),
):
    """Register, log in and return a token"""
    user_repo = UserRepository(db, hasher)
    user = await user_repo.register(user_data)

    # registration counts as the first login
    stamp = await user_repo.update_login_timestamp(user.username)
    token = issuer.issue(SessionClaims(username=stamp.username, login_timestamp=stamp.last_login_at))
    return {"token": token}

@router.post("/login", response_model=Token)
async def login_user(
    user_data: UserLogin,
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_hasher),
    issuer: SessionIssuer = Depends(get_issuer),
):
    user_repo = UserRepository(db, hasher)

    try:
        can_authenticate = await user_repo.authenticate(user_data.username, user_data.password)
    except NotFoundError:
        can_authenticate = False

    if not can_authenticate:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid username/password")

    stamp = await user_repo.update_login_timestamp(user_data.username)
    logger.info(f"User logged in: {stamp.username}")
    token = issuer.issue(SessionClaims(username=stamp.username, login_timestamp=stamp.last_login_at))
    return {"token": token}
