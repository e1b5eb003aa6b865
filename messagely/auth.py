"""Password hashing and session tokens.

Passwords are stored as salted bcrypt digests. Session tokens are HS256 JWTs
carrying the username and the login timestamp they were issued for.
"""

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from messagely.config import Settings
from messagely.exceptions import ConfigurationError, InvalidTokenError
from messagely.schemas.user import PASSWORD_MAX_BYTES, SessionClaims

logger = logging.getLogger("messagely.auth")

class PasswordHasher:
    """bcrypt hashing with a work factor fixed at construction.

    Args:
        settings: Configuration supplying ``BCRYPT_WORK_FACTOR``.

    Raises:
        ConfigurationError: If the work factor is outside bcrypt's 4..31 range.
    """

    def __init__(self, settings: Settings) -> None:
        rounds = settings.BCRYPT_WORK_FACTOR
        if not isinstance(rounds, int) or not 4 <= rounds <= 31:
            raise ConfigurationError(f"Invalid bcrypt work factor: {rounds!r}")
        self.rounds = rounds
        self._dummy_hash = self.hash("messagely-dummy-password")

    def hash(self, plaintext: str) -> str:
        """Raises ValueError for a password longer than PASSWORD_MAX_BYTES."""
        encoded = plaintext.encode("utf-8")
        if len(encoded) > PASSWORD_MAX_BYTES:
            raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plaintext: str, digest: str) -> bool:
        """Constant-time check of ``plaintext`` against a stored digest.

        Returns False for a wrong password, for a password too long to have
        been hashed, and for a digest bcrypt cannot parse.
        """
        encoded = plaintext.encode("utf-8")
        if len(encoded) > PASSWORD_MAX_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, digest.encode("utf-8"))
        except ValueError:
            return False

    def burn(self, plaintext: str) -> None:
        """Spend one verify's worth of work for a username that does not exist."""
        self.verify(plaintext, self._dummy_hash)


class SessionIssuer:
    """Signs and verifies session tokens with the process secret key.

    Args:
        settings: Configuration supplying ``SECRET_KEY``, ``ALGORITHM`` and
                  ``ACCESS_TOKEN_EXPIRE_MINUTES``. An expiry of 0 issues
                  tokens without an ``exp`` claim.

    Raises:
        ConfigurationError: If no secret key is configured.
    """

    def __init__(self, settings: Settings) -> None:
        if not settings.SECRET_KEY:
            raise ConfigurationError("SECRET_KEY is required to issue session tokens")
        self._secret_key = settings.SECRET_KEY
        self.algorithm = settings.ALGORITHM
        minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
        self.expires_delta = timedelta(minutes=minutes) if minutes and minutes > 0 else None

    def issue(self, claims: SessionClaims) -> str:
        to_encode = {
            "username": claims.username,
            "login_timestamp": claims.login_timestamp.isoformat(),
        }
        if self.expires_delta is not None:
            now = datetime.now(timezone.utc)
            to_encode.update({"iat": now, "exp": now + self.expires_delta})
        return jwt.encode(to_encode, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> SessionClaims:
        """Decode a token issued by :meth:`issue`.

        Raises:
            InvalidTokenError: On a bad signature, an expired token, or
                missing claims.
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
            return SessionClaims(
                username=payload["username"],
                login_timestamp=payload["login_timestamp"],
            )
        except (JWTError, KeyError, ValidationError) as e:
            raise InvalidTokenError("Could not validate session token") from e


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def get_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_issuer(request: Request) -> SessionIssuer:
    return request.app.state.issuer


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    issuer: SessionIssuer = Depends(get_issuer),
) -> SessionClaims:
    try:
        return issuer.verify(token)
    except InvalidTokenError:
        logger.warning("Rejected invalid session token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
