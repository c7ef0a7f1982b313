import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict

from jose import jwt, JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings
from ..exceptions import InvalidCredentials, NotFound, Unauthenticated, ValidationFailed
from ..users import service as user_service
from ..users.models import User
from ..users.schema import UserCreate

logger = logging.getLogger(__name__)


def create_access_token(user: User, settings: Settings) -> str:
    """
    Issue a bearer token for ``user``.
    The payload carries the user id as ``sub`` and the role at issue time.
    """
    expire = datetime.now(timezone.utc) + timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    to_encode = {
        "sub": str(user.id),
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, settings: Settings) -> Optional[Dict]:
    """Return the payload, or None when the signature or expiry check fails."""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


async def get_user_from_token(token: Optional[str], db: AsyncSession, settings: Settings) -> User:
    if not token:
        raise Unauthenticated("No token provided")

    payload = decode_token(token, settings)
    subject = payload.get("sub") if payload else None
    if subject is None or not str(subject).isdigit():
        raise Unauthenticated("Invalid token")

    user = await user_service.get_user_by_id(int(subject), db)
    if user is None:
        raise NotFound("User not found")
    return user


async def signup(db: AsyncSession, data: UserCreate, settings: Settings) -> tuple[User, str]:
    user = await user_service.create_user(data, db)
    return user, create_access_token(user, settings)


async def login(db: AsyncSession, identifier: str, password: str, settings: Settings) -> tuple[User, str]:
    identifier = (identifier or "").strip()
    if not identifier:
        raise ValidationFailed("Email or username is required")

    user = await user_service.find_by_identifier(db, identifier)
    if user is None:
        logger.info(f"Login failed: no user for identifier {identifier!r}")
        raise NotFound("User not found")

    if not user.verify_password(password):
        logger.info(f"Login failed: wrong password for user id={user.id}")
        raise InvalidCredentials("Invalid credentials")

    logger.info(f"User id={user.id} logged in")
    return user, create_access_token(user, settings)
