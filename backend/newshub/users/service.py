import logging
from typing import Optional

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import Conflict, InvalidCredentials, NotFound
from ..pagination import PageParams, paginate
from .models import User as UserModel, Role
from .schema import UserCreate, ProfileUpdate

logger = logging.getLogger(__name__)


async def create_user(user_data: UserCreate, db: AsyncSession, role: Role = Role.USER) -> UserModel:
    existing_user = await get_user_by_email_or_username(db, email=user_data.email, username=user_data.username)
    if existing_user:
        raise Conflict("User already exists with this email or username")

    db_user = UserModel(
        username=user_data.username,
        email=user_data.email,
        password=user_data.password,
        role=role.value,
        location={},
    )
    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)
    logger.info(f"Created user id={db_user.id} username={db_user.username!r} role={db_user.role}")
    return db_user


async def get_user_by_id(user_id: int, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_username(username: str, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.username == username))
    return result.scalar_one_or_none()


async def get_user_by_email_or_username(
    db: AsyncSession, *, email: str, username: str
) -> Optional[UserModel]:
    result = await db.execute(
        select(UserModel)
        .where(or_(UserModel.email == email, func.lower(UserModel.username) == username.lower()))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def find_by_identifier(db: AsyncSession, identifier: str) -> Optional[UserModel]:
    """Login lookup: exact lowercased email, or case-insensitive username."""
    lowered = identifier.strip().lower()
    result = await db.execute(
        select(UserModel)
        .where(or_(UserModel.email == lowered, func.lower(UserModel.username) == lowered))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def resolve_user(db: AsyncSession, identifier: str) -> UserModel:
    """Profile lookup: numeric id first, then username."""
    user = None
    if identifier.isdigit():
        user = await get_user_by_id(int(identifier), db)
    if user is None:
        user = await get_user_by_username(identifier, db)
    if user is None:
        raise NotFound("User not found")
    return user


async def update_profile(db: AsyncSession, db_user: UserModel, user_in: ProfileUpdate) -> UserModel:
    update_data = user_in.model_dump(exclude_unset=True)

    for field, value in update_data.items():
        if value is None:
            continue
        setattr(db_user, field, value)

    await db.commit()
    await db.refresh(db_user)
    return db_user


async def change_password(db: AsyncSession, db_user: UserModel, current_password: str, new_password: str) -> None:
    if not db_user.verify_password(current_password):
        logger.info(f"Rejected password change for user id={db_user.id}: current password mismatch")
        raise InvalidCredentials("Current password is incorrect")
    db_user.password = new_password
    await db.commit()
    logger.info(f"Password changed for user id={db_user.id}")


async def set_role(db: AsyncSession, user_id: int, role: Role) -> UserModel:
    user = await get_user_by_id(user_id, db)
    if user is None:
        raise NotFound("User not found")
    user.role = role.value
    await db.commit()
    await db.refresh(user)
    logger.info(f"Role of user id={user.id} set to {user.role}")
    return user


async def list_users(db: AsyncSession, params: PageParams, search: Optional[str] = None):
    stmt = select(UserModel)
    if search:
        ilike = f"%{search}%"
        stmt = stmt.where(or_(UserModel.username.ilike(ilike), UserModel.email.ilike(ilike)))
    stmt = stmt.order_by(UserModel.created_at.desc(), UserModel.id.desc())
    return await paginate(db, stmt, params)


async def count_users(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(UserModel.id)))).scalar_one()
