from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from ..config import SettingsDep
from ..database import SessionDep
from ..exceptions import Forbidden
from ..users.models import User
from ..auth import service as auth_service

# auto_error is off so a missing header yields our own 401 message.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

async def get_current_user(
    db: SessionDep,
    settings: SettingsDep,
    token: Optional[str] = Depends(oauth2_scheme),
) -> User:
    return await auth_service.get_user_from_token(token, db, settings)

CurrentUser = Depends(get_current_user)

def require_admin(
    current_user: User = CurrentUser
) -> User:
    """
    Admin-only routes depend on this.
    The role is read from the database row, so a role change applies to
    tokens issued before it.
    """
    if not current_user.is_admin:
        raise Forbidden("Access denied. Admin only.")
    return current_user

AdminUser = Depends(require_admin)

CurrentUserDep = Annotated[User, CurrentUser]
AdminUserDep = Annotated[User, AdminUser]
