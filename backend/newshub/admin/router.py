import logging
from typing import Optional

from fastapi import APIRouter

from ..auth.dependencies import AdminUserDep
from ..database import SessionDep
from ..news import service as news_service
from ..news.schemas import ModerationRequest, ModerationResult, NewsOut
from ..pagination import PageDep
from ..users import service as user_service
from ..users.models import Role
from ..users.schema import RoleUpdate, UserOut
from . import service
from .schemas import AdminStats, RoleResult, UserPage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/stats", response_model=AdminStats)
async def get_stats(db: SessionDep, admin: AdminUserDep):
    return await service.get_stats(db)


@router.get("/users", response_model=UserPage)
async def list_users(db: SessionDep, params: PageDep, admin: AdminUserDep, search: Optional[str] = None):
    users, pages = await user_service.list_users(db, params, search)
    return UserPage(
        users=[UserOut.model_validate(u) for u in users],
        total_pages=pages,
        current_page=params.page,
    )


@router.patch("/moderate/{news_id}", response_model=ModerationResult)
async def moderate_news(news_id: int, body: ModerationRequest, db: SessionDep, admin: AdminUserDep):
    news = await news_service.set_moderation(db, news_id, body.is_moderated)
    logger.info(f"Admin id={admin.id} set moderation of news id={news_id} to {body.is_moderated}")
    return ModerationResult(
        message="News moderation updated successfully",
        news=NewsOut.model_validate(news),
    )


@router.patch("/user-role/{user_id}", response_model=RoleResult)
async def set_user_role(user_id: int, body: RoleUpdate, db: SessionDep, admin: AdminUserDep):
    user = await user_service.set_role(db, user_id, Role(body.role))
    logger.info(f"Admin id={admin.id} changed role of user id={user_id} to {user.role}")
    return RoleResult(message="User role updated successfully", user=UserOut.model_validate(user))
