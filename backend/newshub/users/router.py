from fastapi import APIRouter

from ..database import SessionDep
from ..models import Message
from ..news import service as news_service
from ..news.schemas import NewsOut, NewsPage
from ..pagination import PageDep
from ..auth.dependencies import CurrentUserDep

from .schema import ProfileUpdate, PasswordChange, UserOut
from . import service as user_service

router = APIRouter(prefix="/api/users", tags=["users"])

@router.patch("/profile", response_model=UserOut)
async def update_profile(
    db: SessionDep,
    body: ProfileUpdate,
    current_user: CurrentUserDep,
):
    user = await user_service.update_profile(db, db_user=current_user, user_in=body)
    return UserOut.model_validate(user)

@router.patch("/change-password", response_model=Message)
async def change_password(
    db: SessionDep,
    body: PasswordChange,
    current_user: CurrentUserDep,
):
    await user_service.change_password(db, current_user, body.current_password, body.new_password)
    return Message(message="Password updated successfully")

@router.get("/{identifier}", response_model=UserOut)
async def get_profile(identifier: str, db: SessionDep):
    user = await user_service.resolve_user(db, identifier)
    return UserOut.model_validate(user)

@router.get("/{identifier}/news", response_model=NewsPage)
async def get_user_news(identifier: str, db: SessionDep, params: PageDep):
    user = await user_service.resolve_user(db, identifier)
    items, pages = await news_service.list_user_news(db, user, params)
    return NewsPage(
        news=[NewsOut.model_validate(n) for n in items],
        total_pages=pages,
        current_page=params.page,
    )
