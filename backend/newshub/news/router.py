# backend/newshub/news/router.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Query, status

from ..auth.dependencies import CurrentUserDep
from ..database import SessionDep
from ..models import Message
from ..pagination import PageDep
from . import service
from .schemas import (
    CommentCreate,
    CommentOut,
    NewsCreate,
    NewsDetail,
    NewsOut,
    NewsPage,
    NewsUpdate,
    VoteRequest,
    VoteResult,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/news", tags=["news"])


@router.get("", response_model=NewsPage)
async def list_news(
    db: SessionDep,
    params: PageDep,
    category: Optional[str] = None,
    location: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    search: Optional[str] = None,
):
    items, pages = await service.list_news(
        db,
        params,
        category=category,
        location=location,
        sort_by=sort_by,
        search=search,
    )
    return NewsPage(
        news=[NewsOut.model_validate(n) for n in items],
        total_pages=pages,
        current_page=params.page,
    )


@router.post("", response_model=NewsOut, status_code=status.HTTP_201_CREATED)
async def create_news(body: NewsCreate, db: SessionDep, current_user: CurrentUserDep):
    news = await service.create_news(db, body, current_user)
    return NewsOut.model_validate(news)


@router.get("/{news_id}", response_model=NewsDetail)
async def get_news(news_id: int, db: SessionDep):
    news = await service.read_news(db, news_id)
    return NewsDetail.model_validate(news)


@router.patch("/{news_id}", response_model=NewsOut)
async def update_news(news_id: int, body: NewsUpdate, db: SessionDep, current_user: CurrentUserDep):
    news = await service.update_news(db, news_id, body, current_user)
    return NewsOut.model_validate(news)


@router.delete("/{news_id}", response_model=Message)
async def delete_news(news_id: int, db: SessionDep, current_user: CurrentUserDep):
    await service.delete_news(db, news_id, current_user)
    return Message(message="News article deleted successfully")


@router.post("/{news_id}/vote", response_model=VoteResult)
async def vote_news(news_id: int, body: VoteRequest, db: SessionDep, current_user: CurrentUserDep):
    upvotes, downvotes = await service.vote(db, news_id, body.vote)
    logger.debug(f"User id={current_user.id} voted {body.vote} on news id={news_id}")
    return VoteResult(upvotes=upvotes, downvotes=downvotes)


@router.get("/{news_id}/comments", response_model=List[CommentOut])
async def list_comments(news_id: int, db: SessionDep):
    comments = await service.list_comments(db, news_id)
    return [CommentOut.model_validate(c) for c in comments]


@router.post("/{news_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def add_comment(news_id: int, body: CommentCreate, db: SessionDep, current_user: CurrentUserDep):
    comment = await service.add_comment(db, news_id, body, current_user)
    return CommentOut.model_validate(comment)
