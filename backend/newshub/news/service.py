import logging
from typing import Optional

from sqlalchemy import func, literal_column, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..exceptions import Forbidden, NotFound
from ..pagination import PageParams, paginate
from ..users.models import User
from .models import Comment, News, NewsCategory, NewsType
from .schemas import CommentCreate, NewsCreate, NewsUpdate

logger = logging.getLogger(__name__)

SORT_ORDERS = {
    "trending": (News.upvotes.desc(), News.view_count.desc(), News.id.desc()),
    "popular": (News.view_count.desc(), News.id.desc()),
}
DEFAULT_SORT = (News.created_at.desc(), News.id.desc())


def search_document():
    """Text searched by ``?search=``; must match the GIN index expression in the initial migration."""
    empty, space = literal_column("''"), literal_column("' '")
    return (
        func.coalesce(News.title, empty) + space
        + func.coalesce(News.description, empty) + space
        + func.coalesce(News.content, empty)
    )


def search_condition(dialect_name: str, search: str):
    if dialect_name == "postgresql":
        # Literal config name so the planner can match ix_news_search.
        english = literal_column("'english'")
        return func.to_tsvector(english, search_document()).op("@@")(
            func.plainto_tsquery(english, search)
        )
    # Other backends have no text index; fall back to substring matching.
    ilike = f"%{search}%"
    return or_(News.title.ilike(ilike), News.description.ilike(ilike), News.content.ilike(ilike))


async def list_news(
    db: AsyncSession,
    params: PageParams,
    *,
    category: Optional[str] = None,
    location: Optional[str] = None,
    sort_by: Optional[str] = None,
    search: Optional[str] = None,
):
    conditions = []
    if category:
        names = [c.strip().lower() for c in category.split(",") if c.strip()]
        if names:
            conditions.append(News.category_rows.any(func.lower(NewsCategory.name).in_(names)))
    if location:
        ilike = f"%{location.strip()}%"
        conditions.append(
            or_(
                News.location_city.ilike(ilike),
                News.location_state.ilike(ilike),
                News.location_country.ilike(ilike),
            )
        )
    if search and search.strip():
        conditions.append(search_condition(db.get_bind().dialect.name, search.strip()))

    stmt = (
        select(News)
        .where(*conditions)
        .order_by(*SORT_ORDERS.get(sort_by or "", DEFAULT_SORT))
    )
    return await paginate(db, stmt, params, selectinload(News.author))


async def list_user_news(db: AsyncSession, author: User, params: PageParams):
    stmt = select(News).where(News.author_id == author.id).order_by(*DEFAULT_SORT)
    return await paginate(db, stmt, params, selectinload(News.author))


async def get_news(db: AsyncSession, news_id: int) -> News:
    result = await db.execute(
        select(News)
        .where(News.id == news_id)
        .options(selectinload(News.author), selectinload(News.category_rows))
        .execution_options(populate_existing=True)
    )
    news = result.scalar_one_or_none()
    if news is None:
        raise NotFound("News article not found")
    return news


async def _increment(db: AsyncSession, news_id: int, **columns) -> None:
    """Atomically add 1 to each named counter column of one news row."""
    values = {name: getattr(News, name) + 1 for name in columns}
    result = await db.execute(
        update(News)
        .where(News.id == news_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("News article not found")


async def read_news(db: AsyncSession, news_id: int) -> News:
    """Fetch one item for display; every successful read counts as a view."""
    await _increment(db, news_id, view_count=True)
    await db.commit()
    return await get_news(db, news_id)


def _ensure_can_modify(news: News, actor: User, action: str) -> None:
    if news.author_id != actor.id and not actor.is_admin:
        logger.info(f"User id={actor.id} denied {action} on news id={news.id}")
        raise Forbidden(f"Not authorized to {action} this news article")


async def create_news(db: AsyncSession, data: NewsCreate, author: User) -> News:
    news = News(
        title=data.title,
        description=data.description,
        content=data.content,
        thumbnail=data.thumbnail,
        type=data.type.value,
        video_url=(data.video_url or "") if data.type == NewsType.VIDEO else "",
        location=data.location.model_dump(),
        categories=data.categories,
        author_id=author.id,
    )
    db.add(news)
    await db.commit()
    logger.info(f"User id={author.id} created {news.type} news id={news.id}")
    return await get_news(db, news.id)


async def update_news(db: AsyncSession, news_id: int, data: NewsUpdate, actor: User) -> News:
    news = await get_news(db, news_id)
    _ensure_can_modify(news, actor, "update")

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None:
            continue
        if field == "type":
            value = value.value if isinstance(value, NewsType) else value
        setattr(news, field, value)
    news.updated_at = func.now()

    await db.commit()
    return await get_news(db, news_id)


async def delete_news(db: AsyncSession, news_id: int, actor: User) -> None:
    news = await get_news(db, news_id)
    _ensure_can_modify(news, actor, "delete")
    await db.delete(news)
    await db.commit()
    logger.info(f"User id={actor.id} deleted news id={news_id}")


async def vote(db: AsyncSession, news_id: int, direction: str) -> tuple[int, int]:
    column = "upvotes" if direction == "up" else "downvotes"
    await _increment(db, news_id, **{column: True})
    await db.commit()
    row = (
        await db.execute(select(News.upvotes, News.downvotes).where(News.id == news_id))
    ).one()
    return row.upvotes, row.downvotes


async def set_moderation(db: AsyncSession, news_id: int, is_moderated: bool) -> News:
    news = await get_news(db, news_id)
    news.is_moderated = is_moderated
    await db.commit()
    logger.info(f"News id={news_id} moderation set to {is_moderated}")
    return await get_news(db, news_id)


async def count_news(db: AsyncSession, *, is_moderated: Optional[bool] = None) -> int:
    stmt = select(func.count(News.id))
    if is_moderated is not None:
        stmt = stmt.where(News.is_moderated == is_moderated)
    return (await db.execute(stmt)).scalar_one()


async def _get_comment(db: AsyncSession, comment_id: int) -> Comment:
    result = await db.execute(
        select(Comment)
        .where(Comment.id == comment_id)
        .options(selectinload(Comment.author))
        .execution_options(populate_existing=True)
    )
    comment = result.scalar_one_or_none()
    if comment is None:
        raise NotFound("Comment not found")
    return comment


async def list_comments(db: AsyncSession, news_id: int) -> list[Comment]:
    await get_news(db, news_id)
    result = await db.execute(
        select(Comment)
        .where(Comment.news_id == news_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .options(selectinload(Comment.author))
    )
    return result.scalars().all()


async def add_comment(db: AsyncSession, news_id: int, data: CommentCreate, author: User) -> Comment:
    await get_news(db, news_id)
    if data.parent_id is not None:
        parent = await db.get(Comment, data.parent_id)
        if parent is None or parent.news_id != news_id:
            raise NotFound("Parent comment not found")

    comment = Comment(
        content=data.content,
        author_id=author.id,
        news_id=news_id,
        parent_id=data.parent_id,
    )
    db.add(comment)
    await db.flush()
    await _increment(db, news_id, comments=True)
    await db.commit()
    return await _get_comment(db, comment.id)
