from sqlalchemy.ext.asyncio import AsyncSession

from ..news import service as news_service
from ..users import service as user_service
from .schemas import AdminStats


async def get_stats(db: AsyncSession) -> AdminStats:
    """Dashboard counters; pending means not yet moderated."""
    return AdminStats(
        total_users=await user_service.count_users(db),
        total_news=await news_service.count_news(db),
        pending_moderation=await news_service.count_news(db, is_moderated=False),
    )
