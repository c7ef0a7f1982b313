from typing import Annotated, AsyncGenerator

from fastapi import Depends

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import get_settings

Base = declarative_base()

_settings = get_settings()

engine_kwargs = {}
if _settings.DATABASE_URL.startswith("postgresql"):
    engine_kwargs = {
        "pool_pre_ping": True,
        "pool_recycle": 1800,
        "connect_args": {"ssl": _settings.POSTGRES_SSLMODE == "require"},
    }

engine = create_async_engine(_settings.DATABASE_URL, **engine_kwargs)

async_session_factory = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as sess:
        yield sess

# `db: SessionDep` injects a request-scoped session.
SessionDep = Annotated[AsyncSession, Depends(get_db)]
