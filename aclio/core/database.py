# aclio/core/database.py
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from .config import settings
import logging
from typing import Optional

logger = logging.getLogger(__name__)

# Base class for all models
Base = declarative_base()


def make_engine(database_url: Optional[str] = None) -> AsyncEngine:
    url = database_url or settings.DATABASE_URL
    engine_kwargs = {
        "echo": False,
        "future": True,
    }
    if not url.startswith("sqlite"):
        # Keep the pool small; the store only does short key lookups
        engine_kwargs.update({
            "pool_size": 5,
            "max_overflow": 5,
            "pool_timeout": 30,
            "pool_pre_ping": True,
            "pool_recycle": 300,
        })
    return create_async_engine(url, **engine_kwargs)


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        class_=AsyncSession,
    )


# Default engine for the configured local store
engine = make_engine()


async def create_db_and_tables(target: Optional[AsyncEngine] = None) -> None:
    # Importing the model registers its table on Base.metadata
    from aclio.models import kv_entry  # noqa: F401

    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
