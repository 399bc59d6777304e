from __future__ import annotations
from typing import AsyncGenerator
from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool
from sqlalchemy.orm.exc import StaleDataError
from scavhunt.config import settings
from scavhunt.errors import ProgressConflict, StoreFailure
import structlog

log = structlog.get_logger()

class Base(DeclarativeBase):
    pass

# JSONB on Postgres, plain JSON elsewhere (tests run on SQLite)
JSONList = JSON().with_variant(JSONB(), "postgresql")

def _engine_kwargs(url: str) -> dict:
    # SQLite connections are tied to the thread/loop that opened them
    if url.startswith("sqlite"):
        return {"poolclass": NullPool}
    return {}

engine = create_async_engine(settings.database_url, future=True, echo=False, **_engine_kwargs(settings.database_url))
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session

async def commit_or_raise(session: AsyncSession, context: str) -> None:
    """Commit, translating persistence failures into retryable domain errors."""
    try:
        await session.commit()
    except StaleDataError as e:
        await session.rollback()
        log.warning("progress_conflict", context=context)
        raise ProgressConflict(f"{context}: progress changed concurrently, please retry") from e
    except SQLAlchemyError as e:
        await session.rollback()
        log.error("store_failure", context=context, error=str(e))
        raise StoreFailure.wrap(context, e) from e

async def flush_or_raise(session: AsyncSession, context: str) -> None:
    try:
        await session.flush()
    except SQLAlchemyError as e:
        await session.rollback()
        log.error("store_failure", context=context, error=str(e))
        raise StoreFailure.wrap(context, e) from e
