import asyncio
import logging
import os

from sqlalchemy import event
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from app.config import settings

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (OperationalError, InterfaceError)


def _get_database_url() -> str:
    url = settings.database_url
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _is_sqlite() -> bool:
    return settings.database_url.startswith("sqlite")


_database_url = _get_database_url()

_engine_kwargs: dict = {"echo": False}
if _is_sqlite():
    # aiosqlite connections must not outlive the event loop that opened them
    _engine_kwargs["poolclass"] = NullPool
else:
    _engine_kwargs.update(pool_size=5, max_overflow=10, pool_pre_ping=True)

engine = create_async_engine(_database_url, **_engine_kwargs)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

if _is_sqlite():
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class Base(DeclarativeBase):
    pass


async def create_tables():
    if _is_sqlite():
        db_path = engine.url.database
        if db_path and db_path != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    async with engine.begin() as conn:
        from app.models import (  # noqa: F401
            vehicle, task, team_member, location, comment, project_settings, share_link,
        )
        await conn.run_sync(Base.metadata.create_all)


async def execute_with_retry(session: AsyncSession, statement, max_retries: int | None = None,
                             base_delay: float | None = None):
    """Execute a read statement, retrying transient database errors.

    Waits ``base_delay * 2**attempt`` seconds between attempts and re-raises
    the last error once ``max_retries`` retries are exhausted.
    """
    if max_retries is None:
        max_retries = settings.db_max_retries
    if base_delay is None:
        base_delay = settings.db_retry_base_delay

    attempt = 0
    while True:
        try:
            return await session.execute(statement)
        except TRANSIENT_ERRORS as e:
            if attempt >= max_retries:
                logger.error("Database read failed after %d retries: %s", attempt, e)
                raise
            delay = base_delay * (2 ** attempt)
            attempt += 1
            logger.warning("Transient database error, retry %d/%d in %.1fs: %s",
                           attempt, max_retries, delay, e)
            await session.rollback()
            await asyncio.sleep(delay)
