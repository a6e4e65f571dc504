"""
Repo - async SQLAlchemy engine (asyncpg pool) supervised as a child

Usage:
    from budget_manager.db import get_async_session

    async with get_async_session() as session:
        service = BudgetService(session)
"""
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from . import telemetry
from .config import Settings, get_settings
from .supervisor import Child
from .utils.logger import LogOperation, get_logger

logger = get_logger(__name__)


class RepoNotStartedError(RuntimeError):
    """Session requested before the Repo child started"""


def _attach_query_timing(engine: AsyncEngine) -> None:
    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(sync_engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        started = conn.info["query_start_time"].pop(-1)
        telemetry.execute(
            "budget_manager.repo.query",
            {"total_time": (time.perf_counter() - started) * 1000},
            {"statement": statement.split(None, 1)[0].upper() if statement else ""},
        )


class Repo(Child):
    """Owns the engine and its connection pool"""

    name = "Repo"

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None

    @property
    def started(self) -> bool:
        return self.engine is not None

    async def start(self) -> None:
        with LogOperation("database_pool_initialization", logger):
            self.engine = create_async_engine(
                self.settings.database_url,
                pool_size=self.settings.pool_size,
                max_overflow=self.settings.max_overflow,
                pool_timeout=self.settings.pool_timeout,
                pool_pre_ping=True,
            )
            _attach_query_timing(self.engine)
            self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)

            if self.settings.create_schema:
                await self.create_schema()

        logger.info(
            f"Database pool initialized: size={self.settings.pool_size}, "
            f"max_overflow={self.settings.max_overflow}"
        )

    async def stop(self) -> None:
        engine, self.engine = self.engine, None
        self.session_factory = None
        if engine is not None:
            await engine.dispose()
            logger.info("Database pool disposed")

    async def create_schema(self) -> None:
        from .models.budget_orm import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        async with self.session() as session:
            result = await session.execute(text("SELECT 1"))
            return result.scalar() == 1

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self.session_factory is None:
            raise RepoNotStartedError("Repo is not started")
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    def pool_status(self) -> Dict[str, int]:
        if self.engine is None:
            return {"size": 0, "checked_out": 0, "overflow": 0}
        pool = self.engine.pool
        return {
            "size": pool.size(),
            "checked_out": pool.checkedout(),
            "overflow": pool.overflow(),
        }


_repo: Optional[Repo] = None


def get_repo() -> Repo:
    global _repo
    if _repo is None:
        _repo = Repo()
    return _repo


@asynccontextmanager
async def get_async_session() -> AsyncIterator[AsyncSession]:
    async with get_repo().session() as session:
        yield session
