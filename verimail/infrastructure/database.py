"""Database - engine, per-request sessions and SQLAlchemy failure mapping for the stores.

Invariants:
    - A session that raises rolls back before the error leaves get_db()
    - Store failures never escape as raw SQLAlchemy exceptions: each class maps
      to a DatabaseError naming the failed operation (503 DATABASE_ERROR)
    - Pool sizing applies only to server backends; SQLite runs on its default pool

Design Decisions:
    - Module-level db_manager set in the FastAPI lifespan; the readiness probe
      reads it through the module so it sees the live value
    - expire_on_commit=False: stores read attributes after commit to build envelopes
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import (
    IntegrityError, MultipleResultsFound, NoResultFound, OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)

from verimail.config import Settings
from verimail.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# Most specific first: MultipleResultsFound and NoResultFound subclass SQLAlchemyError.
_FAILURES: tuple[tuple[type[SQLAlchemyError], str], ...] = (
    (MultipleResultsFound, "lookup"),
    (NoResultFound, "lookup"),
    (IntegrityError, "write"),
    (OperationalError, "connect"),
    (SQLAlchemyError, "execute"),
)


def classify_failure(exc: SQLAlchemyError) -> DatabaseError:
    for kind, operation in _FAILURES:
        if isinstance(exc, kind):
            return DatabaseError(type(exc).__name__, operation)
    return DatabaseError(type(exc).__name__, "execute")


def engine_options(database_url: str, pool_size: int, max_overflow: int) -> dict:
    if make_url(database_url).get_backend_name() == "sqlite":
        return {}
    return {"pool_size": pool_size, "max_overflow": max_overflow, "pool_pre_ping": True}


class DatabaseSessionManager:
    """Owns the engine behind the config and user stores."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabaseSessionManager":
        return cls(create_async_engine(
            settings.database_url,
            **engine_options(
                settings.database_url,
                settings.database_pool_size,
                settings.database_max_overflow,
            ),
        ))

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                error = classify_failure(e)
                logger.error(
                    error.message,
                    extra={"error_code": error.i18n, "category": error.category.value},
                )
                raise error from e

    async def health_check(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"DB health check failed: {e}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(settings: Settings) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager.from_settings(settings)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
