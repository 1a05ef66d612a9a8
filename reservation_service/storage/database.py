"""Database connection and session management."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from reservation_service.config.settings import Settings
from reservation_service.logging import get_logger
from reservation_service.storage.db_models import Base
from reservation_service.storage.postgres_reservation_repo import PostgresReservationRepository

logger = get_logger(__name__)


class Database:
    """Database connection manager."""

    def __init__(self, settings: Settings):
        """
        Initialize database connection.

        Args:
            settings: Application settings with database URL
        """
        self.settings = settings
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    async def connect(self) -> None:
        """Create database engine and session factory."""
        if self._engine is not None:
            return

        self._engine = create_async_engine(
            self.settings.database_url,
            echo=self.settings.log_level == "DEBUG",
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,
        )

        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        # URL password is masked by the logging processor
        logger.info("database_connected", url=self.settings.database_url)

    async def disconnect(self) -> None:
        """Close database connections."""
        if self._engine is None:
            return

        await self._engine.dispose()
        self._engine = None
        self._session_factory = None

        logger.info("database_disconnected")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Get database session context manager.

        Commits on success and rolls back on error.

        Example:
            async with db.session() as session:
                result = await session.execute(query)
        """
        if self._session_factory is None:
            raise RuntimeError("Database not connected. Call connect() first.")

        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    @asynccontextmanager
    async def reservation_repository(self) -> AsyncIterator[PostgresReservationRepository]:
        """Open a session-scoped reservation repository (one unit of work)."""
        async with self.session() as session:
            yield PostgresReservationRepository(session)

    async def create_tables(self) -> None:
        """Create all database tables. Use migrations in production."""
        if self._engine is None:
            raise RuntimeError("Database not connected. Call connect() first.")

        async with self._engine.begin() as conn:
            await conn.execute(text("CREATE EXTENSION IF NOT EXISTS btree_gist"))
            await conn.run_sync(Base.metadata.create_all)

        logger.info("database_tables_created")
