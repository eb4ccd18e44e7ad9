"""
Database connection and session management.
Uses async SQLAlchemy for non-blocking operations.
"""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from chatseller.config import settings
from chatseller.db.models import Base


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.endswith("://"))


class Database:
    """Async database manager."""

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.db_url
        self._engine = None
        self._session_factory = None
        self._init_lock = asyncio.Lock()

    async def init(self) -> None:
        """
        Initialize database engine and create tables.

        Safe to call concurrently: sessions only become available once the
        tables exist.
        """
        async with self._init_lock:
            if self._session_factory is not None:
                return

            engine_options = {"echo": settings.debug}

            if _is_memory_sqlite(self.url):
                # One shared connection, otherwise every session sees an empty database
                engine_options["poolclass"] = StaticPool
                engine_options["connect_args"] = {"check_same_thread": False}
            elif self.url.startswith("sqlite"):
                # Ensure data directory exists
                path_part = self.url.split("///", 1)[-1]
                Path(path_part).parent.mkdir(parents=True, exist_ok=True)

            engine = create_async_engine(self.url, **engine_options)

            # Create all tables
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

            self._engine = engine
            self._session_factory = async_sessionmaker(
                bind=engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

    async def close(self) -> None:
        """Close database connections."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get async database session, committed on success and rolled back on error."""
        if not self._session_factory:
            await self.init()

        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# Global database instance
db = Database()
