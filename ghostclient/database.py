"""Local SQLite storage for the remembered stream-server login."""

from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import MetaData
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the client's local tables."""

    metadata = MetaData()


def _ensure_sqlite_directory(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return
    if not url.database or url.database == ":memory:":
        return
    Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)


class Database:
    """Owns the async engine and the sessions used by the account store."""

    def __init__(self, database_url: str):
        _ensure_sqlite_directory(database_url)
        self._url = make_url(database_url)
        self._engine: AsyncEngine = create_async_engine(database_url)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self._engine, expire_on_commit=False
        )

    async def create_all(self) -> None:
        """Create the account table on first start."""

        async with self._engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)
        logger.info(
            "Account database ready at %s",
            self._url.render_as_string(hide_password=True),
        )

    async def dispose(self) -> None:
        await self._engine.dispose()
