"""
Database session management and connection handling.
"""
from __future__ import annotations
import logging
from typing import AsyncGenerator, Optional, Dict, Any
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
    async_sessionmaker,
    AsyncEngine
)
from sqlalchemy.pool import NullPool, StaticPool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import text

from .exceptions import ConnectionError
from .models import Base


class Database:
    """Database connection and session management."""

    def __init__(
        self,
        database_url: str,
        echo_sql: bool = False,
        **kwargs: Any
    ) -> None:
        """Initialize the database connection.

        Args:
            database_url: SQLAlchemy async database URL.
            echo_sql: Log every emitted SQL statement.
            **kwargs: Additional keyword arguments passed to create_async_engine.
        """
        self.database_url = database_url
        self.echo_sql = echo_sql
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._logger = logging.getLogger(__name__)

        self._setup_engine(**kwargs)

    @staticmethod
    def _is_memory_sqlite(url: str) -> bool:
        return url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"))

    def _setup_engine(self, **kwargs: Any) -> None:
        """Set up the SQLAlchemy async engine."""
        if not self.database_url:
            raise ValueError("Database URL is required")

        engine_options: Dict[str, Any] = {
            "echo": self.echo_sql,
            "pool_pre_ping": True,
            **kwargs
        }

        # SQLite specific options; an in-memory database must keep one connection
        if "sqlite" in self.database_url:
            engine_options["connect_args"] = {"check_same_thread": False}
            engine_options["poolclass"] = (
                StaticPool if self._is_memory_sqlite(self.database_url) else NullPool
            )
        else:
            engine_options.setdefault("pool_recycle", 300)

        try:
            self.engine = create_async_engine(
                self.database_url,
                **engine_options
            )
            self.session_factory = async_sessionmaker(
                bind=self.engine,
                expire_on_commit=False,
                class_=AsyncSession
            )
            self._logger.info(
                "Database engine initialized for %s", self._obfuscate_url(self.database_url)
            )
        except Exception as e:
            self._logger.error(f"Failed to initialize database engine: {e}")
            raise ConnectionError(
                f"Failed to connect to database: {e}",
                context={"database_url": self._obfuscate_url(self.database_url)},
                original_exception=e,
            )

    @staticmethod
    def _obfuscate_url(url: str) -> str:
        """Obfuscate sensitive information in database URLs for logging."""
        if not url:
            return ""

        if "@" in url:
            # Obfuscate username:password in URL
            parts = url.split("@", 1)
            auth_part = parts[0].split("//", 1)[-1]
            if ":" in auth_part:
                user_pass = auth_part.split(":", 1)
                obfuscated = f"{user_pass[0]}:****@"
                return url.replace(auth_part + "@", obfuscated)
        return url

    async def health_check(self) -> bool:
        """Check if the database is reachable."""
        if not self.engine:
            return False

        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
                return True
        except Exception as e:
            self._logger.error(f"Database health check failed: {e}")
            return False

    async def create_tables(self) -> None:
        """Create every table known to the model metadata."""
        if not self.engine:
            raise ConnectionError("Database engine not initialized")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self._logger.info("Database tables created successfully")

    async def drop_tables(self) -> None:
        """Drop all tables (WARNING: This deletes all data!)"""
        if not self.engine:
            raise ConnectionError("Database engine not initialized")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get an async database session; commits on success, rolls back on database errors."""
        if not self.session_factory:
            raise ConnectionError("Database session factory not initialized")

        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            self._logger.error(f"Database error: {e}")
            raise
        finally:
            await session.close()

    async def close(self) -> None:
        """Close all database connections."""
        if self.engine:
            await self.engine.dispose()
            self._logger.info("Database connections closed")


# FastAPI dependency
async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI to get a database session."""
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database not initialized")

    async with database.get_session() as session:
        yield session
