#main __init__.py
"""
Legacy API - backend for a family-history site.

Serves family tree records and authenticates two kinds of user, administrators
and family members, with server-side sessions held in an HTTP-only cookie.
"""

__version__ = "0.1.0"

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from fastapi import FastAPI

from .api import router as api_router
from .auth.rate_limiting import LoginRateLimiter
from .core.config import Settings, get_settings
from .core.errors import register_exception_handlers
from .core.security import PasswordHasher
from .db import AdminRole, Database
from .middleware import setup_middleware
from .utils.datetime import isoformat, utcnow

# Initialize module-level logger; logging configuration is handled in `create_app`
logger = logging.getLogger(__name__)


class LegacyAPI(FastAPI):
    """Main application class for the Legacy API."""

    def __init__(self, *args, settings: Settings, database: Database, **kwargs):
        super().__init__(*args, lifespan=self._lifespan, **kwargs)

        self.logger = logging.getLogger(__name__)
        self.state.settings = settings
        self.state.database = database
        self.state.hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
        self.state.rate_limiter = LoginRateLimiter(
            max_attempts=settings.RATE_LIMIT_MAX_ATTEMPTS,
            window_seconds=settings.RATE_LIMIT_WINDOW_MINUTES * 60,
            sweep_interval=settings.RATE_LIMIT_SWEEP_MINUTES * 60,
        )
        self._setup()

    def _setup(self):
        """Set up the application with middleware, error handlers and routes."""
        register_exception_handlers(self)
        setup_middleware(self, cors_origins=self.state.settings.cors_origins)
        self.include_router(api_router)
        self.add_api_route("/health", self.health_check, methods=["GET"], tags=["health"])

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI) -> AsyncIterator[None]:
        await self.on_startup()
        try:
            yield
        finally:
            await self.on_shutdown()

    async def on_startup(self):
        """Create tables, bootstrap the first admin and start the limiter sweep."""
        self.logger.info("Starting up Legacy API...")
        database: Database = self.state.database
        try:
            await database.create_tables()
            await self._create_initial_admin()
        except Exception as e:
            self.logger.error(f"Error during startup: {e}")
            raise
        self.state.rate_limiter.start()

    async def _create_initial_admin(self):
        """Create the initial admin from settings if it doesn't exist."""
        from .services.accounts import AccountService
        from .services.principals import PrincipalRepository

        settings: Settings = self.state.settings
        if not settings.INITIAL_ADMIN_EMAIL or not settings.INITIAL_ADMIN_PASSWORD:
            return

        async with self.state.database.get_session() as db:
            if await PrincipalRepository(db).get_admin_by_email(settings.INITIAL_ADMIN_EMAIL):
                self.logger.info("Initial admin already exists, skipping creation")
                return
            accounts = AccountService(db, self.state.hasher, self.state.rate_limiter)
            await accounts.create_admin(
                email=settings.INITIAL_ADMIN_EMAIL,
                password=settings.INITIAL_ADMIN_PASSWORD,
                first_name="Site",
                last_name="Administrator",
                role=AdminRole.ADMIN,
            )
            self.logger.info("Initial admin %s created", settings.INITIAL_ADMIN_EMAIL)

    async def on_shutdown(self):
        """Handle application shutdown events."""
        self.logger.info("Shutting down Legacy API...")
        try:
            await self.state.rate_limiter.stop()
        finally:
            await self.state.database.close()
        self.logger.info("Legacy API shutdown complete")

    async def health_check(self) -> dict[str, Any]:
        """Health check endpoint."""
        database_ok = await self.state.database.health_check()
        return {
            "status": "ok" if database_ok else "degraded",
            "timestamp": isoformat(utcnow()),
            "environment": self.state.settings.ENV,
            "database": "connected" if database_ok else "disconnected",
        }


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    title: Optional[str] = None,
    version: str = __version__,
    debug: Optional[bool] = None,
    **kwargs
) -> LegacyAPI:
    """
    Create and configure the Legacy API application.

    Args:
        settings: Settings to use; defaults to the cached environment settings.
        database: Database to use; defaults to one built from ``settings.DATABASE_URL``.
        title: The title of the API; defaults to ``settings.APP_NAME``.
        version: The version of the API.
        debug: Whether to run the application in debug mode; defaults to ``settings.DEBUG``.
        **kwargs: Additional keyword arguments to pass to the FastAPI constructor.

    Returns:
        LegacyAPI: The configured application instance.
    """
    settings = settings or get_settings()
    debug = settings.DEBUG if debug is None else debug

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        logger.info(f"Creating {settings.APP_NAME} application (version: {version})")

        database = database or Database(settings.DATABASE_URL, echo_sql=settings.ECHO_SQL)
        app = LegacyAPI(
            title=title or settings.APP_NAME,
            version=version,
            debug=debug,
            settings=settings,
            database=database,
            **kwargs
        )

        logger.info("Application initialization complete")
        return app

    except Exception as e:
        logger.critical(f"Failed to create application: {e}", exc_info=True)
        raise


__all__ = ['LegacyAPI', 'create_app', '__version__']
