"""
Server management commands.
"""
from typing import Optional

import typer

from ..utils import print_info, print_success


def run_server(
    host: Optional[str] = typer.Option(None, help="Bind address (defaults to HOST)"),
    port: Optional[int] = typer.Option(None, help="Port (defaults to PORT)"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
) -> None:
    """Run the API server with uvicorn."""
    # Import uvicorn only when needed
    import uvicorn
    from legacyapi.core.config import settings

    host = host or settings.HOST
    port = port or settings.PORT
    print_success(f"Starting Legacy API at http://{host}:{port}")
    uvicorn.run(
        "legacyapi:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


def server_status() -> None:
    """Show the effective configuration."""
    from legacyapi.core.config import settings
    from legacyapi.db.session import Database

    print_info("Server status:")
    print_info(f"  Environment: {settings.ENV}")
    print_info(f"  Debug mode: {settings.DEBUG}")
    print_info(f"  Database: {Database._obfuscate_url(settings.DATABASE_URL)}")
    print_info(f"  Secure cookies: {settings.cookie_secure}")
    print_info(f"  Legacy admin JWT: {'enabled' if settings.LEGACY_JWT_ENABLED else 'disabled'}")
