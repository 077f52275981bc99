# auth/dependencies.py
"""
Request authentication guards.

Each guard resolves the caller from the session cookie and stores it on
``request.state.principal`` before the route handler runs. ``require_admin``
also accepts a legacy admin bearer JWT, but only when no session cookie was
sent: a cookie always takes precedence.
"""
import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Settings
from ..core.security import PasswordHasher, decode_legacy_jwt
from ..db import get_db
from ..db.models import PrincipalKind
from ..services.auth import AuthService, CurrentPrincipal
from ..services.principals import PrincipalRepository
from ..services.sessions import ClientMeta
from .exceptions import AuthError, Forbidden, SessionCollision, Unauthenticated
from .rate_limiting import LoginRateLimiter

logger = logging.getLogger("legacy.auth")

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_limiter(request: Request) -> LoginRateLimiter:
    return request.app.state.rate_limiter


def get_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_client_meta(request: Request) -> ClientMeta:
    return ClientMeta(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


async def get_auth_service(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AuthService:
    return AuthService(
        db,
        rate_limiter=get_rate_limiter(request),
        hasher=get_hasher(request),
        settings=get_app_settings(request),
    )


def session_token_from(request: Request) -> Optional[str]:
    return request.cookies.get(get_app_settings(request).SESSION_COOKIE_NAME) or None


async def get_current_principal(
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> CurrentPrincipal:
    """Resolve the session cookie into the calling principal."""
    token = session_token_from(request)
    if token is None:
        raise Unauthenticated("No session token provided")

    current = await service.resolve_session(token)
    request.state.principal = current
    return current


async def get_optional_principal(
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> Optional[CurrentPrincipal]:
    """Like ``get_current_principal`` but anonymous callers get ``None``."""
    token = session_token_from(request)
    if token is None:
        return None
    try:
        current = await service.resolve_session(token)
    except SessionCollision:
        raise
    except AuthError as e:
        logger.debug("Ignoring unusable session on optional route: %s", e.message)
        return None
    request.state.principal = current
    return current


async def require_member(
    current: CurrentPrincipal = Depends(get_current_principal),
) -> CurrentPrincipal:
    """Any authenticated principal, admin or family member."""
    return current


async def _principal_from_bearer(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
    service: AuthService,
) -> CurrentPrincipal:
    settings = get_app_settings(request)
    if credentials is None or not settings.LEGACY_JWT_ENABLED:
        raise Unauthenticated("No session token provided")

    admin_id = decode_legacy_jwt(credentials.credentials, settings.SECRET_KEY, settings.JWT_ALGORITHM)
    if admin_id is None:
        raise Unauthenticated("Invalid or expired token")

    admin = await PrincipalRepository(service.db).get(PrincipalKind.ADMIN, admin_id)
    if admin is None or not admin.is_active:
        raise Unauthenticated("Invalid or expired token")

    return CurrentPrincipal(principal=admin, kind=PrincipalKind.ADMIN, role=admin.effective_role)


async def require_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    service: AuthService = Depends(get_auth_service),
) -> CurrentPrincipal:
    """An authenticated principal with the elevated admin role."""
    token = session_token_from(request)
    if token is not None:
        current = await service.resolve_session(token)
    else:
        current = await _principal_from_bearer(request, credentials, service)

    if not current.is_admin:
        logger.info("Admin route refused for %s %s", current.kind.value, current.id)
        raise Forbidden()

    request.state.principal = current
    return current


__all__ = [
    "get_app_settings", "get_rate_limiter", "get_hasher", "get_client_meta",
    "get_auth_service", "get_current_principal", "get_optional_principal",
    "require_member", "require_admin", "session_token_from",
]
