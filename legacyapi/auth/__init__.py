# auth/__init__.py
"""
Authentication building blocks for the Legacy API.

The request guards live in ``legacyapi.auth.dependencies``; they depend on the
service layer and are imported from there directly.
"""
from .exceptions import (
    AuthError, MissingCredentials, InvalidCredentials, AccountDisabled, RateLimited,
    SessionExpired, Unauthenticated, Forbidden, SessionCollision, PasswordPolicyError,
    PrincipalNotFound, BadRequest,
)
from .rate_limiting import LoginRateLimiter, RateLimitEntry, principal_key, unknown_key
from .audit import AuditAction, AuditService

__all__ = [
    "AuthError", "MissingCredentials", "InvalidCredentials", "AccountDisabled", "RateLimited",
    "SessionExpired", "Unauthenticated", "Forbidden", "SessionCollision", "PasswordPolicyError",
    "PrincipalNotFound", "BadRequest",
    "LoginRateLimiter", "RateLimitEntry", "principal_key", "unknown_key",
    "AuditAction", "AuditService",
]
