"""
Authentication exceptions.

Every exception carries the HTTP status and the client-safe message it maps
to. The specific reason a credential or session check failed stays in the
server log; clients only ever see the generic message.
"""
from typing import Any, Dict, Optional

from fastapi import status

GENERIC_LOGIN_ERROR = "Invalid username/email or password"


class AuthError(Exception):
    """Base class for authentication and authorization failures."""

    status_code: int = status.HTTP_401_UNAUTHORIZED
    message: str = "Authentication required"

    def __init__(self, message: Optional[str] = None, **extra: Any) -> None:
        self.message = message or self.message
        self.extra: Dict[str, Any] = extra
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class MissingCredentials(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Username/email and password are required"


class InvalidCredentials(AuthError):
    message = GENERIC_LOGIN_ERROR


class AccountDisabled(AuthError):
    message = GENERIC_LOGIN_ERROR


class RateLimited(AuthError):
    """Raised when a login key has too many recent failures."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = "Too many authentication attempts, please try again later."

    def __init__(self, remaining_attempts: int = 0, retry_after: str = "15 minutes") -> None:
        super().__init__(retryAfter=retry_after, remainingAttempts=remaining_attempts)
        self.remaining_attempts = remaining_attempts
        self.retry_after = retry_after


class SessionExpired(AuthError):
    message = "Session expired"


class Unauthenticated(AuthError):
    message = "Invalid or expired session"


class Forbidden(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Admin access required"


class SessionCollision(AuthError):
    """A legacy token matched sessions of more than one principal.

    This never happens with correct token issuance; it points at a token
    generation or storage bug and is never resolved by picking one side.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Session authentication error - please login again"


class PasswordPolicyError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "New password must be at least 8 characters long"


class PrincipalNotFound(AuthError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found"


class BadRequest(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Bad request"


__all__ = [
    "AuthError", "MissingCredentials", "InvalidCredentials", "AccountDisabled",
    "RateLimited", "SessionExpired", "Unauthenticated", "Forbidden",
    "SessionCollision", "PasswordPolicyError", "PrincipalNotFound", "BadRequest",
    "GENERIC_LOGIN_ERROR",
]
