"""
Authentication service: login, logout, session resolution and password change.

Login handles are resolved against two disjoint principal tables. An email
handle only ever matches an administrator; a username matches a family member
first and an administrator second. Session tokens carry a kind prefix so a
token is only ever looked up against sessions of its own kind.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.exceptions import (
    AccountDisabled,
    InvalidCredentials,
    MissingCredentials,
    PasswordPolicyError,
    PrincipalNotFound,
    RateLimited,
    SessionCollision,
    SessionExpired,
    Unauthenticated,
)
from ..auth.rate_limiting import LoginRateLimiter, principal_key, unknown_key
from ..core.config import Settings
from ..core.security import PasswordHasher, generate_session_token, token_kind
from ..db.models import AuthSession, PrincipalKind
from ..utils.datetime import utcnow
from .principals import Principal, PrincipalRepository
from .sessions import ClientMeta, SessionStore

logger = logging.getLogger("legacy.auth")


def token_hint(token: str) -> str:
    """First characters of a token, safe to put in a log line."""
    return f"{token[:8]}..."


@dataclass
class LoginResult:
    principal: Principal
    kind: PrincipalKind
    role: str
    token: str


@dataclass
class CurrentPrincipal:
    """The authenticated caller attached to a request."""
    principal: Principal
    kind: PrincipalKind
    role: str
    session_token: Optional[str] = None

    @property
    def id(self) -> int:
        return self.principal.id

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class AuthService:
    """Credential and session operations over one database session."""

    def __init__(
        self,
        db: AsyncSession,
        rate_limiter: LoginRateLimiter,
        hasher: PasswordHasher,
        settings: Settings,
    ):
        self.db = db
        self.rate_limiter = rate_limiter
        self.hasher = hasher
        self.settings = settings
        self.principals = PrincipalRepository(db)
        self.sessions = SessionStore(db)

    @property
    def session_ttl(self) -> timedelta:
        return timedelta(hours=self.settings.SESSION_TTL_HOURS)

    async def rate_limit_key(self, handle: str) -> str:
        """Key failed attempts by account, falling back to the raw handle."""
        resolved = await self.principals.find_for_rate_limit(handle)
        if resolved is None:
            return unknown_key(handle)
        kind, principal_id = resolved
        return principal_key(principal_id, kind)

    async def login(
        self,
        handle: Optional[str],
        password: Optional[str],
        client: Optional[ClientMeta] = None,
    ) -> LoginResult:
        """Verify credentials and open a new session.

        Raises:
            MissingCredentials: handle or password is empty.
            RateLimited: too many recent failures for this account.
            InvalidCredentials: unknown handle or wrong password.
            AccountDisabled: the account exists but is inactive.
        """
        if not handle or not password:
            raise MissingCredentials()

        key = await self.rate_limit_key(handle)
        if await self.rate_limiter.is_rate_limited(key):
            remaining = await self.rate_limiter.remaining_attempts(key)
            logger.warning("Rate-limited login attempt for %s", key, extra={"rate_limit_key": key})
            raise RateLimited(remaining_attempts=remaining)

        principal = await self.principals.find_by_handle(handle)
        if principal is None or not principal.password_hash:
            await self.rate_limiter.record_failed_attempt(key)
            logger.info("Login failed for %s: no matching account", key)
            raise InvalidCredentials()

        if not principal.is_active:
            await self.rate_limiter.record_failed_attempt(key)
            logger.info("Login failed for %s: account inactive", key)
            raise AccountDisabled()

        if not await self.hasher.verify_async(password, principal.password_hash):
            await self.rate_limiter.record_failed_attempt(key)
            logger.info("Login failed for %s: wrong password", key)
            raise InvalidCredentials()

        await self.rate_limiter.clear(key)

        kind = principal.kind
        token = generate_session_token(kind)
        await self.sessions.create(token, kind, principal.id, self.session_ttl, client)
        await self.principals.touch_last_login(principal)
        await self.db.commit()

        logger.info(
            "Login succeeded for %s %s (session %s)", kind.value, principal.id, token_hint(token),
            extra={"principal_kind": kind.value, "principal_id": principal.id},
        )
        return LoginResult(principal=principal, kind=kind, role=principal.effective_role, token=token)

    async def logout(self, token: Optional[str]) -> None:
        """Deactivate the session behind ``token``. Unknown tokens are ignored."""
        if not token:
            return
        touched = await self.sessions.deactivate_token(token, token_kind(token))
        await self.db.commit()
        logger.info("Logout for session %s (%d row(s))", token_hint(token), touched)

    async def _find_session(self, token: str) -> Optional[AuthSession]:
        kind = token_kind(token)
        rows = await self.sessions.find_active(token, kind)
        if kind is not None:
            return rows[0] if rows else None

        # Unprefixed tokens predate kind prefixes and may match either kind
        if len(rows) > 1:
            logger.critical(
                "Legacy session token %s matches %d sessions across principal kinds",
                token_hint(token), len(rows),
                extra={"kinds": sorted({row.principal_kind.value for row in rows})},
            )
            raise SessionCollision()
        return rows[0] if rows else None

    async def resolve_session(self, token: str) -> CurrentPrincipal:
        """Map a session token to its principal.

        Raises:
            Unauthenticated: no active session, or its principal is gone.
            SessionExpired: the session passed its expiry; it is deactivated.
            AccountDisabled: the principal was deactivated.
            SessionCollision: a legacy token matched more than one principal.
        """
        session = await self._find_session(token)
        if session is None:
            raise Unauthenticated()

        if utcnow() > session.expires_at:
            session.is_active = False
            await self.db.commit()
            logger.info("Session %s expired", token_hint(token))
            raise SessionExpired()

        principal = await self.principals.get(session.principal_kind, session.principal_id)
        if principal is None:
            raise Unauthenticated()
        if not principal.is_active:
            raise AccountDisabled("User not found or inactive")

        await self.sessions.touch(session)
        return CurrentPrincipal(
            principal=principal,
            kind=session.principal_kind,
            role=principal.effective_role,
            session_token=token,
        )

    async def change_password(
        self,
        principal_id: int,
        kind: PrincipalKind,
        current_password: Optional[str],
        new_password: Optional[str],
    ) -> int:
        """Replace a principal's password and end every one of its sessions.

        Returns the number of sessions that were deactivated.
        """
        if not current_password or not new_password:
            raise MissingCredentials("Current password and new password are required")

        min_length = self.settings.PASSWORD_MIN_LENGTH
        if len(new_password) < min_length:
            raise PasswordPolicyError(f"New password must be at least {min_length} characters long")

        principal = await self.principals.get(kind, principal_id)
        if principal is None:
            raise PrincipalNotFound()

        if not await self.hasher.verify_async(current_password, principal.password_hash):
            raise InvalidCredentials("Current password is incorrect")

        new_hash = await self.hasher.hash_async(new_password)
        await self.principals.set_password(principal, new_hash, changed=True)
        ended = await self.sessions.deactivate_all(kind, principal_id)
        await self.db.commit()

        await self.rate_limiter.clear_principal(principal_id, kind)
        logger.info(
            "Password changed for %s %s; %d session(s) invalidated", kind.value, principal_id, ended,
        )
        return ended


__all__ = ["AuthService", "LoginResult", "CurrentPrincipal", "ClientMeta", "token_hint"]
