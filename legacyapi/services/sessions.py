"""
Session store: server-side login sessions.
"""
from datetime import datetime, timedelta
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import AuthSession, PrincipalKind
from ..utils.datetime import utcnow


class ClientMeta(BaseModel):
    """Client metadata recorded with a session."""
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class SessionInfo(BaseModel):
    """Session information model."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    ip_address: Optional[str] = Field(None, alias="ipAddress")
    user_agent: Optional[str] = Field(None, alias="userAgent")
    is_current: bool = Field(False, alias="isCurrent")
    created_at: datetime = Field(alias="createdAt")
    last_activity: datetime = Field(alias="lastActivity")
    expires_at: datetime = Field(alias="expiresAt")


class SessionStore:
    """Session management service. Never commits; callers own the transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        token: str,
        kind: PrincipalKind,
        principal_id: int,
        ttl: timedelta,
        client: Optional[ClientMeta] = None,
    ) -> AuthSession:
        """Create a new session row."""
        client = client or ClientMeta()
        now = utcnow()
        session = AuthSession(
            token=token,
            principal_kind=kind,
            principal_id=principal_id,
            expires_at=now + ttl,
            is_active=True,
            ip_address=client.ip_address,
            user_agent=(client.user_agent or "")[:255] or None,
            last_activity=now,
        )
        self.db.add(session)
        await self.db.flush()
        return session

    async def find_active(self, token: str, kind: Optional[PrincipalKind] = None) -> List[AuthSession]:
        """Active rows for ``token``, restricted to ``kind`` when given."""
        query = select(AuthSession).where(
            and_(AuthSession.token == token, AuthSession.is_active == True)  # noqa: E712
        )
        if kind is not None:
            query = query.where(AuthSession.principal_kind == kind)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def deactivate_token(self, token: str, kind: Optional[PrincipalKind] = None) -> int:
        """Deactivate ``token``; any kind when ``kind`` is None. Returns rows touched."""
        stmt = update(AuthSession).where(AuthSession.token == token)
        if kind is not None:
            stmt = stmt.where(AuthSession.principal_kind == kind)
        result = await self.db.execute(stmt.values(is_active=False))
        return result.rowcount

    async def deactivate_all(self, kind: PrincipalKind, principal_id: int) -> int:
        """Deactivate every session owned by a principal."""
        result = await self.db.execute(
            update(AuthSession)
            .where(
                and_(
                    AuthSession.principal_kind == kind,
                    AuthSession.principal_id == principal_id,
                    AuthSession.is_active == True,  # noqa: E712
                )
            )
            .values(is_active=False)
        )
        return result.rowcount

    async def touch(self, session: AuthSession) -> None:
        session.last_activity = utcnow()
        await self.db.flush()

    async def list_active(
        self,
        kind: PrincipalKind,
        principal_id: int,
        current_token: Optional[str] = None,
    ) -> List[SessionInfo]:
        """Get all unexpired active sessions for a principal, most recent first."""
        result = await self.db.execute(
            select(AuthSession)
            .where(
                and_(
                    AuthSession.principal_kind == kind,
                    AuthSession.principal_id == principal_id,
                    AuthSession.is_active == True,  # noqa: E712
                    AuthSession.expires_at > utcnow(),
                )
            )
            .order_by(AuthSession.last_activity.desc())
        )

        return [
            SessionInfo(
                id=session.id,
                ip_address=session.ip_address,
                user_agent=session.user_agent,
                is_current=session.token == current_token,
                created_at=session.created_at,
                last_activity=session.last_activity,
                expires_at=session.expires_at,
            )
            for session in result.scalars().all()
        ]
