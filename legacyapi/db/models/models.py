"""
Database models for the Legacy API.

Two disjoint principal tables (administrators and family members) share the
columns authentication needs through ``PrincipalMixin``. Sessions for both
kinds live in one table keyed by a globally unique token.
"""
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Dict, Optional

from sqlalchemy import Boolean, Date, DateTime, Enum as SQLEnum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base
from ...utils.datetime import utcnow


class PrincipalKind(str, Enum):
    """Kinds of authenticated principal."""
    ADMIN = "admin"
    FAMILY_MEMBER = "family_member"


class AdminRole(str, Enum):
    """Roles stored in the admin table."""
    ADMIN = "admin"
    MEMBER = "member"


def _kind_enum() -> SQLEnum:
    return SQLEnum(
        PrincipalKind,
        native_enum=False,
        length=20,
        values_callable=lambda kinds: [k.value for k in kinds],
    )


class PrincipalMixin:
    """Columns shared by every principal table."""

    kind: ClassVar[PrincipalKind]

    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    password_changed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @property
    def effective_role(self) -> str:
        return "member"

    def public_dict(self) -> Dict[str, Any]:
        """Column values without the password hash."""
        return self.to_dict(exclude={"password_hash"})


class Admin(PrincipalMixin, Base):
    """Administrator account. Logs in by email, or by username when one is set."""
    __tablename__ = "admins"

    kind: ClassVar[PrincipalKind] = PrincipalKind.ADMIN

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    username: Mapped[Optional[str]] = mapped_column(String(50), unique=True, index=True, nullable=True)
    role: Mapped[str] = mapped_column(String(20), default=AdminRole.MEMBER.value, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(ForeignKey("admins.id"), nullable=True)

    @property
    def effective_role(self) -> str:
        return AdminRole.ADMIN.value if self.role == AdminRole.ADMIN.value else AdminRole.MEMBER.value

    def __repr__(self) -> str:
        return f"<Admin {self.email}>"


class FamilyMember(PrincipalMixin, Base):
    """A person in the family tree, optionally holding login credentials."""
    __tablename__ = "family_members"

    kind: ClassVar[PrincipalKind] = PrincipalKind.FAMILY_MEMBER

    username: Mapped[Optional[str]] = mapped_column(String(100), unique=True, index=True, nullable=True)
    maiden_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    birth_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    death_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    birth_place: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    occupation: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    biography: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    profile_photo_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    father_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("family_members.id", ondelete="SET NULL"), nullable=True
    )
    mother_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("family_members.id", ondelete="SET NULL"), nullable=True
    )
    spouse_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("family_members.id", ondelete="SET NULL"), nullable=True
    )

    def __repr__(self) -> str:
        return f"<FamilyMember {self.username or self.display_name}>"


class AuthSession(Base):
    """Server-side login session.

    ``token`` is unique across the whole table, so one token value can never
    belong to two principal kinds.
    """
    __tablename__ = "auth_sessions"

    token: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    principal_kind: Mapped[PrincipalKind] = mapped_column(_kind_enum(), index=True, nullable=False)
    principal_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_activity: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


class AdminAuditLog(Base):
    """Record of an administrative action."""
    __tablename__ = "admin_audit_logs"

    admin_id: Mapped[Optional[int]] = mapped_column(ForeignKey("admins.id"), nullable=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    target_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON string
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
