"""
Legacy API database module.

Async SQLAlchemy engine/session management, declarative models and the
database exception family.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from .session import Database, get_db
from .models import (
    Base, AdminRole, PrincipalKind, PrincipalMixin,
    Admin, FamilyMember, AuthSession, AdminAuditLog,
    ContentStatus, SubmissionStatus, SubmissionType,
    BlogPost, NewsArticle, TimelineEvent, ArchiveItem, ContentSubmission,
)
from .exceptions import DatabaseError, ConnectionError, StoreUnavailable

__all__ = [
    # Core components
    'Database', 'get_db', 'AsyncSession',

    # Models
    'Base', 'AdminRole', 'PrincipalKind', 'PrincipalMixin',
    'Admin', 'FamilyMember', 'AuthSession', 'AdminAuditLog',
    'ContentStatus', 'SubmissionStatus', 'SubmissionType',
    'BlogPost', 'NewsArticle', 'TimelineEvent', 'ArchiveItem', 'ContentSubmission',

    # Exceptions
    'DatabaseError', 'ConnectionError', 'StoreUnavailable',
]
