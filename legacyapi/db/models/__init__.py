"""
Database models for the Legacy API.
"""
from .base import Base
from .models import (
    AdminRole, PrincipalKind, PrincipalMixin,
    Admin, FamilyMember, AuthSession, AdminAuditLog,
)
from .content import (
    ContentStatus, SubmissionStatus, SubmissionType,
    BlogPost, NewsArticle, TimelineEvent, ArchiveItem, ContentSubmission,
)

__all__ = [
    "Base", "AdminRole", "PrincipalKind", "PrincipalMixin",
    "Admin", "FamilyMember", "AuthSession", "AdminAuditLog",
    "ContentStatus", "SubmissionStatus", "SubmissionType",
    "BlogPost", "NewsArticle", "TimelineEvent", "ArchiveItem", "ContentSubmission",
]
