"""
Pydantic models for request/response validation.
"""
from .auth import (
    LoginRequest, ChangePasswordRequest, MessageResponse, ChangePasswordResponse, user_payload,
)
from .family import FamilyMemberCreate, FamilyMemberUpdate, FamilyMemberOut
from .admin import (
    AccountOut, AccountList, ProvisionedAccount, PasswordResetOut, AuditEntryOut, AuditPage,
    AdminUserCreate, AdminUserUpdate, AdminUserOut, DashboardStats,
)
from .articles import ArticleCreate, ArticleUpdate, ArticleOut
from .timeline import TimelineEventCreate, TimelineEventUpdate, TimelineEventOut
from .archives import ArchiveCreate, ArchiveUpdate, ArchiveOut, ArchiveStats
from .submissions import (
    ArticleDraft, ArchiveDraft, SubmissionCreate, SubmissionReview, SubmissionOut, SubmissionStats,
)

__all__ = [
    "LoginRequest", "ChangePasswordRequest", "MessageResponse", "ChangePasswordResponse",
    "user_payload",
    "FamilyMemberCreate", "FamilyMemberUpdate", "FamilyMemberOut",
    "AccountOut", "AccountList", "ProvisionedAccount", "PasswordResetOut",
    "AuditEntryOut", "AuditPage",
    "AdminUserCreate", "AdminUserUpdate", "AdminUserOut", "DashboardStats",
    "ArticleCreate", "ArticleUpdate", "ArticleOut",
    "TimelineEventCreate", "TimelineEventUpdate", "TimelineEventOut",
    "ArchiveCreate", "ArchiveUpdate", "ArchiveOut", "ArchiveStats",
    "ArticleDraft", "ArchiveDraft", "SubmissionCreate", "SubmissionReview",
    "SubmissionOut", "SubmissionStats",
]
