"""
Service layer for the Legacy API.
"""
from .principals import Principal, PrincipalRepository
from .sessions import ClientMeta, SessionInfo, SessionStore
from .auth import AuthService, CurrentPrincipal, LoginResult
from .family import FamilyService
from .accounts import AccountService, Credentials
from .articles import ArticleService, BlogService, NewsService
from .timeline import TimelineService
from .archives import ArchiveService
from .submissions import SubmissionService
from .dashboard import dashboard_stats

__all__ = [
    "Principal", "PrincipalRepository",
    "ClientMeta", "SessionInfo", "SessionStore",
    "AuthService", "CurrentPrincipal", "LoginResult",
    "FamilyService",
    "AccountService", "Credentials",
    "ArticleService", "BlogService", "NewsService",
    "TimelineService", "ArchiveService", "SubmissionService",
    "dashboard_stats",
]
