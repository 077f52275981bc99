# auth/audit.py
"""
Admin audit logging for the Legacy API.
"""
import json
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import AdminAuditLog


class AuditAction(str, Enum):
    """Audit action types."""
    ACCOUNT_CREATE = "account_create"
    ACCOUNT_UPDATE = "account_update"
    ACCOUNT_DELETE = "account_delete"
    ACCOUNT_ACTIVATE = "account_activate"
    ACCOUNT_DEACTIVATE = "account_deactivate"
    PASSWORD_RESET = "password_reset"
    FAMILY_CREATE = "family_create"
    FAMILY_UPDATE = "family_update"
    FAMILY_DELETE = "family_delete"
    BLOG_POST_CREATE = "blog_post_create"
    BLOG_POST_UPDATE = "blog_post_update"
    BLOG_POST_DELETE = "blog_post_delete"
    NEWS_ARTICLE_CREATE = "news_article_create"
    NEWS_ARTICLE_UPDATE = "news_article_update"
    NEWS_ARTICLE_DELETE = "news_article_delete"
    TIMELINE_CREATE = "timeline_create"
    TIMELINE_UPDATE = "timeline_update"
    TIMELINE_DELETE = "timeline_delete"
    ARCHIVE_CREATE = "archive_create"
    ARCHIVE_UPDATE = "archive_update"
    ARCHIVE_DELETE = "archive_delete"
    SUBMISSION_CREATE = "submission_create"
    SUBMISSION_REVIEW = "submission_review"
    SUBMISSION_DELETE = "submission_delete"


def client_meta(request: Optional[Request]) -> Tuple[Optional[str], Optional[str]]:
    """IP address and user agent of a request."""
    if request is None:
        return None, None
    ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")


class AuditService:
    """Audit logging service."""

    @staticmethod
    async def log_admin_action(
        db: AsyncSession,
        admin_id: Optional[int],
        action: AuditAction,
        target_type: str,
        target_id: Optional[Any] = None,
        request: Optional[Request] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> AdminAuditLog:
        """Record an admin action and commit it with the pending changes."""
        ip_address, user_agent = client_meta(request)

        audit_log = AdminAuditLog(
            admin_id=admin_id,
            action=action.value,
            target_type=target_type,
            target_id=str(target_id) if target_id is not None else None,
            ip_address=ip_address,
            user_agent=user_agent,
            details=json.dumps(details) if details else None,
        )

        db.add(audit_log)
        await db.commit()
        return audit_log

    @staticmethod
    async def get_audit_log(
        db: AsyncSession,
        page: int = 1,
        limit: int = 50
    ) -> Tuple[List[AdminAuditLog], int]:
        """Get one page of audit entries, newest first, with the total count."""
        total = await db.scalar(select(func.count()).select_from(AdminAuditLog))
        result = await db.execute(
            select(AdminAuditLog)
            .order_by(AdminAuditLog.created_at.desc(), AdminAuditLog.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0
