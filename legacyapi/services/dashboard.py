"""
Counts shown on the admin dashboard.
"""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import (
    Admin,
    ArchiveItem,
    BlogPost,
    ContentStatus,
    ContentSubmission,
    FamilyMember,
    NewsArticle,
    SubmissionStatus,
)
from ..schemas.admin import DashboardStats


async def _count(db: AsyncSession, model, *conditions) -> int:
    result = await db.scalar(select(func.count(model.id)).where(*conditions))
    return result or 0


async def dashboard_stats(db: AsyncSession) -> DashboardStats:
    published = ContentStatus.PUBLISHED.value
    return DashboardStats(
        admins=await _count(db, Admin, Admin.is_active.is_(True)),
        family_accounts=await _count(db, FamilyMember, FamilyMember.username.is_not(None)),
        family_tree_members=await _count(db, FamilyMember),
        published_blogs=await _count(db, BlogPost, BlogPost.status == published),
        published_news=await _count(db, NewsArticle, NewsArticle.status == published),
        published_archives=await _count(db, ArchiveItem, ArchiveItem.status == published),
        pending_submissions=await _count(
            db, ContentSubmission, ContentSubmission.status == SubmissionStatus.PENDING.value
        ),
    )
