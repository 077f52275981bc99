"""
Site content models: blog posts, news articles, timeline events, archive
items and the member submissions that feed them.

Authors and uploaders may be either kind of principal, so they are stored
as a (kind, id) pair rather than a foreign key into one table.
"""
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base
from .models import PrincipalKind, _kind_enum


class ContentStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SubmissionType(str, Enum):
    NEWS = "news"
    BLOG = "blog"
    ARCHIVE = "archive"


class ArticleMixin:
    """Columns shared by blog posts and news articles."""

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), unique=True, index=True, nullable=False)
    excerpt: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    featured_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=ContentStatus.DRAFT.value, index=True, nullable=False
    )
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    author_kind: Mapped[Optional[PrincipalKind]] = mapped_column(_kind_enum(), nullable=True)
    author_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    @property
    def is_published(self) -> bool:
        return self.status == ContentStatus.PUBLISHED.value


class BlogPost(ArticleMixin, Base):
    __tablename__ = "blog_posts"


class NewsArticle(ArticleMixin, Base):
    __tablename__ = "news_articles"


class TimelineEvent(Base):
    """A dated event in the family's history."""
    __tablename__ = "timeline_events"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    event_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    event_type: Mapped[Optional[str]] = mapped_column(String(50), index=True, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    associated_member_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("family_members.id", ondelete="SET NULL"), nullable=True
    )
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(ForeignKey("admins.id"), nullable=True)


class ArchiveItem(Base):
    """Metadata for a file held by the external object store."""
    __tablename__ = "archive_items"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    file_url: Mapped[str] = mapped_column(String(500), nullable=False)
    file_type: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    storage_file_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), index=True, nullable=True)
    tags: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    date_taken: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    person_related: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=ContentStatus.PUBLISHED.value, index=True, nullable=False
    )
    uploaded_by_kind: Mapped[Optional[PrincipalKind]] = mapped_column(_kind_enum(), nullable=True)
    uploaded_by_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)


class ContentSubmission(Base):
    """Content proposed by a signed-in user, waiting for an admin's review."""
    __tablename__ = "content_submissions"

    type: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=SubmissionStatus.PENDING.value, index=True, nullable=False
    )
    submitter_kind: Mapped[PrincipalKind] = mapped_column(_kind_enum(), nullable=False)
    submitter_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    reviewed_by: Mapped[Optional[int]] = mapped_column(ForeignKey("admins.id"), nullable=True)
    review_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    published_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
