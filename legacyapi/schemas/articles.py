"""
Blog post and news article models.

Both publications share one shape; request bodies accept camelCase keys.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..db.models import ContentStatus

SLUG_PATTERN = r"^[a-z0-9-]+$"


class ArticleCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=200, pattern=SLUG_PATTERN)
    excerpt: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    featured_image_url: Optional[str] = Field(None, alias="featuredImageUrl", max_length=500)
    status: ContentStatus = ContentStatus.DRAFT


class ArticleUpdate(BaseModel):
    """Partial update; only keys present in the body are written."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200, pattern=SLUG_PATTERN)
    excerpt: Optional[str] = Field(None, max_length=500)
    content: Optional[str] = Field(None, min_length=1)
    featured_image_url: Optional[str] = Field(None, alias="featuredImageUrl", max_length=500)
    status: Optional[ContentStatus] = None


class ArticleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    excerpt: Optional[str] = None
    content: str
    featured_image_url: Optional[str] = None
    status: str
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    author_name: Optional[str] = None
