"""
Archive item models. Files live in external object storage; only their
metadata passes through these models.
"""
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..db.models import ContentStatus


class ArchiveCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    file_url: str = Field(..., min_length=1, max_length=500)
    file_type: str = Field(..., min_length=1, max_length=100)
    file_size: Optional[int] = Field(None, ge=0)
    storage_file_id: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=100)
    tags: List[str] = Field(default_factory=list)
    date_taken: Optional[date] = None
    location: Optional[str] = Field(None, max_length=255)
    person_related: Optional[str] = Field(None, max_length=255)


class ArchiveUpdate(BaseModel):
    """Metadata an uploader may change; the file itself is fixed."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    tags: Optional[List[str]] = None
    date_taken: Optional[date] = None
    location: Optional[str] = Field(None, max_length=255)
    person_related: Optional[str] = Field(None, max_length=255)
    status: Optional[ContentStatus] = None


class ArchiveOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    file_url: str
    file_type: str
    file_size: Optional[int] = None
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    date_taken: Optional[date] = None
    location: Optional[str] = None
    person_related: Optional[str] = None
    status: str
    uploaded_by_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ArchiveStats(BaseModel):
    documents: int = 0
    photos: int = 0
    videos: int = 0
    audio: int = 0
    total: int = 0
    earliest_date: Optional[date] = None
    latest_date: Optional[date] = None
    years_covered: int = 0
