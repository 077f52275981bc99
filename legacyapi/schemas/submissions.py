"""
Content submission models.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..db.models import SubmissionStatus, SubmissionType


class ArticleDraft(BaseModel):
    """``content`` of a blog or news submission."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: Optional[str] = Field(None, max_length=200)
    excerpt: Optional[str] = Field(None, max_length=500)
    content: str = Field(..., min_length=1)
    featured_image_url: Optional[str] = Field(None, alias="featuredImageUrl", max_length=500)


class ArchiveDraft(BaseModel):
    """``content`` of an archive submission, for a file that is already uploaded."""
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    file_url: str = Field(..., alias="fileUrl", min_length=1, max_length=500)
    file_type: str = Field(..., alias="fileType", min_length=1, max_length=100)
    file_size: Optional[int] = Field(None, alias="fileSize", ge=0)
    storage_file_id: Optional[str] = Field(None, alias="storageFileId", max_length=255)
    category: Optional[str] = Field(None, max_length=100)
    tags: List[str] = Field(default_factory=list)
    date_taken: Optional[date] = Field(None, alias="dateTaken")
    location: Optional[str] = Field(None, max_length=255)
    person_related: Optional[str] = Field(None, alias="personRelated", max_length=255)


DRAFT_MODELS = {
    SubmissionType.NEWS: ArticleDraft,
    SubmissionType.BLOG: ArticleDraft,
    SubmissionType.ARCHIVE: ArchiveDraft,
}


class SubmissionCreate(BaseModel):
    type: SubmissionType
    title: str = Field(..., min_length=1, max_length=200)
    content: Dict[str, Any]


class SubmissionReview(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: SubmissionStatus
    review_notes: Optional[str] = Field(None, alias="reviewNotes")


class SubmissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    title: str
    content: Dict[str, Any]
    status: str
    submitter_type: str
    submitter_id: int
    submitter_name: Optional[str] = None
    reviewed_by: Optional[int] = None
    review_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    published_id: Optional[int] = None
    created_at: datetime


class SubmissionStats(BaseModel):
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    total: int = 0
