"""
Family tree record models.
"""
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FamilyMemberBase(BaseModel):
    """Fields an admin may set on a family tree record."""
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    maiden_name: Optional[str] = Field(None, max_length=100)
    birth_date: Optional[date] = None
    death_date: Optional[date] = None
    birth_place: Optional[str] = Field(None, max_length=255)
    occupation: Optional[str] = Field(None, max_length=255)
    biography: Optional[str] = None
    profile_photo_url: Optional[str] = Field(None, max_length=500)
    father_id: Optional[int] = None
    mother_id: Optional[int] = None
    spouse_id: Optional[int] = None


class FamilyMemberCreate(FamilyMemberBase):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class FamilyMemberUpdate(FamilyMemberBase):
    """Partial update; only fields present in the body are written."""
    pass


class FamilyMemberOut(FamilyMemberBase):
    """Public view of a family tree record."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    spouse_name: Optional[str] = None
