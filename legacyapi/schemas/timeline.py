"""
Timeline event models.
"""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TimelineEventCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    event_date: date = Field(..., alias="eventDate")
    event_type: Optional[str] = Field(None, alias="eventType", max_length=50)
    location: Optional[str] = Field(None, max_length=255)
    associated_member_id: Optional[int] = Field(None, alias="associatedMemberId")
    image_url: Optional[str] = Field(None, alias="imageUrl", max_length=500)


class TimelineEventUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    event_date: Optional[date] = Field(None, alias="eventDate")
    event_type: Optional[str] = Field(None, alias="eventType", max_length=50)
    location: Optional[str] = Field(None, max_length=255)
    associated_member_id: Optional[int] = Field(None, alias="associatedMemberId")
    image_url: Optional[str] = Field(None, alias="imageUrl", max_length=500)


class TimelineEventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    event_date: date
    event_type: Optional[str] = None
    location: Optional[str] = None
    associated_member_id: Optional[int] = None
    associated_member_name: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
