"""
SelfEmploy Portal - Content Schemas

Pydantic schemas for announcements and utility links.
"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class AnnouncementCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    is_active: bool = True
    expiry_date: Optional[date] = None
    poster_image_url: Optional[str] = Field(None, max_length=500)
    youtube_video_url: Optional[str] = Field(None, max_length=500)


class AnnouncementUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None
    expiry_date: Optional[date] = None
    poster_image_url: Optional[str] = Field(None, max_length=500)
    youtube_video_url: Optional[str] = Field(None, max_length=500)


class AnnouncementResponse(BaseModel):
    id: UUID
    title: str
    content: str
    is_active: bool
    expiry_date: Optional[date] = None
    poster_image_url: Optional[str] = None
    youtube_video_url: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UtilityCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    url: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    is_active: bool = True


class UtilityUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    url: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class UtilityResponse(BaseModel):
    id: UUID
    name: str
    url: str
    description: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


class AnnouncementListResponse(BaseModel):
    announcements: List[AnnouncementResponse]
    total: int


class UtilityListResponse(BaseModel):
    utilities: List[UtilityResponse]
    total: int
