"""
SelfEmploy Portal - Public Content Models

Announcements and utility links shown on the public site.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class Announcement(BaseModel):
    """Public announcement with an optional expiry date."""

    __tablename__ = "announcements"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    poster_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    youtube_video_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    def is_visible_on(self, day: date) -> bool:
        return self.is_active and (self.expiry_date is None or self.expiry_date >= day)


class Utility(BaseModel):
    """External link listed in the utilities menu."""

    __tablename__ = "utilities"

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
