"""
SelfEmploy Portal - Panchayath Model

Local administrative units used to group registrations.
"""

from typing import TYPE_CHECKING, List

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.registration import Registration


class Panchayath(BaseModel):
    """A panchayath (locality) within a district."""

    __tablename__ = "panchayaths"

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    district: Mapped[str] = mapped_column(String(150), nullable=False)

    registrations: Mapped[List["Registration"]] = relationship(
        "Registration",
        back_populates="panchayath",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Panchayath(id={self.id}, name={self.name}, district={self.district})>"
