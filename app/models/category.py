"""
SelfEmploy Portal - Category Model

Self-employment categories a registrant can apply under, with their fees.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.registration import Registration


class Category(BaseModel):
    """
    Registration category.

    ``offer_fee`` is the discounted fee actually charged at registration;
    ``actual_fee`` is the list price shown alongside it.
    """

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Fees
    actual_fee: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
    )
    offer_fee: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
    )

    # Presentation
    warning_message: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Shown to the registrant before submitting",
    )
    preference: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    popup_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    qr_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_highlighted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    registrations: Mapped[List["Registration"]] = relationship(
        "Registration",
        back_populates="category",
        passive_deletes=True,
    )

    @property
    def is_free(self) -> bool:
        return self.offer_fee == 0

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name}, offer_fee={self.offer_fee})>"
