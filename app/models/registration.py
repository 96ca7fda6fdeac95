"""
SelfEmploy Portal - Registration Model

Public self-employment registrations and their approval lifecycle.

Lifecycle:
- created by the public registration form with status PENDING
- moved to APPROVED / REJECTED / back to PENDING by an admin, or to
  APPROVED by the registrant's own confirmation in a free category
- removed only by an explicit privileged delete
"""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.category import Category
    from app.models.panchayath import Panchayath


class RegistrationStatus(str, Enum):
    """Application status."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Registration(BaseModel):
    """
    A registrant's application under a category.

    ``approved_date`` and ``approved_by`` are stamped by every transition
    into APPROVED and cleared by a transition back to PENDING.
    """

    __tablename__ = "registrations"

    # Identity
    customer_id: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        nullable=False,
        index=True,
    )
    mobile_number: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
        index=True,
    )

    # Personal data
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    ward: Mapped[str] = mapped_column(String(50), nullable=False)
    agent_pro: Mapped[Optional[str]] = mapped_column(
        String(200),
        nullable=True,
        comment="Agent / PRO who referred the registrant",
    )
    preference: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Classification
    category_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    panchayath_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("panchayaths.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    fee_paid: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
    )

    # Lifecycle
    status: Mapped[RegistrationStatus] = mapped_column(
        SQLEnum(RegistrationStatus),
        default=RegistrationStatus.PENDING,
        nullable=False,
        index=True,
    )
    approved_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    approved_by: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="Approving admin username, or the self-service marker",
    )

    # Relationships
    category: Mapped["Category"] = relationship(
        "Category",
        back_populates="registrations",
        lazy="selectin",
    )
    panchayath: Mapped[Optional["Panchayath"]] = relationship(
        "Panchayath",
        back_populates="registrations",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Registration(id={self.id}, customer_id={self.customer_id}, status={self.status})>"
