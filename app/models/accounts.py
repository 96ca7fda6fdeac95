"""
SelfEmploy Portal - Accounts Models

Append-only ledger entries for the registration fee cash book.

Balances are never stored; they are recomputed from these rows and from
approved registration fees on every read.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Date, Numeric, String, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class CashTransactionType(str, Enum):
    """Type of cash movement."""
    CASH_TRANSFER = "cash_transfer"  # Cash in hand deposited to bank


class PaymentMethod(str, Enum):
    """Bucket an expense is paid from."""
    CASH = "cash"
    BANK = "bank"


class CashTransaction(BaseModel):
    """Transfer of collected cash into the bank account."""

    __tablename__ = "cash_transactions"

    transaction_type: Mapped[CashTransactionType] = mapped_column(
        SQLEnum(CashTransactionType),
        default=CashTransactionType.CASH_TRANSFER,
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Collection period the transfer covers
    from_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    to_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<CashTransaction(id={self.id}, amount={self.amount})>"


class Expense(BaseModel):
    """Money spent from either cash in hand or the bank account."""

    __tablename__ = "expenses"

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLEnum(PaymentMethod),
        nullable=False,
    )
    created_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<Expense(id={self.id}, amount={self.amount}, method={self.payment_method})>"
