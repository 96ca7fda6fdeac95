"""
SelfEmploy Portal - Accounts Schemas

Pydantic schemas for ledger balances, cash transfers and expenses.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.accounts import CashTransactionType, PaymentMethod


class CashTransferRequest(BaseModel):
    """Deposit of cash in hand into the bank."""
    amount: Decimal = Field(..., gt=0)
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    remarks: Optional[str] = None


class ExpenseRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)
    payment_method: PaymentMethod
    description: str = Field(..., min_length=1)


class BalancesResponse(BaseModel):
    cash_in_hand: Decimal
    cash_at_bank: Decimal
    total_approved_fees: Decimal
    total_transfers: Decimal
    total_cash_expenses: Decimal
    total_bank_expenses: Decimal


class CashTransactionResponse(BaseModel):
    id: UUID
    transaction_type: CashTransactionType
    amount: Decimal
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    remarks: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ExpenseResponse(BaseModel):
    id: UUID
    amount: Decimal
    description: str
    payment_method: PaymentMethod
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CashTransactionListResponse(BaseModel):
    transactions: List[CashTransactionResponse]
    total: int


class ExpenseListResponse(BaseModel):
    expenses: List[ExpenseResponse]
    total: int
