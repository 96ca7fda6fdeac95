"""
SelfEmploy Portal - Ledger Reconciliation

Cash book for registration fees.

Balances are projections over the append-only transfer / expense log and
the approved registrations, recomputed on every read:

    cash_in_hand = approved_fees - transfers - cash_expenses
    cash_at_bank = transfers - bank_expenses

A new transfer or expense may not exceed the balance of the bucket it
draws from, computed with the same formula at submission time.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.accounts import CashTransaction, CashTransactionType, Expense, PaymentMethod
from app.models.admin_user import PermissionModule, PermissionType
from app.models.registration import Registration, RegistrationStatus
from app.utils.error_handling import (
    InsufficientBalanceException,
    ValidationException,
    require_text,
    validate_amount,
)
from app.utils.permissions import ActorContext, require_permission

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class LedgerAggregates:
    """Totals the balances are derived from."""
    total_approved_fees: Decimal = ZERO
    total_transfers: Decimal = ZERO
    total_cash_expenses: Decimal = ZERO
    total_bank_expenses: Decimal = ZERO


@dataclass(frozen=True)
class LedgerBalances:
    cash_in_hand: Decimal
    cash_at_bank: Decimal

    def available(self, method: PaymentMethod) -> Decimal:
        return self.cash_in_hand if method == PaymentMethod.CASH else self.cash_at_bank


def compute_balances(aggregates: LedgerAggregates) -> LedgerBalances:
    """Derive both balances from the ledger totals."""
    return LedgerBalances(
        cash_in_hand=(
            aggregates.total_approved_fees
            - aggregates.total_transfers
            - aggregates.total_cash_expenses
        ),
        cash_at_bank=aggregates.total_transfers - aggregates.total_bank_expenses,
    )


class LedgerService:
    """Service for the cash / bank ledger."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _sum(self, query) -> Decimal:
        result = await self.db.execute(query)
        return Decimal(str(result.scalar() or 0))

    async def get_aggregates(self) -> LedgerAggregates:
        """Recompute all ledger totals from stored records."""
        approved_fees = await self._sum(
            select(func.coalesce(func.sum(Registration.fee_paid), 0))
            .where(Registration.status == RegistrationStatus.APPROVED)
        )
        transfers = await self._sum(
            select(func.coalesce(func.sum(CashTransaction.amount), 0))
            .where(CashTransaction.transaction_type == CashTransactionType.CASH_TRANSFER)
        )
        cash_expenses = await self._sum(
            select(func.coalesce(func.sum(Expense.amount), 0))
            .where(Expense.payment_method == PaymentMethod.CASH)
        )
        bank_expenses = await self._sum(
            select(func.coalesce(func.sum(Expense.amount), 0))
            .where(Expense.payment_method == PaymentMethod.BANK)
        )
        return LedgerAggregates(
            total_approved_fees=approved_fees,
            total_transfers=transfers,
            total_cash_expenses=cash_expenses,
            total_bank_expenses=bank_expenses,
        )

    async def get_balances(self, actor: ActorContext) -> LedgerBalances:
        require_permission(actor, PermissionModule.ACCOUNTS, PermissionType.READ)
        return compute_balances(await self.get_aggregates())

    async def _check_available(self, method: PaymentMethod, amount: Decimal) -> None:
        balances = compute_balances(await self.get_aggregates())
        available = balances.available(method)
        if amount > available:
            bucket = "cash in hand" if method == PaymentMethod.CASH else "cash at bank"
            raise InsufficientBalanceException(bucket, amount, available)

    async def record_cash_transfer(
        self,
        actor: ActorContext,
        amount,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        remarks: Optional[str] = None,
    ) -> CashTransaction:
        """Move cash in hand to the bank."""
        require_permission(actor, PermissionModule.ACCOUNTS, PermissionType.WRITE)
        value = validate_amount(amount)
        if from_date and to_date and from_date > to_date:
            raise ValidationException(
                "From date must be on or before to date",
                field="from_date",
                details={"from_date": str(from_date), "to_date": str(to_date)},
            )
        await self._check_available(PaymentMethod.CASH, value)

        transaction = CashTransaction(
            transaction_type=CashTransactionType.CASH_TRANSFER,
            amount=value,
            from_date=from_date,
            to_date=to_date,
            remarks=remarks or None,
            created_by=actor.username,
        )
        self.db.add(transaction)
        await self.db.commit()
        await self.db.refresh(transaction)

        logger.info(f"Cash transfer of {value} recorded by {actor.username}")
        return transaction

    async def record_expense(
        self,
        actor: ActorContext,
        amount,
        method: PaymentMethod,
        description: str,
    ) -> Expense:
        """Record an expense paid from cash in hand or the bank."""
        require_permission(actor, PermissionModule.ACCOUNTS, PermissionType.WRITE)
        value = validate_amount(amount)
        description = require_text(description, "description")
        method = PaymentMethod(method)
        await self._check_available(method, value)

        expense = Expense(
            amount=value,
            description=description,
            payment_method=method,
            created_by=actor.username,
        )
        self.db.add(expense)
        await self.db.commit()
        await self.db.refresh(expense)

        logger.info(f"Expense of {value} ({method.value}) recorded by {actor.username}")
        return expense

    async def list_transfers(self, actor: ActorContext) -> List[CashTransaction]:
        require_permission(actor, PermissionModule.ACCOUNTS, PermissionType.READ)
        result = await self.db.execute(
            select(CashTransaction).order_by(CashTransaction.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_expenses(self, actor: ActorContext) -> List[Expense]:
        require_permission(actor, PermissionModule.ACCOUNTS, PermissionType.READ)
        result = await self.db.execute(
            select(Expense).order_by(Expense.created_at.desc())
        )
        return list(result.scalars().all())
