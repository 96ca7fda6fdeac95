"""
SelfEmploy Portal - Accounts Router

Cash book: balances, cash transfers to the bank and expenses.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_actor
from app.models.admin_user import PermissionModule, PermissionType
from app.schemas.accounts import (
    BalancesResponse,
    CashTransactionListResponse,
    CashTransactionResponse,
    CashTransferRequest,
    ExpenseListResponse,
    ExpenseRequest,
    ExpenseResponse,
)
from app.services.ledger_service import LedgerService, compute_balances
from app.utils.permissions import ActorContext, require_permission


router = APIRouter()


@router.get(
    "/balances",
    response_model=BalancesResponse,
    summary="Ledger balances",
    description="Cash in hand and cash at bank, recomputed from the ledger on every call.",
)
async def get_balances(
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    require_permission(actor, PermissionModule.ACCOUNTS, PermissionType.READ)
    aggregates = await LedgerService(db).get_aggregates()
    balances = compute_balances(aggregates)
    return BalancesResponse(
        cash_in_hand=balances.cash_in_hand,
        cash_at_bank=balances.cash_at_bank,
        total_approved_fees=aggregates.total_approved_fees,
        total_transfers=aggregates.total_transfers,
        total_cash_expenses=aggregates.total_cash_expenses,
        total_bank_expenses=aggregates.total_bank_expenses,
    )


@router.get("/transfers", response_model=CashTransactionListResponse, summary="List cash transfers")
async def list_transfers(
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    transactions = await LedgerService(db).list_transfers(actor)
    return CashTransactionListResponse(
        transactions=[CashTransactionResponse.model_validate(t) for t in transactions],
        total=len(transactions),
    )


@router.post(
    "/transfers",
    response_model=CashTransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record cash transfer",
)
async def record_transfer(
    request: CashTransferRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    transaction = await LedgerService(db).record_cash_transfer(
        actor,
        request.amount,
        from_date=request.from_date,
        to_date=request.to_date,
        remarks=request.remarks,
    )
    return CashTransactionResponse.model_validate(transaction)


@router.get("/expenses", response_model=ExpenseListResponse, summary="List expenses")
async def list_expenses(
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    expenses = await LedgerService(db).list_expenses(actor)
    return ExpenseListResponse(
        expenses=[ExpenseResponse.model_validate(e) for e in expenses],
        total=len(expenses),
    )


@router.post(
    "/expenses",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record expense",
)
async def record_expense(
    request: ExpenseRequest,
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_async_session),
):
    expense = await LedgerService(db).record_expense(
        actor,
        request.amount,
        request.payment_method,
        request.description,
    )
    return ExpenseResponse.model_validate(expense)
