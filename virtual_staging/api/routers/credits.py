"""
Credit API endpoints.

Routes: GET /credits/balance, GET /credits/history, POST /credits/purchase

Purchases are recorded as already paid; payment verification belongs to
the checkout integration.

Dependencies: virtual_staging.application.services.credit_ledger, virtual_staging.models
System role: Credit HTTP API
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from virtual_staging.api.deps import get_credit_ledger, get_current_user_id
from virtual_staging.api.error_handling import handle_staging_errors
from virtual_staging.application.services.credit_ledger import CreditLedger
from virtual_staging.boundary.db.models.credit_model import CreditTransactionModel
from virtual_staging.models.credits import (
    BalanceResponse,
    PurchaseRequest,
    PurchaseResponse,
    TransactionHistoryResponse,
    TransactionResponse,
)

router = APIRouter(prefix="/credits", tags=["credits"])


def _transaction(transaction: CreditTransactionModel) -> TransactionResponse:
    return TransactionResponse(
        id=transaction.id,
        amount=transaction.amount,
        kind=transaction.kind.value,
        description=transaction.description,
        job_id=transaction.job_id,
        payment_reference=transaction.payment_reference,
        created_at=transaction.created_at,
    )


@router.get("/balance", response_model=BalanceResponse)
@handle_staging_errors
async def get_balance(
    user_id: UUID = Depends(get_current_user_id),
    ledger: CreditLedger = Depends(get_credit_ledger),
) -> BalanceResponse:
    return BalanceResponse(balance=await ledger.get_balance(user_id))


@router.get("/history", response_model=TransactionHistoryResponse)
@handle_staging_errors
async def get_history(
    limit: int = Query(default=50, ge=1, le=200),
    user_id: UUID = Depends(get_current_user_id),
    ledger: CreditLedger = Depends(get_credit_ledger),
) -> TransactionHistoryResponse:
    """Newest-first ledger entries."""
    transactions = await ledger.get_history(user_id, limit=limit)
    return TransactionHistoryResponse(transactions=[_transaction(t) for t in transactions])


@router.post("/purchase", response_model=PurchaseResponse)
@handle_staging_errors
async def purchase_credits(
    body: PurchaseRequest,
    user_id: UUID = Depends(get_current_user_id),
    ledger: CreditLedger = Depends(get_credit_ledger),
) -> PurchaseResponse:
    """
    Record a completed credit purchase.

    Raises:
        HTTPException(400): Amount not positive
    """
    transaction = await ledger.purchase(
        user_id,
        body.amount,
        description=body.description,
        payment_reference=body.payment_reference,
    )
    await ledger.db.commit()
    return PurchaseResponse(
        transaction=_transaction(transaction),
        balance=await ledger.get_balance(user_id),
    )
