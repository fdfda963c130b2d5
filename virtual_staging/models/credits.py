"""
Credit schemas.

Dependencies: pydantic
System role: Credit balance and ledger API contracts
"""

import uuid
from datetime import datetime

from pydantic import Field

from virtual_staging.models.common import CamelModel


class BalanceResponse(CamelModel):
    balance: int


class TransactionResponse(CamelModel):
    """One ledger entry."""

    id: uuid.UUID
    amount: int
    kind: str
    description: str
    job_id: uuid.UUID | None = None
    payment_reference: str | None = None
    created_at: datetime


class TransactionHistoryResponse(CamelModel):
    transactions: list[TransactionResponse]


class PurchaseRequest(CamelModel):
    """Completed purchase reported by the payment integration."""

    amount: int = Field(description="Credits purchased")
    description: str = Field(default="Credit purchase")
    payment_reference: str | None = Field(default=None, description="Payment provider reference")


class PurchaseResponse(CamelModel):
    transaction: TransactionResponse
    balance: int
