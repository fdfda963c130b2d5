"""
Credit ledger service.

Owns the spendable balance and the append-only transaction log. Every
balance change and its ledger entry are written in the same transaction,
so balance always equals the sum of the user's transactions.

Methods flush but do not commit; the caller decides the transaction
boundary (JobManager commits a reservation together with its job row).

Dependencies: sqlalchemy, virtual_staging.boundary.db.CRUD
System role: CreditLedger (reserve / refund / purchase / balance)
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from virtual_staging.boundary.db.CRUD.credit_crud import (
    credit_account_crud,
    credit_transaction_crud,
)
from virtual_staging.boundary.db.models.credit_model import (
    CreditAccountModel,
    CreditTransactionModel,
    TransactionKind,
)
from virtual_staging.core.exceptions import InsufficientCreditsError, ValidationError

logger = logging.getLogger(__name__)


class CreditLedger:
    """Atomic reserve/refund/purchase operations over a user's credits."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize ledger.

        Args:
            db: AsyncSession whose transaction the ledger writes join
        """
        self.db = db

    async def ensure_account(self, user_id: UUID) -> CreditAccountModel:
        """Return the user's account, creating a zero-balance one if missing."""
        account = await credit_account_crud.get_by_user_id(self.db, user_id)
        if account is None:
            account = await credit_account_crud.create(self.db, user_id=user_id, balance=0)
        return account

    async def reserve(
        self,
        user_id: UUID,
        amount: int,
        job_id: UUID | None = None,
        description: str = "Generation",
    ) -> CreditTransactionModel:
        """
        Debit credits for a job if the balance covers them.

        The balance check and decrement are one conditional UPDATE; two
        concurrent reservations can never both pass on the same credits.

        Args:
            user_id: Account owner
            amount: Credits to debit (positive)
            job_id: Job the debit pays for
            description: Ledger entry description

        Returns:
            The debit transaction (reservation token)

        Raises:
            ValidationError: If amount is not positive
            InsufficientCreditsError: If amount exceeds the balance
        """
        if amount <= 0:
            raise ValidationError("Reservation amount must be positive", field="amount")

        new_balance = await credit_account_crud.try_debit(self.db, user_id, amount)
        if new_balance is None:
            available = await credit_account_crud.get_balance(self.db, user_id) or 0
            logger.info(
                f"{__name__}:reserve - Insufficient credits",
                extra={"user_id": str(user_id), "required": amount, "available": available},
            )
            raise InsufficientCreditsError(required=amount, available=available)

        transaction = await credit_transaction_crud.create(
            self.db,
            user_id=user_id,
            amount=-amount,
            kind=TransactionKind.DEBIT,
            description=description,
            job_id=job_id,
        )

        logger.info(
            f"{__name__}:reserve - Credits reserved",
            extra={
                "user_id": str(user_id),
                "job_id": str(job_id) if job_id else None,
                "amount": amount,
                "balance": new_balance,
            },
        )
        return transaction

    async def refund(
        self,
        user_id: UUID,
        amount: int,
        reason: str,
        job_id: UUID | None = None,
    ) -> CreditTransactionModel:
        """
        Credit back a failed job.

        Not subject to a balance check. With a job_id the refund is
        idempotent: a second call returns the existing refund entry.

        Args:
            user_id: Account owner
            amount: Credits to return (positive)
            reason: Ledger entry description
            job_id: Job being compensated

        Returns:
            The refund transaction

        Raises:
            ValidationError: If amount is not positive
        """
        if amount <= 0:
            raise ValidationError("Refund amount must be positive", field="amount")

        if job_id is not None:
            existing = await credit_transaction_crud.get_for_job(self.db, job_id, TransactionKind.REFUND)
            if existing is not None:
                logger.info(
                    f"{__name__}:refund - Refund already recorded",
                    extra={"user_id": str(user_id), "job_id": str(job_id)},
                )
                return existing

        try:
            async with self.db.begin_nested():
                transaction = await self._credit(user_id, amount, TransactionKind.REFUND, reason, job_id=job_id)
        except IntegrityError:
            if job_id is None:
                raise
            existing = await credit_transaction_crud.get_for_job(self.db, job_id, TransactionKind.REFUND)
            if existing is None:
                raise
            logger.info(
                f"{__name__}:refund - Concurrent refund detected",
                extra={"user_id": str(user_id), "job_id": str(job_id)},
            )
            return existing

        logger.info(
            f"{__name__}:refund - Credits refunded",
            extra={"user_id": str(user_id), "job_id": str(job_id) if job_id else None, "amount": amount},
        )
        return transaction

    async def purchase(
        self,
        user_id: UUID,
        amount: int,
        description: str = "Credit purchase",
        payment_reference: str | None = None,
    ) -> CreditTransactionModel:
        """
        Record purchased credits.

        Raises:
            ValidationError: If amount is not positive
        """
        if amount <= 0:
            raise ValidationError("Purchase amount must be positive", field="amount")

        transaction = await self._credit(
            user_id,
            amount,
            TransactionKind.PURCHASE,
            description,
            payment_reference=payment_reference,
        )
        logger.info(
            f"{__name__}:purchase - Credits purchased",
            extra={"user_id": str(user_id), "amount": amount, "payment_reference": payment_reference},
        )
        return transaction

    async def get_balance(self, user_id: UUID) -> int:
        """Current balance; 0 for users without an account."""
        balance = await credit_account_crud.get_balance(self.db, user_id)
        return balance or 0

    async def get_history(self, user_id: UUID, limit: int = 50) -> Sequence[CreditTransactionModel]:
        """Newest-first ledger entries."""
        return await credit_transaction_crud.get_by_user(self.db, user_id, limit=limit)

    async def _credit(
        self,
        user_id: UUID,
        amount: int,
        kind: TransactionKind,
        description: str,
        job_id: UUID | None = None,
        payment_reference: str | None = None,
    ) -> CreditTransactionModel:
        new_balance = await credit_account_crud.add_to_balance(self.db, user_id, amount)
        if new_balance is None:
            await credit_account_crud.create(self.db, user_id=user_id, balance=amount)

        return await credit_transaction_crud.create(
            self.db,
            user_id=user_id,
            amount=amount,
            kind=kind,
            description=description,
            job_id=job_id,
            payment_reference=payment_reference,
        )
