"""
Credit account and ledger CRUD operations.

Balance changes are expressed as single conditional UPDATE ... RETURNING
statements so concurrent requests never read-modify-write the balance.

Dependencies: sqlalchemy, virtual_staging.boundary.db.models
System role: Credit persistence operations for the ledger service
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import and_, exists, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from virtual_staging.boundary.db.CRUD.base_crud import BaseCRUD
from virtual_staging.boundary.db.models.credit_model import (
    CreditAccountModel,
    CreditTransactionModel,
    TransactionKind,
)


class CreditAccountCRUD(BaseCRUD[CreditAccountModel]):
    """
    CRUD operations for CreditAccountModel.

    Extends BaseCRUD with atomic balance adjustments.
    """

    def __init__(self) -> None:
        super().__init__(CreditAccountModel)

    async def get_by_user_id(
        self,
        session: AsyncSession,
        user_id: UUID,
    ) -> CreditAccountModel | None:
        stmt = select(CreditAccountModel).where(CreditAccountModel.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_balance(self, session: AsyncSession, user_id: UUID) -> int | None:
        """
        Read the denormalized balance.

        Returns:
            Current balance, None when the user has no account
        """
        stmt = select(CreditAccountModel.balance).where(CreditAccountModel.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def try_debit(
        self,
        session: AsyncSession,
        user_id: UUID,
        amount: int,
    ) -> int | None:
        """
        Subtract amount only if the balance stays non-negative.

        Executes UPDATE ... SET balance = balance - :amount
        WHERE user_id = :user_id AND balance >= :amount RETURNING balance.

        Args:
            session: Async database session
            user_id: Account owner
            amount: Credits to subtract (positive)

        Returns:
            New balance, or None when the account is missing or too low
        """
        stmt = (
            update(CreditAccountModel)
            .where(
                and_(
                    CreditAccountModel.user_id == user_id,
                    CreditAccountModel.balance >= amount,
                )
            )
            .values(balance=CreditAccountModel.balance - amount)
            .returning(CreditAccountModel.balance)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_to_balance(
        self,
        session: AsyncSession,
        user_id: UUID,
        amount: int,
    ) -> int | None:
        """
        Add amount to the balance unconditionally.

        Returns:
            New balance, or None when the user has no account
        """
        stmt = (
            update(CreditAccountModel)
            .where(CreditAccountModel.user_id == user_id)
            .values(balance=CreditAccountModel.balance + amount)
            .returning(CreditAccountModel.balance)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


class CreditTransactionCRUD(BaseCRUD[CreditTransactionModel]):
    """CRUD operations for the append-only CreditTransactionModel ledger."""

    def __init__(self) -> None:
        super().__init__(CreditTransactionModel)

    async def get_for_job(
        self,
        session: AsyncSession,
        job_id: UUID,
        kind: TransactionKind,
    ) -> CreditTransactionModel | None:
        """
        Retrieve the debit or refund entry recorded for a job.

        Args:
            session: Async database session
            job_id: Job UUID
            kind: DEBIT or REFUND

        Returns:
            Ledger entry if present, None otherwise
        """
        stmt = select(CreditTransactionModel).where(
            CreditTransactionModel.job_id == job_id,
            CreditTransactionModel.kind == kind,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_user(
        self,
        session: AsyncSession,
        user_id: UUID,
        limit: int = 50,
    ) -> Sequence[CreditTransactionModel]:
        """Newest-first ledger entries for a user."""
        stmt = (
            select(CreditTransactionModel)
            .where(CreditTransactionModel.user_id == user_id)
            .order_by(CreditTransactionModel.created_at.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def sum_for_user(self, session: AsyncSession, user_id: UUID) -> int:
        """Sum of all ledger amounts for a user."""
        stmt = select(func.coalesce(func.sum(CreditTransactionModel.amount), 0)).where(
            CreditTransactionModel.user_id == user_id
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())

    def refund_exists_clause(self, job_id_column):
        """EXISTS clause matching a refund entry for the given job id column."""
        return exists().where(
            CreditTransactionModel.job_id == job_id_column,
            CreditTransactionModel.kind == TransactionKind.REFUND,
        )


credit_account_crud = CreditAccountCRUD()
credit_transaction_crud = CreditTransactionCRUD()
