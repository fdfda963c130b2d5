"""
Credit ORM models.

CreditAccountModel holds the denormalized spendable balance;
CreditTransactionModel is the append-only ledger it is derived from.

Dependencies: sqlalchemy, virtual_staging.boundary.db.base
System role: Credit balance and ledger persistence
"""

import enum
import uuid

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from virtual_staging.boundary.db.base import Base, CreatedAtMixin, UUIDMixin, TimestampMixin


class TransactionKind(str, enum.Enum):
    """
    Ledger entry classification.

    PURCHASE: Credits bought by the user (positive amount)
    DEBIT: Credits reserved for a job (negative amount)
    REFUND: Compensation for a failed job (positive amount)
    """

    PURCHASE = "purchase"
    DEBIT = "debit"
    REFUND = "refund"


class CreditAccountModel(Base, UUIDMixin, TimestampMixin):
    """
    Spendable balance per user.

    The balance is only ever changed by the same statement batch that
    appends a CreditTransactionModel, so it always equals the ledger sum.

    Attributes:
        user_id: Owning user (unique, cascade delete)
        balance: Current spendable credits, never negative

    Constraints:
        balance >= 0 enforced at the database level
    """

    __tablename__ = "credit_accounts"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_credit_accounts_balance_non_negative"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    balance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    user = relationship("UserModel", back_populates="credit_account")


class CreditTransactionModel(Base, UUIDMixin, CreatedAtMixin):
    """
    Immutable ledger entry.

    Attributes:
        user_id: Owning user
        amount: Signed credit delta (negative for debits)
        kind: PURCHASE / DEBIT / REFUND
        description: Human-readable reason
        job_id: Job the debit or refund belongs to (None for purchases)
        payment_reference: Payment provider reference for purchases

    Constraints:
        (job_id, kind) unique: one debit and at most one refund per job
    """

    __tablename__ = "credit_transactions"
    __table_args__ = (
        UniqueConstraint("job_id", "kind", name="uq_credit_transactions_job_kind"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    amount: Mapped[int] = mapped_column(Integer, nullable=False)

    kind: Mapped[TransactionKind] = mapped_column(
        Enum(TransactionKind, native_enum=False),
        nullable=False,
    )

    description: Mapped[str] = mapped_column(String(512), nullable=False)

    job_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        nullable=True,
        index=True,
        doc="Job this debit/refund settles",
    )

    payment_reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
