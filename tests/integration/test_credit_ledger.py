"""
Integration tests for the credit ledger.

Runs against SQLite; the balance must always equal the sum of the
user's ledger entries.
"""

import asyncio
import uuid

import pytest

from virtual_staging.application.services.credit_ledger import CreditLedger
from virtual_staging.boundary.db.CRUD.credit_crud import credit_transaction_crud
from virtual_staging.boundary.db.CRUD.user_crud import user_crud
from virtual_staging.boundary.db.models.credit_model import TransactionKind
from virtual_staging.core.exceptions import InsufficientCreditsError, ValidationError


async def assert_balance_matches_ledger(db, user_id, expected: int) -> None:
    ledger = CreditLedger(db)
    assert await ledger.get_balance(user_id) == expected
    assert await credit_transaction_crud.sum_for_user(db, user_id) == expected


class TestReserve:
    """Tests for CreditLedger.reserve."""

    @pytest.mark.asyncio
    async def test_reserve_debits_and_records(self, test_async_db, make_user):
        user = await make_user(balance=50)
        ledger = CreditLedger(test_async_db)
        job_id = uuid.uuid4()

        transaction = await ledger.reserve(user.id, 20, job_id=job_id, description="Staging generation")
        await test_async_db.commit()

        assert transaction.amount == -20
        assert transaction.kind == TransactionKind.DEBIT
        assert transaction.job_id == job_id
        await assert_balance_matches_ledger(test_async_db, user.id, 30)

    @pytest.mark.asyncio
    async def test_reserve_exact_balance_leaves_zero(self, test_async_db, make_user):
        user = await make_user(balance=20)
        ledger = CreditLedger(test_async_db)

        await ledger.reserve(user.id, 20)
        await test_async_db.commit()

        await assert_balance_matches_ledger(test_async_db, user.id, 0)

    @pytest.mark.asyncio
    async def test_insufficient_credits_has_no_side_effects(self, test_async_db, make_user):
        user = await make_user(balance=15)
        ledger = CreditLedger(test_async_db)

        with pytest.raises(InsufficientCreditsError) as exc_info:
            await ledger.reserve(user.id, 20)

        assert exc_info.value.required == 20
        assert exc_info.value.available == 15
        history = await ledger.get_history(user.id)
        assert [t.kind for t in history] == [TransactionKind.PURCHASE]
        await assert_balance_matches_ledger(test_async_db, user.id, 15)

    @pytest.mark.asyncio
    async def test_user_without_account_has_nothing_available(self, test_async_db):
        ledger = CreditLedger(test_async_db)

        with pytest.raises(InsufficientCreditsError) as exc_info:
            await ledger.reserve(uuid.uuid4(), 10)

        assert exc_info.value.available == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -5])
    async def test_non_positive_amount_rejected(self, test_async_db, make_user, amount):
        user = await make_user(balance=10)

        with pytest.raises(ValidationError):
            await CreditLedger(test_async_db).reserve(user.id, amount)

    @pytest.mark.asyncio
    async def test_concurrent_reservations_never_overdraw(self, session_factory, seed_user):
        async with session_factory() as db:
            user = await seed_user(db, balance=30)

        async def reserve_once():
            async with session_factory() as db:
                try:
                    await CreditLedger(db).reserve(user.id, 20)
                    await db.commit()
                    return True
                except InsufficientCreditsError:
                    await db.rollback()
                    return False

        outcomes = await asyncio.gather(reserve_once(), reserve_once())

        assert sorted(outcomes) == [False, True]
        async with session_factory() as db:
            await assert_balance_matches_ledger(db, user.id, 10)


class TestRefund:
    """Tests for CreditLedger.refund."""

    @pytest.mark.asyncio
    async def test_refund_restores_balance(self, test_async_db, make_user):
        user = await make_user(balance=20)
        ledger = CreditLedger(test_async_db)
        job_id = uuid.uuid4()
        await ledger.reserve(user.id, 20, job_id=job_id)
        await test_async_db.commit()

        refund = await ledger.refund(user.id, 20, "Refund: staging generation failed", job_id=job_id)
        await test_async_db.commit()

        assert refund.kind == TransactionKind.REFUND
        assert refund.amount == 20
        await assert_balance_matches_ledger(test_async_db, user.id, 20)

    @pytest.mark.asyncio
    async def test_refund_is_idempotent_per_job(self, test_async_db, make_user):
        user = await make_user(balance=20)
        ledger = CreditLedger(test_async_db)
        job_id = uuid.uuid4()
        await ledger.reserve(user.id, 20, job_id=job_id)
        await test_async_db.commit()

        first = await ledger.refund(user.id, 20, "Refund", job_id=job_id)
        await test_async_db.commit()
        second = await ledger.refund(user.id, 20, "Refund", job_id=job_id)
        await test_async_db.commit()

        assert first.id == second.id
        await assert_balance_matches_ledger(test_async_db, user.id, 20)

    @pytest.mark.asyncio
    async def test_concurrent_refunds_credit_once(self, session_factory, seed_user):
        async with session_factory() as db:
            user = await seed_user(db, balance=20)
            job_id = uuid.uuid4()
            await CreditLedger(db).reserve(user.id, 20, job_id=job_id)
            await db.commit()

        async def refund_once():
            async with session_factory() as db:
                transaction = await CreditLedger(db).refund(user.id, 20, "Refund", job_id=job_id)
                await db.commit()
                return transaction.id

        ids = await asyncio.gather(refund_once(), refund_once())

        assert ids[0] == ids[1]
        async with session_factory() as db:
            await assert_balance_matches_ledger(db, user.id, 20)


class TestPurchaseAndHistory:
    """Tests for purchases and ledger history."""

    @pytest.mark.asyncio
    async def test_purchase_creates_account_when_missing(self, test_async_db):
        user = await user_crud.create(test_async_db, external_id="user_no_account")
        ledger = CreditLedger(test_async_db)

        await ledger.purchase(user.id, 100, payment_reference="pi_123")
        await test_async_db.commit()

        await assert_balance_matches_ledger(test_async_db, user.id, 100)

    @pytest.mark.asyncio
    async def test_history_is_newest_first_and_limited(self, test_async_db, make_user):
        user = await make_user(balance=100)
        ledger = CreditLedger(test_async_db)
        await ledger.reserve(user.id, 10, description="first")
        await ledger.reserve(user.id, 10, description="second")
        await test_async_db.commit()

        history = await ledger.get_history(user.id, limit=2)

        assert len(history) == 2
        assert history[0].created_at >= history[1].created_at
        await assert_balance_matches_ledger(test_async_db, user.id, 80)
