"""
Integration tests for the job manager.

Drives full generation requests against SQLite with a scripted provider
and checks job state, ledger balance and recorded history together.
"""

import asyncio
import uuid
from datetime import timedelta

import pytest
from sqlalchemy import func, select

from virtual_staging.application.services.credit_ledger import CreditLedger
from virtual_staging.application.services.generation_tracker import GenerationTracker
from virtual_staging.application.services.job_manager import GenerationRequest, JobManager
from virtual_staging.application.services.refund_reconciler import RefundReconciler
from virtual_staging.application.services.session_service import SessionService
from virtual_staging.application.services.stuck_job_reaper import StuckJobReaper
from virtual_staging.boundary.db.CRUD.credit_crud import credit_transaction_crud
from virtual_staging.boundary.db.CRUD.job_crud import job_crud
from virtual_staging.boundary.db.CRUD.session_crud import session_crud
from virtual_staging.boundary.db.models.credit_model import TransactionKind
from virtual_staging.boundary.db.models.generation_model import GenerationStatus, GenerationType
from virtual_staging.boundary.db.models.job_model import JobModel, JobStatus, JobType
from virtual_staging.boundary.generation.provider import GenerationResult
from virtual_staging.configs.generation import GenerationSettings
from virtual_staging.configs.settings import Settings
from virtual_staging.core.exceptions import (
    InsufficientCreditsError,
    JobNotFoundError,
    ProviderError,
    SessionNotFoundError,
    ValidationError,
)

ROOM_URL = "https://staging-images.s3.us-east-1.amazonaws.com/uploads/room.jpg"


def staging(session_id=None, generation_number=None, style="modern", room_type="bedroom") -> GenerationRequest:
    return GenerationRequest(
        job_type=JobType.STAGING,
        image_url=ROOM_URL,
        style=style,
        room_type=room_type,
        session_id=session_id,
        generation_number=generation_number,
    )


def empty_room(session_id=None) -> GenerationRequest:
    return GenerationRequest(job_type=JobType.EMPTY_ROOM, image_url=ROOM_URL, session_id=session_id)


def mask(text_prompt="furniture", session_id=None) -> GenerationRequest:
    return GenerationRequest(
        job_type=JobType.MASK,
        image_url=ROOM_URL,
        text_prompt=text_prompt,
        session_id=session_id,
    )


async def count_jobs(db, user_id) -> int:
    result = await db.execute(select(func.count()).select_from(JobModel).where(JobModel.user_id == user_id))
    return result.scalar_one()


async def assert_ledger(db, user_id, expected: int) -> None:
    assert await CreditLedger(db).get_balance(user_id) == expected
    assert await credit_transaction_crud.sum_for_user(db, user_id) == expected


@pytest.fixture
async def owner_session(test_async_db, make_user):
    """User with 20 credits and a generate_empty session."""
    user = await make_user(balance=20)
    session = await SessionService(test_async_db).create_session(user.id, ROOM_URL, "generate_empty")
    await test_async_db.commit()
    return user, session


class TestStagingSuccess:
    """Tests for successful staging requests."""

    @pytest.mark.asyncio
    async def test_completes_with_one_url_per_variant(self, test_async_db, owner_session, fake_provider, test_settings):
        user, session = owner_session
        manager = JobManager(test_async_db, fake_provider, test_settings)

        result = await manager.start_generation(user.id, staging(session.id, generation_number=1))

        assert result["status"] == "completed"
        assert result["result_urls"] == [
            "https://fal.media/files/out-1.jpeg",
            "https://fal.media/files/out-2.jpeg",
        ]
        assert result["credits_used"] == 20
        assert result["generation_number"] == 1
        assert result["error_message"] is None
        await assert_ledger(test_async_db, user.id, 0)

    @pytest.mark.asyncio
    async def test_variants_get_distinct_prompts(self, test_async_db, owner_session, fake_provider, test_settings):
        user, session = owner_session

        await JobManager(test_async_db, fake_provider, test_settings).start_generation(user.id, staging(session.id))

        prompts = [prompt for prompt, _ in fake_provider.calls]
        assert len(prompts) == 2
        assert prompts[0] != prompts[1]
        assert all(image_url == ROOM_URL for _, image_url in fake_provider.calls)

    @pytest.mark.asyncio
    async def test_records_generation_and_status(self, test_async_db, owner_session, fake_provider, test_settings):
        user, session = owner_session
        manager = JobManager(test_async_db, fake_provider, test_settings)

        result = await manager.start_generation(user.id, staging(session.id))
        status = await manager.get_status(uuid.UUID(result["job_id"]), user.id)
        history = await SessionService(test_async_db).get_session_with_history(user.id, session.id)

        assert status["status"] == "completed"
        assert status["progress"] == 100
        assert status["completed_at"] is not None
        assert history["staging_generations"][0]["output_image_urls"] == result["result_urls"]
        assert history["staging_generations"][0]["style"] == "modern"
        assert history["staging_generations"][0]["room_type"] == "bedroom"
        assert await manager.list_active_jobs(user.id) == []

    @pytest.mark.asyncio
    async def test_without_session_skips_history(self, test_async_db, make_user, fake_provider, test_settings):
        user = await make_user(balance=20)

        result = await JobManager(test_async_db, fake_provider, test_settings).start_generation(user.id, staging())

        assert result["status"] == "completed"
        assert result["generation_number"] is None


class TestStagingFailure:
    """Tests for provider failures and refunds."""

    @pytest.mark.asyncio
    async def test_one_failed_variant_fails_job_and_refunds(
        self, test_async_db, owner_session, fake_provider_factory, test_settings
    ):
        user, session = owner_session
        provider = fake_provider_factory(
            [
                GenerationResult(result_urls=["https://fal.media/files/ok.jpeg"], provider_job_id="req-1"),
                ProviderError("Provider returned HTTP 500"),
            ]
        )

        result = await JobManager(test_async_db, provider, test_settings).start_generation(
            user.id, staging(session.id)
        )

        assert result["status"] == "failed"
        assert result["result_urls"] == []
        assert result["error_message"] == "Generation failed (1 of 2 variants)"
        await assert_ledger(test_async_db, user.id, 20)
        refund = await credit_transaction_crud.get_for_job(test_async_db, uuid.UUID(result["job_id"]), TransactionKind.REFUND)
        assert refund is not None and refund.amount == 20

        history = await SessionService(test_async_db).get_session_with_history(user.id, session.id)
        failed = history["staging_generations"][0]
        assert failed["status"] == GenerationStatus.FAILED.value
        assert failed["output_image_urls"] == []

    @pytest.mark.asyncio
    async def test_empty_provider_response_fails_job(
        self, test_async_db, owner_session, fake_provider_factory, test_settings
    ):
        user, session = owner_session
        provider = fake_provider_factory([GenerationResult(result_urls=[], provider_job_id="req-1")])

        result = await JobManager(test_async_db, provider, test_settings).start_generation(
            user.id, staging(session.id)
        )

        assert result["status"] == "failed"
        await assert_ledger(test_async_db, user.id, 20)

    @pytest.mark.asyncio
    async def test_timeout_fails_job_and_refunds(self, test_async_db, owner_session, fake_provider_factory):
        user, session = owner_session
        settings = Settings(generation=GenerationSettings(key="test-fal-key-0123456789", request_timeout_seconds=0.05))
        provider = fake_provider_factory(delay=1.0)

        result = await JobManager(test_async_db, provider, settings).start_generation(user.id, staging(session.id))

        assert result["status"] == "failed"
        assert result["error_message"].startswith("Generation timed out")
        await assert_ledger(test_async_db, user.id, 20)

    @pytest.mark.asyncio
    async def test_cancellation_fails_job_and_refunds(self, test_async_db, owner_session, fake_provider_factory):
        user, session = owner_session
        settings = Settings(generation=GenerationSettings(key="test-fal-key-0123456789", request_timeout_seconds=30))
        provider = fake_provider_factory(delay=10.0)
        manager = JobManager(test_async_db, provider, settings)

        task = asyncio.create_task(manager.start_generation(user.id, staging(session.id)))
        await provider.started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        job = (await test_async_db.execute(select(JobModel).where(JobModel.user_id == user.id))).scalar_one()
        await test_async_db.refresh(job)
        assert job.status == JobStatus.FAILED
        assert job.error_message == "Generation cancelled"
        await assert_ledger(test_async_db, user.id, 20)


class TestRejectedRequests:
    """Requests rejected before any side effect."""

    @pytest.mark.asyncio
    async def test_insufficient_credits_creates_nothing(self, test_async_db, make_user, fake_provider, test_settings):
        user = await make_user(balance=15)
        manager = JobManager(test_async_db, fake_provider, test_settings)

        with pytest.raises(InsufficientCreditsError) as exc_info:
            await manager.start_generation(user.id, staging())

        assert (exc_info.value.required, exc_info.value.available) == (20, 15)
        assert await count_jobs(test_async_db, user.id) == 0
        assert fake_provider.calls == []
        await assert_ledger(test_async_db, user.id, 15)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "request_kwargs,field",
        [
            ({"style": None}, "style"),
            ({"style": "baroque"}, "style"),
            ({"room_type": "garage"}, "room_type"),
            ({"generation_number": 1}, "generation_number"),
        ],
    )
    async def test_invalid_requests(self, test_async_db, make_user, fake_provider, test_settings, request_kwargs, field):
        user = await make_user(balance=20)

        with pytest.raises(ValidationError) as exc_info:
            await JobManager(test_async_db, fake_provider, test_settings).start_generation(
                user.id, staging(**request_kwargs)
            )

        assert exc_info.value.field == field
        assert await count_jobs(test_async_db, user.id) == 0
        await assert_ledger(test_async_db, user.id, 20)

    @pytest.mark.asyncio
    async def test_stale_generation_number_rejected(self, test_async_db, owner_session, fake_provider, test_settings):
        user, session = owner_session
        await GenerationTracker(test_async_db).record_generation(
            session_id=session.id,
            generation_type=GenerationType.STAGING,
            input_image_url=ROOM_URL,
            status=GenerationStatus.FAILED,
        )
        await test_async_db.commit()
        manager = JobManager(test_async_db, fake_provider, test_settings)

        with pytest.raises(ValidationError) as exc_info:
            await manager.start_generation(user.id, staging(session.id, generation_number=1))

        assert exc_info.value.field == "generation_number"
        await assert_ledger(test_async_db, user.id, 20)

        result = await manager.start_generation(user.id, staging(session.id, generation_number=2))
        assert result["generation_number"] == 2

    @pytest.mark.asyncio
    async def test_foreign_session_rejected(self, test_async_db, owner_session, make_user, fake_provider, test_settings):
        _, session = owner_session
        stranger = await make_user(balance=20)

        with pytest.raises(SessionNotFoundError):
            await JobManager(test_async_db, fake_provider, test_settings).start_generation(
                stranger.id, staging(session.id)
            )

        await assert_ledger(test_async_db, stranger.id, 20)


class TestEmptyRoom:
    """Tests for the empty-room attempt policy."""

    @pytest.mark.asyncio
    async def test_first_attempt_charged_retries_free_then_capped(
        self, test_async_db, make_user, fake_provider, test_settings
    ):
        user = await make_user(balance=10)
        session = await SessionService(test_async_db).create_session(user.id, ROOM_URL, "generate_empty")
        await test_async_db.commit()
        manager = JobManager(test_async_db, fake_provider, test_settings)

        first = await manager.start_generation(user.id, empty_room(session.id))
        second = await manager.start_generation(user.id, empty_room(session.id))
        third = await manager.start_generation(user.id, empty_room(session.id))

        assert [r["credits_used"] for r in (first, second, third)] == [10, 0, 0]
        assert [r["generation_number"] for r in (first, second, third)] == [1, 2, 3]
        await assert_ledger(test_async_db, user.id, 0)

        with pytest.raises(ValidationError) as exc_info:
            await manager.start_generation(user.id, empty_room(session.id))
        assert exc_info.value.field == "session_id"

    @pytest.mark.asyncio
    async def test_first_output_becomes_selected_empty_room(
        self, test_async_db, make_user, fake_provider, test_settings
    ):
        user = await make_user(balance=10)
        service = SessionService(test_async_db)
        session = await service.create_session(user.id, ROOM_URL, "generate_empty")
        await test_async_db.commit()

        result = await JobManager(test_async_db, fake_provider, test_settings).start_generation(
            user.id, empty_room(session.id)
        )

        reloaded = await service.get_session(user.id, session.id)
        assert reloaded.selected_empty_room_url == result["result_urls"][0]
        assert len(fake_provider.calls) == 1


class TestMask:
    """Tests for text-prompted mask generation."""

    @pytest.mark.asyncio
    async def test_mask_charges_mask_cost_and_keeps_every_mask(
        self, test_async_db, make_user, fake_provider_factory, test_settings
    ):
        user = await make_user(balance=10)
        provider = fake_provider_factory(
            outcomes=[
                GenerationResult(
                    result_urls=["https://fal.media/files/mask-1.png", "https://fal.media/files/mask-2.png"],
                    provider_job_id="req-mask",
                )
            ]
        )

        result = await JobManager(test_async_db, provider, test_settings).start_generation(user.id, mask())

        assert result["status"] == "completed"
        assert result["result_urls"] == [
            "https://fal.media/files/mask-1.png",
            "https://fal.media/files/mask-2.png",
        ]
        assert result["credits_used"] == 10
        assert result["generation_number"] is None
        assert provider.calls == [("furniture", ROOM_URL)]
        await assert_ledger(test_async_db, user.id, 0)
        job = await job_crud.get_by_id(test_async_db, uuid.UUID(result["job_id"]))
        assert job.type == JobType.MASK
        assert job.prompt == "furniture"

    @pytest.mark.asyncio
    async def test_failed_mask_refunds(self, test_async_db, make_user, fake_provider_factory, test_settings):
        user = await make_user(balance=10)
        provider = fake_provider_factory(outcomes=[ProviderError("Provider returned HTTP 429")])

        result = await JobManager(test_async_db, provider, test_settings).start_generation(user.id, mask())

        assert result["status"] == "failed"
        assert result["result_urls"] == []
        await assert_ledger(test_async_db, user.id, 10)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "request_kwargs,field",
        [
            ({"text_prompt": None}, "text_prompt"),
            ({"text_prompt": "   "}, "text_prompt"),
            ({"text_prompt": "chair " * 100}, "text_prompt"),
            ({"session_id": uuid.uuid4()}, "session_id"),
        ],
    )
    async def test_invalid_mask_requests(
        self, test_async_db, make_user, fake_provider, test_settings, request_kwargs, field
    ):
        user = await make_user(balance=10)

        with pytest.raises(ValidationError) as exc_info:
            await JobManager(test_async_db, fake_provider, test_settings).start_generation(
                user.id, mask(**request_kwargs)
            )

        assert exc_info.value.field == field
        assert fake_provider.calls == []
        assert await count_jobs(test_async_db, user.id) == 0
        await assert_ledger(test_async_db, user.id, 10)


class TestStatus:
    """Tests for status lookups."""

    @pytest.mark.asyncio
    async def test_foreign_job_is_not_found(self, test_async_db, make_user, fake_provider, test_settings):
        owner = await make_user(balance=20)
        stranger = await make_user()
        manager = JobManager(test_async_db, fake_provider, test_settings)
        result = await manager.start_generation(owner.id, staging())

        with pytest.raises(JobNotFoundError):
            await manager.get_status(uuid.UUID(result["job_id"]), stranger.id)


class TestConcurrency:
    """Tests that need independent connections."""

    @pytest.mark.asyncio
    async def test_double_start_spends_credits_once(self, session_factory, seed_user, fake_provider_factory, test_settings):
        async with session_factory() as db:
            user = await seed_user(db, balance=20)
        provider = fake_provider_factory(delay=0.05)

        async def start():
            async with session_factory() as db:
                return await JobManager(db, provider, test_settings).start_generation(user.id, staging())

        outcomes = await asyncio.gather(start(), start(), return_exceptions=True)

        completed = [o for o in outcomes if isinstance(o, dict)]
        rejected = [o for o in outcomes if isinstance(o, InsufficientCreditsError)]
        assert len(completed) == 1 and completed[0]["status"] == "completed"
        assert len(rejected) == 1
        async with session_factory() as db:
            await assert_ledger(db, user.id, 0)
            assert await count_jobs(db, user.id) == 1

    @pytest.mark.asyncio
    async def test_sweep_during_fan_out_keeps_job_failed_and_refunds_once(
        self, session_factory, seed_user, fake_provider_factory, test_settings
    ):
        async with session_factory() as db:
            user = await seed_user(db, balance=20)
        provider = fake_provider_factory(delay=0.3)

        async def start():
            async with session_factory() as db:
                return await JobManager(db, provider, test_settings).start_generation(user.id, staging())

        task = asyncio.create_task(start())
        await provider.started.wait()
        async with session_factory() as db:
            assert await StuckJobReaper(db).sweep(staleness=timedelta(0)) == 1

        result = await task

        assert result["status"] == "failed"
        assert result["result_urls"] == []
        async with session_factory() as db:
            await assert_ledger(db, user.id, 20)
            assert await RefundReconciler(db).reconcile() == 0
            await assert_ledger(db, user.id, 20)

    @pytest.mark.asyncio
    async def test_session_purged_mid_job_still_settles_job_and_refund(
        self, session_factory, seed_user, fake_provider_factory, test_settings
    ):
        async with session_factory() as db:
            user = await seed_user(db, balance=10)
            session = await SessionService(db).create_session(user.id, ROOM_URL, "generate_empty")
            await db.commit()
        provider = fake_provider_factory(outcomes=[ProviderError("Provider returned HTTP 500")], delay=0.3)

        async def start():
            async with session_factory() as db:
                return await JobManager(db, provider, test_settings).start_generation(user.id, empty_room(session.id))

        task = asyncio.create_task(start())
        await provider.started.wait()
        async with session_factory() as db:
            await job_crud.detach_sessions(db, [session.id])
            await session_crud.delete_by_ids(db, [session.id])
            await db.commit()

        result = await task

        assert result["status"] == "failed"
        assert result["generation_number"] is None
        async with session_factory() as db:
            job = await job_crud.get_by_id(db, uuid.UUID(result["job_id"]))
            assert job.status == JobStatus.FAILED
            await assert_ledger(db, user.id, 10)
            assert await RefundReconciler(db).reconcile() == 0
