"""
Integration tests for staging sessions and generation history.

Covers session creation, empty-room selection, history grouping and
per-(session, type) generation numbering.
"""

import asyncio
import uuid

import pytest

from virtual_staging.application.services.generation_tracker import GenerationTracker
from virtual_staging.application.services.session_service import SessionService
from virtual_staging.boundary.db.models.generation_model import GenerationStatus, GenerationType
from virtual_staging.core.exceptions import SessionNotFoundError, ValidationError

ROOM_URL = "https://staging-images.s3.us-east-1.amazonaws.com/uploads/room.jpg"


async def record(tracker, session_id, generation_type, status=GenerationStatus.COMPLETED, outputs=None):
    return await tracker.record_generation(
        session_id=session_id,
        generation_type=generation_type,
        input_image_url=ROOM_URL,
        status=status,
        output_image_urls=outputs if outputs is not None else ["https://fal.media/files/a.jpeg"],
    )


class TestSessionService:
    """Tests for SessionService."""

    @pytest.mark.asyncio
    async def test_already_empty_selects_original(self, test_async_db, make_user):
        user = await make_user()
        service = SessionService(test_async_db)

        session = await service.create_session(user.id, ROOM_URL, "already_empty", title="Loft")
        await test_async_db.commit()

        assert session.selected_empty_room_url == ROOM_URL
        assert session.title == "Loft"

    @pytest.mark.asyncio
    async def test_generate_empty_has_no_selection(self, test_async_db, make_user):
        user = await make_user()

        session = await SessionService(test_async_db).create_session(user.id, ROOM_URL, "generate_empty")

        assert session.selected_empty_room_url is None

    @pytest.mark.asyncio
    async def test_invalid_choice_rejected(self, test_async_db, make_user):
        user = await make_user()

        with pytest.raises(ValidationError) as exc_info:
            await SessionService(test_async_db).create_session(user.id, ROOM_URL, "half_empty")

        assert exc_info.value.field == "room_state_choice"

    @pytest.mark.asyncio
    async def test_foreign_session_is_not_found(self, test_async_db, make_user):
        owner = await make_user()
        stranger = await make_user()
        service = SessionService(test_async_db)
        session = await service.create_session(owner.id, ROOM_URL, "generate_empty")
        await test_async_db.commit()

        with pytest.raises(SessionNotFoundError):
            await service.get_session(stranger.id, session.id)

    @pytest.mark.asyncio
    async def test_select_empty_room_requires_own_output(self, test_async_db, make_user):
        user = await make_user()
        service = SessionService(test_async_db)
        session = await service.create_session(user.id, ROOM_URL, "generate_empty")
        await record(
            GenerationTracker(test_async_db),
            session.id,
            GenerationType.EMPTY_ROOM,
            outputs=["https://fal.media/files/empty-1.jpeg"],
        )
        await test_async_db.commit()

        with pytest.raises(ValidationError):
            await service.select_empty_room(user.id, session.id, "https://elsewhere.test/x.jpeg")

        selected = await service.select_empty_room(user.id, session.id, "https://fal.media/files/empty-1.jpeg")

        assert selected.selected_empty_room_url == "https://fal.media/files/empty-1.jpeg"

    @pytest.mark.asyncio
    async def test_history_groups_generations_newest_first(self, test_async_db, make_user):
        user = await make_user()
        service = SessionService(test_async_db)
        tracker = GenerationTracker(test_async_db)
        session = await service.create_session(user.id, ROOM_URL, "generate_empty")
        await record(tracker, session.id, GenerationType.EMPTY_ROOM)
        await record(tracker, session.id, GenerationType.EMPTY_ROOM, status=GenerationStatus.FAILED)
        await record(tracker, session.id, GenerationType.STAGING)
        await test_async_db.commit()

        history = await service.get_session_with_history(user.id, session.id)

        assert [g["generation_number"] for g in history["empty_room_generations"]] == [2, 1]
        assert [g["generation_number"] for g in history["staging_generations"]] == [1]
        assert history["empty_room_generations"][0]["status"] == "failed"

        listed = await service.list_sessions_with_history(user.id)
        assert [s["id"] for s in listed] == [str(session.id)]


class TestGenerationNumbering:
    """Tests for GenerationTracker numbering."""

    @pytest.mark.asyncio
    async def test_numbers_are_sequential_per_type(self, test_async_db, make_user):
        user = await make_user()
        session = await SessionService(test_async_db).create_session(user.id, ROOM_URL, "generate_empty")
        tracker = GenerationTracker(test_async_db)

        first = await record(tracker, session.id, GenerationType.STAGING)
        second = await record(tracker, session.id, GenerationType.STAGING, status=GenerationStatus.FAILED)
        empty = await record(tracker, session.id, GenerationType.EMPTY_ROOM)
        await test_async_db.commit()

        assert (first.generation_number, second.generation_number) == (1, 2)
        assert empty.generation_number == 1
        assert await tracker.next_generation_number(session.id, GenerationType.STAGING) == 3

    @pytest.mark.asyncio
    async def test_failed_attempt_stores_no_outputs(self, test_async_db, make_user):
        user = await make_user()
        session = await SessionService(test_async_db).create_session(user.id, ROOM_URL, "generate_empty")

        generation = await record(
            GenerationTracker(test_async_db),
            session.id,
            GenerationType.EMPTY_ROOM,
            status=GenerationStatus.FAILED,
        )

        assert generation.output_image_urls == []
        assert generation.completed_at is not None

    @pytest.mark.asyncio
    async def test_first_completed_empty_room_is_auto_selected(self, test_async_db, make_user):
        user = await make_user()
        service = SessionService(test_async_db)
        session = await service.create_session(user.id, ROOM_URL, "generate_empty")
        tracker = GenerationTracker(test_async_db)

        await record(tracker, session.id, GenerationType.EMPTY_ROOM, outputs=["https://fal.media/files/e1.jpeg"])
        await record(tracker, session.id, GenerationType.EMPTY_ROOM, outputs=["https://fal.media/files/e2.jpeg"])
        await test_async_db.commit()

        reloaded = await service.get_session(user.id, session.id)
        assert reloaded.selected_empty_room_url == "https://fal.media/files/e1.jpeg"

    @pytest.mark.asyncio
    async def test_concurrent_recording_never_duplicates(self, session_factory, seed_user):
        async with session_factory() as db:
            user = await seed_user(db)
            session = await SessionService(db).create_session(user.id, ROOM_URL, "already_empty")
            await db.commit()

        async def record_once():
            async with session_factory() as db:
                generation = await record(GenerationTracker(db), session.id, GenerationType.STAGING)
                await db.commit()
                return generation.generation_number

        numbers = await asyncio.gather(*(record_once() for _ in range(4)))

        assert sorted(numbers) == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_missing_session_raises(self, test_async_db):
        with pytest.raises(SessionNotFoundError):
            await record(GenerationTracker(test_async_db), uuid.uuid4(), GenerationType.STAGING)
