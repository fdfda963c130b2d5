"""
Job manager.

Drives one generation request through the credit-backed state machine:

    validate -> reserve credits + create job (one commit)
             -> fan out to the provider (N variants, per-call deadline)
             -> completed with every variant's first URL, or failed
             -> record the generation attempt under the session
             -> refund after the failure is durably committed

Mask requests take the same path with a single segmentation call and no
session; every mask URL of that call is kept.

Provider failures never escape; they become a failed job plus refund.
Failures while persisting are raised as InfrastructureError and left for
the stuck-job sweep and refund reconciliation.

Dependencies: sqlalchemy, virtual_staging.boundary, virtual_staging.configs
System role: JobManager (generation orchestration core)
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from virtual_staging.application.services.credit_ledger import CreditLedger
from virtual_staging.application.services.generation_tracker import GenerationTracker
from virtual_staging.application.services.session_service import SessionService
from virtual_staging.boundary.db.base import utcnow
from virtual_staging.boundary.db.CRUD.job_crud import job_crud
from virtual_staging.boundary.db.models.generation_model import GenerationType
from virtual_staging.boundary.db.models.job_model import JobModel, JobStatus, JobType
from virtual_staging.boundary.generation.provider import GenerationProvider, GenerationResult
from virtual_staging.configs.settings import Settings
from virtual_staging.core import job_state
from virtual_staging.core.exceptions import (
    InfrastructureError,
    InsufficientCreditsError,
    JobNotFoundError,
    ProviderError,
    SessionNotFoundError,
    StagingError,
    ValidationError,
)
from virtual_staging.core.prompts import (
    build_empty_room_prompt,
    build_staging_prompts,
    parse_room_type,
    parse_style,
)

logger = logging.getLogger(__name__)

GENERATION_TYPES = {
    JobType.EMPTY_ROOM: GenerationType.EMPTY_ROOM,
    JobType.STAGING: GenerationType.STAGING,
}

MAX_TEXT_PROMPT_LENGTH = 500


@dataclass
class GenerationRequest:
    """
    Inbound generation request.

    Attributes:
        job_type: EMPTY_ROOM, STAGING or MASK
        image_url: Source image for the provider
        style: Style preset (staging only)
        room_type: Room type (staging only, defaults to living_room)
        text_prompt: Objects to segment (mask only)
        session_id: Session the attempt belongs to
        generation_number: Expected next attempt number (stale guard)
    """

    job_type: JobType
    image_url: str
    style: str | None = None
    room_type: str | None = None
    text_prompt: str | None = None
    session_id: UUID | None = None
    generation_number: int | None = None


@dataclass
class _Plan:
    prompts: list[str]
    style: str | None
    room_type: str | None
    cost: int


def serialize_job(job: JobModel) -> dict:
    """Status projection of a job for polling."""
    return {
        "id": str(job.id),
        "type": job.type.value,
        "status": job.status.value,
        "progress": job_state.progress_for(job.status),
        "result_urls": list(job.result_urls or []),
        "error_message": job.error_message,
        "credits_used": job.credits_used,
        "session_id": str(job.session_id) if job.session_id else None,
        "created_at": job.created_at,
        "completed_at": job.completed_at,
    }


class JobManager:
    """
    Credit-backed generation orchestrator.

    The provider is injected so tests can substitute a fake.
    """

    def __init__(
        self,
        db: AsyncSession,
        provider: GenerationProvider,
        settings: Settings,
    ) -> None:
        """
        Initialize job manager.

        Args:
            db: AsyncSession for job, ledger and session writes
            provider: Generation backend
            settings: Billing, generation and reaper configuration
        """
        self.db = db
        self.provider = provider
        self.settings = settings
        self.ledger = CreditLedger(db)
        self.sessions = SessionService(db)
        self.tracker = GenerationTracker(db)

    async def start_generation(self, user_id: UUID, request: GenerationRequest) -> dict:
        """
        Run a generation request to a terminal state.

        Args:
            user_id: Requesting user
            request: Generation parameters

        Returns:
            dict: job_id, status, result_urls, credits_used,
                generation_number, error_message

        Raises:
            ValidationError: Malformed request, missing mask text prompt,
                stale generation number or attempt limit reached (no side effects)
            SessionNotFoundError: Unknown or foreign session (no side effects)
            InsufficientCreditsError: Balance below cost (no side effects)
            InfrastructureError: Database failure while persisting
        """
        try:
            plan = await self._plan(user_id, request)
        except StagingError:
            await self.db.rollback()
            raise
        job_id = uuid.uuid4()

        try:
            if plan.cost > 0:
                await self.ledger.reserve(
                    user_id,
                    plan.cost,
                    job_id=job_id,
                    description=f"{request.job_type.value.replace('_', ' ').capitalize()} generation",
                )
            await job_crud.create(
                self.db,
                id=job_id,
                user_id=user_id,
                session_id=request.session_id,
                type=request.job_type,
                status=JobStatus.PROCESSING,
                input_image_url=request.image_url,
                prompt=plan.prompts[0],
                style=plan.style,
                room_type=plan.room_type,
                result_urls=[],
                credits_used=plan.cost,
                purge_at=utcnow() + timedelta(days=self.settings.reaper.job_purge_days),
            )
            await self.db.commit()
        except InsufficientCreditsError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"{__name__}:start_generation - {type(e).__name__}: {e}",
                extra={"job_id": str(job_id), "user_id": str(user_id)},
            )
            raise InfrastructureError("Failed to create job", operation="create_job") from e

        logger.info(
            f"{__name__}:start_generation - Job processing",
            extra={
                "job_id": str(job_id),
                "user_id": str(user_id),
                "session_id": str(request.session_id) if request.session_id else None,
                "type": request.job_type.value,
                "variants": len(plan.prompts),
                "credits": plan.cost,
            },
        )

        try:
            results, error = await self._fan_out(job_id, request.job_type, plan.prompts, request.image_url)
        except asyncio.CancelledError:
            await asyncio.shield(
                self._finalize(user_id, job_id, request, plan, [], "Generation cancelled", [])
            )
            raise

        provider_ids = [r.provider_job_id for r in results if r.provider_job_id]
        if error is not None:
            result_urls = []
        elif request.job_type == JobType.MASK:
            result_urls = list(results[0].result_urls)
        else:
            result_urls = [r.result_urls[0] for r in results]
        return await self._finalize(user_id, job_id, request, plan, result_urls, error, provider_ids)

    async def get_status(self, job_id: UUID, user_id: UUID) -> dict:
        """
        Owner-scoped job status.

        Raises:
            JobNotFoundError: Missing or owned by another user
        """
        job = await job_crud.get_for_user(self.db, job_id, user_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return serialize_job(job)

    async def list_active_jobs(self, user_id: UUID) -> list[dict]:
        """The user's pending and processing jobs, newest first."""
        jobs = await job_crud.get_active_for_user(self.db, user_id)
        return [serialize_job(job) for job in jobs]

    async def _plan(self, user_id: UUID, request: GenerationRequest) -> _Plan:
        """Validate the request and derive prompts, cost and the attempt number."""
        if not request.image_url or not request.image_url.strip():
            raise ValidationError("Image URL is required", field="image_url")
        if request.generation_number is not None and request.generation_number < 1:
            raise ValidationError("Generation number must be at least 1", field="generation_number")

        billing = self.settings.billing
        style = room_type = None

        match request.job_type:
            case JobType.STAGING:
                if not request.style:
                    raise ValidationError("Style is required for staging", field="style")
                try:
                    style_preset = parse_style(request.style)
                except ValueError as e:
                    raise ValidationError(f"Invalid style: {request.style}", field="style") from e
                try:
                    room = parse_room_type(request.room_type)
                except ValueError as e:
                    raise ValidationError(f"Invalid room type: {request.room_type}", field="room_type") from e
                prompts = build_staging_prompts(
                    style_preset,
                    room,
                    self.settings.generation.staging_variant_count,
                )
                style, room_type = style_preset.value, room.value
                cost = billing.staging_cost
            case JobType.EMPTY_ROOM:
                prompts = [build_empty_room_prompt()]
                cost = billing.empty_room_cost
            case JobType.MASK:
                text_prompt = (request.text_prompt or "").strip()
                if not text_prompt:
                    raise ValidationError("Text prompt is required for mask generation", field="text_prompt")
                if len(text_prompt) > MAX_TEXT_PROMPT_LENGTH:
                    raise ValidationError(
                        f"Text prompt exceeds {MAX_TEXT_PROMPT_LENGTH} characters",
                        field="text_prompt",
                    )
                if request.session_id is not None:
                    raise ValidationError("Mask generations are not tracked in sessions", field="session_id")
                prompts = [text_prompt]
                cost = billing.mask_cost
            case _:
                raise ValidationError(f"Unsupported job type: {request.job_type}", field="type")

        if request.session_id is not None:
            await self.sessions.get_session(user_id, request.session_id)
            generation_type = GENERATION_TYPES[request.job_type]

            if request.job_type == JobType.EMPTY_ROOM:
                attempts = await self.tracker.count_attempts(request.session_id, generation_type)
                if attempts >= billing.max_empty_room_attempts:
                    raise ValidationError(
                        f"Maximum of {billing.max_empty_room_attempts} empty room attempts reached",
                        field="session_id",
                    )
                if attempts >= 1 and billing.free_empty_room_retries:
                    cost = 0

            generation_number = await self.tracker.next_generation_number(request.session_id, generation_type)
            if request.generation_number is not None and request.generation_number != generation_number:
                raise ValidationError(
                    f"Stale generation number {request.generation_number}, expected {generation_number}",
                    field="generation_number",
                )
        elif request.generation_number is not None:
            raise ValidationError("Generation number requires a session", field="generation_number")

        return _Plan(prompts=prompts, style=style, room_type=room_type, cost=cost)

    async def _fan_out(
        self,
        job_id: UUID,
        job_type: JobType,
        prompts: list[str],
        image_url: str,
    ) -> tuple[list[GenerationResult], str | None]:
        """
        Call the provider once per prompt concurrently and join.

        Mask jobs go to the segmentation call, everything else to submit.

        Returns:
            (results, error): results in call order when every call returned
                at least one URL, otherwise error describes the failure
        """
        timeout = self.settings.generation.request_timeout_seconds
        call = self.provider.segment if job_type == JobType.MASK else self.provider.submit
        calls = [asyncio.wait_for(call(prompt, image_url), timeout=timeout) for prompt in prompts]
        outcomes = await asyncio.gather(*calls, return_exceptions=True)

        results: list[GenerationResult] = []
        failures: list[str] = []
        for index, outcome in enumerate(outcomes, start=1):
            if isinstance(outcome, GenerationResult):
                results.append(outcome)
                if not outcome.result_urls:
                    failures.append(f"variant {index}: no image returned")
                continue

            if isinstance(outcome, asyncio.TimeoutError):
                detail = f"variant {index}: timed out after {timeout}s"
            elif isinstance(outcome, ProviderError):
                detail = f"variant {index}: {outcome}"
            else:
                detail = f"variant {index}: {type(outcome).__name__}: {outcome}"
            failures.append(detail)

        if failures:
            logger.error(
                f"{__name__}:_fan_out - Provider failure",
                extra={"job_id": str(job_id), "failures": failures, "variants": len(prompts)},
            )
            timed_out = all("timed out" in f for f in failures)
            message = "Generation timed out" if timed_out else "Generation failed"
            return results, f"{message} ({len(failures)} of {len(prompts)} variants)"
        return results, None

    async def _finalize(
        self,
        user_id: UUID,
        job_id: UUID,
        request: GenerationRequest,
        plan: _Plan,
        result_urls: list[str],
        error: str | None,
        provider_ids: list[str],
    ) -> dict:
        """Persist the terminal state, record the attempt, refund on failure."""
        provider_job_ids = ",".join(provider_ids) or None

        try:
            job = None
            if error is None:
                job = await job_crud.mark_completed(self.db, job_id, result_urls, provider_job_ids)
                if job is None:
                    error = "Job was terminated before results were recorded"
            if job is None:
                job = await job_crud.mark_failed(self.db, job_id, error, provider_job_ids)
                if job is None:
                    job = await job_crud.get_by_id(self.db, job_id)

            generation_number = None
            if request.session_id is not None:
                try:
                    generation = await self.tracker.record_generation(
                        session_id=request.session_id,
                        generation_type=GENERATION_TYPES[request.job_type],
                        input_image_url=request.image_url,
                        status=job_state.generation_status_for(job.status),
                        output_image_urls=list(job.result_urls or []),
                        style=plan.style,
                        room_type=plan.room_type,
                        credits_cost=plan.cost,
                        provider_job_id=provider_job_ids,
                        error_message=job.error_message,
                    )
                    generation_number = generation.generation_number
                except SessionNotFoundError:
                    # Session purged mid-job; the job outcome and refund still stand
                    logger.warning(
                        f"{__name__}:_finalize - Session gone, attempt not recorded",
                        extra={"job_id": str(job_id), "session_id": str(request.session_id)},
                    )

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"{__name__}:_finalize - {type(e).__name__}: {e}",
                extra={"job_id": str(job_id), "user_id": str(user_id)},
            )
            raise InfrastructureError("Failed to record job outcome", operation="finalize_job") from e

        if job.status == JobStatus.FAILED and job.credits_used > 0:
            try:
                await self.ledger.refund(
                    user_id,
                    job.credits_used,
                    f"Refund: {request.job_type.value.replace('_', ' ')} generation failed",
                    job_id=job_id,
                )
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(
                    f"{__name__}:_finalize - Refund failed, left for reconciliation: {type(e).__name__}: {e}",
                    extra={"job_id": str(job_id), "user_id": str(user_id)},
                )
                raise InfrastructureError("Failed to refund credits", operation="refund") from e

        logger.info(
            f"{__name__}:_finalize - Job {job.status.value}",
            extra={"job_id": str(job_id), "user_id": str(user_id), "generation_number": generation_number},
        )
        return {
            "job_id": str(job.id),
            "status": job.status.value,
            "result_urls": list(job.result_urls or []),
            "credits_used": job.credits_used,
            "generation_number": generation_number,
            "error_message": job.error_message,
        }
