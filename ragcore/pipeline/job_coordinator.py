"""Background batch ingestion with grouped concurrency and progress tracking.

# --- DESIGN -------------------------------------------------------------
#
# JobCoordinator accepts a batch of inputs, returns a job id immediately
# and ingests the batch on a background worker task:
#   - Jobs are queued on an asyncio.Queue and run one at a time.
#   - Inputs run in fixed-size groups; members of a group run
#     concurrently, and the worker sleeps briefly between groups to
#     bound embedding calls and open file handles.
#   - After each input finishes, its outcome is appended and progress
#     recomputed under the job's lock, then listeners are notified.
#   - One input failing never aborts the job; only a coordinator fault
#     marks the job failed.
#
# Jobs are not cancellable once started.
#
# Pattern: Observer (progress callbacks) + producer/consumer queue.
# -----------------------------------------------------------------------
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime, timezone
from uuid import uuid4

import structlog

from ragcore.models.job import ItemOutcome, Job, JobStatus, JobSummary
from ragcore.models.rag import IngestionRequest
from ragcore.services.ingestion.ingestion_service import IngestionService
from ragcore.utils.concurrency import grouped
from ragcore.utils.errors import InvalidConfigurationError, JobFaultError, RagCoreError

logger = structlog.get_logger(logger_name=__name__)

# (job_id, item, progress_pct, message)
ProgressCallback = Callable[[str, str, int, str], Awaitable[None]]

BatchInput = str | IngestionRequest


def progress_percent(done: int, total: int) -> int:
    """Return ``round(100 * done / total)`` with halves rounded up."""
    if total <= 0:
        return 100
    return (200 * done + total) // (2 * total)


def to_request(item: BatchInput) -> IngestionRequest:
    """Interpret a batch input: ``http(s)://`` strings are URLs, others file paths."""
    if isinstance(item, IngestionRequest):
        return item
    if item.lower().startswith(("http://", "https://")):
        return IngestionRequest(url=item)
    return IngestionRequest(file_path=item)


class _JobState:
    """Internal mutable state for one job.

    Callers only ever see deep copies of :attr:`job`.
    """

    def __init__(self, job: Job, requests: list[IngestionRequest]) -> None:
        self.job = job
        self.requests = requests
        self.lock = asyncio.Lock()
        self.done = asyncio.Event()
        self.listeners: list[ProgressCallback] = []


class JobCoordinator:
    """Runs batch ingestion jobs in the background.

    Parameters
    ----------
    ingestion_service:
        Ingests each input of a job.
    group_size:
        Number of inputs ingested concurrently.
    group_pause:
        Seconds to sleep between groups.
    """

    def __init__(
        self,
        ingestion_service: IngestionService,
        group_size: int = 5,
        group_pause: float = 0.1,
    ) -> None:
        if group_size <= 0:
            raise InvalidConfigurationError(message=f"group_size must be positive, got {group_size}")
        if group_pause < 0:
            raise InvalidConfigurationError(message=f"group_pause must not be negative, got {group_pause}")
        self._ingestion_service = ingestion_service
        self._group_size = group_size
        self._group_pause = group_pause
        self._jobs: dict[str, _JobState] = {}
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self._closed = False

    # --- Job lifecycle ----------------------------------------------------

    def start(self) -> None:
        """Start the worker task if it is not already running."""
        if self._closed:
            raise JobFaultError(message="Coordinator has been shut down")
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._work(), name="ragcore-job-worker")

    async def submit(self, inputs: Sequence[BatchInput]) -> str:
        """Queue a batch and return its job id without waiting for it to run.

        Raises
        ------
        ValueError
            If *inputs* is empty.
        JobFaultError
            If the coordinator has been shut down.
        """
        if not inputs:
            raise ValueError("A batch job needs at least one input")
        requests = [to_request(item) for item in inputs]

        self.start()
        job = Job(id=str(uuid4()), inputs=[r.label for r in requests])
        self._jobs[job.id] = _JobState(job, requests)
        await self._queue.put(job.id)

        logger.info("batch_job_submitted", job_id=job.id, items=len(requests))
        return job.id

    async def _work(self) -> None:
        while True:
            job_id = await self._queue.get()
            try:
                if job_id is None:
                    return
                await self._run_job(self._jobs[job_id])
            finally:
                self._queue.task_done()

    async def _run_job(self, state: _JobState) -> None:
        job = state.job
        async with state.lock:
            job.status = JobStatus.PROCESSING
        logger.info("batch_job_started", job_id=job.id, items=len(state.requests))

        try:
            groups = grouped(list(enumerate(state.requests)), self._group_size)
            for group_number, group in enumerate(groups):
                if group_number > 0 and self._group_pause:
                    await asyncio.sleep(self._group_pause)
                results = await asyncio.gather(
                    *(self._process_item(state, position, request) for position, request in group),
                    return_exceptions=True,
                )
                faults = [r for r in results if isinstance(r, BaseException)]
                if faults:
                    raise JobFaultError(message=f"Worker fault: {faults[0]}") from faults[0]

            async with state.lock:
                successes = [o for o in job.results if o.success]
                job.summary = JobSummary(
                    total=len(job.inputs),
                    successful=len(successes),
                    failed=len(job.results) - len(successes),
                    total_chunks=sum(o.chunks for o in successes),
                )
                job.progress = 100
                job.status = JobStatus.COMPLETED
                job.completed_at = datetime.now(timezone.utc)
            logger.info(
                "batch_job_finished",
                job_id=job.id,
                successful=job.summary.successful,
                failed=job.summary.failed,
                total_chunks=job.summary.total_chunks,
            )
        except Exception as exc:
            async with state.lock:
                job.status = JobStatus.FAILED
                job.error = str(exc)
                job.completed_at = datetime.now(timezone.utc)
            logger.error("batch_job_failed", job_id=job.id, error=str(exc), exc_info=True)
        finally:
            state.done.set()

        await self._notify(state, "", job.progress, f"Batch {job.status.value}")

    async def _process_item(self, state: _JobState, position: int, request: IngestionRequest) -> None:
        label = request.label
        try:
            result = await self._ingestion_service.ingest(request)
            outcome = ItemOutcome(
                position=position,
                input=label,
                success=True,
                chunks=result.chunk_count,
            )
        except Exception as exc:
            # One input failing is recorded on its outcome, never on the job.
            logger.warning(
                "batch_item_failed",
                job_id=state.job.id,
                item=label,
                error=str(exc),
                exc_info=not isinstance(exc, RagCoreError),
            )
            outcome = ItemOutcome(position=position, input=label, success=False, error=str(exc))

        async with state.lock:
            state.job.results.append(outcome)
            progress = progress_percent(len(state.job.results), len(state.job.inputs))
            state.job.progress = progress

        status = "stored" if outcome.success else "failed"
        await self._notify(state, label, progress, f"{status} {label}")

    # --- Job queries -------------------------------------------------------

    def get_status(self, job_id: str) -> Job | None:
        """Return a snapshot of the job, or ``None`` for an unknown id."""
        state = self._jobs.get(job_id)
        return state.job.model_copy(deep=True) if state else None

    def list_jobs(self) -> list[Job]:
        """Snapshots of every job, in submission order."""
        return [s.job.model_copy(deep=True) for s in self._jobs.values()]

    async def wait(self, job_id: str, timeout: float | None = None) -> Job:
        """Block until the job finishes and return its final snapshot."""
        state = self._jobs.get(job_id)
        if state is None:
            raise ValueError(f"Unknown job: {job_id}")
        await asyncio.wait_for(state.done.wait(), timeout)
        return state.job.model_copy(deep=True)

    # --- Progress listeners (Observer pattern) -----------------------------

    def register_listener(self, job_id: str, callback: ProgressCallback) -> None:
        state = self._jobs.get(job_id)
        if state is not None:
            state.listeners.append(callback)

    def unregister_listener(self, job_id: str, callback: ProgressCallback) -> None:
        state = self._jobs.get(job_id)
        if state is not None:
            state.listeners = [cb for cb in state.listeners if cb is not callback]

    async def _notify(self, state: _JobState, item: str, progress: int, message: str) -> None:
        """Push progress to every listener; a failing listener never affects the job."""
        for cb in list(state.listeners):
            try:
                await cb(state.job.id, item, progress, message)
            except Exception:
                logger.warning("progress_listener_failed", job_id=state.job.id, exc_info=True)

    # --- Cleanup -----------------------------------------------------------

    async def shutdown(self) -> None:
        """Finish every queued job, then stop the worker."""
        self._closed = True
        if self._worker is not None and not self._worker.done():
            await self._queue.put(None)
            await self._worker
        self._worker = None
        logger.info("job_coordinator_shutdown", jobs=len(self._jobs))
