"""In-process job runner using asyncio.

Each submitted job runs as its own detached task on the event loop. The task
is the only writer for its job; progress flows one way, from the engine's
callback into the registry.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Set

from app.jobs.dispatcher import JobDispatcher
from app.jobs.models import JobStatus, PricingJob, ProgressUpdate, StepStatus
from app.jobs.registry import JobRegistry
from app.pricing.models import PricingInput, PricingResult

logger = logging.getLogger(__name__)

AnalyzeFn = Callable[
    [PricingInput, Callable[[ProgressUpdate], None]],
    Awaitable[PricingResult],
]


def describe_error(exc: BaseException) -> str:
    message = str(exc)
    if not message:
        return f"{type(exc).__name__}: Pricing job failed"
    return f"{type(exc).__name__}: {message}"


class InProcessRunner(JobDispatcher):
    """Local async job runner. One task per job, no queue, no worker threads."""

    def __init__(self, registry: JobRegistry, analyze_fn: AnalyzeFn):
        """
        analyze_fn: async callable(pricing_input, on_progress) -> PricingResult
            The pricing engine. on_progress is a plain function; the engine
            must not await it.
        """
        self._registry = registry
        self._analyze_fn = analyze_fn
        self._tasks: Set[asyncio.Task] = set()

    @property
    def registry(self) -> JobRegistry:
        return self._registry

    async def submit(self, pricing_input: PricingInput) -> PricingJob:
        job = self._registry.create(pricing_input)

        task = asyncio.create_task(self._run(job.id, pricing_input), name=f"pricing-job-{job.id}")
        # Keep a strong reference until the task finishes
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return job

    async def get_status(self, job_id: str) -> Optional[PricingJob]:
        return self._registry.get(job_id)

    async def start(self) -> None:
        logger.info("Pricing job runner started")

    async def stop(self) -> None:
        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        if pending:
            logger.info(f"Cancelling {len(pending)} unfinished pricing job(s)")
            await asyncio.gather(*pending, return_exceptions=True)

    async def join(self) -> None:
        """Wait for every job submitted so far to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_progress(self, job_id: str, update: ProgressUpdate) -> None:
        self._registry.update_step(
            job_id,
            update.step_id,
            update.status,
            update.progress,
            update.message,
        )

    async def _run(self, job_id: str, pricing_input: PricingInput) -> None:
        self._registry.update(
            job_id,
            status=JobStatus.RUNNING,
            started_at=datetime.now(timezone.utc),
        )
        logger.info(f"Pricing job {job_id} running")

        try:
            result = await self._analyze_fn(
                pricing_input,
                lambda update: self._on_progress(job_id, update),
            )
        except Exception as e:
            logger.exception(f"Pricing job {job_id} failed")
            self._fail(job_id, describe_error(e))
            return

        self._registry.update(
            job_id,
            status=JobStatus.DONE,
            progress=100,
            result=result,
            completed_at=datetime.now(timezone.utc),
        )
        logger.info(f"Pricing job {job_id} done: price={result.price} confidence={result.confidence}")

    def _fail(self, job_id: str, message: str) -> None:
        job = self._registry.get(job_id)
        if job is not None:
            # The step that was in flight when the engine failed gets the blame
            for step in job.steps:
                if step.status == StepStatus.RUNNING:
                    self._registry.update_step(
                        job_id, step.id, StepStatus.ERROR, job.progress, message
                    )

        self._registry.update(
            job_id,
            status=JobStatus.ERROR,
            error=message,
            completed_at=datetime.now(timezone.utc),
        )
