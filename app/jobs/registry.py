"""Job registry: the single owner of pricing job records.

The in-memory implementation keeps every job for the lifetime of the process.
Callers only see deep copies, so a poll never observes a record half-way
through an update and cannot mutate the stored one.
"""

import logging
from abc import ABC, abstractmethod
from collections import Counter
from typing import Any, Dict, Optional

from app.jobs.models import (
    STEP_TRANSITIONS,
    JobStatus,
    PricingJob,
    StepStatus,
)
from app.pricing.models import PricingInput

logger = logging.getLogger(__name__)


class JobRegistry(ABC):
    """Storage contract for pricing jobs (in-memory today, swappable later)."""

    @abstractmethod
    def create(self, pricing_input: PricingInput) -> PricingJob:
        """Store a new queued job and return a snapshot of it."""
        ...

    @abstractmethod
    def get(self, job_id: str) -> Optional[PricingJob]:
        """Return a snapshot of the job, or None if the id is unknown."""
        ...

    @abstractmethod
    def update(self, job_id: str, **fields: Any) -> None:
        """Merge fields into a job record."""
        ...

    @abstractmethod
    def update_step(
        self,
        job_id: str,
        step_id: str,
        status: StepStatus,
        progress: int,
        message: Optional[str] = None,
    ) -> None:
        """Set one step's status/message and the job's overall progress."""
        ...

    @abstractmethod
    def count_by_status(self) -> Dict[str, int]:
        ...


class InMemoryJobRegistry(JobRegistry):
    def __init__(self):
        self._jobs: Dict[str, PricingJob] = {}

    def __len__(self) -> int:
        return len(self._jobs)

    def create(self, pricing_input: PricingInput) -> PricingJob:
        job = PricingJob(input=pricing_input)
        # uuid4 collisions are not a practical concern, but ids must never be reused
        while job.id in self._jobs:
            job = PricingJob(input=pricing_input)
        self._jobs[job.id] = job
        logger.info(f"Created pricing job {job.id} ({pricing_input.category!r})")
        return job.model_copy(deep=True)

    def get(self, job_id: str) -> Optional[PricingJob]:
        job = self._jobs.get(job_id)
        if job is None:
            return None
        return job.model_copy(deep=True)

    def update(self, job_id: str, **fields: Any) -> None:
        existing = self._jobs.get(job_id)
        if existing is None:
            logger.debug(f"Ignoring update for unknown job {job_id}")
            return
        if existing.status.is_terminal:
            logger.debug(f"Ignoring update for finished job {job_id}")
            return

        self._jobs[job_id] = existing.model_copy(update=fields)

    def update_step(
        self,
        job_id: str,
        step_id: str,
        status: StepStatus,
        progress: int,
        message: Optional[str] = None,
    ) -> None:
        existing = self._jobs.get(job_id)
        if existing is None:
            logger.debug(f"Ignoring step update for unknown job {job_id}")
            return
        if existing.status.is_terminal:
            logger.debug(f"Ignoring step update for finished job {job_id}")
            return

        current = existing.step(step_id)
        if current is None:
            logger.warning(f"Job {job_id} has no step {step_id!r}")
            return

        status = StepStatus(status)
        if status != current.status and status not in STEP_TRANSITIONS[current.status]:
            logger.warning(
                f"Job {job_id}: refusing step {step_id!r} transition "
                f"{current.status.value} -> {status.value}"
            )
            return

        steps = [
            step.model_copy(
                update={
                    "status": status,
                    "message": message if message is not None else step.message,
                }
            )
            if step.id == step_id
            else step
            for step in existing.steps
        ]
        self._jobs[job_id] = existing.model_copy(
            update={"steps": steps, "progress": max(existing.progress, progress)}
        )
        logger.debug(f"Job {job_id}: {step_id} -> {status.value} ({progress}%)")

    def count_by_status(self) -> Dict[str, int]:
        counts = Counter(job.status.value for job in self._jobs.values())
        return {status.value: counts.get(status.value, 0) for status in JobStatus}
