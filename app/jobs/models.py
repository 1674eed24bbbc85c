"""Pricing job record and progress event models."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field
import uuid

from app.pricing.models import PricingInput, PricingResult


class JobStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.DONE, JobStatus.ERROR)


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


# Allowed forward moves for a single step. Re-applying the current status is a no-op.
STEP_TRANSITIONS = {
    StepStatus.PENDING: {StepStatus.RUNNING, StepStatus.ERROR},
    StepStatus.RUNNING: {StepStatus.DONE, StepStatus.ERROR},
    StepStatus.DONE: set(),
    StepStatus.ERROR: set(),
}

# (step id, label) in execution order
PRICING_STEPS = (
    ("prepare", "Preparing input"),
    ("match", "Finding similar listings"),
    ("compute", "Calculating market price"),
    ("finalize", "Finalizing suggestion"),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStep(BaseModel):
    id: str
    label: str
    status: StepStatus = StepStatus.PENDING
    message: Optional[str] = None


def default_steps() -> List[JobStep]:
    return [JobStep(id=step_id, label=label) for step_id, label in PRICING_STEPS]


class ProgressUpdate(BaseModel):
    """One progress event emitted by the pricing engine."""
    step_id: str
    status: StepStatus
    progress: int = Field(ge=0, le=100)
    message: Optional[str] = None


class PricingJob(BaseModel):
    """Tracks the lifecycle of one pricing estimation request."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    status: JobStatus = JobStatus.QUEUED
    progress: int = 0
    steps: List[JobStep] = Field(default_factory=default_steps)
    input: PricingInput
    result: Optional[PricingResult] = None
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def step(self, step_id: str) -> Optional[JobStep]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None
