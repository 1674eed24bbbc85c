"""Job dispatcher interface."""

from abc import ABC, abstractmethod
from typing import Optional

from app.jobs.models import PricingJob
from app.pricing.models import PricingInput


class JobDispatcher(ABC):
    """Abstract interface for launching pricing jobs and reading their status."""

    @abstractmethod
    async def submit(self, pricing_input: PricingInput) -> PricingJob:
        """Create a job and start it without waiting. Returns the queued job."""
        ...

    @abstractmethod
    async def get_status(self, job_id: str) -> Optional[PricingJob]:
        """Get current status of a job."""
        ...

    @abstractmethod
    async def start(self) -> None:
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop the dispatcher gracefully."""
        ...
