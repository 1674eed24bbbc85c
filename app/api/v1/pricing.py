"""Pricing job API — submit a pricing estimate, poll its status."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from app.core.exceptions import InvalidPricingInputError
from app.jobs.models import JobStatus, PricingJob
from app.pricing.models import PricingInput

router = APIRouter()

# Set by main.py during lifespan
_dispatcher = None


def set_dispatcher(dispatcher):
    global _dispatcher
    _dispatcher = dispatcher


class PricingTaskRequest(BaseModel):
    # Optional here so a missing field gets the same 400 as a blank one
    title: Optional[str] = None
    description: Optional[str] = ""
    category: Optional[str] = None
    condition: Optional[str] = None

    def to_input(self) -> PricingInput:
        missing = [
            name for name in ("title", "category", "condition")
            if not (getattr(self, name) or "").strip()
        ]
        if missing:
            raise InvalidPricingInputError(
                "Title, category, and condition are required",
                details={"missing": missing},
            )
        return PricingInput(
            title=self.title.strip(),
            description=self.description or "",
            category=self.category.strip(),
            condition=self.condition.strip(),
        )


class PricingTaskResponse(BaseModel):
    job_id: str
    message: str


def serialize_job(job: PricingJob) -> Dict[str, Any]:
    response = {
        "job_id": job.id,
        "status": job.status.value,
        "progress": job.progress,
        "steps": [
            {
                "id": step.id,
                "label": step.label,
                "status": step.status.value,
                "message": step.message,
            }
            for step in job.steps
        ],
        "created_at": job.created_at.isoformat(),
        "started_at": job.started_at.isoformat() if job.started_at else None,
        "completed_at": job.completed_at.isoformat() if job.completed_at else None,
    }

    if job.status == JobStatus.DONE and job.result is not None:
        response["result"] = job.result.model_dump()

    if job.status == JobStatus.ERROR:
        response["error"] = job.error

    return response


@router.post("/pricing/task", response_model=PricingTaskResponse)
async def submit_pricing_task(request: PricingTaskRequest):
    """Start a pricing estimate. Returns the job id immediately."""
    if _dispatcher is None:
        raise HTTPException(status_code=503, detail="Job dispatcher not initialized")

    try:
        pricing_input = request.to_input()
    except InvalidPricingInputError as e:
        raise HTTPException(status_code=400, detail=e.message)

    job = await _dispatcher.submit(pricing_input)
    return PricingTaskResponse(
        job_id=job.id,
        message="Pricing job started. Poll GET /api/v1/pricing/task/{id} for status.",
    )


@router.get("/pricing/task/{job_id}")
async def get_pricing_task(job_id: str):
    """Get the current status, steps and result (or error) of a pricing job."""
    if _dispatcher is None:
        raise HTTPException(status_code=503, detail="Job dispatcher not initialized")

    job = await _dispatcher.get_status(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Pricing job not found")

    return serialize_job(job)
