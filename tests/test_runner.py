import asyncio

import pytest

from app.core.exceptions import CatalogUnavailableError
from app.jobs.in_process_runner import InProcessRunner, describe_error
from app.jobs.models import JobStatus, StepStatus
from app.jobs.registry import InMemoryJobRegistry
from app.pricing.engine import PricingEngine
from app.pricing.models import PricingInput

from tests.conftest import RecordingSearch


class SnapshotRegistry(InMemoryJobRegistry):
    """Records a snapshot of the job after every step update, like a fast poller."""

    def __init__(self):
        super().__init__()
        self.snapshots = []

    def update_step(self, job_id, step_id, status, progress, message=None):
        super().update_step(job_id, step_id, status, progress, message)
        self.snapshots.append(self.get(job_id))


class BlockingSearch(RecordingSearch):
    """Holds every search until released."""

    def __init__(self):
        super().__init__()
        self.release = asyncio.Event()

    async def search(self, query, limit):
        await self.release.wait()
        return await super().search(query, limit)


@pytest.mark.asyncio
async def test_submit_returns_queued_job_without_waiting(registry, phone_case_input):
    search = BlockingSearch()
    runner = InProcessRunner(registry=registry, analyze_fn=PricingEngine(search).analyze)
    await runner.start()

    job = await runner.submit(phone_case_input)

    assert job.status == JobStatus.QUEUED
    assert job.progress == 0
    assert all(step.status == StepStatus.PENDING for step in job.steps)

    # Engine is parked on the search; the job is running, not finished
    await asyncio.sleep(0)
    running = await runner.get_status(job.id)
    assert running.status == JobStatus.RUNNING
    assert running.started_at is not None
    assert running.step("match").status == StepStatus.RUNNING

    search.release.set()
    await runner.join()
    assert (await runner.get_status(job.id)).status == JobStatus.DONE


@pytest.mark.asyncio
async def test_completed_job_has_result_and_all_steps_done(runner, phone_case_input):
    job = await runner.submit(phone_case_input)
    await runner.join()

    done = await runner.get_status(job.id)
    assert done.status == JobStatus.DONE
    assert done.progress == 100
    assert done.error is None
    assert done.completed_at is not None
    assert all(step.status == StepStatus.DONE for step in done.steps)
    assert 55 <= done.result.confidence <= 95
    assert done.result.price_range.min <= done.result.price <= done.result.price_range.max


@pytest.mark.asyncio
async def test_progress_is_monotonic_and_steps_run_in_order(engine, phone_case_input):
    registry = SnapshotRegistry()
    runner = InProcessRunner(registry=registry, analyze_fn=engine.analyze)

    job = await runner.submit(phone_case_input)
    await runner.join()

    progress = [snap.progress for snap in registry.snapshots]
    assert progress == sorted(progress)
    assert registry.get(job.id).progress == 100

    started = []
    for snap in registry.snapshots:
        for step in snap.steps:
            if step.status != StepStatus.PENDING and step.id not in started:
                started.append(step.id)
    assert started == ["prepare", "match", "compute", "finalize"]


@pytest.mark.asyncio
async def test_terminal_record_is_stable_across_polls(runner, phone_case_input):
    job = await runner.submit(phone_case_input)
    await runner.join()

    first = await runner.get_status(job.id)
    second = await runner.get_status(job.id)
    assert first == second
    assert first.result == second.result


@pytest.mark.asyncio
async def test_engine_failure_becomes_job_error(registry, phone_case_input):
    search = RecordingSearch(errors=[CatalogUnavailableError("Catalog is not configured")])
    runner = InProcessRunner(registry=registry, analyze_fn=PricingEngine(search).analyze)

    job = await runner.submit(phone_case_input)
    await runner.join()

    failed = await runner.get_status(job.id)
    assert failed.status == JobStatus.ERROR
    assert failed.error == "CatalogUnavailableError: Catalog is not configured"
    assert failed.result is None
    assert failed.completed_at is not None
    assert failed.step("prepare").status == StepStatus.DONE
    assert failed.step("match").status == StepStatus.ERROR
    assert failed.step("match").message == failed.error
    assert failed.step("compute").status == StepStatus.PENDING
    assert failed.step("finalize").status == StepStatus.PENDING


@pytest.mark.asyncio
async def test_failure_before_any_progress(registry, phone_case_input):
    async def broken(pricing_input, on_progress):
        raise RuntimeError()

    runner = InProcessRunner(registry=registry, analyze_fn=broken)
    job = await runner.submit(phone_case_input)
    await runner.join()

    failed = await runner.get_status(job.id)
    assert failed.status == JobStatus.ERROR
    assert failed.error == "RuntimeError: Pricing job failed"
    assert all(step.status == StepStatus.PENDING for step in failed.steps)


@pytest.mark.asyncio
async def test_concurrent_jobs_stay_separate(catalog):
    registry = SnapshotRegistry()
    runner = InProcessRunner(registry=registry, analyze_fn=PricingEngine(catalog).analyze)

    phone, table = await asyncio.gather(
        runner.submit(PricingInput(title="iPhone case", category="electronics", condition="good")),
        runner.submit(PricingInput(title="Dining table", category="furniture", condition="good")),
    )
    await runner.join()

    assert phone.id != table.id
    assert (await runner.get_status(phone.id)).result.price == 250
    assert (await runner.get_status(table.id)).result.price == 9000

    for job_id in (phone.id, table.id):
        progress = [s.progress for s in registry.snapshots if s.id == job_id]
        assert progress == sorted(progress)
        assert len(progress) == 8


@pytest.mark.asyncio
async def test_stop_cancels_unfinished_jobs(registry, phone_case_input):
    search = BlockingSearch()
    runner = InProcessRunner(registry=registry, analyze_fn=PricingEngine(search).analyze)
    await runner.start()

    job = await runner.submit(phone_case_input)
    await asyncio.sleep(0)
    await runner.stop()

    assert (await runner.get_status(job.id)).status == JobStatus.RUNNING
    await runner.join()


def test_describe_error_includes_type_name():
    assert describe_error(ValueError("bad price")) == "ValueError: bad price"
