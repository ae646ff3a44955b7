"""Tests for the task-based job executor."""

import asyncio

import pytest

from vca.jobs import JobExecutor, JobRegistry, JobStatus


async def _drain(executor: JobExecutor, job_id: str) -> None:
    await asyncio.wait_for(executor.wait(job_id), timeout=5)


@pytest.mark.asyncio
async def test_completed_job_carries_result():
    """execute_job returns at once; the record later shows the unit's result."""
    registry = JobRegistry()
    executor = JobExecutor(registry)

    async def work(job_id):
        return {"n": 42}

    job_id = executor.execute_job("demo", work)
    assert registry.get_job(job_id).status == JobStatus.PENDING
    await _drain(executor, job_id)
    job = registry.get_job(job_id)
    assert job.status == JobStatus.COMPLETED
    assert job.progress_percent == 100
    assert job.result == {"n": 42}


@pytest.mark.asyncio
async def test_raising_unit_fails_the_job():
    registry = JobRegistry()
    executor = JobExecutor(registry)

    async def work(job_id):
        raise RuntimeError("boom")

    job_id = executor.execute_job("demo", work)
    await _drain(executor, job_id)
    job = registry.get_job(job_id)
    assert job.status == JobStatus.FAILED
    assert job.error == "boom"


@pytest.mark.asyncio
async def test_exception_without_message_uses_class_name():
    registry = JobRegistry()
    executor = JobExecutor(registry)

    async def work(job_id):
        raise KeyError()

    job_id = executor.execute_job("demo", work)
    await _drain(executor, job_id)
    assert registry.get_job(job_id).error == "KeyError"


@pytest.mark.asyncio
async def test_unit_sees_processing_and_reports_progress():
    registry = JobRegistry()
    executor = JobExecutor(registry)
    seen = {}

    async def work(job_id):
        seen["status"] = registry.get_job(job_id).status
        registry.update_progress(job_id, 50, "Half")
        seen["progress"] = registry.get_job(job_id).progress_percent
        return None

    job_id = executor.execute_job("demo", work)
    await _drain(executor, job_id)
    assert seen == {"status": JobStatus.PROCESSING, "progress": 50}


@pytest.mark.asyncio
async def test_running_job_ids_tracks_in_flight_tasks():
    registry = JobRegistry()
    executor = JobExecutor(registry)
    release = asyncio.Event()

    async def work(job_id):
        await release.wait()
        return "ok"

    job_id = executor.execute_job("demo", work)
    await asyncio.sleep(0)
    assert executor.running_job_ids() == [job_id]
    release.set()
    await _drain(executor, job_id)
    assert executor.running_job_ids() == []


@pytest.mark.asyncio
async def test_cancel_deletes_record_and_stops_work():
    registry = JobRegistry()
    executor = JobExecutor(registry)
    reached_end = False

    async def work(job_id):
        nonlocal reached_end
        await asyncio.sleep(30)
        reached_end = True

    job_id = executor.execute_job("demo", work)
    await asyncio.sleep(0)
    assert executor.cancel_job(job_id) is True
    await _drain(executor, job_id)
    assert registry.get_job(job_id) is None
    assert reached_end is False
    assert executor.running_job_ids() == []


@pytest.mark.asyncio
async def test_cancel_unknown_job_returns_false():
    executor = JobExecutor(JobRegistry())
    assert executor.cancel_job("job_missing") is False


@pytest.mark.asyncio
async def test_concurrency_gate_keeps_extra_jobs_pending():
    registry = JobRegistry()
    executor = JobExecutor(registry, max_concurrency=2)
    release = asyncio.Event()
    active = 0
    peak = 0

    async def work(job_id):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await release.wait()
        active -= 1
        return job_id

    ids = [executor.execute_job("demo", work) for _ in range(5)]
    for _ in range(5):
        await asyncio.sleep(0)
    statuses = [registry.get_job(i).status for i in ids]
    assert statuses.count(JobStatus.PROCESSING) == 2
    assert statuses.count(JobStatus.PENDING) == 3

    release.set()
    for job_id in ids:
        await _drain(executor, job_id)
    assert peak == 2
    assert all(registry.get_job(i).status == JobStatus.COMPLETED for i in ids)


@pytest.mark.asyncio
async def test_shutdown_cancels_running_tasks():
    registry = JobRegistry()
    executor = JobExecutor(registry)

    async def work(job_id):
        await asyncio.sleep(30)

    executor.execute_job("demo", work)
    executor.execute_job("demo", work)
    await asyncio.sleep(0)
    await executor.shutdown()
    assert executor.running_job_ids() == []


def test_execute_job_requires_running_loop():
    executor = JobExecutor(JobRegistry())

    async def work(job_id):
        return None

    with pytest.raises(RuntimeError):
        executor.execute_job("demo", work)


def test_max_concurrency_must_be_positive():
    with pytest.raises(ValueError):
        JobExecutor(JobRegistry(), max_concurrency=0)
