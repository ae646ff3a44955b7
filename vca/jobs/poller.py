"""Client-side status polling: query a job until it is terminal or time runs out."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable

import httpx

from vca.errors import JobFailedError, JobNotFoundError, JobPollingTimeout
from vca.jobs.models import Job, JobStatus
from vca.jobs.store import JobRegistry

logger = logging.getLogger(__name__)

StatusFetcher = Callable[[str], Awaitable["Job | None"]]
ProgressCallback = Callable[[int, str], None]


async def poll_until_complete(
    fetch: StatusFetcher,
    job_id: str,
    *,
    interval: float = 2.0,
    timeout: float = 600.0,
    on_progress: ProgressCallback | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Any:
    """Return the job result once completed.

    Raises JobFailedError (job failed), JobNotFoundError (never existed or purged)
    and JobPollingTimeout. A timeout does not stop the job itself.
    """
    started = clock()
    last_progress = -1
    while True:
        if clock() - started > timeout:
            raise JobPollingTimeout(f"Job polling timeout after {timeout:.0f}s: {job_id}")

        job = await fetch(job_id)
        if job is None:
            raise JobNotFoundError(f"Job not found or has been cleaned up: {job_id}")

        if on_progress is not None and job.progress_percent != last_progress:
            on_progress(job.progress_percent, job.progress_message)
            last_progress = job.progress_percent

        if job.status == JobStatus.COMPLETED:
            logger.info("Job %s completed", job_id)
            return job.result
        if job.status == JobStatus.FAILED:
            raise JobFailedError(job.error or "Job failed")

        await sleep(interval)


def registry_fetcher(registry: JobRegistry) -> StatusFetcher:
    """Adapt an in-process registry to the fetcher signature."""

    async def fetch(job_id: str) -> Job | None:
        return registry.get_job(job_id)

    return fetch


class JobsClient:
    """HTTP client for the job endpoints of a running backend."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000/api",
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ):
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def get_status(self, job_id: str) -> Job | None:
        response = await self._client.get(f"/jobs/{job_id}")
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return Job.model_validate(response.json())

    async def cancel(self, job_id: str) -> bool:
        response = await self._client.delete(f"/jobs/{job_id}")
        if response.status_code == 404:
            return False
        response.raise_for_status()
        return True

    async def wait(self, job_id: str, **kwargs: Any) -> Any:
        return await poll_until_complete(self.get_status, job_id, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "JobsClient":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()
