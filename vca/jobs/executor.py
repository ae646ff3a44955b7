"""Run units of work as tracked asyncio tasks under the registry lifecycle."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from vca.jobs.store import JobRegistry

logger = logging.getLogger(__name__)

UnitOfWork = Callable[[str], Awaitable[Any]]


class JobExecutor:
    """Spawns one task per job behind a bounded-concurrency gate.

    ``execute_job`` returns the job id immediately. The task waits for a slot,
    marks the job processing, awaits the unit of work and writes the terminal
    state itself. Exceptions never reach the caller of ``execute_job``.
    """

    def __init__(self, registry: JobRegistry, max_concurrency: int = 4):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._registry = registry
        self._gate = asyncio.Semaphore(max_concurrency)
        self._tasks: dict[str, asyncio.Task] = {}

    @property
    def registry(self) -> JobRegistry:
        return self._registry

    def execute_job(self, kind: str, work: UnitOfWork) -> str:
        """Create a job and schedule ``work(job_id)``. Must be called inside a running loop."""
        loop = asyncio.get_running_loop()
        job_id = self._registry.create_job(kind)
        task = loop.create_task(self._run(job_id, work), name=f"job:{job_id}")
        self._tasks[job_id] = task
        task.add_done_callback(lambda _t, jid=job_id: self._tasks.pop(jid, None))
        return job_id

    async def _run(self, job_id: str, work: UnitOfWork) -> None:
        async with self._gate:
            self._registry.mark_processing(job_id)
            try:
                result = await work(job_id)
            except asyncio.CancelledError:
                logger.info("Job %s cancelled", job_id)
                raise
            except Exception as e:
                logger.exception("Job %s raised", job_id)
                self._registry.fail_job(job_id, str(e) or e.__class__.__name__)
            else:
                self._registry.complete_job(job_id, result)

    def cancel_job(self, job_id: str) -> bool:
        """Delete the record and cancel its task if still running."""
        deleted = self._registry.delete_job(job_id)
        task = self._tasks.get(job_id)
        if task is not None and not task.done():
            task.cancel()
            return True
        return deleted

    def running_job_ids(self) -> list[str]:
        return [job_id for job_id, task in self._tasks.items() if not task.done()]

    async def wait(self, job_id: str) -> None:
        """Wait until the job's task has finished (no-op if it already has)."""
        task = self._tasks.get(job_id)
        if task is None:
            return
        await asyncio.gather(task, return_exceptions=True)

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("Cancelled %d running jobs on shutdown", len(tasks))
