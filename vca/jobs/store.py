"""In-memory job registry, one instance per process."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Callable

from vca.jobs.models import Job, JobStatus, _utcnow

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_SECONDS = 30 * 60


def _new_job_id() -> str:
    return f"job_{uuid.uuid4().hex[:16]}"


class JobRegistry:
    """Owns every job record and enforces the lifecycle.

    pending -> processing -> completed | failed. Terminal states are absorbing:
    writes against a terminal job are ignored with a warning. Terminal jobs are
    kept for ``retention_seconds`` and then read as absent; ``sweep()`` drops them.
    """

    def __init__(
        self,
        retention_seconds: float = DEFAULT_RETENTION_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._retention = retention_seconds
        self._clock = clock
        self._jobs: dict[str, Job] = {}
        # job_id -> clock() value when the job became terminal
        self._terminal_at: dict[str, float] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_job(self, kind: str) -> str:
        job_id = _new_job_id()
        self._jobs[job_id] = Job(id=job_id, kind=kind)
        logger.info("Job created: %s (kind: %s)", job_id, kind)
        return job_id

    def mark_processing(self, job_id: str) -> None:
        job = self._live(job_id)
        if job is None:
            return
        if job.status != JobStatus.PENDING:
            logger.warning("Job %s cannot start from status %s", job_id, job.status.value)
            return
        job.status = JobStatus.PROCESSING
        job.progress_message = "Processing"
        job.updated_at = _utcnow()
        logger.info("Job %s is now processing", job_id)

    def update_progress(self, job_id: str, percent: int, message: str) -> None:
        job = self._live(job_id)
        if job is None:
            return
        if job.status != JobStatus.PROCESSING:
            logger.warning("Ignoring progress for job %s in status %s", job_id, job.status.value)
            return
        job.progress_percent = max(0, min(100, int(percent)))
        job.progress_message = message
        job.updated_at = _utcnow()
        logger.info("Job %s progress: %d%% - %s", job_id, job.progress_percent, message)

    def complete_job(self, job_id: str, result: Any) -> None:
        job = self._live(job_id)
        if job is None or not self._can_finish(job):
            return
        job.status = JobStatus.COMPLETED
        job.progress_percent = 100
        job.progress_message = "Job completed"
        job.result = result
        job.updated_at = _utcnow()
        self._terminal_at[job_id] = self._clock()
        logger.info("Job %s completed", job_id)

    def fail_job(self, job_id: str, error: str) -> None:
        job = self._live(job_id)
        if job is None or not self._can_finish(job):
            return
        job.status = JobStatus.FAILED
        job.error = error
        job.progress_message = "Job failed"
        job.updated_at = _utcnow()
        self._terminal_at[job_id] = self._clock()
        logger.error("Job %s failed: %s", job_id, error)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_job(self, job_id: str) -> Job | None:
        """Return a snapshot of the job, or None when unknown or expired."""
        job = self._jobs.get(job_id)
        if job is None or self._expired(job_id):
            return None
        return job.model_copy(deep=True)

    def list_jobs(self) -> list[Job]:
        return [
            job.model_copy(deep=True)
            for job_id, job in self._jobs.items()
            if not self._expired(job_id)
        ]

    def delete_job(self, job_id: str) -> bool:
        """Drop the record. Expired jobs count as absent and return False."""
        expired = self._expired(job_id)
        self._terminal_at.pop(job_id, None)
        deleted = self._jobs.pop(job_id, None) is not None and not expired
        if deleted:
            logger.info("Job %s deleted", job_id)
        return deleted

    def sweep(self) -> int:
        """Purge terminal jobs older than the retention window."""
        expired = [job_id for job_id in self._terminal_at if self._expired(job_id)]
        for job_id in expired:
            self._jobs.pop(job_id, None)
            self._terminal_at.pop(job_id, None)
        if expired:
            logger.info("Cleaned up %d old jobs", len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._jobs)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _live(self, job_id: str) -> Job | None:
        job = self._jobs.get(job_id)
        if job is None or self._expired(job_id):
            logger.warning("Job not found: %s", job_id)
            return None
        return job

    def _can_finish(self, job: Job) -> bool:
        if job.status != JobStatus.PROCESSING:
            logger.warning("Job %s cannot finish from status %s", job.id, job.status.value)
            return False
        return True

    def _expired(self, job_id: str) -> bool:
        finished = self._terminal_at.get(job_id)
        return finished is not None and self._clock() - finished >= self._retention
