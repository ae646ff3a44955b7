"""Background job schema and status."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})


class Job(BaseModel):
    """Deferred unit of work, held in memory for async polling."""

    id: str
    kind: str
    status: JobStatus = JobStatus.PENDING
    progress_percent: int = Field(default=0, ge=0, le=100)
    progress_message: str = "Job created"
    result: Any | None = None
    error: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class JobAccepted(BaseModel):
    """Immediate response for endpoints that start a job."""

    job_id: str
    status: JobStatus = JobStatus.PENDING


class JobList(BaseModel):
    jobs: list[Job] = Field(default_factory=list)
    running_job_ids: list[str] = Field(default_factory=list)
