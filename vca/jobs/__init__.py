"""Background job registry, executor and status polling."""

from vca.jobs.executor import JobExecutor
from vca.jobs.models import Job, JobAccepted, JobList, JobStatus, TERMINAL_STATUSES
from vca.jobs.poller import JobsClient, poll_until_complete, registry_fetcher
from vca.jobs.store import JobRegistry

__all__ = [
    "Job",
    "JobAccepted",
    "JobExecutor",
    "JobList",
    "JobRegistry",
    "JobStatus",
    "JobsClient",
    "TERMINAL_STATUSES",
    "poll_until_complete",
    "registry_fetcher",
]
