"""Exception taxonomy shared by providers, jobs and the HTTP layer."""


class VcaError(Exception):
    """Base class for all application errors."""


class ProviderError(VcaError):
    """A video provider call failed."""


class QuotaExhaustedError(ProviderError):
    """The provider reported a quota or rate limit. Retry later, not now."""

    def __init__(self, message: str = "API quota exhausted, please try again later"):
        super().__init__(message)


class ChannelNotFoundError(ProviderError):
    pass


class JobNotFoundError(VcaError):
    """Job id was never created or has been purged after retention."""


class JobFailedError(VcaError):
    """A polled job reached the failed state."""


class JobPollingTimeout(VcaError):
    """The job did not reach a terminal state within the polling timeout."""


class SnippetStoreError(VcaError):
    """Remote snippet store request failed or returned an unusable document."""


class SnippetNotFoundError(SnippetStoreError):
    """The gist, or the catalog file inside it, does not exist."""
