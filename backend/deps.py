"""Process-wide service bundle, built once in the app lifespan and injected into routes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import httpx
from fastapi import HTTPException, Request, status

from vca.analytics.cache import ResultCache
from vca.config import Settings
from vca.jobs import JobExecutor, JobRegistry
from vca.llm import LLMProvider, provider_from_settings
from vca.quota import QuotaLedger
from vca.youtube import GoogleVideoProvider, VideoProvider

ProviderFactory = Callable[[str], VideoProvider]
LLMFactory = Callable[[str | None, str | None], LLMProvider]


@dataclass
class Services:
    settings: Settings
    registry: JobRegistry
    executor: JobExecutor
    cache: ResultCache
    ledger: QuotaLedger
    provider_factory: ProviderFactory = GoogleVideoProvider.from_access_token
    llm_factory: LLMFactory | None = None
    # Snippet store HTTP client override (tests inject an httpx.MockTransport client)
    gist_client_factory: Callable[[], httpx.AsyncClient] | None = None

    def make_llm(self, provider_name: str | None = None, model: str | None = None) -> LLMProvider:
        if self.llm_factory is not None:
            return self.llm_factory(provider_name, model)
        return provider_from_settings(self.settings, provider_name, model)


def build_services(settings: Settings) -> Services:
    registry = JobRegistry(retention_seconds=settings.job_retention_seconds)
    return Services(
        settings=settings,
        registry=registry,
        executor=JobExecutor(registry, max_concurrency=settings.max_concurrent_jobs),
        cache=ResultCache(ttl_seconds=settings.analytics_cache_ttl_seconds),
        ledger=QuotaLedger(),
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency: the Services bundle created at startup."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Services not initialised")
    return services
