"""Channel analytics aggregation API.

POST /api/channel-analytics/aggregate
  → Validates keyword groups and date ranges, returns { job_id } immediately.
  → The job discovers each group's videos, queries analytics per date range
    (chunked, cached) and completes with the aggregation matrix.

POST /api/channel-analytics/clear-cache
  → Drops every cached cell.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from backend.deps import Services, get_services
from vca.analytics import AggregateRequest
from vca.analytics.discovery import ContentDiscovery
from vca.analytics.engine import AggregationEngine
from vca.jobs import JobAccepted

logger = logging.getLogger(__name__)
router = APIRouter()


def build_engine(services: Services, access_token: str) -> AggregationEngine:
    settings = services.settings
    provider = services.provider_factory(access_token)
    discovery = ContentDiscovery(
        provider,
        services.ledger,
        page_size=settings.discovery_page_size,
        max_pages=settings.discovery_max_pages,
        max_items=settings.discovery_max_items,
    )
    return AggregationEngine(
        provider,
        services.ledger,
        services.cache,
        discovery=discovery,
        chunk_size=settings.analytics_chunk_size,
    )


@router.post("/channel-analytics/aggregate", response_model=JobAccepted, status_code=status.HTTP_201_CREATED)
async def aggregate(body: AggregateRequest, services: Services = Depends(get_services)):
    """Start an aggregation job for the given channel."""
    engine = build_engine(services, body.access_token)
    registry = services.registry

    async def work(job_id: str):
        def on_progress(percent: int, message: str) -> None:
            registry.update_progress(job_id, percent, message)

        matrix = await engine.aggregate(body.channel_id, body.keyword_groups, body.date_ranges, on_progress)
        return matrix.model_dump(mode="json")

    job_id = services.executor.execute_job("channel-analytics", work)
    logger.info(
        "Aggregation job %s: %d groups x %d date ranges on %s",
        job_id,
        len(body.keyword_groups),
        len(body.date_ranges),
        body.channel_id,
    )
    return JobAccepted(job_id=job_id)


@router.post("/channel-analytics/clear-cache")
async def clear_cache(services: Services = Depends(get_services)):
    return {"cleared": services.cache.clear()}
