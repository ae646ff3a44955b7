"""Video catalog cache API (GitHub Gist as the remote snippet store).

POST /api/video-cache/generate         → { job_id }; the job completes with the gist info
GET  /api/video-cache/load/{gist_id}   → the stored catalog document
GET  /api/video-cache/search           → title/tag search over the stored catalog
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from backend.deps import Services, get_services
from vca.catalog import CatalogDocument, CatalogRequest, GistSnippetStore, build_catalog, search_catalog
from vca.errors import SnippetNotFoundError, SnippetStoreError
from vca.jobs import JobAccepted

logger = logging.getLogger(__name__)
router = APIRouter()


def _store(services: Services, token: str | None) -> GistSnippetStore:
    client = services.gist_client_factory() if services.gist_client_factory else None
    return GistSnippetStore(
        token=token or services.settings.github_gist_token,
        filename=services.settings.github_gist_filename,
        client=client,
    )


async def _load(services: Services, gist_id: str, token: str | None) -> CatalogDocument:
    store = _store(services, token)
    try:
        return await store.load(gist_id)
    except SnippetNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SnippetStoreError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    finally:
        await store.aclose()


@router.post("/video-cache/generate", response_model=JobAccepted, status_code=status.HTTP_201_CREATED)
async def generate_cache(body: CatalogRequest, services: Services = Depends(get_services)):
    token = body.gist_token or services.settings.github_gist_token
    if not token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="gist_token is required")
    gist_id = body.gist_id or services.settings.github_gist_id
    provider = services.provider_factory(body.access_token)
    registry = services.registry

    async def work(job_id: str):
        def on_progress(percent: int, message: str) -> None:
            registry.update_progress(job_id, percent, message)

        doc = await build_catalog(provider, services.ledger, body.channel_id, on_progress)
        on_progress(95, "Uploading catalog")
        store = _store(services, token)
        try:
            info = await store.save(doc, gist_id)
        finally:
            await store.aclose()
        return {"total_videos": doc.total_videos, **info.model_dump()}

    job_id = services.executor.execute_job("video-cache", work)
    logger.info("Video cache job %s for channel %s", job_id, body.channel_id)
    return JobAccepted(job_id=job_id)


@router.get("/video-cache/load/{gist_id}", response_model=CatalogDocument)
async def load_cache(gist_id: str, gist_token: str | None = None, services: Services = Depends(get_services)):
    return await _load(services, gist_id, gist_token)


@router.get("/video-cache/search")
async def search_cache(
    q: str = "",
    gist_id: str | None = None,
    gist_token: str | None = None,
    max_results: int = Query(10, ge=1, le=500),
    services: Services = Depends(get_services),
):
    gist_id = gist_id or services.settings.github_gist_id
    if not gist_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="gist_id is required (or set GITHUB_GIST_ID)",
        )
    doc = await _load(services, gist_id, gist_token)
    videos = search_catalog(doc, q, max_results)
    return {"query": q, "total_results": len(videos), "videos": [v.model_dump(mode="json") for v in videos]}
