"""Article generation API.

GET  /api/templates          → audience templates
POST /api/articles/generate  → { job_id }; the job completes with an ArticleDraft
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from backend.deps import Services, get_services
from vca.articles import ARTICLE_TEMPLATES, ArticleRequest, ArticleTemplate, generate_article
from vca.jobs import JobAccepted

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/templates", response_model=list[ArticleTemplate])
async def list_templates():
    return list(ARTICLE_TEMPLATES.values())


@router.post("/articles/generate", response_model=JobAccepted, status_code=status.HTTP_201_CREATED)
async def generate(body: ArticleRequest, services: Services = Depends(get_services)):
    if body.template_id not in ARTICLE_TEMPLATES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown template: {body.template_id}")
    try:
        llm = services.make_llm(body.llm_provider, body.llm_model)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    registry = services.registry

    async def work(job_id: str):
        registry.update_progress(job_id, 10, "Generating article")
        draft = await generate_article(llm, body.video_title, body.user_prompt, body.template_id)
        return draft.model_dump(mode="json")

    job_id = services.executor.execute_job("article", work)
    logger.info("Article job %s for %r", job_id, body.video_title)
    return JobAccepted(job_id=job_id)
