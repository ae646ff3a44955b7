"""Article generation from video metadata via the configured LLM."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader
from pydantic import BaseModel, Field

from vca.articles.templates import get_template
from vca.llm.base import LLMProvider

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).resolve().parent.parent.parent / "prompts"


class Screenshot(BaseModel):
    timestamp: str = ""  # mm:ss
    reason: str = ""


class ArticleDraft(BaseModel):
    title_a: str = ""
    title_b: str = ""
    title_c: str = ""
    article_text: str = ""
    seo_description: str = ""
    screenshots: list[Screenshot] = Field(default_factory=list)


class ArticleRequest(BaseModel):
    """Body for POST /api/articles/generate."""

    video_title: str = Field(min_length=1)
    user_prompt: str = ""
    template_id: str = "default"
    llm_provider: str | None = None
    llm_model: str | None = None


def build_article_prompt(video_title: str, user_prompt: str = "", template_id: str = "default") -> str:
    env = Environment(loader=FileSystemLoader(str(PROMPTS_DIR)))
    template = env.get_template("article.j2")
    return template.render(
        video_title=video_title,
        user_prompt=user_prompt.strip(),
        template=get_template(template_id),
    )


async def generate_article(
    llm: LLMProvider,
    video_title: str,
    user_prompt: str = "",
    template_id: str = "default",
) -> ArticleDraft:
    """Render the prompt and run the (blocking) LLM call in a worker thread."""
    prompt = build_article_prompt(video_title, user_prompt, template_id)
    logger.info("Generating article for %r (template: %s)", video_title, template_id)
    return await asyncio.to_thread(llm.complete_structured, prompt, ArticleDraft)
