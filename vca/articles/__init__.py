"""AI-written articles from video metadata."""

from vca.articles.generator import ArticleDraft, ArticleRequest, Screenshot, build_article_prompt, generate_article
from vca.articles.templates import ARTICLE_TEMPLATES, ArticleTemplate, get_template

__all__ = [
    "ARTICLE_TEMPLATES",
    "ArticleDraft",
    "ArticleRequest",
    "ArticleTemplate",
    "Screenshot",
    "build_article_prompt",
    "generate_article",
    "get_template",
]
