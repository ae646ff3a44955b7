"""Audience templates for article generation."""

from pydantic import BaseModel, Field


class ArticleTemplate(BaseModel):
    id: str
    name: str
    description: str
    target_audience: str
    category: str = "general"
    keywords: list[str] = Field(default_factory=list)


ARTICLE_TEMPLATES: dict[str, ArticleTemplate] = {
    t.id: t
    for t in [
        ArticleTemplate(
            id="default",
            name="General reader",
            description="Accessible article style for a broad audience",
            target_audience="general web readers",
        ),
        ArticleTemplate(
            id="ecosystem-loyalist",
            name="Ecosystem loyalist",
            description="Brand integration, seamless ecosystem experience, premium feel",
            target_audience="loyal users of a single brand ecosystem",
            category="premium",
            keywords=["integration", "ecosystem", "seamless experience", "premium"],
        ),
        ArticleTemplate(
            id="pragmatic-performer",
            name="Pragmatic performer",
            description="Value for money, hardware comparisons, performance testing",
            target_audience="numbers-driven and analytical buyers",
            category="professional",
            keywords=["value", "benchmarks", "performance", "price-performance"],
        ),
        ArticleTemplate(
            id="lifestyle-integrator",
            name="Lifestyle integrator",
            description="Everyday scenarios, convenience, design aesthetics",
            target_audience="parents, health professionals, style-minded creators",
            category="lifestyle",
            keywords=["scenarios", "convenience", "quality of life", "design"],
        ),
        ArticleTemplate(
            id="reliability-seeker",
            name="Reliability seeker",
            description="Simple operation, durability, service guarantees",
            target_audience="seniors and carers, technology beginners, small business owners",
            category="service",
            keywords=["simple", "durable", "peace of mind", "service"],
        ),
    ]
}


def get_template(template_id: str | None) -> ArticleTemplate:
    """Return the named template, falling back to ``default`` for unknown ids."""
    return ARTICLE_TEMPLATES.get(template_id or "default", ARTICLE_TEMPLATES["default"])
