"""Channel analytics: content discovery, chunked queries, result cache, aggregation.

Submodules that talk to the provider (discovery, chunker, engine) are imported
by path; the provider adapter itself depends on the models exported here.
"""

from vca.analytics.cache import ResultCache
from vca.analytics.models import (
    AggregateRequest,
    AggregationCell,
    AggregationMatrix,
    AnalyticsMetrics,
    ContentItem,
    DateRange,
    KeywordGroup,
    Visibility,
)

__all__ = [
    "AggregateRequest",
    "AggregationCell",
    "AggregationMatrix",
    "AnalyticsMetrics",
    "ContentItem",
    "DateRange",
    "KeywordGroup",
    "ResultCache",
    "Visibility",
]
