"""Pydantic models for content discovery and channel analytics aggregation."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Visibility(str, Enum):
    PUBLIC = "public"
    UNLISTED = "unlisted"
    PRIVATE = "private"


class ContentItem(BaseModel):
    """One video on a channel. Immutable once discovered."""

    model_config = ConfigDict(frozen=True)

    item_id: str
    title: str = ""
    description: str = ""
    tags: tuple[str, ...] = ()
    published_at: datetime | None = None
    visibility: Visibility = Visibility.PUBLIC
    thumbnail_url: str = ""


class KeywordGroup(BaseModel):
    """Named filter; an empty keyword means every video on the channel."""

    name: str = Field(min_length=1)
    keyword: str = ""


class DateRange(BaseModel):
    label: str = Field(min_length=1)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _check_order(self) -> "DateRange":
        if self.end_date < self.start_date:
            raise ValueError(f"end_date precedes start_date in range '{self.label}'")
        return self


# Summed across chunks.
ADDITIVE_METRICS: tuple[str, ...] = (
    "views",
    "estimated_minutes_watched",
    "likes",
    "comments",
    "shares",
    "subscribers_gained",
)
# Combined as a views-weighted mean across chunks.
WEIGHTED_METRICS: tuple[str, ...] = (
    "average_view_duration",
    "average_view_percentage",
)

# Analytics API column name -> AnalyticsMetrics field
API_METRIC_NAMES: dict[str, str] = {
    "views": "views",
    "estimatedMinutesWatched": "estimated_minutes_watched",
    "averageViewDuration": "average_view_duration",
    "averageViewPercentage": "average_view_percentage",
    "likes": "likes",
    "comments": "comments",
    "shares": "shares",
    "subscribersGained": "subscribers_gained",
}


class AnalyticsMetrics(BaseModel):
    views: int = 0
    estimated_minutes_watched: float = 0.0
    average_view_duration: float = 0.0
    average_view_percentage: float = 0.0
    likes: int = 0
    comments: int = 0
    shares: int = 0
    subscribers_gained: int = 0


class AnalyticsReport(BaseModel):
    """Raw analytics query result: column names plus data rows."""

    column_names: list[str] = Field(default_factory=list)
    rows: list[list[float]] = Field(default_factory=list)


class AggregationCell(BaseModel):
    """One (group, date range) result. ``error`` set means this cell only failed."""

    metrics: AnalyticsMetrics | None = None
    item_count: int = 0
    error: str | None = None
    error_kind: str | None = None


class GroupRow(BaseModel):
    name: str
    keyword: str = ""
    item_count: int = 0
    cells: dict[str, AggregationCell] = Field(default_factory=dict)


class GroupSummary(BaseModel):
    name: str
    keyword: str
    item_count: int


class AggregationMatrix(BaseModel):
    rows: list[GroupRow] = Field(default_factory=list)
    columns: list[str] = Field(default_factory=list)
    channel_country: str = "Unknown"
    groups: list[GroupSummary] = Field(default_factory=list)
    quota_units: int = 0


class AggregateRequest(BaseModel):
    """Body for POST /api/channel-analytics/aggregate."""

    access_token: str = Field(min_length=1)
    channel_id: str = Field(min_length=1)
    keyword_groups: list[KeywordGroup] = Field(min_length=1)
    date_ranges: list[DateRange] = Field(min_length=1)

    @model_validator(mode="after")
    def _check_unique_labels(self) -> "AggregateRequest":
        duplicates = duplicate_labels(self.date_ranges)
        if duplicates:
            raise ValueError(f"date range labels must be unique: {', '.join(duplicates)}")
        return self


def duplicate_labels(date_ranges) -> list[str]:
    """Labels that appear more than once, in first-seen order."""
    seen: set[str] = set()
    duplicates: list[str] = []
    for date_range in date_ranges:
        if date_range.label in seen and date_range.label not in duplicates:
            duplicates.append(date_range.label)
        seen.add(date_range.label)
    return duplicates
