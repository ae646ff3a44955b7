"""Tests for id chunking and views-weighted metric combination."""

from datetime import date

import pytest

from vca.analytics.chunker import BatchChunker, chunk_ids, combine_metrics, metrics_from_report
from vca.analytics.models import AnalyticsMetrics, AnalyticsReport, DateRange
from vca.quota import QuotaLedger

from tests.conftest import CHANNEL_ID, FakeVideoProvider, make_video

RANGE = DateRange(label="Q1", start_date=date(2025, 1, 1), end_date=date(2025, 3, 31))


def test_chunk_ids_splits_in_order():
    assert chunk_ids(["a", "b", "c", "d", "e"], 2) == [["a", "b"], ["c", "d"], ["e"]]
    assert chunk_ids([], 200) == []


def test_chunk_ids_rejects_non_positive_size():
    with pytest.raises(ValueError):
        chunk_ids(["a"], 0)


def test_combine_sums_additive_and_weights_averages():
    parts = [
        AnalyticsMetrics(views=10, average_view_percentage=50, likes=1, estimated_minutes_watched=1.5),
        AnalyticsMetrics(views=30, average_view_percentage=70, likes=2, estimated_minutes_watched=2.5),
    ]
    combined = combine_metrics(parts)
    assert combined.views == 40
    assert combined.likes == 3
    assert combined.estimated_minutes_watched == pytest.approx(4.0)
    assert combined.average_view_percentage == pytest.approx(65.0)


def test_combine_with_zero_views_gives_zero_averages():
    combined = combine_metrics([AnalyticsMetrics(views=0, average_view_duration=99)])
    assert combined.average_view_duration == 0
    assert combine_metrics([]) == AnalyticsMetrics()


def test_metrics_from_report_maps_api_columns():
    report = AnalyticsReport(
        column_names=["views", "averageViewPercentage", "subscribersGained"],
        rows=[[12.0, 44.5, 3.0]],
    )
    metrics = metrics_from_report(report)
    assert metrics.views == 12
    assert isinstance(metrics.views, int)
    assert metrics.average_view_percentage == 44.5
    assert metrics.subscribers_gained == 3


def test_metrics_from_empty_report_is_none():
    assert metrics_from_report(AnalyticsReport(column_names=["views"], rows=[])) is None


@pytest.mark.asyncio
async def test_two_single_item_chunks_combine_by_views():
    """A(views=10, 50%) and B(views=30, 70%) in chunks of one give 40 views at 65%."""
    provider = FakeVideoProvider(
        videos=[make_video("A"), make_video("B")],
        metrics={
            "A": {"views": 10, "averageViewPercentage": 50},
            "B": {"views": 30, "averageViewPercentage": 70},
        },
    )
    ledger = QuotaLedger()
    chunker = BatchChunker(provider, ledger, chunk_size=1)
    metrics = await chunker.aggregate_metric(CHANNEL_ID, ["A", "B"], RANGE)
    assert metrics.views == 40
    assert metrics.average_view_percentage == pytest.approx(65.0)
    assert provider.calls["query_analytics"] == 2
    assert ledger.total_units() == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("chunk_size", [1, 2, 3, 200])
async def test_chunking_does_not_change_the_result(provider, chunk_size):
    ids = ["v1", "v2", "v3"]
    single = await BatchChunker(provider, QuotaLedger(), chunk_size=200).aggregate_metric(CHANNEL_ID, ids, RANGE)
    chunked = await BatchChunker(provider, QuotaLedger(), chunk_size=chunk_size).aggregate_metric(
        CHANNEL_ID, ids, RANGE
    )
    assert chunked.views == single.views
    assert chunked.likes == single.likes
    assert chunked.average_view_percentage == pytest.approx(single.average_view_percentage)
    assert chunked.average_view_duration == pytest.approx(single.average_view_duration)


@pytest.mark.asyncio
async def test_chunks_without_data_are_skipped(provider):
    """v4 has no analytics rows; its chunk contributes nothing."""
    metrics = await BatchChunker(provider, QuotaLedger(), chunk_size=1).aggregate_metric(
        CHANNEL_ID, ["v1", "v4"], RANGE
    )
    assert metrics.views == 10
    assert metrics.average_view_percentage == pytest.approx(50.0)


@pytest.mark.asyncio
async def test_provider_errors_propagate(provider):
    provider.analytics_errors[RANGE.start_date] = RuntimeError("backend down")
    with pytest.raises(RuntimeError):
        await BatchChunker(provider, QuotaLedger()).aggregate_metric(CHANNEL_ID, ["v1"], RANGE)
