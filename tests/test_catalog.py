"""Tests for the video catalog builder and the Gist snippet store."""

import httpx
import pytest

from vca.catalog import CatalogDocument, CatalogVideo, GistSnippetStore, build_catalog, sanitize_text, search_catalog
from vca.errors import SnippetNotFoundError, SnippetStoreError
from vca.quota import QuotaLedger

from tests.conftest import CHANNEL_ID, GIST_FILENAME as FILENAME, GistServer, make_video


def test_sanitize_text_strips_control_chars_and_collapses_space():
    assert sanitize_text("  Hello\x00\x07   world\n\tagain ") == "Hello world again"
    assert sanitize_text(None) == ""
    assert sanitize_text("") == ""


@pytest.mark.asyncio
async def test_build_catalog_merges_statistics(provider):
    ledger = QuotaLedger()
    progress = []
    doc = await build_catalog(provider, ledger, CHANNEL_ID, lambda p, m: progress.append(p))
    assert doc.version == "1.0"
    assert doc.total_videos == 4
    first = doc.videos[0]
    assert first.video_id == "v1"
    assert first.view_count == 10
    assert first.category_id == "28"
    assert first.tags == ["phone", "unboxing"]
    assert first.privacy_status == "public"
    assert ledger.snapshot().totals["youtube.videos.list"] > 0
    assert progress == sorted(progress)


@pytest.mark.asyncio
async def test_build_catalog_sanitizes_titles(provider):
    provider.videos["v5"] = make_video("v5", "Bad\x01 title\n\nhere")
    doc = await build_catalog(provider, QuotaLedger(), CHANNEL_ID)
    assert doc.videos[-1].title == "Bad title here"


def test_search_catalog_matches_title_and_tags():
    doc = CatalogDocument.from_videos([
        CatalogVideo(video_id="a", title="Phone unboxing"),
        CatalogVideo(video_id="b", title="Laptop", tags=["phone accessories"]),
        CatalogVideo(video_id="c", title="Vlog"),
    ])
    assert [v.video_id for v in search_catalog(doc, "PHONE")] == ["a", "b"]
    assert [v.video_id for v in search_catalog(doc, "phone", max_results=1)] == ["a"]
    assert [v.video_id for v in search_catalog(doc, "", max_results=2)] == ["a", "b"]


@pytest.fixture
def gist_server():
    return GistServer()


def _store(server, token="ghp_test"):
    return GistSnippetStore(token=token, filename=FILENAME, client=httpx.AsyncClient(transport=httpx.MockTransport(server)))


def _doc():
    return CatalogDocument.from_videos([CatalogVideo(video_id="a", title="Phone"), CatalogVideo(video_id="b")])


@pytest.mark.asyncio
async def test_save_creates_then_updates(gist_server):
    store = _store(gist_server)
    info = await store.save(_doc())
    assert info.id == "g1"
    assert info.filename == FILENAME
    assert gist_server.requests[-1].method == "POST"
    assert gist_server.requests[-1].headers["Authorization"] == "token ghp_test"

    await store.save(_doc(), gist_id="g1")
    assert gist_server.requests[-1].method == "PATCH"


@pytest.mark.asyncio
async def test_load_reads_back_document(gist_server):
    store = _store(gist_server)
    await store.save(_doc())
    doc = await store.load("g1")
    assert doc.total_videos == 2
    assert [v.video_id for v in doc.videos] == ["a", "b"]


@pytest.mark.asyncio
async def test_load_follows_raw_url_when_truncated(gist_server):
    store = _store(gist_server)
    await store.save(_doc())
    gist_server.truncate = True
    doc = await store.load("g1")
    assert doc.total_videos == 2
    assert gist_server.requests[-1].url.path.startswith("/raw/")


@pytest.mark.asyncio
async def test_load_missing_gist_raises_not_found(gist_server):
    with pytest.raises(SnippetNotFoundError):
        await _store(gist_server).load("nope")


@pytest.mark.asyncio
async def test_load_corrupt_document_raises(gist_server):
    gist_server.gists["g9"] = {"content": "{not json"}
    with pytest.raises(SnippetStoreError, match="regenerate"):
        await _store(gist_server).load("g9")


@pytest.mark.asyncio
async def test_save_requires_token(gist_server):
    with pytest.raises(SnippetStoreError):
        await _store(gist_server, token=None).save(_doc())
