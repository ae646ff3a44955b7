"""GitHub Gist as the remote snippet store for the video catalog."""

from __future__ import annotations

import logging
import time

import httpx
from pydantic import ValidationError

from vca.catalog.models import CatalogDocument, GistInfo
from vca.errors import SnippetNotFoundError, SnippetStoreError

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
DEFAULT_FILENAME = "youtube-videos-cache.json"


class GistSnippetStore:
    """Create, update and read a single JSON file inside a Gist."""

    def __init__(
        self,
        token: str | None = None,
        filename: str = DEFAULT_FILENAME,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self._token = token
        self._filename = filename
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self._token:
            headers["Authorization"] = f"token {self._token}"
        return headers

    async def save(self, doc: CatalogDocument, gist_id: str | None = None) -> GistInfo:
        """Create a private gist (POST) or update ``gist_id`` in place (PATCH)."""
        if not self._token:
            raise SnippetStoreError("A GitHub token is required to write the catalog")
        payload = {
            "description": f"YouTube channel video cache - {doc.total_videos} videos",
            "public": False,
            "files": {self._filename: {"content": doc.model_dump_json(indent=2)}},
        }
        try:
            if gist_id:
                resp = await self._client.patch(f"{GITHUB_API}/gists/{gist_id}", json=payload, headers=self._headers())
            else:
                resp = await self._client.post(f"{GITHUB_API}/gists", json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            raise SnippetStoreError(f"Gist request failed: {e}") from e
        if resp.status_code >= 400:
            raise SnippetStoreError(f"Gist {'update' if gist_id else 'create'} failed: {resp.status_code} {resp.text}")

        data = resp.json()
        file_info = (data.get("files") or {}).get(self._filename) or {}
        info = GistInfo(
            id=data["id"],
            url=data.get("html_url", ""),
            raw_url=file_info.get("raw_url", ""),
            filename=self._filename,
        )
        logger.info("Saved catalog of %d videos to gist %s", doc.total_videos, info.id)
        return info

    async def load(self, gist_id: str) -> CatalogDocument:
        """Fetch the gist and read the catalog file, following raw_url when truncated."""
        headers = {**self._headers(), "Cache-Control": "no-cache"}
        try:
            resp = await self._client.get(
                f"{GITHUB_API}/gists/{gist_id}", params={"t": int(time.time())}, headers=headers
            )
            if resp.status_code == 404:
                raise SnippetNotFoundError(f"Gist not found: {gist_id}")
            if resp.status_code >= 400:
                raise SnippetStoreError(f"Gist load failed: {resp.status_code}")

            file_info = (resp.json().get("files") or {}).get(self._filename)
            if not file_info:
                raise SnippetNotFoundError(f"File {self._filename} not found in gist {gist_id}")

            if file_info.get("truncated") or file_info.get("content") is None:
                raw = await self._client.get(file_info["raw_url"], headers=headers)
                if raw.status_code >= 400:
                    raise SnippetStoreError(f"Raw content download failed: {raw.status_code}")
                content = raw.text
            else:
                content = file_info["content"]
        except httpx.HTTPError as e:
            raise SnippetStoreError(f"Gist request failed: {e}") from e

        try:
            doc = CatalogDocument.model_validate_json(content)
        except ValidationError as e:
            raise SnippetStoreError(f"Catalog in gist {gist_id} is unreadable, regenerate it: {e}") from e
        logger.info("Loaded catalog of %d videos (updated %s)", doc.total_videos, doc.updated_at)
        return doc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
