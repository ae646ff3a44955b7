"""Full-channel video catalog cached in a GitHub Gist."""

from vca.catalog.builder import build_catalog, sanitize_text, search_catalog
from vca.catalog.gist import GistSnippetStore
from vca.catalog.models import CatalogDocument, CatalogRequest, CatalogVideo, GistInfo

__all__ = [
    "CatalogDocument",
    "CatalogRequest",
    "CatalogVideo",
    "GistInfo",
    "GistSnippetStore",
    "build_catalog",
    "sanitize_text",
    "search_catalog",
]
