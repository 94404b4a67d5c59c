"""GhostClient catalog browsing package.

The navigation engine is importable without the web stack; the FastAPI
application lives in :mod:`ghostclient.main`.
"""

from __future__ import annotations

from .models import CatalogEntry, Collection, MediaItem, ViewState, WatchMetadata
from .navigator import Navigator
from .pipeline import build_entries

__all__ = [
    "CatalogEntry",
    "Collection",
    "MediaItem",
    "Navigator",
    "ViewState",
    "WatchMetadata",
    "build_entries",
]
