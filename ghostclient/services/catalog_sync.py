"""Loads the downloaded catalog into the navigator."""

from __future__ import annotations

import logging

from ..navigator import Navigator
from .stream_server import StreamServerClient

logger = logging.getLogger(__name__)


class CatalogSync:
    """Pushes server data into the navigator for the selected profile."""

    def __init__(self, client: StreamServerClient, navigator: Navigator):
        self._client = client
        self._navigator = navigator
        self._profile_id: str | None = None

    @property
    def profile_id(self) -> str | None:
        return self._profile_id

    async def refresh(self, profile_id: str | None = None) -> bool:
        """Download the catalog and watch metadata and apply them.

        Returns ``False`` when the catalog itself could not be downloaded; the
        navigator then keeps its previous contents. Missing watch metadata
        does not undo an applied catalog.
        """

        resolved = profile_id or self._profile_id
        if not resolved:
            logger.info("No profile selected, skipping catalog refresh")
            return False
        self._profile_id = resolved

        payload = await self._client.fetch_media_data(resolved)
        if payload is None:
            logger.warning("Catalog download failed for profile %s", resolved)
            return False

        self._navigator.replace_collections(payload.collections)
        self._navigator.replace_media(payload.media)

        metadata = await self._client.fetch_media_metadata(resolved)
        if metadata is None:
            logger.warning("Watch metadata download failed for profile %s", resolved)
            metadata = []
        self._navigator.merge_watch_metadata(metadata)
        return True
