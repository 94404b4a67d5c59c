"""Client for the GhostStream media server API."""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from ..models import (
    CatalogPayload,
    Collection,
    MediaItem,
    Profile,
    WatchMetadata,
    parse_records,
)

logger = logging.getLogger(__name__)


class StreamServerClient:
    """Thin wrapper around the stream server's JSON endpoints.

    Every call is a JSON ``POST``. After :meth:`authenticate` succeeds the
    returned token is sent as a bearer token on all later requests. Failed
    requests are logged and reported as ``None``, ``False`` or an empty list
    so the caller can keep showing whatever it already has.
    """

    def __init__(self, http_client: httpx.AsyncClient, token: str | None = None):
        self._client = http_client
        self._token = token

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _post(
        self, path: str, payload: dict[str, Any] | None = None
    ) -> httpx.Response | None:
        try:
            response = await self._client.post(
                path, json=payload or {}, headers=self._headers()
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Stream server request %s failed with status %s",
                path,
                exc.response.status_code,
            )
            return None
        except httpx.HTTPError as exc:
            logger.warning("Stream server request %s failed: %s", path, exc)
            return None
        return response

    async def _post_json(
        self, path: str, payload: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        response = await self._post(path, payload)
        if response is None:
            return None
        try:
            data = response.json()
        except ValueError:
            logger.warning("Stream server returned invalid JSON for %s", path)
            return None
        if not isinstance(data, dict):
            logger.warning("Unexpected payload shape from %s", path)
            return None
        return data

    async def authenticate(self, user_id: str, password: str) -> str | None:
        """Log in and return the session token, or ``None`` on failure."""

        if not user_id or not password:
            logger.info("Credentials missing, skipping authentication")
            return None

        data = await self._post_json(
            "/auth/login", {"userID": user_id, "password": password}
        )
        if data is None:
            return None
        token = data.get("token")
        if not isinstance(token, str) or not token:
            logger.warning("Authentication failed: token not found in response")
            return None
        self._token = token
        logger.info("Authenticated user %s", user_id)
        return token

    async def list_profiles(self) -> list[Profile]:
        if not self._token:
            return []
        data = await self._post_json("/profile/list")
        if data is None:
            return []
        raw = data.get("profiles") or []
        if not isinstance(raw, list):
            return []
        return parse_records(Profile, raw, label="profile")

    async def add_profile(self, profile_id: str, picture_id: str) -> bool:
        if not self._token:
            logger.info("Not authenticated, cannot add profile %s", profile_id)
            return False
        response = await self._post(
            "/profile/add", {"profileID": profile_id, "pictureID": picture_id}
        )
        if response is None:
            return False
        logger.info("Profile %s added", profile_id)
        return True

    async def fetch_media_data(self, profile_id: str) -> CatalogPayload | None:
        """Download the collections and media items visible to a profile."""

        data = await self._post_json("/download/media_data", {"profileID": profile_id})
        if data is None:
            return None

        raw_collections = data.get("collections") or []
        raw_media = data.get("media") or []
        payload = CatalogPayload(
            collections=parse_records(
                Collection,
                raw_collections if isinstance(raw_collections, list) else [],
                label="collection",
            ),
            media=parse_records(
                MediaItem,
                raw_media if isinstance(raw_media, list) else [],
                label="media",
            ),
        )
        logger.info(
            "Downloaded %d collections and %d media items for profile %s",
            len(payload.collections),
            len(payload.media),
            profile_id,
        )
        return payload

    async def fetch_media_metadata(self, profile_id: str) -> list[WatchMetadata] | None:
        data = await self._post_json(
            "/download/media_metadata", {"profileID": profile_id}
        )
        if data is None:
            return None
        raw = data.get("mediaMetadata")
        if not isinstance(raw, list):
            return []
        return parse_records(WatchMetadata, raw, label="watch metadata")

    async def fetch_cover(
        self, media_id: str, backup_id: str | None = None
    ) -> str | None:
        """Return the base64-encoded cover picture of ``media_id``.

        When the server has no picture for the item, ``backup_id`` (usually
        the parent collection) is tried instead.
        """

        for candidate in (media_id, backup_id):
            if not candidate:
                continue
            response = await self._post(f"/cover/{candidate}")
            if response is not None and response.content:
                return base64.b64encode(response.content).decode("ascii")
        logger.debug("No cover available for %s", media_id)
        return None
