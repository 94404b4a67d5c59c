"""Tests for loading downloaded catalogs into the navigator."""

from __future__ import annotations

import httpx
import pytest

from ghostclient.navigator import Navigator
from ghostclient.services.catalog_sync import CatalogSync
from ghostclient.services.stream_server import StreamServerClient


def build_sync(handler, navigator: Navigator) -> CatalogSync:
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://ghost.test"
    )
    return CatalogSync(StreamServerClient(http_client, token="secret"), navigator)


@pytest.mark.anyio("asyncio")
async def test_refresh_loads_catalog_and_metadata(
    raw_collections, raw_media, raw_metadata
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/download/media_data":
            return httpx.Response(
                200, json={"collections": raw_collections, "media": raw_media}
            )
        return httpx.Response(200, json={"mediaMetadata": raw_metadata})

    navigator = Navigator()
    loaded: list[str] = []
    navigator.connect("media_loaded", lambda: loaded.append("loaded"))
    sync = build_sync(handler, navigator)

    assert await sync.refresh("main") is True

    assert sync.profile_id == "main"
    assert len(navigator.media) == len(raw_media)
    assert navigator.get_media_progress("E1") == pytest.approx(0.4)
    assert loaded == ["loaded"]


@pytest.mark.anyio("asyncio")
async def test_refresh_reuses_last_profile(raw_collections, raw_media) -> None:
    profiles: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        profiles.append(request.content)
        if request.url.path == "/download/media_data":
            return httpx.Response(
                200, json={"collections": raw_collections, "media": raw_media}
            )
        return httpx.Response(200, json={"mediaMetadata": []})

    sync = build_sync(handler, Navigator())

    await sync.refresh("main")
    await sync.refresh()

    assert len(profiles) == 4
    assert all(b"main" in body for body in profiles)


@pytest.mark.anyio("asyncio")
async def test_refresh_without_profile_does_nothing() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    sync = build_sync(handler, Navigator())

    assert await sync.refresh() is False


@pytest.mark.anyio("asyncio")
async def test_failed_download_keeps_previous_catalog(
    raw_collections, raw_media
) -> None:
    navigator = Navigator()
    navigator.replace_collections(raw_collections)
    navigator.replace_media(raw_media)

    sync = build_sync(lambda request: httpx.Response(503), navigator)

    assert await sync.refresh("main") is False
    assert len(navigator.media) == len(raw_media)


@pytest.mark.anyio("asyncio")
async def test_missing_metadata_still_applies_catalog(
    raw_collections, raw_media
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/download/media_data":
            return httpx.Response(
                200, json={"collections": raw_collections, "media": raw_media}
            )
        return httpx.Response(500)

    navigator = Navigator()
    sync = build_sync(handler, navigator)

    assert await sync.refresh("main") is True
    assert len(navigator.collections) == 2
    assert navigator.watch_metadata == {}
