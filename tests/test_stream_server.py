"""Tests for the stream server API client."""

from __future__ import annotations

import base64
import json
from typing import Any, Callable

import httpx
import pytest

from ghostclient.services.stream_server import StreamServerClient

Handler = Callable[[httpx.Request], httpx.Response]


def build_client(handler: Handler, token: str | None = None) -> StreamServerClient:
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://ghost.test"
    )
    return StreamServerClient(http_client, token=token)


@pytest.mark.anyio("asyncio")
async def test_authenticate_stores_token_for_later_calls() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/auth/login":
            return httpx.Response(200, json={"token": "secret"})
        return httpx.Response(
            200, json={"profiles": [{"profileID": "main", "pictureID": "2"}]}
        )

    client = build_client(handler)
    token = await client.authenticate("alice", "hunter2")
    profiles = await client.list_profiles()

    assert token == "secret"
    assert client.is_authenticated
    assert json.loads(seen[0].content) == {"userID": "alice", "password": "hunter2"}
    assert "authorization" not in seen[0].headers
    assert seen[1].headers["authorization"] == "Bearer secret"
    assert [profile.profile_id for profile in profiles] == ["main"]


@pytest.mark.anyio("asyncio")
async def test_authenticate_without_token_in_response() -> None:
    client = build_client(lambda request: httpx.Response(200, json={"status": "ok"}))

    assert await client.authenticate("alice", "hunter2") is None
    assert not client.is_authenticated


@pytest.mark.anyio("asyncio")
async def test_authenticate_rejected() -> None:
    client = build_client(lambda request: httpx.Response(401, json={}))

    assert await client.authenticate("alice", "wrong") is None


@pytest.mark.anyio("asyncio")
async def test_profile_calls_need_a_token() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(200, json={})

    client = build_client(handler)

    assert await client.list_profiles() == []
    assert await client.add_profile("kids", "1") is False
    assert calls == []


@pytest.mark.anyio("asyncio")
async def test_add_profile_posts_identifiers() -> None:
    bodies: list[dict[str, Any]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200)

    client = build_client(handler, token="secret")

    assert await client.add_profile("kids", "4") is True
    assert bodies == [{"profileID": "kids", "pictureID": "4"}]


@pytest.mark.anyio("asyncio")
async def test_fetch_media_data_skips_broken_records(raw_collections, raw_media) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/download/media_data"
        assert json.loads(request.content) == {"profileID": "main"}
        return httpx.Response(
            200,
            json={
                "collections": raw_collections + ["garbage"],
                "media": raw_media + [{"title": "no id"}],
            },
        )

    client = build_client(handler, token="secret")
    payload = await client.fetch_media_data("main")

    assert payload is not None
    assert [collection.id for collection in payload.collections] == ["C1", "C2"]
    assert len(payload.media) == len(raw_media)


@pytest.mark.anyio("asyncio")
async def test_fetch_media_data_tolerates_null_lists() -> None:
    client = build_client(
        lambda request: httpx.Response(200, json={"collections": None, "media": None}),
        token="secret",
    )

    payload = await client.fetch_media_data("main")

    assert payload is not None
    assert payload.is_empty()


@pytest.mark.anyio("asyncio")
async def test_fetch_media_data_server_error() -> None:
    client = build_client(lambda request: httpx.Response(500), token="secret")

    assert await client.fetch_media_data("main") is None


@pytest.mark.anyio("asyncio")
async def test_fetch_media_data_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = build_client(handler, token="secret")

    assert await client.fetch_media_data("main") is None


@pytest.mark.anyio("asyncio")
async def test_fetch_media_metadata(raw_metadata) -> None:
    client = build_client(
        lambda request: httpx.Response(200, json={"mediaMetadata": raw_metadata}),
        token="secret",
    )

    records = await client.fetch_media_metadata("main")

    assert records is not None
    assert [record.media_id for record in records] == ["E1", "E2", "M1", "M3"]


@pytest.mark.anyio("asyncio")
async def test_fetch_media_metadata_missing_list() -> None:
    client = build_client(
        lambda request: httpx.Response(200, json={"mediaMetadata": None}),
        token="secret",
    )

    assert await client.fetch_media_metadata("main") == []


@pytest.mark.anyio("asyncio")
async def test_fetch_cover_falls_back_to_backup() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/cover/E1":
            return httpx.Response(404)
        return httpx.Response(200, content=b"\x89PNG")

    client = build_client(handler, token="secret")

    data = await client.fetch_cover("E1", "C1")

    assert data == base64.b64encode(b"\x89PNG").decode("ascii")


@pytest.mark.anyio("asyncio")
async def test_fetch_cover_unavailable() -> None:
    client = build_client(lambda request: httpx.Response(404), token="secret")

    assert await client.fetch_cover("E1") is None
