"""Entry point for the local JSON API that the browsing UI talks to."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import AliasChoices, BaseModel, Field, ValidationError

from .config import settings
from .database import Database
from .models import ViewState, ViewUpdate, serialize_entries
from .navigator import Navigator
from .services.accounts import AccountStore
from .services.catalog_sync import CatalogSync
from .services.stream_server import StreamServerClient

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app: FastAPI


class LoginRequest(BaseModel):
    """Credentials submitted from the login screen."""

    user_id: str = Field(
        min_length=1, validation_alias=AliasChoices("userID", "userId", "user_id")
    )
    password: str = Field(min_length=1)


class AddProfileRequest(BaseModel):
    profile_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("profileID", "profileId", "profile_id"),
    )
    picture_id: str = Field(
        default="",
        validation_alias=AliasChoices("pictureID", "pictureId", "picture_id"),
    )


async def _restore_session(
    client: StreamServerClient,
    accounts: AccountStore,
    catalog_sync: CatalogSync,
) -> str | None:
    """Log in with configured or stored credentials and load the catalog."""

    stored = await accounts.load(settings.ghost_user_id)
    user_id = settings.ghost_user_id or (stored.user_id if stored else None)
    password = settings.ghost_password or (stored.password if stored else None)
    if not (user_id and password):
        logger.info("No stored login found; waiting for the UI to log in")
        return None

    token = await client.authenticate(user_id, password)
    if token is None:
        return None
    await accounts.save_login(user_id, password)
    await accounts.store_token(user_id, token)

    profile_id = settings.ghost_profile_id or (
        stored.selected_profile_id if stored else None
    )
    if profile_id:
        await accounts.select_profile(user_id, profile_id)
        await catalog_sync.refresh(profile_id)
    return user_id


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=settings.server_base_url,
            timeout=httpx.Timeout(settings.request_timeout_seconds, connect=10.0),
        )
    )
    database = Database(settings.database_url)
    await database.create_all()

    navigator = Navigator(ViewState(current_category=settings.default_category))
    stream_client = StreamServerClient(http_client)
    account_store = AccountStore(database.session_factory)
    catalog_sync = CatalogSync(stream_client, navigator)

    fastapi_app.state.navigator = navigator
    fastapi_app.state.stream_client = stream_client
    fastapi_app.state.account_store = account_store
    fastapi_app.state.catalog_sync = catalog_sync
    fastapi_app.state.database = database
    fastapi_app.state.user_id = await _restore_session(
        stream_client, account_store, catalog_sync
    )

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Local catalog browsing API for the GhostStream client",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["*"],
    )

    fastapi_app.state.user_id = None

    register_routes(fastapi_app)
    return fastapi_app


def _require_state(fastapi_app: FastAPI, name: str, expected: type) -> Any:
    value = getattr(fastapi_app.state, name, None)
    if not isinstance(value, expected):
        raise RuntimeError(f"{name.replace('_', ' ').capitalize()} not initialised")
    return value


def get_navigator(fastapi_app: FastAPI) -> Navigator:
    return _require_state(fastapi_app, "navigator", Navigator)


def get_stream_client(fastapi_app: FastAPI) -> StreamServerClient:
    return _require_state(fastapi_app, "stream_client", StreamServerClient)


def get_account_store(fastapi_app: FastAPI) -> AccountStore:
    return _require_state(fastapi_app, "account_store", AccountStore)


def get_catalog_sync(fastapi_app: FastAPI) -> CatalogSync:
    return _require_state(fastapi_app, "catalog_sync", CatalogSync)


def register_routes(fastapi_app: FastAPI) -> None:
    async def _read_payload(request: Request) -> dict[str, Any]:
        try:
            payload = await request.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid payload")
        return payload

    def _catalog_payload(navigator: Navigator) -> dict[str, Any]:
        return {
            "entries": serialize_entries(navigator.entries),
            "view": navigator.view_state().to_payload(),
        }

    def _require_user() -> str:
        user_id = getattr(fastapi_app.state, "user_id", None)
        if not user_id:
            raise HTTPException(status_code=401, detail="Not logged in")
        return user_id

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.post("/api/login")
    async def login(request: Request) -> dict[str, Any]:
        payload = await _read_payload(request)
        try:
            credentials = LoginRequest.model_validate(payload)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=exc.errors()) from exc

        client = get_stream_client(fastapi_app)
        token = await client.authenticate(credentials.user_id, credentials.password)
        if token is None:
            raise HTTPException(status_code=401, detail="Login rejected by server")

        accounts = get_account_store(fastapi_app)
        try:
            await accounts.save_login(credentials.user_id, credentials.password)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        await accounts.store_token(credentials.user_id, token)
        fastapi_app.state.user_id = credentials.user_id
        return {"userID": credentials.user_id, "authenticated": True}

    @fastapi_app.get("/api/profiles")
    async def list_profiles() -> dict[str, Any]:
        _require_user()
        client = get_stream_client(fastapi_app)
        profiles = await client.list_profiles()
        return {"profiles": [profile.model_dump(by_alias=True) for profile in profiles]}

    @fastapi_app.post("/api/profiles")
    async def add_profile(request: Request) -> dict[str, Any]:
        _require_user()
        payload = await _read_payload(request)
        try:
            body = AddProfileRequest.model_validate(payload)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=exc.errors()) from exc

        client = get_stream_client(fastapi_app)
        if not await client.add_profile(body.profile_id, body.picture_id):
            raise HTTPException(status_code=502, detail="Profile could not be added")
        return {"profileID": body.profile_id, "added": True}

    @fastapi_app.post("/api/profiles/{profile_id}/select")
    async def select_profile(profile_id: str) -> dict[str, Any]:
        user_id = _require_user()
        accounts = get_account_store(fastapi_app)
        try:
            await accounts.select_profile(user_id, profile_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

        loaded = await get_catalog_sync(fastapi_app).refresh(profile_id)
        return {"profileID": profile_id, "catalogLoaded": loaded}

    @fastapi_app.post("/api/catalog/refresh")
    async def refresh_catalog() -> dict[str, Any]:
        if not await get_catalog_sync(fastapi_app).refresh():
            raise HTTPException(status_code=502, detail="Catalog could not be loaded")
        return _catalog_payload(get_navigator(fastapi_app))

    @fastapi_app.get("/api/catalog/entries")
    async def catalog_entries() -> dict[str, Any]:
        return _catalog_payload(get_navigator(fastapi_app))

    @fastapi_app.get("/api/catalog/view")
    async def catalog_view() -> dict[str, Any]:
        return get_navigator(fastapi_app).view_state().to_payload()

    @fastapi_app.patch("/api/catalog/view")
    async def update_catalog_view(request: Request) -> dict[str, Any]:
        payload = await _read_payload(request)
        try:
            update = ViewUpdate.model_validate(payload)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=exc.errors()) from exc

        navigator = get_navigator(fastapi_app)
        changed = navigator.apply_view(update.changes())
        return {"changed": changed, **_catalog_payload(navigator)}

    @fastapi_app.post("/api/catalog/filters/clear")
    async def clear_filters() -> dict[str, Any]:
        navigator = get_navigator(fastapi_app)
        navigator.clear_filters()
        return _catalog_payload(navigator)

    @fastapi_app.get("/api/catalog/genres")
    async def catalog_genres() -> dict[str, Any]:
        return {"genres": get_navigator(fastapi_app).unique_genres()}

    @fastapi_app.get("/api/catalog/producers")
    async def catalog_producers() -> dict[str, Any]:
        return {"producers": get_navigator(fastapi_app).unique_producers()}

    @fastapi_app.get("/api/catalog/categories")
    async def catalog_categories() -> dict[str, Any]:
        return {"categories": get_navigator(fastapi_app).sidebar_categories()}

    @fastapi_app.get("/api/media/{media_id}")
    async def media_details(media_id: str) -> dict[str, Any]:
        navigator = get_navigator(fastapi_app)
        item = navigator.get_media(media_id)
        if item is None:
            raise HTTPException(status_code=404, detail="Unknown media item")
        metadata = navigator.get_watch_metadata(media_id)
        return {
            "media": item.model_dump(mode="json", by_alias=True),
            "title": navigator.get_media_title(media_id),
            "progress": navigator.get_media_progress(media_id),
            "metadata": (
                metadata.model_dump(mode="json", by_alias=True) if metadata else None
            ),
            "episodeType": navigator.get_episode_type(media_id),
        }

    @fastapi_app.get("/api/collections/{collection_id}")
    async def collection_details(collection_id: str) -> dict[str, Any]:
        navigator = get_navigator(fastapi_app)
        collection = navigator.get_collection(collection_id)
        if collection is None:
            raise HTTPException(status_code=404, detail="Unknown collection")
        return {
            "collection": collection.model_dump(mode="json", by_alias=True),
            "media": serialize_entries(navigator.get_collection_media(collection_id)),
        }

    @fastapi_app.get("/api/collections/{collection_id}/final-episode")
    async def final_episode(collection_id: str) -> dict[str, Any]:
        navigator = get_navigator(fastapi_app)
        media_id = navigator.get_final_episode(collection_id)
        return {"collectionId": collection_id, "mediaId": media_id or None}

    @fastapi_app.get("/api/episodes/{media_id}/next")
    async def next_episode(
        media_id: str, offset: int = 1, collection: str | None = None
    ) -> dict[str, Any]:
        navigator = get_navigator(fastapi_app)
        target = navigator.get_next_episode(media_id, offset, collection)
        return {"mediaId": target or None}

    @fastapi_app.get("/api/episodes/{media_id}/type")
    async def episode_kind(
        media_id: str, collection: str | None = None
    ) -> dict[str, Any]:
        navigator = get_navigator(fastapi_app)
        return {
            "mediaId": media_id,
            "episodeType": navigator.get_episode_type(media_id, collection),
        }

    @fastapi_app.get("/api/covers/{media_id}")
    async def cover(media_id: str, backup: str | None = None) -> dict[str, Any]:
        client = get_stream_client(fastapi_app)
        data = await client.fetch_cover(media_id, backup)
        if data is None:
            raise HTTPException(status_code=404, detail="Cover not available")
        return {"mediaId": media_id, "data": data}


app = create_app()
