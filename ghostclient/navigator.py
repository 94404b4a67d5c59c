"""Catalog navigation engine driving the browsing UI."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from .categories import SIDEBAR_CATEGORIES
from .episodes import EpisodeType, episode_type, final_episode, find_media, next_episode
from .models import (
    CatalogEntry,
    Collection,
    MediaItem,
    ViewState,
    WatchMetadata,
    parse_records,
)
from .pipeline import PRODUCER_ALL, build_entries, watch_progress
from .utils import era_from_year

logger = logging.getLogger(__name__)

Listener = Callable[[], None]

VIEW_FIELDS: tuple[str, ...] = tuple(ViewState.model_fields)

SIGNALS: tuple[str, ...] = (
    "collections_changed",
    "media_changed",
    "metadata_changed",
    "entries_changed",
    "media_loaded",
    *(f"{name}_changed" for name in VIEW_FIELDS),
)


def _normalise_view_value(name: str, value: Any) -> Any:
    if name in {"selected_genres", "selected_eras"}:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            return frozenset({value}) if value else frozenset()
        return frozenset(str(entry) for entry in value)
    if name in {"show_top_rated", "group_by_collection", "sort_order"}:
        return bool(value)
    if value is None:
        return ""
    return str(value)


class Navigator:
    """Holds the catalog and the view state, and publishes display entries.

    Every mutator recomputes the entries from the full catalog before it
    returns and then notifies listeners registered with :meth:`connect`. A
    single re-entrant lock guards all public operations.
    """

    def __init__(self, view: ViewState | None = None) -> None:
        self._lock = threading.RLock()
        self._collections: list[Collection] = []
        self._media: list[MediaItem] = []
        self._metadata: dict[str, WatchMetadata] = {}
        self._view = view or ViewState()
        self._entries: list[CatalogEntry] = []
        self._listeners: dict[str, list[Listener]] = {name: [] for name in SIGNALS}

    def connect(self, signal: str, listener: Listener) -> None:
        """Register ``listener`` to be called whenever ``signal`` fires."""

        if signal not in self._listeners:
            raise ValueError(f"Unknown navigator signal: {signal}")
        with self._lock:
            self._listeners[signal].append(listener)

    def disconnect(self, signal: str, listener: Listener) -> None:
        with self._lock:
            listeners = self._listeners.get(signal, [])
            if listener in listeners:
                listeners.remove(listener)

    def _emit(self, *signals: str) -> None:
        for signal in signals:
            for listener in list(self._listeners[signal]):
                listener()

    @property
    def collections(self) -> list[Collection]:
        with self._lock:
            return list(self._collections)

    @property
    def media(self) -> list[MediaItem]:
        with self._lock:
            return list(self._media)

    @property
    def watch_metadata(self) -> dict[str, WatchMetadata]:
        with self._lock:
            return dict(self._metadata)

    @property
    def entries(self) -> list[CatalogEntry]:
        with self._lock:
            return list(self._entries)

    def view_state(self) -> ViewState:
        with self._lock:
            return self._view

    @property
    def current_category(self) -> str:
        return self.view_state().current_category

    @property
    def selected_collection_id(self) -> str:
        return self.view_state().selected_collection_id

    @property
    def selected_genres(self) -> frozenset[str]:
        return self.view_state().selected_genres

    @property
    def selected_eras(self) -> frozenset[str]:
        return self.view_state().selected_eras

    @property
    def selected_producer(self) -> str:
        return self.view_state().selected_producer

    @property
    def show_top_rated(self) -> bool:
        return self.view_state().show_top_rated

    @property
    def group_by_collection(self) -> bool:
        return self.view_state().group_by_collection

    @property
    def sort_by(self) -> str:
        return self.view_state().sort_by

    @property
    def sort_order(self) -> bool:
        return self.view_state().sort_order

    @property
    def search_text(self) -> str:
        return self.view_state().search_text

    def replace_collections(
        self, collections: Iterable[Collection | Mapping[str, Any]]
    ) -> None:
        records = parse_records(Collection, collections, label="collection")
        with self._lock:
            self._collections = records
            self._recompute()
            self._emit("collections_changed", "entries_changed")

    def replace_media(self, media: Iterable[MediaItem | Mapping[str, Any]]) -> None:
        records = parse_records(MediaItem, media, label="media")
        with self._lock:
            self._media = records
            self._recompute()
            self._emit("media_changed", "entries_changed")

    def merge_watch_metadata(
        self, metadata: Iterable[WatchMetadata | Mapping[str, Any]]
    ) -> None:
        """Upsert watch metadata by media id and announce the loaded catalog."""

        records = parse_records(WatchMetadata, metadata, label="watch metadata")
        with self._lock:
            for record in records:
                self._metadata[record.media_id] = record
            self._recompute()
            logger.info(
                "Catalog loaded: %d collections, %d media items, %d metadata records",
                len(self._collections),
                len(self._media),
                len(self._metadata),
            )
            self._emit("metadata_changed", "entries_changed", "media_loaded")

    def apply_view(self, changes: Mapping[str, Any]) -> bool:
        """Apply several view changes with a single recomputation.

        Returns whether any field actually changed.
        """

        unknown = set(changes) - set(VIEW_FIELDS)
        if unknown:
            raise ValueError(f"Unknown view fields: {', '.join(sorted(unknown))}")
        normalised = {
            name: _normalise_view_value(name, value) for name, value in changes.items()
        }
        with self._lock:
            changed = {
                name: value
                for name, value in normalised.items()
                if getattr(self._view, name) != value
            }
            if not changed:
                return False
            self._view = self._view.model_copy(update=changed)
            self._recompute()
            self._emit(*(f"{name}_changed" for name in changed), "entries_changed")
            return True

    def set_current_category(self, category: str) -> None:
        self.apply_view({"current_category": category})

    def set_selected_collection_id(self, collection_id: str) -> None:
        self.apply_view({"selected_collection_id": collection_id})

    def set_selected_genres(self, genres: Iterable[str]) -> None:
        self.apply_view({"selected_genres": genres})

    def set_selected_eras(self, eras: Iterable[str]) -> None:
        self.apply_view({"selected_eras": eras})

    def set_selected_producer(self, producer: str) -> None:
        self.apply_view({"selected_producer": producer})

    def set_show_top_rated(self, show_top_rated: bool) -> None:
        self.apply_view({"show_top_rated": show_top_rated})

    def set_group_by_collection(self, group_by_collection: bool) -> None:
        self.apply_view({"group_by_collection": group_by_collection})

    def set_sort_by(self, sort_by: str) -> None:
        self.apply_view({"sort_by": sort_by})

    def set_sort_order(self, ascending: bool) -> None:
        self.apply_view({"sort_order": ascending})

    def set_search_text(self, search_text: str) -> None:
        self.apply_view({"search_text": search_text})

    def clear_filters(self) -> None:
        """Reset genre, era, producer and top-rated filters."""

        self.apply_view(
            {
                "selected_genres": (),
                "selected_eras": (),
                "selected_producer": "",
                "show_top_rated": False,
            }
        )

    def _recompute(self) -> None:
        self._entries = build_entries(
            self._collections, self._media, self._metadata, self._view
        )
        logger.debug(
            "Recomputed %d entries for category=%r collection=%r",
            len(self._entries),
            self._view.current_category,
            self._view.selected_collection_id,
        )

    def sidebar_categories(self) -> list[dict[str, str]]:
        return [category.to_payload() for category in SIDEBAR_CATEGORIES]

    def unique_genres(self) -> list[dict[str, str]]:
        """Return every genre in the catalog as ``{"text": genre}`` records."""

        with self._lock:
            genres: set[str] = set()
            for collection in self._collections:
                genres.update(collection.genres)
            for item in self._media:
                genres.update(item.genres)
        return [{"text": genre} for genre in sorted(genres)]

    def unique_producers(self) -> list[str]:
        """Return the distinct producers, preceded by the ``"All"`` option."""

        with self._lock:
            producers: set[str] = set()
            for collection in self._collections:
                producers.add(collection.producer)
            for item in self._media:
                producers.add(item.producer)
        producers.discard("")
        producers.discard(PRODUCER_ALL)
        return [PRODUCER_ALL, *sorted(producers)]

    @staticmethod
    def get_era_from_year(year: int) -> str:
        return era_from_year(year)

    def get_media(self, media_id: str) -> MediaItem | None:
        with self._lock:
            return find_media(self._media, media_id)

    def get_media_title(self, media_id: str) -> str:
        item = self.get_media(media_id)
        if item is None:
            return ""
        return item.display_title()

    def get_collection(self, collection_id: str) -> Collection | None:
        with self._lock:
            for collection in self._collections:
                if collection.id == collection_id:
                    return collection
        return None

    def get_collection_media(self, collection_id: str) -> list[MediaItem]:
        with self._lock:
            return [item for item in self._media if item.collection_id == collection_id]

    def get_watch_metadata(self, media_id: str) -> WatchMetadata | None:
        with self._lock:
            return self._metadata.get(media_id)

    def get_media_progress(self, media_id: str) -> float:
        with self._lock:
            return watch_progress(self._metadata, media_id)

    def _episode_scope(self, collection_id: str | None) -> str:
        if collection_id:
            return collection_id
        return self._view.selected_collection_id

    def get_final_episode(self, collection_id: str | None = None) -> str:
        with self._lock:
            return final_episode(self._media, self._episode_scope(collection_id))

    def get_next_episode(
        self, current_id: str, offset: int = 1, collection_id: str | None = None
    ) -> str:
        with self._lock:
            return next_episode(
                self._media, current_id, offset, self._episode_scope(collection_id)
            )

    def get_episode_type(
        self, current_id: str, collection_id: str | None = None
    ) -> EpisodeType:
        with self._lock:
            return episode_type(
                self._media, current_id, self._episode_scope(collection_id)
            )
