"""Query pipeline turning the raw catalog and a view into display entries.

Every stage is a pure function of its inputs. ``build_entries`` chains them in
the fixed order used by the navigator:

1. category classification
2. restriction to the selected collection
3. free-text search
4. facet filters (genre, era, producer, top-rated)
5. collapsing of member items into their collection
6. sorting
"""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from .categories import CONTINUE_WATCHING, MOVIES, SERIES, get_category
from .models import CatalogEntry, Collection, MediaItem, ViewState, WatchMetadata
from .utils import any_value_contains, era_from_year

TOP_RATED_THRESHOLD = 8.0
FINISHED_THRESHOLD = 0.99
PRODUCER_ALL = "All"

MediaList = list[MediaItem]
CollectionList = list[Collection]


def index_collections(collections: Iterable[Collection]) -> dict[str, Collection]:
    """Map collection ids to collections, keeping the first duplicate."""

    index: dict[str, Collection] = {}
    for collection in collections:
        index.setdefault(collection.id, collection)
    return index


def group_members(media: Iterable[MediaItem]) -> dict[str, MediaList]:
    """Group media items by the collection they reference."""

    members: dict[str, MediaList] = {}
    for item in media:
        if item.collection_id:
            members.setdefault(item.collection_id, []).append(item)
    return members


def watch_progress(metadata: Mapping[str, WatchMetadata], media_id: str) -> float:
    record = metadata.get(media_id)
    if record is None or not record.percentage_watched:
        return 0.0
    return record.percentage_watched


def is_in_progress(progress: float) -> bool:
    """Return whether playback has started but not finished."""

    return 0.0 < progress <= FINISHED_THRESHOLD


def producer_filter_active(producer: str) -> bool:
    return bool(producer) and producer != PRODUCER_ALL


def classify(
    media: Sequence[MediaItem],
    collections: Sequence[Collection],
    metadata: Mapping[str, WatchMetadata],
    category: str,
) -> tuple[MediaList, CollectionList]:
    """Return the media items and collections eligible for ``category``."""

    if category == CONTINUE_WATCHING:
        eligible = [
            item for item in media if is_in_progress(watch_progress(metadata, item.id))
        ]
        return eligible, []

    definition = get_category(category)
    if definition is None or definition.media_type is None:
        return [], []

    eligible_media = [item for item in media if item.type == definition.media_type]
    eligible_collections = [
        collection
        for collection in collections
        if collection.collection_type == definition.collection_type
    ]
    return eligible_media, eligible_collections


def restrict_to_collection(
    media: MediaList,
    collections: CollectionList,
    collection_id: str,
) -> tuple[MediaList, CollectionList]:
    if not collection_id:
        return media, collections
    return [item for item in media if item.collection_id == collection_id], []


def filter_by_search(
    media: MediaList,
    collections: CollectionList,
    search_text: str,
    collections_by_id: Mapping[str, Collection],
) -> tuple[MediaList, CollectionList]:
    """Keep entries with any text value containing ``search_text``.

    Media items are also matched against their parent collection's title so
    an episode can be found by the name of its series.
    """

    if not search_text:
        return media, collections

    def _media_values(item: MediaItem) -> list[str]:
        values = item.text_values()
        parent = collections_by_id.get(item.collection_id)
        if parent is not None:
            values.append(parent.collection_title)
        return values

    kept_media = [
        item for item in media if any_value_contains(_media_values(item), search_text)
    ]
    kept_collections = [
        collection
        for collection in collections
        if any_value_contains(collection.text_values(), search_text)
    ]
    return kept_media, kept_collections


def _matches_genres(genres: Iterable[str], selected: frozenset[str]) -> bool:
    return any(genre in selected for genre in genres)


def _matches_era(year: int, selected: frozenset[str]) -> bool:
    era = era_from_year(year)
    return bool(era) and era in selected


def media_matches_facets(
    item: MediaItem,
    view: ViewState,
    collections_by_id: Mapping[str, Collection],
) -> bool:
    if view.selected_genres:
        genres = list(item.genres)
        parent = collections_by_id.get(item.collection_id)
        if parent is not None:
            genres.extend(parent.genres)
        if not _matches_genres(genres, view.selected_genres):
            return False
    if view.selected_eras and not _matches_era(item.year, view.selected_eras):
        return False
    if producer_filter_active(view.selected_producer):
        if item.producer != view.selected_producer:
            return False
    if view.show_top_rated and item.rating < TOP_RATED_THRESHOLD:
        return False
    return True


def collection_matches_facets(
    collection: Collection,
    view: ViewState,
    members_by_collection: Mapping[str, Sequence[MediaItem]],
) -> bool:
    """Return whether ``collection`` passes every active facet.

    Genre, producer and top-rated also pass when any member item matches, so
    a member that survives a facet keeps its collection. Era only looks at
    the collection's own year.
    """

    members = members_by_collection.get(collection.id, ())
    if view.selected_genres:
        genres = [*collection.genres]
        for member in members:
            genres.extend(member.genres)
        if not _matches_genres(genres, view.selected_genres):
            return False
    if view.selected_eras and not _matches_era(collection.year, view.selected_eras):
        return False
    if producer_filter_active(view.selected_producer):
        producer = view.selected_producer
        if collection.producer != producer and not any(
            member.producer == producer for member in members
        ):
            return False
    if view.show_top_rated:
        ratings = [collection.collection_rating, *(m.rating for m in members)]
        if max(ratings) < TOP_RATED_THRESHOLD:
            return False
    return True


def filter_by_facets(
    media: MediaList,
    collections: CollectionList,
    view: ViewState,
    collections_by_id: Mapping[str, Collection],
    members_by_collection: Mapping[str, Sequence[MediaItem]],
) -> tuple[MediaList, CollectionList]:
    kept_media = [
        item for item in media if media_matches_facets(item, view, collections_by_id)
    ]
    kept_collections = [
        collection
        for collection in collections
        if collection_matches_facets(collection, view, members_by_collection)
    ]
    return kept_media, kept_collections


def collapse(
    media: MediaList,
    collections: CollectionList,
    view: ViewState,
) -> list[CatalogEntry]:
    """Merge surviving media and collections into one unsorted list."""

    if view.current_category == CONTINUE_WATCHING or view.selected_collection_id:
        return list(media)
    if not view.group_by_collection and view.current_category == MOVIES:
        return list(media)

    shown = {collection.id for collection in collections}
    entries: list[CatalogEntry] = [
        item
        for item in media
        if not (item.collection_id and item.collection_id in shown)
    ]
    entries.extend(collections)
    return entries


def entry_title(entry: CatalogEntry) -> str:
    if isinstance(entry, Collection):
        return entry.collection_title
    return entry.title


def entry_rating(entry: CatalogEntry) -> float:
    if isinstance(entry, Collection):
        return entry.collection_rating
    return entry.rating


def _episode_key(entry: CatalogEntry) -> tuple[int, int]:
    if isinstance(entry, MediaItem):
        return entry.season, entry.episode
    return 0, 0


def order_members(collection: Collection, members: Sequence[MediaItem]) -> MediaList:
    """Return collection members in viewing order (episodes) or by year."""

    if collection.is_series:
        return sorted(members, key=_episode_key)
    return sorted(members, key=lambda item: item.year)


def entry_year(
    entry: CatalogEntry,
    members_by_collection: Mapping[str, Sequence[MediaItem]],
) -> int:
    """Return the year used when sorting ``entry`` by release date.

    Collections without a year of their own take the year of their first
    member in viewing order.
    """

    if isinstance(entry, MediaItem):
        return entry.year
    if entry.year > 0:
        return entry.year
    members = members_by_collection.get(entry.id)
    if not members:
        return 0
    return order_members(entry, members)[0].year


def sort_entries(
    entries: list[CatalogEntry],
    view: ViewState,
    members_by_collection: Mapping[str, Sequence[MediaItem]],
) -> list[CatalogEntry]:
    descending = not view.sort_order

    if view.selected_collection_id:
        if view.current_category == SERIES:
            return sorted(entries, key=_episode_key)
        if view.current_category == MOVIES:
            return sorted(
                entries,
                key=lambda entry: entry_year(entry, members_by_collection),
                reverse=descending,
            )
        return sorted(entries, key=entry_rating, reverse=descending)

    if view.sort_by == "title":
        return sorted(entries, key=entry_title, reverse=descending)
    if view.sort_by == "year":
        return sorted(
            entries,
            key=lambda entry: entry_year(entry, members_by_collection),
            reverse=descending,
        )
    if view.sort_by == "rating":
        return sorted(entries, key=entry_rating, reverse=descending)
    return list(entries)


def build_entries(
    collections: Sequence[Collection],
    media: Sequence[MediaItem],
    metadata: Mapping[str, WatchMetadata],
    view: ViewState,
) -> list[CatalogEntry]:
    """Run the whole pipeline and return the ordered display entries."""

    collections_by_id = index_collections(collections)
    members_by_collection = group_members(media)

    eligible_media, eligible_collections = classify(
        media, collections, metadata, view.current_category
    )
    eligible_media, eligible_collections = restrict_to_collection(
        eligible_media, eligible_collections, view.selected_collection_id
    )
    eligible_media, eligible_collections = filter_by_search(
        eligible_media, eligible_collections, view.search_text, collections_by_id
    )
    eligible_media, eligible_collections = filter_by_facets(
        eligible_media,
        eligible_collections,
        view,
        collections_by_id,
        members_by_collection,
    )
    entries = collapse(eligible_media, eligible_collections, view)
    return sort_entries(entries, view, members_by_collection)
