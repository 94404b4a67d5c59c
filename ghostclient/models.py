"""Pydantic models describing the streaming catalog."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Literal, TypeVar, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)

from .categories import MOVIES
from .utils import coerce_float, coerce_int, parse_genres

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

SortKey = Literal["title", "year", "rating"]

MEDIA_TYPE_EPISODE = "episode"
COLLECTION_TYPE_SERIE = "serie"


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class MediaItem(BaseModel):
    """A single playable movie or episode."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(
        validation_alias=AliasChoices("ID", "id"),
        serialization_alias="ID",
    )
    type: str = ""
    title: str = ""
    collection_id: str = Field(
        default="",
        validation_alias=AliasChoices("collection_id", "collectionId"),
    )
    genres: list[str] = Field(default_factory=list)
    year: int = 0
    producer: str = ""
    rating: float = 0.0
    season: int = 0
    episode: int = 0

    @field_validator("id", "type", "title", "collection_id", "producer", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        return _as_text(value)

    @field_validator("genres", mode="before")
    @classmethod
    def _parse_genres(cls, value: object) -> list[str]:
        return parse_genres(value)

    @field_validator("year", "season", "episode", mode="before")
    @classmethod
    def _coerce_int(cls, value: object) -> int:
        return coerce_int(value)

    @field_validator("rating", mode="before")
    @classmethod
    def _coerce_rating(cls, value: object) -> float:
        return coerce_float(value)

    @property
    def is_episode(self) -> bool:
        return self.type == MEDIA_TYPE_EPISODE

    def display_title(self) -> str:
        """Return the title with a season/episode prefix for episodes."""

        if self.is_episode:
            return f"[S{self.season} EP{self.episode}] {self.title}"
        return self.title

    def text_values(self) -> list[str]:
        """Return every string value carried by the item."""

        return [
            self.id,
            self.type,
            self.title,
            self.collection_id,
            self.producer,
            *self.genres,
        ]


class Collection(BaseModel):
    """A series or movie franchise grouping several media items."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(
        validation_alias=AliasChoices("ID", "id"),
        serialization_alias="ID",
    )
    collection_title: str = ""
    collection_type: str = ""
    genres: list[str] = Field(default_factory=list)
    producer: str = ""
    collection_rating: float = 0.0
    year: int = 0

    @field_validator(
        "id", "collection_title", "collection_type", "producer", mode="before"
    )
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        return _as_text(value)

    @field_validator("genres", mode="before")
    @classmethod
    def _parse_genres(cls, value: object) -> list[str]:
        return parse_genres(value)

    @field_validator("year", mode="before")
    @classmethod
    def _coerce_year(cls, value: object) -> int:
        return coerce_int(value)

    @field_validator("collection_rating", mode="before")
    @classmethod
    def _coerce_rating(cls, value: object) -> float:
        return coerce_float(value)

    @property
    def is_series(self) -> bool:
        return self.collection_type == COLLECTION_TYPE_SERIE

    def text_values(self) -> list[str]:
        return [
            self.id,
            self.collection_title,
            self.collection_type,
            self.producer,
            *self.genres,
        ]


CatalogEntry = Union[MediaItem, Collection]


class WatchMetadata(BaseModel):
    """Per-user playback state of a media item."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    media_id: str = Field(
        validation_alias=AliasChoices("ID", "media_id", "mediaID", "mediaId"),
        serialization_alias="mediaID",
    )
    percentage_watched: float = Field(
        default=0.0,
        validation_alias=AliasChoices("percentage_watched", "percentageWatched"),
    )
    language_chosen: str = Field(
        default="",
        validation_alias=AliasChoices("language_chosen", "languageChosen"),
    )
    subtitles_chosen: str = Field(
        default="",
        validation_alias=AliasChoices("subtitles_chosen", "subtitlesChosen"),
    )

    @field_validator("media_id", "language_chosen", "subtitles_chosen", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        return _as_text(value)

    @field_validator("percentage_watched", mode="before")
    @classmethod
    def _coerce_percentage(cls, value: object) -> float:
        return coerce_float(value)


class Profile(BaseModel):
    """A viewer profile attached to the account."""

    model_config = ConfigDict(populate_by_name=True)

    profile_id: str = Field(
        validation_alias=AliasChoices("profileID", "profile_id", "profileId"),
        serialization_alias="profileID",
    )
    picture_id: str = Field(
        default="",
        validation_alias=AliasChoices("pictureID", "picture_id", "pictureId"),
        serialization_alias="pictureID",
    )

    @field_validator("profile_id", "picture_id", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        return _as_text(value)


class CatalogPayload(BaseModel):
    """Collections and media items downloaded for a profile."""

    collections: list[Collection] = Field(default_factory=list)
    media: list[MediaItem] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.collections or self.media)


class ViewState(BaseModel):
    """Immutable snapshot of the user-chosen view parameters."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    current_category: str = Field(default=MOVIES, alias="currentCategory")
    selected_collection_id: str = Field(default="", alias="selectedCollectionId")
    selected_genres: frozenset[str] = Field(
        default_factory=frozenset, alias="selectedGenres"
    )
    selected_eras: frozenset[str] = Field(
        default_factory=frozenset, alias="selectedEras"
    )
    selected_producer: str = Field(default="", alias="selectedProducer")
    show_top_rated: bool = Field(default=False, alias="showTopRated")
    group_by_collection: bool = Field(default=True, alias="groupByCollection")
    sort_by: str = Field(default="title", alias="sortBy")
    sort_order: bool = Field(default=True, alias="sortOrder")
    search_text: str = Field(default="", alias="searchText")

    @field_serializer("selected_genres", "selected_eras")
    def _serialize_selection(self, value: frozenset[str]) -> list[str]:
        return sorted(value)

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


class ViewUpdate(BaseModel):
    """Partial view change submitted by the UI; unset fields are left alone."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    current_category: str | None = Field(default=None, alias="currentCategory")
    selected_collection_id: str | None = Field(
        default=None, alias="selectedCollectionId"
    )
    selected_genres: list[str] | None = Field(default=None, alias="selectedGenres")
    selected_eras: list[str] | None = Field(default=None, alias="selectedEras")
    selected_producer: str | None = Field(default=None, alias="selectedProducer")
    show_top_rated: bool | None = Field(default=None, alias="showTopRated")
    group_by_collection: bool | None = Field(default=None, alias="groupByCollection")
    sort_by: SortKey | None = Field(default=None, alias="sortBy")
    sort_order: bool | None = Field(default=None, alias="sortOrder")
    search_text: str | None = Field(default=None, alias="searchText")

    def changes(self) -> dict[str, Any]:
        """Return the explicitly provided fields keyed by attribute name."""

        return {
            name: getattr(self, name)
            for name in self.model_fields_set
        }


def serialize_entries(entries: Iterable[CatalogEntry]) -> list[dict[str, Any]]:
    """Return wire-shaped dictionaries for a mixed list of entries."""

    return [entry.model_dump(mode="json", by_alias=True) for entry in entries]


def parse_records(
    model: type[ModelT], raw: Iterable[Any], *, label: str
) -> list[ModelT]:
    """Validate a list of records, skipping entries that are not usable."""

    records: list[ModelT] = []
    for entry in raw:
        if isinstance(entry, model):
            records.append(entry)
            continue
        if not isinstance(entry, dict):
            logger.warning("Skipping %s record of type %s", label, type(entry).__name__)
            continue
        try:
            records.append(model.model_validate(entry))
        except ValidationError as exc:
            logger.warning(
                "Skipping invalid %s record %s: %s",
                label,
                entry.get("ID") or entry.get("id") or "<unknown>",
                exc.errors(),
            )
    return records
