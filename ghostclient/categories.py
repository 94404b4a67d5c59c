"""Browsing categories shown in the client sidebar."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


CategoryKey = Literal["continueWatching", "movies", "series"]

CONTINUE_WATCHING = "continueWatching"
MOVIES = "movies"
SERIES = "series"


@dataclass(frozen=True)
class SidebarCategory:
    """Describes a top-level browsing mode of the catalog."""

    key: str
    title: str
    media_type: str | None
    collection_type: str | None

    def to_payload(self) -> dict[str, str]:
        return {"key": self.key, "value": self.title}


SIDEBAR_CATEGORIES: tuple[SidebarCategory, ...] = (
    SidebarCategory(
        key=CONTINUE_WATCHING,
        title="Continue Watching",
        media_type=None,
        collection_type=None,
    ),
    SidebarCategory(
        key=MOVIES,
        title="Movies",
        media_type="movie",
        collection_type="movies",
    ),
    SidebarCategory(
        key=SERIES,
        title="Series",
        media_type="episode",
        collection_type="serie",
    ),
)


CATEGORY_KEYS: tuple[str, ...] = tuple(category.key for category in SIDEBAR_CATEGORIES)


def get_category(key: str) -> SidebarCategory | None:
    """Return the category definition for ``key`` or ``None`` if unknown."""

    for category in SIDEBAR_CATEGORIES:
        if category.key == key:
            return category
    return None
