"""Pytest configuration and test helpers."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


# Ensure the application package is importable when running tests without an
# editable install. This mirrors the expected runtime layout where
# ``ghostclient`` sits at the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


@pytest.fixture
def raw_collections() -> list[dict[str, object]]:
    """Collections as the stream server returns them."""

    return [
        {
            "ID": "C1",
            "collection_title": "Dark Harbor",
            "collection_type": "serie",
            "genres": '["Drama"]',
            "producer": "North Studio",
            "collection_rating": 8.5,
            "year": 2010,
        },
        {
            "ID": "C2",
            "collection_title": "Space Saga",
            "collection_type": "movies",
            "genres": '["Sci-Fi", "Adventure"]',
            "producer": "Orbit Films",
            "collection_rating": 7.0,
            "year": 0,
        },
    ]


@pytest.fixture
def raw_media() -> list[dict[str, object]]:
    """Media items as the stream server returns them."""

    return [
        {
            "ID": "E1",
            "type": "episode",
            "title": "Pilot",
            "collection_id": "C1",
            "genres": "[]",
            "year": 2010,
            "producer": "North Studio",
            "rating": 8.1,
            "season": 1,
            "episode": 1,
        },
        {
            "ID": "E2",
            "type": "episode",
            "title": "Storm",
            "collection_id": "C1",
            "genres": "",
            "year": 2010,
            "producer": "North Studio",
            "rating": 7.9,
            "season": 1,
            "episode": 2,
        },
        {
            "ID": "M1",
            "type": "movie",
            "title": "Space Saga I",
            "collection_id": "C2",
            "genres": '["Sci-Fi"]',
            "year": 1994,
            "producer": "Orbit Films",
            "rating": 7.5,
        },
        {
            "ID": "M2",
            "type": "movie",
            "title": "Space Saga II",
            "collection_id": "C2",
            "genres": '["Sci-Fi"]',
            "year": 1999,
            "producer": "Nova Pictures",
            "rating": 8.2,
        },
        {
            "ID": "M3",
            "type": "movie",
            "title": "Alone",
            "collection_id": "",
            "genres": '["Drama"]',
            "year": 2003,
            "producer": "Indie House",
            "rating": 6.0,
        },
        {
            "ID": "M4",
            "type": "movie",
            "title": "broken",
            "genres": "not json",
            "year": None,
            "producer": "",
            "rating": 9.0,
        },
    ]


@pytest.fixture
def raw_metadata() -> list[dict[str, object]]:
    return [
        {"ID": "E1", "percentage_watched": 0.4, "language_chosen": "en"},
        {"ID": "E2", "percentage_watched": 0.0},
        {"ID": "M1", "percentage_watched": 1.0},
        {"ID": "M3", "percentageWatched": 0.99, "subtitlesChosen": "fr"},
    ]
