"""Utility helpers for the GhostClient catalog engine."""

from __future__ import annotations

import json
from typing import Any, Iterable


def parse_genres(value: Any) -> list[str]:
    """Return the genre names held in a JSON-array string or a list.

    Malformed JSON, non-array payloads and non-string members are ignored so a
    partially broken record simply carries no genres.
    """

    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        try:
            value = json.loads(text)
        except json.JSONDecodeError:
            return []
    if not isinstance(value, (list, tuple)):
        return []

    genres: list[str] = []
    for entry in value:
        if isinstance(entry, str) and entry not in genres:
            genres.append(entry)
    return genres


def era_from_year(year: int) -> str:
    """Return the decade label for a release year, e.g. ``"1990's"``."""

    if year <= 0:
        return ""
    decade = (year // 10) * 10
    return f"{decade}'s"


def any_value_contains(values: Iterable[str], needle: str) -> bool:
    """Return whether any string contains ``needle``, ignoring case."""

    folded = needle.casefold()
    return any(folded in value.casefold() for value in values)


def coerce_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return 0


def coerce_float(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return 0.0
