"""Episode ordering questions answered within one collection."""

from __future__ import annotations

from typing import Literal, Sequence

from .models import MediaItem

EpisodeType = Literal["NoEpisode", "FirstEpisode", "MiddleEpisode", "FinalEpisode"]

NO_EPISODE: EpisodeType = "NoEpisode"
FIRST_EPISODE: EpisodeType = "FirstEpisode"
MIDDLE_EPISODE: EpisodeType = "MiddleEpisode"
FINAL_EPISODE: EpisodeType = "FinalEpisode"


def find_media(media: Sequence[MediaItem], media_id: str) -> MediaItem | None:
    for item in media:
        if item.id == media_id:
            return item
    return None


def final_episode(media: Sequence[MediaItem], collection_id: str) -> str:
    """Return the id of the highest-numbered episode, or ``""``."""

    if not collection_id:
        return ""
    best: MediaItem | None = None
    for item in media:
        if item.collection_id != collection_id:
            continue
        if best is None or item.episode > best.episode:
            best = item
    return best.id if best is not None else ""


def next_episode(
    media: Sequence[MediaItem],
    current_id: str,
    offset: int,
    collection_id: str,
) -> str:
    """Return the id of the episode ``offset`` steps away from ``current_id``.

    A negative offset walks backwards. The empty string is returned when the
    current item or the target episode does not exist.
    """

    current = find_media(media, current_id)
    if current is None:
        return ""
    scope = collection_id or current.collection_id
    if not scope:
        return ""
    target = current.episode + offset
    for item in media:
        if item.collection_id == scope and item.episode == target:
            return item.id
    return ""


def episode_type(
    media: Sequence[MediaItem],
    current_id: str,
    collection_id: str,
) -> EpisodeType:
    current = find_media(media, current_id)
    if current is None or not current.is_episode:
        return NO_EPISODE
    if current.episode == 1:
        return FIRST_EPISODE
    scope = collection_id or current.collection_id
    if current.id == final_episode(media, scope):
        return FINAL_EPISODE
    return MIDDLE_EPISODE
