"""Utility helpers for the CineScope service."""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/"
POSTER_SIZES = {"small": "w185", "medium": "w342", "large": "w500", "original": "original"}
BACKDROP_SIZES = {"small": "w300", "medium": "w780", "large": "w1280", "original": "original"}


def build_image_url(path: str | None, size: str) -> str:
    """Return the absolute TMDB image URL for ``path`` or an empty string."""

    if not path:
        return ""
    if path.startswith("http"):
        return path
    return f"{TMDB_IMAGE_BASE_URL}{size}{path}"


def format_runtime(minutes: int | None) -> str:
    """Render a runtime such as ``2h 16min``."""

    if not minutes:
        return "N/A"
    hours, mins = divmod(minutes, 60)
    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if mins > 0:
        parts.append(f"{mins}min")
    return " ".join(parts)


def format_vote_average(vote: float | None) -> str:
    if vote is None:
        return "N/A"
    return f"{vote:.1f}"


def load_json_value(raw: str | None, *, key: str, default: Any) -> Any:
    """Parse a stored JSON string, falling back to ``default`` when unreadable."""

    if raw is None:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored value for %s is not valid JSON; ignoring it", key)
        return default
