"""
Identifier helpers.

Sources disagree on how they want an IMDb id: YTS takes ``tt0903747`` while
EZTV wants the bare digits. Everything here is pure; an empty string means the
value was unusable and the adapter that needed it should be skipped.
"""
from __future__ import annotations

import re
from typing import Optional, Tuple

_IMDB_RE = re.compile(r"^(?:imdb:)?(?:tt)?(\d{1,10})$", re.IGNORECASE)


def normalize_imdb_id(value: Optional[str]) -> str:
    """Return the canonical ``tt``-prefixed id, or ``""`` when malformed."""
    text = str(value or "").strip()
    if not text:
        return ""
    # Stremio series ids carry ":season:episode" after the imdb id.
    if text.lower().startswith("imdb:"):
        text = text[5:]
    text = text.split(":", 1)[0].strip()
    match = _IMDB_RE.match(text)
    if not match:
        return ""
    return f"tt{match.group(1)}"


def strip_imdb_prefix(value: Optional[str]) -> str:
    canonical = normalize_imdb_id(value)
    return canonical[2:] if canonical else ""


def parse_stremio_id(value: Optional[str]) -> Tuple[str, Optional[int], Optional[int]]:
    """Split ``tt0903747:1:2`` into ``("tt0903747", 1, 2)``."""
    text = str(value or "").strip()
    if text.lower().startswith("imdb:"):
        text = text[5:]
    parts = text.split(":")
    imdb_id = normalize_imdb_id(parts[0])
    season = to_int(parts[1]) if len(parts) > 1 else None
    episode = to_int(parts[2]) if len(parts) > 2 else None
    return imdb_id, season, episode


def pad2(number) -> str:
    """Zero-pad a season/episode number to two digits."""
    value = to_int(number)
    if value is None or value < 0:
        return ""
    return f"{value:02d}"


def episode_tag(season, episode) -> str:
    s, e = pad2(season), pad2(episode)
    if not s or not e:
        return ""
    return f"S{s}E{e}"


def to_int(value) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None
