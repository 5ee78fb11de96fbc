"""
Search Request Model
Immutable description of one movie or episode lookup
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.identifiers import episode_tag, normalize_imdb_id, to_int


class MediaKind(str, Enum):
    MOVIE = "movie"
    SERIES = "series"

    @classmethod
    def parse(cls, value) -> Optional["MediaKind"]:
        if isinstance(value, MediaKind):
            return value
        text = str(value or "").strip().lower()
        if text == "movie":
            return cls.MOVIE
        if text in ("series", "tv"):
            return cls.SERIES
        return None


@dataclass(frozen=True)
class SearchRequest:
    kind: MediaKind
    title: str
    imdb_id: str = ""
    year: Optional[int] = None
    season: Optional[int] = None
    episode: Optional[int] = None

    @classmethod
    def create(
        cls,
        identifier: Optional[str],
        title: Optional[str],
        kind,
        year=None,
        season=None,
        episode=None,
    ) -> Optional["SearchRequest"]:
        """
        Validate caller input and build a request.

        Returns None when the request cannot be served: unknown kind, a movie
        without a title, or a series lookup missing season or episode.
        """
        media_kind = MediaKind.parse(kind)
        if media_kind is None:
            return None

        clean_title = " ".join(str(title or "").split())
        imdb_id = normalize_imdb_id(identifier)

        if media_kind == MediaKind.MOVIE:
            if not clean_title:
                return None
            year_value = to_int(year)
            if year_value is not None and year_value <= 0:
                year_value = None
            return cls(kind=media_kind, title=clean_title, imdb_id=imdb_id, year=year_value)

        season_value = to_int(season)
        episode_value = to_int(episode)
        if season_value is None or episode_value is None:
            return None
        # Season 0 holds specials; episodes start at 1.
        if season_value < 0 or episode_value < 1:
            return None
        return cls(
            kind=media_kind,
            title=clean_title,
            imdb_id=imdb_id,
            year=to_int(year),
            season=season_value,
            episode=episode_value,
        )

    @property
    def is_series(self) -> bool:
        return self.kind == MediaKind.SERIES

    @property
    def episode_tag(self) -> str:
        if not self.is_series:
            return ""
        return episode_tag(self.season, self.episode)

    @property
    def text_query(self) -> str:
        """Free-text query used by keyword-search sources."""
        if self.is_series:
            return " ".join(p for p in (self.title, self.episode_tag) if p)
        if self.year:
            return f"{self.title} {self.year}"
        return self.title
