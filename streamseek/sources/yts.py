"""
YTS Search Source
Structured JSON API with per-quality torrents for movies
"""
from typing import List, Optional

from ..models.candidate import Candidate, QualityTier, classify_quality, format_size
from ..models.search_request import MediaKind, SearchRequest
from .base import BaseSource, safe_int


class YTSSource(BaseSource):
    """YTS movie index - trusted, one entry per quality variant"""

    name = "YTS"
    kinds = frozenset({MediaKind.MOVIE})

    def reload_from_settings(self):
        self.api_url = str(self.setting("yts_api_url") or "").strip().rstrip("/")
        self.timeout_seconds = float(self.setting("yts_timeout_seconds") or 10.0)
        self.session.headers.update({
            "Accept": "application/json,text/plain,*/*",
        })

    def call_budget_seconds(self) -> float:
        # Id lookup plus title fallback.
        return 2 * float(self.timeout_seconds)

    def fetch(self, request: SearchRequest) -> List[Candidate]:
        """
        Look the movie up by IMDb id first; YTS indexes ids as search terms.
        Falls back to a title search when the id is missing or unknown there.
        """
        movies = []
        if request.imdb_id:
            movies = self._list_movies(request.imdb_id)
        by_title = False
        if not movies and request.title:
            movies = self._list_movies(request.title)
            by_title = True

        results: List[Candidate] = []
        for movie in movies:
            if not isinstance(movie, dict):
                continue
            if by_title and request.year and not self._year_matches(movie, request.year):
                continue
            results.extend(self._parse_movie(movie))
        return results

    def _list_movies(self, query_term: str) -> list:
        response = self.session.get(
            f"{self.api_url}/list_movies.json",
            params={"query_term": query_term},
            timeout=self.request_timeout(),
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict) or payload.get("status") != "ok":
            return []
        data = payload.get("data") or {}
        movies = data.get("movies") if isinstance(data, dict) else None
        if not isinstance(movies, list):
            return []
        return movies

    @staticmethod
    def _year_matches(movie: dict, year: int) -> bool:
        movie_year = safe_int(movie.get("year"), default=0)
        return movie_year == 0 or movie_year == year

    def _parse_movie(self, movie: dict) -> List[Candidate]:
        out: List[Candidate] = []
        torrents = movie.get("torrents") or []
        if not isinstance(torrents, list):
            return out

        title = str(movie.get("title") or movie.get("title_english") or "").strip()
        year = movie.get("year")
        display_title = f"{title} ({year})" if title and year else title
        imdb_code = str(movie.get("imdb_code") or "").strip()
        binge_group = f"yts-{imdb_code}" if imdb_code else f"yts-{title.lower()}"

        for torrent in torrents:
            if not isinstance(torrent, dict):
                continue
            info_hash = str(torrent.get("hash") or "").strip()
            if not info_hash:
                continue
            quality_field: Optional[str] = torrent.get("quality")
            if quality_field:
                quality = classify_quality(str(quality_field))
            else:
                quality = QualityTier.HD_720P
            size_label = str(torrent.get("size") or "").strip() or format_size(torrent.get("size_bytes"))
            out.append(self.make_candidate(
                title=display_title,
                quality=quality,
                info_hash=info_hash,
                uri=self.magnets.synthesize(info_hash, display_title),
                seeds=safe_int(torrent.get("seeds")),
                leeches=safe_int(torrent.get("peers")),
                size_label=size_label,
                binge_group=binge_group,
                release_type=str(torrent.get("type") or "BluRay").strip(),
            ))
        return out
