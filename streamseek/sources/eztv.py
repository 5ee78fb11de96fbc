"""
EZTV Search Source
Per-show torrent index filtered down to one episode
"""
import re
from typing import List

from ..core.identifiers import pad2, strip_imdb_prefix
from ..models.candidate import Candidate, classify_quality, extract_infohash, format_size
from ..models.search_request import MediaKind, SearchRequest
from .base import BaseSource, safe_int


class EZTVSource(BaseSource):
    """EZTV episode index - needs an IMDb id, matches SxxEyy client-side"""

    name = "EZTV"
    kinds = frozenset({MediaKind.SERIES})

    def reload_from_settings(self):
        self.api_url = str(self.setting("eztv_api_url") or "").strip().rstrip("/")
        self.timeout_seconds = float(self.setting("eztv_timeout_seconds") or 10.0)
        self.limit = int(self.setting("eztv_limit") or 100)
        self.session.headers.update({
            "Accept": "application/json,text/plain,*/*",
        })

    @staticmethod
    def episode_pattern(season: int, episode: int) -> "re.Pattern":
        # S01E01 must not match S01E010.
        return re.compile(rf"S{pad2(season)}E{pad2(episode)}(?!\d)", re.IGNORECASE)

    def fetch(self, request: SearchRequest) -> List[Candidate]:
        numeric_id = strip_imdb_prefix(request.imdb_id)
        if not numeric_id:
            return []

        response = self.session.get(
            f"{self.api_url}/get-torrents",
            params={"imdb_id": numeric_id, "limit": max(1, self.limit)},
            timeout=self.request_timeout(),
        )
        response.raise_for_status()
        payload = response.json()
        torrents = payload.get("torrents") if isinstance(payload, dict) else None
        if not isinstance(torrents, list) or not torrents:
            return []

        pattern = self.episode_pattern(request.season, request.episode)
        binge_group = f"eztv-{request.imdb_id}-{request.season}"
        results: List[Candidate] = []
        for torrent in torrents:
            if not isinstance(torrent, dict):
                continue
            title = str(torrent.get("title") or "").strip()
            filename = str(torrent.get("filename") or "").strip()
            if not (pattern.search(title) or pattern.search(filename)):
                continue
            candidate = self._parse_torrent(torrent, title or filename, f"{title} {filename}", binge_group)
            if candidate is not None:
                results.append(candidate)
        return results

    def _parse_torrent(self, torrent: dict, title: str, quality_text: str, binge_group: str):
        magnet = str(torrent.get("magnet_url") or "").strip()
        info_hash = str(torrent.get("hash") or "").strip() or extract_infohash(magnet)
        if not magnet and not info_hash:
            return None
        uri = magnet or self.magnets.synthesize(info_hash, title)
        seeds = safe_int(torrent.get("seeds"))
        return self.make_candidate(
            title=title,
            quality=classify_quality(quality_text),
            info_hash=info_hash,
            uri=uri,
            seeds=seeds,
            leeches=safe_int(torrent.get("peers")),
            size_label=format_size(torrent.get("size_bytes")),
            binge_group=binge_group,
        )
