"""
APIBay Search Source
PirateBay JSON API used as a broad keyword safety net
"""
from typing import List

from ..models.candidate import Candidate, classify_quality, format_size, normalize_infohash
from ..models.search_request import SearchRequest
from .base import BaseSource, safe_int

NO_RESULTS_NAME = "No results returned"
ZERO_HASH = "0" * 40


class APIBaySource(BaseSource):
    """PirateBay API source - trusted JSON, capped to the top rows"""

    name = "TPB"

    def reload_from_settings(self):
        self.api_url = str(self.setting("apibay_url") or "").strip().rstrip("/")
        self.timeout_seconds = float(self.setting("apibay_timeout_seconds") or 10.0)
        self.max_results = int(self.setting("apibay_max_results") or 10)
        self.session.headers.update({
            "Accept": "application/json,text/plain,*/*",
        })

    def fetch(self, request: SearchRequest) -> List[Candidate]:
        if not request.title:
            return []
        query = request.text_query
        response = self.session.get(
            f"{self.api_url}/q.php",
            params={"q": query},
            timeout=self.request_timeout(),
        )
        response.raise_for_status()
        rows = response.json()
        if not isinstance(rows, list) or not rows:
            return []
        if isinstance(rows[0], dict) and rows[0].get("name") == NO_RESULTS_NAME:
            return []
        return self._parse_api_rows(rows[:max(1, self.max_results)])

    def _parse_api_rows(self, rows: List[dict]) -> List[Candidate]:
        results: List[Candidate] = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            name = str(row.get("name") or "").strip()
            info_hash = normalize_infohash(row.get("info_hash"))
            if not name or not info_hash or info_hash == ZERO_HASH:
                continue
            results.append(self.make_candidate(
                title=name,
                quality=classify_quality(name),
                info_hash=info_hash,
                uri=self.magnets.synthesize(info_hash, name),
                seeds=safe_int(row.get("seeders")),
                leeches=safe_int(row.get("leechers")),
                size_label=format_size(row.get("size")),
                binge_group=f"tpb-{info_hash}",
            ))
        return results
