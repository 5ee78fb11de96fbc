"""
1337x Search Source
Category search scraping with a bounded detail-page fan-out
"""
from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Optional
from urllib.parse import quote
import threading

from bs4 import BeautifulSoup

from ..models.candidate import Candidate, classify_quality, extract_infohash
from ..models.search_request import SearchRequest
from .base import BaseSource, safe_int


class X1337Source(BaseSource):
    """1337x torrent search source - low trust, two requests per result"""

    name = "1337x"

    def __init__(self, settings=None, magnets=None):
        self._mirror_lock = threading.Lock()
        super().__init__(settings, magnets)

    def reload_from_settings(self):
        mirrors = self.setting("x1337_mirror_order") or []
        deduped = []
        for m in mirrors:
            m = str(m or "").strip().rstrip("/")
            if m and m not in deduped:
                deduped.append(m)
        with self._mirror_lock:
            self.mirrors = deduped
            self.base_url = getattr(self, "base_url", "") or (deduped[0] if deduped else "")
            if self.base_url not in self.mirrors and self.mirrors:
                self.base_url = self.mirrors[0]
        self.timeout_seconds = float(self.setting("x1337_timeout_seconds") or 10.0)
        self._detail_timeout_seconds = float(self.setting("x1337_detail_timeout_seconds") or 8.0)
        self._detail_budget_seconds = float(self.setting("x1337_detail_budget_seconds") or 15.0)
        self._max_detail_fetches = int(self.setting("x1337_max_detail_fetches") or 10)
        self._detail_concurrency = int(self.setting("x1337_detail_concurrency") or 4)
        self.session.headers.update({
            'Accept': 'text/html,application/xhtml+xml,application/xml',
            'Accept-Language': 'en-US,en;q=0.9',
        })

    def call_budget_seconds(self) -> float:
        return float(self.timeout_seconds) + max(0.0, self._detail_budget_seconds)

    def fetch(self, request: SearchRequest) -> List[Candidate]:
        """
        Search 1337x for torrents

        1. Category search page (Movies or TV) on the first healthy mirror
        2. Keep the first rows of the listing
        3. Visit each row's detail page concurrently to pull its magnet link
        """
        if not request.title:
            return []
        query = request.text_query
        category = "TV" if request.is_series else "Movies"
        with self._mirror_lock:
            mirror_order = [self.base_url] + [m for m in self.mirrors if m != self.base_url]
        errors = []

        for mirror in mirror_order:
            if self.remaining_seconds() <= 0:
                errors.append("call budget exhausted before all mirrors were tried")
                break
            try:
                rows = self._search_on_mirror(mirror, query, category)
            except Exception as e:
                errors.append(str(e))
                print(f"1337x search error ({mirror}): {e}")
                continue
            with self._mirror_lock:
                self.base_url = mirror
            return self._resolve_rows(rows, query)

        if errors:
            if all("Cloudflare challenge" in e for e in errors):
                self.warn("Blocked by Cloudflare challenge on all 1337x mirrors.")
            else:
                self.warn(f"All 1337x mirrors failed: {errors[-1]}")
        return []

    def _search_on_mirror(self, mirror: str, query: str, category: str) -> List[dict]:
        """Fetch one listing page and parse its rows."""
        search_url = f"{mirror}/category-search/{quote(query, safe='')}/{category}/1/"
        response = self.session.get(search_url, timeout=self.request_timeout())

        # Most 1337x mirrors are fronted by Cloudflare and can return challenge pages.
        if response.status_code == 403 and "Just a moment" in response.text:
            raise Exception("Cloudflare challenge (403)")

        response.raise_for_status()
        soup = BeautifulSoup(response.content, 'html.parser')
        rows = []
        for row in soup.select('tbody tr')[:max(1, self._max_detail_fetches)]:
            parsed = self._parse_listing_row(row, mirror)
            if parsed:
                rows.append(parsed)
        return rows

    def _parse_listing_row(self, row, mirror_base: str) -> Optional[dict]:
        """Parse metadata from one search row and return a detail-page candidate."""
        name_elem = row.select_one('td.name a:nth-of-type(2)')
        if not name_elem:
            return None

        title = name_elem.get_text(strip=True)
        detail_path = name_elem.get('href', '')
        if not detail_path:
            return None

        if detail_path.startswith("http://") or detail_path.startswith("https://"):
            detail_url = detail_path
        else:
            detail_url = mirror_base.rstrip("/") + detail_path

        seeds_elem = row.select_one('td.seeds')
        leeches_elem = row.select_one('td.leeches')
        size_elem = row.select_one('td.size')

        # The size cell also nests the uploader's seed count in a <span>.
        size_label = ""
        if size_elem:
            size_label = next(iter(size_elem.stripped_strings), "")

        return {
            "title": title,
            "detail_url": detail_url,
            "size_label": size_label,
            "seeds": safe_int(seeds_elem.get_text(strip=True)) if seeds_elem else 0,
            "leeches": safe_int(leeches_elem.get_text(strip=True)) if leeches_elem else 0,
        }

    def _resolve_rows(self, rows: List[dict], query: str) -> List[Candidate]:
        """Fan detail fetches out; each one fills only its own slot."""
        if not rows:
            return []
        budget = min(self._detail_budget_seconds, self.remaining_seconds())
        if budget <= 0:
            self.warn("1337x call budget exhausted before detail pages were fetched.")
            return []
        detail_timeout = min(self._detail_timeout_seconds, budget)
        slots: List[Optional[Candidate]] = [None] * len(rows)
        executor = ThreadPoolExecutor(max_workers=max(1, min(self._detail_concurrency, len(rows))))
        try:
            futures = {
                executor.submit(self._build_result_from_row, row, query, detail_timeout): index
                for index, row in enumerate(rows)
            }
            done, not_done = wait(futures, timeout=budget)
            for future in done:
                try:
                    slots[futures[future]] = future.result()
                except Exception:
                    continue
            if not_done:
                self.warn("1337x detail-page lookup timed out; partial results shown.")
                for future in not_done:
                    future.cancel()
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return [c for c in slots if c is not None]

    def _build_result_from_row(self, row: dict, query: str, timeout: float) -> Optional[Candidate]:
        magnet = self._get_magnet_link(row["detail_url"], timeout)
        if not magnet:
            print(f"1337x failed to get details for: {row['title']}")
            return None

        title = row["title"]
        return self.make_candidate(
            title=title,
            quality=classify_quality(title),
            info_hash=extract_infohash(magnet),
            uri=magnet,
            seeds=row["seeds"],
            leeches=row["leeches"],
            size_label=row["size_label"],
            binge_group=f"1337x-{query}",
        )

    def _get_magnet_link(self, detail_url: str, timeout: float) -> str:
        """Fetch a detail page and return its magnet link, or "" on any failure."""
        try:
            response = self.session.get(detail_url, timeout=timeout)
            response.raise_for_status()
        except Exception:
            return ""

        soup = BeautifulSoup(response.content, 'html.parser')
        magnet_elem = soup.select_one('a[href^="magnet:"]')
        if magnet_elem:
            return magnet_elem['href']
        return ""
