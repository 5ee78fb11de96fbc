"""
Source SDK
Base interface for StreamSeek torrent sources.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, List, Optional, Tuple
import threading
import time

import requests

from ..core.magnet import MagnetSynthesizer
from ..core.settings_manager import SettingsManager
from ..models.candidate import Candidate, QualityTier, build_description
from ..models.search_request import MediaKind, SearchRequest


class BaseSource(ABC):
    """
    Stable source contract.

    Subclasses implement ``fetch`` and may raise freely from it;
    ``search_with_error`` is the total wrapper the aggregator calls, folding
    every failure into an empty list plus an error string for that call.
    ``last_error`` only mirrors the most recent call for health payloads.
    """
    api_version = 1
    name = "UnnamedSource"
    label = ""
    kinds: FrozenSet[MediaKind] = frozenset({MediaKind.MOVIE, MediaKind.SERIES})
    last_error = ""
    timeout_seconds = 10.0

    # Per-thread call state; each call runs start to finish on one thread.
    _call_state = threading.local()

    USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

    def __init__(self, settings=None, magnets: Optional[MagnetSynthesizer] = None):
        self.settings = settings
        self.magnets = magnets or MagnetSynthesizer()
        self.last_error = ""
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": self.USER_AGENT,
        })
        self.reload_from_settings()

    @abstractmethod
    def fetch(self, request: SearchRequest) -> List[Candidate]:
        """Query the index and map its rows to candidates."""
        raise NotImplementedError

    def search(self, request: SearchRequest) -> List[Candidate]:
        """Return candidates for a request; never raises."""
        return self.search_with_error(request)[0]

    def search_with_error(
        self,
        request: SearchRequest,
        deadline: Optional[float] = None,
    ) -> Tuple[List[Candidate], str]:
        """
        Run one call and return ``(candidates, error)``.

        The error belongs to this call only, so concurrent callers sharing the
        source never see each other's failures. ``deadline`` is a
        ``time.monotonic()`` value; adapters stop issuing requests past it.
        """
        state = self._call_state
        state.warning = ""
        state.deadline = deadline if deadline is not None else time.monotonic() + self.call_budget_seconds()
        if not self.supports(request.kind):
            return [], ""
        try:
            results = self.fetch(request) or []
        except Exception as e:
            error = f"{self.name} search failed: {e}"
            print(f"{self.name} search error: {e}")
            self.last_error = error
            return [], error
        error = state.warning
        self.last_error = error
        return [c for c in results if c.is_valid()], error

    def warn(self, message: str) -> None:
        """Attach a non-fatal error to the current call."""
        self._call_state.warning = message

    def remaining_seconds(self) -> float:
        deadline = getattr(self._call_state, "deadline", None)
        if deadline is None:
            return float(self.call_budget_seconds())
        return max(0.0, deadline - time.monotonic())

    def request_timeout(self, timeout: Optional[float] = None) -> float:
        """Per-request timeout clipped to what is left of the call budget."""
        limit = float(self.timeout_seconds if timeout is None else timeout)
        remaining = self.remaining_seconds()
        if remaining <= 0:
            raise TimeoutError(f"{self.name} call budget exhausted")
        return min(limit, remaining)

    def supports(self, kind: MediaKind) -> bool:
        return kind in self.kinds

    def call_budget_seconds(self) -> float:
        """Wall-clock limit for one ``search`` call, enforced by the aggregator."""
        return float(self.timeout_seconds)

    def reload_from_settings(self) -> None:
        """Optional hook called when source settings are reloaded."""
        return None

    def setting(self, key: str, default: Any = None) -> Any:
        if default is None:
            default = SettingsManager.DEFAULT_SETTINGS.get(key)
        if self.settings is None:
            return default
        value = self.settings.get(key, default)
        return default if value is None else value

    def brand(self) -> str:
        return str(self.setting("display_brand") or "StreamSeek")

    def make_candidate(
        self,
        title: str,
        quality: QualityTier,
        info_hash: str,
        uri: str,
        seeds: int,
        leeches: int,
        size_label: str,
        binge_group: str,
        release_type: str = "",
    ) -> Candidate:
        label = self.label or self.name
        return Candidate(
            display_name=f"{self.brand()} | {label}",
            title=title,
            quality=quality,
            uri=uri,
            source=label,
            info_hash=info_hash,
            seeds=seeds,
            leeches=leeches,
            size_label=size_label,
            description=build_description(label, quality, size_label, seeds, release_type),
            binge_group=binge_group,
        )

    def healthcheck(self) -> Dict[str, Any]:
        """Optional lightweight health payload for dashboards."""
        return {
            "name": self.name,
            "ok": not bool(self.last_error),
            "error": self.last_error,
            "api_version": self.api_version,
        }


def safe_int(value, default: int = 0) -> int:
    try:
        return max(0, int(str(value).strip().replace(",", "")))
    except (TypeError, ValueError):
        return default
