"""
Torrent Aggregator
Runs sources tier by tier, then merges, deduplicates and ranks their candidates
"""
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence
import threading
import time

from ..models.candidate import Candidate
from ..models.search_request import SearchRequest
from ..sources.base import BaseSource
from .event_bus import EventBus, Events

# A tier is not started with less time than this left on the resolve deadline.
MIN_TIER_SECONDS = 0.05


class TierDecision(Enum):
    STOP = "stop"
    CONTINUE = "continue"


@dataclass
class SourceOutcome:
    """One adapter call, as reported to observers."""
    source: str
    tier: int
    count: int = 0
    elapsed_ms: float = 0.0
    error: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return not self.error and not self.timed_out


@dataclass
class SourceHealth:
    attempts: int = 0
    successes: int = 0
    failures: int = 0
    consecutive_failures: int = 0
    last_error: str = ""
    last_latency_ms: float = 0.0
    last_attempt_at: float = 0.0
    last_success_at: float = 0.0


class TorrentAggregator:
    """
    Tiered multi-source torrent resolver.

    Tiers are ordered by trust and latency cost. After each tier the unique
    candidate count is checked against the gate; once it is reached no later
    tier is started. Tiers run one after another, each source call bounded by
    its own budget and by the overall resolve deadline.
    """

    def __init__(
        self,
        event_bus: Optional[EventBus] = None,
        settings=None,
        tiers: Optional[Sequence[Sequence[BaseSource]]] = None,
    ):
        self.event_bus = event_bus or EventBus()
        self.settings = settings
        self._tiers: List[List[BaseSource]] = []
        self._enabled: Dict[str, bool] = {}
        self._health: Dict[str, SourceHealth] = {}
        self._lock = threading.RLock()
        self._gate_min_results = 3
        self._resolve_timeout_seconds = 45.0
        self.reload_from_settings()
        for tier in tiers or []:
            self.add_tier(tier)

    def reload_from_settings(self):
        if self.settings is None:
            return
        self._gate_min_results = int(self.settings.get("tier_gate_min_results", 3) or 3)
        self._resolve_timeout_seconds = float(self.settings.get("resolve_timeout_seconds", 45.0) or 45.0)
        with self._lock:
            for tier in self._tiers:
                for source in tier:
                    source.reload_from_settings()
            enabled = self.settings.get("enabled_sources", {}) or {}
            if isinstance(enabled, dict):
                for name, flag in enabled.items():
                    if name in self._enabled:
                        self._enabled[name] = bool(flag)

    def add_tier(self, sources: Sequence[BaseSource]):
        """Append a tier; sources inside it run in the given order."""
        tier = []
        for source in sources:
            if not isinstance(source, BaseSource):
                raise TypeError(f"Invalid source type for add_tier(): {type(source)}. Expected BaseSource.")
            if not getattr(source, "name", ""):
                raise ValueError("Source must define non-empty 'name'.")
            tier.append(source)
        with self._lock:
            self._tiers.append(tier)
            for source in tier:
                self._enabled.setdefault(source.name, True)
                self._health.setdefault(source.name, SourceHealth())
        if self.settings is not None:
            self.reload_from_settings()

    def enable_source(self, source_name: str, enabled: bool = True):
        """Enable or disable a source"""
        with self._lock:
            if source_name in self._enabled:
                self._enabled[source_name] = enabled

    def is_source_enabled(self, source_name: str) -> bool:
        with self._lock:
            return bool(self._enabled.get(source_name, False))

    def get_source_names(self) -> List[str]:
        with self._lock:
            return [source.name for tier in self._tiers for source in tier]

    def resolve_torrents(
        self,
        identifier: Optional[str],
        title: Optional[str],
        kind,
        year=None,
        season=None,
        episode=None,
    ) -> List[Candidate]:
        """Resolve a movie or episode into a ranked candidate list."""
        request = SearchRequest.create(identifier, title, kind, year=year, season=season, episode=episode)
        if request is None:
            return []
        return self.search(request)

    def resolve_streams(self, *args, **kwargs) -> List[Dict]:
        return [c.to_stream() for c in self.resolve_torrents(*args, **kwargs)]

    def search(self, request: SearchRequest) -> List[Candidate]:
        self.event_bus.emit(Events.RESOLVE_STARTED, {
            "kind": request.kind.value,
            "title": request.title,
            "imdb_id": request.imdb_id,
        })

        deadline = time.monotonic() + max(1.0, self._resolve_timeout_seconds)
        collected: List[Candidate] = []
        unique: List[Candidate] = []
        tiers_invoked = 0

        with self._lock:
            tiers = [list(t) for t in self._tiers]

        for index, tier in enumerate(tiers, start=1):
            sources = [s for s in tier if s.supports(request.kind) and self.is_source_enabled(s.name)]
            if not sources:
                continue
            if deadline - time.monotonic() < MIN_TIER_SECONDS:
                print(f"Resolve deadline reached before tier {index}; remaining tiers skipped.")
                break

            tiers_invoked += 1
            self.event_bus.emit(Events.TIER_STARTED, {
                "tier": index,
                "sources": [s.name for s in sources],
            })
            # One worker per source: a call abandoned here keeps running on its
            # own thread and never delays later calls or other requests.
            executor = ThreadPoolExecutor(max_workers=len(sources))
            try:
                for source in sources:
                    collected.extend(self._call_source(executor, source, request, index, deadline))
            finally:
                executor.shutdown(wait=False)

            unique = self.deduplicate(collected)
            decision = self._tier_decision(len(unique))
            self.event_bus.emit(Events.TIER_COMPLETED, {
                "tier": index,
                "unique_count": len(unique),
                "decision": decision.value,
            })
            if decision == TierDecision.STOP:
                break

        ranked = self.rank(unique)
        self.event_bus.emit(Events.RESOLVE_COMPLETED, {
            "count": len(ranked),
            "tiers_invoked": tiers_invoked,
            "source_health": self.get_source_health_snapshot(),
        })
        return ranked

    def _tier_decision(self, unique_count: int) -> TierDecision:
        if unique_count >= max(1, self._gate_min_results):
            return TierDecision.STOP
        return TierDecision.CONTINUE

    def _call_source(
        self,
        executor: ThreadPoolExecutor,
        source: BaseSource,
        request: SearchRequest,
        tier: int,
        deadline: float,
    ) -> List[Candidate]:
        """
        Run one adapter call under its budget.

        A call that outlives the budget is abandoned; whatever it returns later
        is never read. The adapter gets the same deadline and stops issuing
        requests once it passes.
        """
        remaining = deadline - time.monotonic()
        timeout = max(0.0, min(source.call_budget_seconds(), remaining))
        outcome = SourceOutcome(source=source.name, tier=tier)
        start = time.perf_counter()
        results: List[Candidate] = []
        future = executor.submit(source.search_with_error, request, time.monotonic() + timeout)
        try:
            found, outcome.error = future.result(timeout=timeout)
            results = list(found)
        except FutureTimeoutError:
            future.cancel()
            outcome.timed_out = True
            outcome.error = f"{source.name} timed out after {timeout:.1f}s; results from this source were skipped."
        except Exception as e:
            outcome.error = str(e)
            print(f"Search error in {source.name}: {e}")
        outcome.elapsed_ms = (time.perf_counter() - start) * 1000.0
        outcome.count = len(results)

        self._record_source_outcome(outcome)
        self.event_bus.emit(Events.SOURCE_COMPLETED, asdict(outcome))
        return results

    def _record_source_outcome(self, outcome: SourceOutcome):
        with self._lock:
            h = self._health.setdefault(outcome.source, SourceHealth())
            h.attempts += 1
            h.last_attempt_at = time.time()
            h.last_latency_ms = float(outcome.elapsed_ms or 0.0)
            # Partial results with a warning still count as a success.
            if outcome.count or outcome.ok:
                h.successes += 1
                h.consecutive_failures = 0
                h.last_error = outcome.error
                h.last_success_at = h.last_attempt_at
            else:
                h.failures += 1
                h.consecutive_failures += 1
                h.last_error = outcome.error

    def get_source_health_snapshot(self) -> Dict[str, Dict]:
        with self._lock:
            out = {}
            for name, h in self._health.items():
                out[name] = {
                    "enabled": bool(self._enabled.get(name, False)),
                    "attempts": h.attempts,
                    "successes": h.successes,
                    "failures": h.failures,
                    "consecutive_failures": h.consecutive_failures,
                    "last_error": h.last_error,
                    "last_latency_ms": round(h.last_latency_ms, 2),
                    "last_attempt_at": h.last_attempt_at,
                    "last_success_at": h.last_success_at,
                }
            return out

    @staticmethod
    def deduplicate(candidates: Sequence[Candidate]) -> List[Candidate]:
        """
        Keep the first candidate seen for each infohash.

        Earlier tiers are more trusted, so their copy wins even when a later
        duplicate reports more seeds. Hashless candidates cannot be matched
        and are always kept; invalid ones are dropped.
        """
        seen = set()
        unique: List[Candidate] = []
        for candidate in candidates:
            if not candidate.is_valid():
                continue
            key = (candidate.info_hash or "").lower()
            if key:
                if key in seen:
                    continue
                seen.add(key)
            unique.append(candidate)
        return unique

    @staticmethod
    def rank(candidates: Sequence[Candidate]) -> List[Candidate]:
        """Quality tier first, then seeds; stable, so ties keep arrival order."""
        return sorted(candidates, key=lambda c: (-int(c.quality), -c.seeds))
