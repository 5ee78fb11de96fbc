"""Runtime bootstrap for the StreamSeek web API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.aggregator import TorrentAggregator
from ..core.event_bus import EventBus
from ..core.magnet import MagnetSynthesizer
from ..core.settings_manager import SettingsManager
from ..sources import APIBaySource, EZTVSource, X1337Source, YTSSource


@dataclass
class StreamSeekRuntime:
    """Shared service graph used by web endpoints."""

    settings: SettingsManager
    event_bus: EventBus
    aggregator: TorrentAggregator


def build_runtime(settings: Optional[SettingsManager] = None) -> StreamSeekRuntime:
    """Create and wire core services with the default tier layout."""

    settings = settings or SettingsManager()
    event_bus = EventBus()
    magnets = MagnetSynthesizer()

    aggregator = TorrentAggregator(event_bus, settings=settings)
    # Tier 1 holds one primary index per media kind; sources declare which kinds they serve.
    aggregator.add_tier([YTSSource(settings, magnets), EZTVSource(settings, magnets)])
    aggregator.add_tier([APIBaySource(settings, magnets)])
    aggregator.add_tier([X1337Source(settings, magnets)])

    return StreamSeekRuntime(
        settings=settings,
        event_bus=event_bus,
        aggregator=aggregator,
    )
