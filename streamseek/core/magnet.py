"""
Magnet Synthesizer
Builds fully specified magnet URIs from a bare infohash
"""
from __future__ import annotations

from typing import Iterable, Optional, Tuple
from urllib.parse import quote

# Order matters: the synthesized URI must be reproducible.
DEFAULT_TRACKERS: Tuple[str, ...] = (
    "udp://tracker.opentrackr.org:1337/announce",
    "udp://open.tracker.cl:1337/announce",
    "udp://9.rarbg.com:2810/announce",
    "udp://tracker.openbittorrent.com:80/announce",
    "udp://opentracker.i2p.rocks:6969/announce",
    "udp://tracker.internetwarriors.net:1337/announce",
    "udp://tracker.leechers-paradise.org:6969/announce",
    "udp://coppersurfer.tk:6969/announce",
    "udp://tracker.zer0day.to:1337/announce",
    "udp://tracker.tiny-vps.com:6969/announce",
    "udp://open.stealth.si:80/announce",
    "udp://tracker.torrent.eu.org:451/announce",
    "udp://exodus.desync.com:6969/announce",
    "udp://yourbittorrent.com:80/announce",
    "udp://ipv4.tracker.harry.lu:80/announce",
    "udp://tracker.moeking.me:6969/announce",
    "https://tracker.tamersunion.org:443/announce",
    "https://tracker.lilithraws.org:443/announce",
    "http://tracker.bt4g.com:2095/announce",
    "udp://tracker.cyberia.is:6969/announce",
)

PLACEHOLDER_TITLE = "Unknown"

# Same set encodeURIComponent leaves untouched on top of quote()'s defaults.
_COMPONENT_SAFE = "!~*'()"


def encode_component(value: str) -> str:
    return quote(value, safe=_COMPONENT_SAFE)


class MagnetSynthesizer:
    """Attach a curated tracker list to sources that only hand out a hash."""

    def __init__(self, trackers: Optional[Iterable[str]] = None):
        self.trackers: Tuple[str, ...] = tuple(trackers) if trackers is not None else DEFAULT_TRACKERS
        self._tracker_params = "".join(f"&tr={encode_component(t)}" for t in self.trackers)

    def synthesize(self, info_hash: str, title: Optional[str] = None) -> str:
        name = encode_component(title or PLACEHOLDER_TITLE)
        return f"magnet:?xt=urn:btih:{info_hash}&dn={name}{self._tracker_params}"
