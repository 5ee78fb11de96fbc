"""
Candidate Model
Represents one discovered torrent stream before ranking
"""
from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import Dict, Optional
import re


class QualityTier(IntEnum):
    """Ranked resolution tiers (higher value = better quality)."""

    UNKNOWN = 0
    SD_480P = 1
    HD_720P = 2
    FHD_1080P = 3
    UHD_2160P = 4

    @property
    def label(self) -> str:
        return _QUALITY_LABELS[self]


_QUALITY_LABELS = MappingProxyType({
    QualityTier.UNKNOWN: "unknown",
    QualityTier.SD_480P: "480p",
    QualityTier.HD_720P: "720p",
    QualityTier.FHD_1080P: "1080p",
    QualityTier.UHD_2160P: "2160p",
})

QUALITY_EMOJI = MappingProxyType({
    QualityTier.UHD_2160P: "🌟",
    QualityTier.FHD_1080P: "🎬",
    QualityTier.HD_720P: "📺",
    QualityTier.SD_480P: "📱",
    QualityTier.UNKNOWN: "🎞️",
})

# Checked in order; first match wins.
_QUALITY_PATTERNS = (
    (QualityTier.UHD_2160P, re.compile(r"2160p|4k|uhd", re.IGNORECASE)),
    (QualityTier.FHD_1080P, re.compile(r"1080p", re.IGNORECASE)),
    (QualityTier.HD_720P, re.compile(r"720p", re.IGNORECASE)),
    (QualityTier.SD_480P, re.compile(r"480p", re.IGNORECASE)),
)

_INFOHASH_RE = re.compile(r"^[a-fA-F0-9]{40}$")


def classify_quality(text: Optional[str], default: QualityTier = QualityTier.UNKNOWN) -> QualityTier:
    """
    Infer the resolution tier from a release name or quality field.

    Every adapter goes through this function so tier thresholds stay identical
    across sources. Returns ``default`` when no marker is present.
    """
    if not text:
        return default
    for tier, pattern in _QUALITY_PATTERNS:
        if pattern.search(text):
            return tier
    return default


def extract_infohash(magnet: str) -> str:
    """Extract a lowercase infohash from a magnet link"""
    match = re.search(r"btih:([a-fA-F0-9]{40})", magnet or "")
    if match:
        return match.group(1).lower()
    return ""


def normalize_infohash(value: Optional[str]) -> str:
    text = str(value or "").strip()
    if not _INFOHASH_RE.match(text):
        return ""
    return text.lower()


def format_size(size_bytes) -> str:
    """Format a byte count as ``1.50 GB`` or ``700 MB``; empty when unknown."""
    try:
        size_bytes = int(size_bytes or 0)
    except (TypeError, ValueError):
        return ""
    if size_bytes <= 0:
        return ""
    gb = size_bytes / (1024 ** 3)
    if gb >= 1:
        return f"{gb:.2f} GB"
    mb = size_bytes / (1024 ** 2)
    return f"{mb:.0f} MB"


def build_description(source_label: str, quality: QualityTier, size_label: str, seeds: int, release_type: str = "") -> str:
    """Two-line human label shown under the stream name."""
    head = [f"{QUALITY_EMOJI[quality]} {source_label}", quality.label]
    if release_type:
        head.append(release_type)
    tail = []
    if size_label:
        tail.append(f"📦 {size_label}")
    tail.append(f"🌱 {max(0, int(seeds or 0))} seeds")
    return " • ".join(head) + "\n" + " • ".join(tail)


@dataclass
class Candidate:
    """Torrent stream candidate"""
    display_name: str
    title: str
    quality: QualityTier
    uri: str
    source: str
    info_hash: str = ""
    seeds: int = 0
    leeches: int = 0
    size_label: str = ""
    description: str = ""
    binge_group: str = ""

    def __post_init__(self):
        if not isinstance(self.quality, QualityTier):
            self.quality = classify_quality(str(self.quality or ""))
        self.info_hash = normalize_infohash(self.info_hash)
        if not self.info_hash and self.uri:
            self.info_hash = extract_infohash(self.uri)
        self.uri = (self.uri or "").strip()
        self.seeds = max(0, int(self.seeds or 0))
        self.leeches = max(0, int(self.leeches or 0))
        self.size_label = self.size_label or ""

    def is_valid(self) -> bool:
        """A candidate needs at least a hash or a resolvable URI."""
        return bool(self.info_hash or self.uri)

    def to_stream(self) -> Dict:
        """Shape the candidate for the playback-selection layer."""
        return {
            "name": self.display_name,
            "title": self.description or self.title,
            "quality": self.quality.label,
            "infoHash": self.info_hash or None,
            "url": self.uri,
            "seeds": self.seeds,
            "peers": self.leeches,
            "size": self.size_label,
            "type": "torrent",
            "behaviorHints": {
                "bingeGroup": self.binge_group,
            },
        }
