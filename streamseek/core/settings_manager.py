"""
Settings Manager
Handles persistent resolver settings in the user home directory
"""
import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional
import threading


class SettingsManager:
    """Manages resolver settings with persistence"""

    REQUIRED_X1337_MIRRORS = [
        "https://1337x.to",
        "https://www.1337x.to",
        "https://1337x.st",
        "https://x1337x.ws",
        "https://x1337x.eu",
    ]

    DEFAULT_SETTINGS = {
        "display_brand": "StreamSeek",

        # Sources
        "enabled_sources": {
            "YTS": True,
            "EZTV": True,
            "TPB": True,
            "1337x": True,
        },
        "yts_api_url": "https://yts.mx/api/v2",
        "yts_timeout_seconds": 10.0,
        "eztv_api_url": "https://eztv.re/api",
        "eztv_timeout_seconds": 10.0,
        "eztv_limit": 100,
        "apibay_url": "https://apibay.org",
        "apibay_timeout_seconds": 10.0,
        "apibay_max_results": 10,
        "x1337_mirror_order": [
            "https://1337x.to",
            "https://www.1337x.to",
            "https://1337x.st",
            "https://x1337x.ws",
            "https://x1337x.eu",
        ],
        "x1337_timeout_seconds": 10.0,
        "x1337_detail_timeout_seconds": 8.0,
        "x1337_detail_budget_seconds": 15.0,
        "x1337_max_detail_fetches": 10,
        "x1337_detail_concurrency": 4,

        # Aggregation
        "tier_gate_min_results": 3,
        "resolve_timeout_seconds": 45.0,
    }

    def __init__(self, settings_dir: Optional[Path] = None, persist: bool = True):
        if settings_dir is None:
            data_dir = str(os.environ.get("STREAMSEEK_DATA_DIR", "") or "").strip()
            settings_dir = Path(data_dir).expanduser() if data_dir else (Path.home() / ".streamseek")
        self.settings_dir = Path(settings_dir)
        self.settings_file = self.settings_dir / "settings.json"
        self._persist = persist

        self._lock = threading.RLock()
        self._settings: Dict[str, Any] = {}
        self._load()

    def _defaults(self) -> Dict[str, Any]:
        return copy.deepcopy(self.DEFAULT_SETTINGS)

    def _load(self):
        """Load settings from file"""
        with self._lock:
            if self._persist and self.settings_file.exists():
                try:
                    with open(self.settings_file, 'r') as f:
                        loaded = json.load(f)
                    if not isinstance(loaded, dict):
                        raise ValueError("settings file must hold a JSON object")
                    # Merge with defaults (adds new keys if they don't exist)
                    self._settings = {**self._defaults(), **loaded}
                    # Deep-merge source flags so new sources get default states.
                    default_sources = self.DEFAULT_SETTINGS.get("enabled_sources", {})
                    loaded_sources = loaded.get("enabled_sources", {})
                    if not isinstance(loaded_sources, dict):
                        loaded_sources = {}
                    self._settings["enabled_sources"] = {**default_sources, **loaded_sources}
                except Exception as e:
                    print(f"Error loading settings: {e}")
                    self._settings = self._defaults()
            else:
                self._settings = self._defaults()

            self._ensure_required_mirrors()

    def _ensure_required_mirrors(self):
        mirrors = self._settings.get("x1337_mirror_order")
        if not isinstance(mirrors, list):
            mirrors = []
        merged = []
        for m in mirrors + self.REQUIRED_X1337_MIRRORS:
            m = str(m or "").strip().rstrip("/")
            if m and m not in merged:
                merged.append(m)
        self._settings["x1337_mirror_order"] = merged

    def _save(self):
        """Save settings to file"""
        if not self._persist:
            return
        with self._lock:
            try:
                self.settings_dir.mkdir(parents=True, exist_ok=True)
                with open(self.settings_file, 'w') as f:
                    json.dump(self._settings, f, indent=2)
            except Exception as e:
                print(f"Error saving settings: {e}")

    def get(self, key: str, default=None) -> Any:
        """Get a setting value"""
        with self._lock:
            return self._settings.get(key, default)

    def set(self, key: str, value: Any):
        """Set a setting value and save"""
        with self._lock:
            self._settings[str(key)] = value
            self._save()

    def update(self, settings_dict: Dict[str, Any]):
        """Update multiple settings at once"""
        with self._lock:
            self._settings.update(dict(settings_dict or {}))
            self._ensure_required_mirrors()
            self._save()

    def get_all(self) -> Dict[str, Any]:
        """Get all settings"""
        with self._lock:
            return copy.deepcopy(self._settings)

    def reset(self):
        """Reset to default settings"""
        with self._lock:
            self._settings = self._defaults()
            self._ensure_required_mirrors()
            self._save()
