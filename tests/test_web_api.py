import unittest

from streamseek.core.aggregator import TorrentAggregator
from streamseek.core.event_bus import EventBus, Events
from streamseek.core.settings_manager import SettingsManager
from streamseek.models.candidate import Candidate, QualityTier
from streamseek.sources.base import BaseSource

try:
    from fastapi.testclient import TestClient
    from streamseek.web.app import create_app
    from streamseek.web.runtime import StreamSeekRuntime
    HAS_WEB_DEPS = True
except Exception:
    HAS_WEB_DEPS = False


class StaticSource(BaseSource):
    name = "Static"

    def __init__(self, settings, results):
        super().__init__(settings)
        self.results = results
        self.requests = []

    def fetch(self, request):
        self.requests.append(request)
        return list(self.results)


def _candidate(info_hash, quality, seeds):
    return Candidate(
        display_name="StreamSeek | Static",
        title=f"Demo {quality.label}",
        quality=quality,
        uri=f"magnet:?xt=urn:btih:{info_hash}",
        source="Static",
        info_hash=info_hash,
        seeds=seeds,
    )


@unittest.skipUnless(HAS_WEB_DEPS, "fastapi/httpx not installed")
class TestWebAPI(unittest.TestCase):
    def setUp(self):
        self.settings = SettingsManager(persist=False)
        self.bus = EventBus()
        self.source = StaticSource(self.settings, [
            _candidate("1" * 40, QualityTier.HD_720P, 10),
            _candidate("2" * 40, QualityTier.UHD_2160P, 1),
        ])
        self.aggregator = TorrentAggregator(self.bus, settings=self.settings, tiers=[[self.source]])
        runtime = StreamSeekRuntime(settings=self.settings, event_bus=self.bus, aggregator=self.aggregator)
        self.client = TestClient(create_app(runtime))

    def test_health(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertTrue(payload["ok"])
        self.assertIn("Static", payload["sources"])

    def test_torrents_are_ranked(self):
        resp = self.client.get("/api/torrents", params={"id": "tt1431045", "title": "Deadpool", "type": "movie"})
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["count"], 2)
        self.assertEqual([s["quality"] for s in payload["streams"]], ["2160p", "720p"])
        self.assertEqual(payload["streams"][0]["type"], "torrent")

    def test_series_lookup_forwards_episode(self):
        resp = self.client.get("/api/torrents", params={
            "id": "tt0903747", "title": "Breaking Bad", "type": "tv", "season": 1, "episode": 2,
        })
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.source.requests[-1].episode_tag, "S01E02")

    def test_incomplete_series_lookup_returns_empty(self):
        resp = self.client.get("/api/torrents", params={"id": "tt0903747", "type": "series", "season": 1})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"streams": [], "count": 0})
        self.assertEqual(self.source.requests, [])

    def test_unknown_type_is_rejected(self):
        resp = self.client.get("/api/torrents", params={"title": "Demo", "type": "anime"})
        self.assertEqual(resp.status_code, 400)

    def test_non_numeric_season_returns_empty_list(self):
        resp = self.client.get("/api/torrents", params={
            "id": "tt0903747", "title": "Breaking Bad", "type": "series", "season": "abc", "episode": "1",
        })
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"streams": [], "count": 0})
        self.assertEqual(self.source.requests, [])

    def test_negative_season_returns_empty_list(self):
        resp = self.client.get("/api/torrents", params={
            "id": "tt0903747", "title": "Breaking Bad", "type": "series", "season": "-1", "episode": "1",
        })
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["count"], 0)
        self.assertEqual(self.source.requests, [])

    def test_malformed_year_is_ignored(self):
        for year in ("abcd", "-5"):
            resp = self.client.get("/api/torrents", params={"title": "Deadpool", "type": "movie", "year": year})
            self.assertEqual(resp.status_code, 200)
            self.assertEqual(resp.json()["count"], 2)
        self.assertIsNone(self.source.requests[-1].year)

    def test_settings_round_trip(self):
        changes = []
        self.bus.subscribe(Events.SETTINGS_CHANGED, changes.append)

        resp = self.client.post("/api/settings", json={"values": {"enabled_sources": {"Static": False}}})
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["ok"])
        self.assertEqual(changes, [{"keys": ["enabled_sources"]}])

        current = self.client.get("/api/settings").json()
        self.assertFalse(current["enabled_sources"]["Static"])
        self.assertFalse(self.aggregator.is_source_enabled("Static"))

        resp = self.client.get("/api/torrents", params={"title": "Deadpool", "type": "movie"})
        self.assertEqual(resp.json()["count"], 0)


if __name__ == "__main__":
    unittest.main()
