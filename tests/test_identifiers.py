import unittest

from streamseek.core.identifiers import (
    episode_tag,
    normalize_imdb_id,
    pad2,
    parse_stremio_id,
    strip_imdb_prefix,
)
from streamseek.models.search_request import MediaKind, SearchRequest


class TestIdentifiers(unittest.TestCase):
    def test_normalize_accepts_common_shapes(self):
        self.assertEqual(normalize_imdb_id("tt0903747"), "tt0903747")
        self.assertEqual(normalize_imdb_id(" TT0903747 "), "tt0903747")
        self.assertEqual(normalize_imdb_id("0903747"), "tt0903747")
        self.assertEqual(normalize_imdb_id("imdb:tt0903747"), "tt0903747")
        self.assertEqual(normalize_imdb_id("tt0903747:1:2"), "tt0903747")

    def test_normalize_rejects_garbage(self):
        self.assertEqual(normalize_imdb_id(""), "")
        self.assertEqual(normalize_imdb_id(None), "")
        self.assertEqual(normalize_imdb_id("ttabc"), "")
        self.assertEqual(normalize_imdb_id("kitsu:1234x"), "")

    def test_strip_prefix(self):
        self.assertEqual(strip_imdb_prefix("tt0903747"), "0903747")
        self.assertEqual(strip_imdb_prefix("bad"), "")

    def test_parse_stremio_id(self):
        self.assertEqual(parse_stremio_id("tt0903747:1:2"), ("tt0903747", 1, 2))
        self.assertEqual(parse_stremio_id("tt1431045"), ("tt1431045", None, None))

    def test_pad_and_tag(self):
        self.assertEqual(pad2(1), "01")
        self.assertEqual(pad2("12"), "12")
        self.assertEqual(pad2(105), "105")
        self.assertEqual(pad2(None), "")
        self.assertEqual(episode_tag(1, 2), "S01E02")
        self.assertEqual(episode_tag(1, None), "")


class TestSearchRequest(unittest.TestCase):
    def test_movie_request(self):
        req = SearchRequest.create("tt1431045", "  Deadpool ", "movie", year="2016")
        self.assertIsNotNone(req)
        self.assertEqual(req.kind, MediaKind.MOVIE)
        self.assertEqual(req.title, "Deadpool")
        self.assertEqual(req.year, 2016)
        self.assertEqual(req.text_query, "Deadpool 2016")
        self.assertFalse(req.is_series)
        self.assertEqual(req.episode_tag, "")

    def test_movie_requires_title(self):
        self.assertIsNone(SearchRequest.create("tt1431045", "", "movie"))
        self.assertIsNone(SearchRequest.create("tt1431045", "   ", "movie"))

    def test_movie_with_bad_identifier_keeps_title(self):
        req = SearchRequest.create("not-an-id", "Deadpool", "movie")
        self.assertEqual(req.imdb_id, "")
        self.assertEqual(req.text_query, "Deadpool")

    def test_series_request(self):
        req = SearchRequest.create("tt0903747", "Breaking Bad", "series", season=1, episode=1)
        self.assertTrue(req.is_series)
        self.assertEqual(req.episode_tag, "S01E01")
        self.assertEqual(req.text_query, "Breaking Bad S01E01")

    def test_tv_alias(self):
        req = SearchRequest.create("tt0903747", "Breaking Bad", "TV", season=2, episode=10)
        self.assertEqual(req.kind, MediaKind.SERIES)
        self.assertEqual(req.episode_tag, "S02E10")

    def test_series_requires_season_and_episode(self):
        self.assertIsNone(SearchRequest.create("tt0903747", "Breaking Bad", "series", season=1))
        self.assertIsNone(SearchRequest.create("tt0903747", "Breaking Bad", "series", episode=1))
        self.assertIsNone(SearchRequest.create("tt0903747", "Breaking Bad", "series", season=1, episode=0))
        self.assertIsNone(SearchRequest.create("tt0903747", "Breaking Bad", "series", season=-1, episode=1))

    def test_specials_season_is_allowed(self):
        req = SearchRequest.create("tt0903747", "Breaking Bad", "series", season=0, episode=3)
        self.assertEqual(req.episode_tag, "S00E03")

    def test_unknown_kind(self):
        self.assertIsNone(SearchRequest.create("tt1", "Demo", "anime"))
        self.assertIsNone(MediaKind.parse(None))


if __name__ == "__main__":
    unittest.main()
