import unittest

from streamseek.core.magnet import DEFAULT_TRACKERS, MagnetSynthesizer, encode_component
from streamseek.models.candidate import extract_infohash

HASH = "ABCDEF0123456789ABCDEF0123456789ABCDEF01"


class TestMagnetSynthesizer(unittest.TestCase):
    def setUp(self):
        self.magnets = MagnetSynthesizer()

    def test_layout_and_encoding(self):
        uri = self.magnets.synthesize(HASH, "My Movie (2020)")
        self.assertTrue(uri.startswith(
            f"magnet:?xt=urn:btih:{HASH}&dn=My%20Movie%20(2020)"
            "&tr=udp%3A%2F%2Ftracker.opentrackr.org%3A1337%2Fannounce"
        ))
        self.assertEqual(uri.count("&tr="), 20)
        self.assertTrue(uri.endswith("&tr=udp%3A%2F%2Ftracker.cyberia.is%3A6969%2Fannounce"))

    def test_output_is_deterministic(self):
        a = self.magnets.synthesize(HASH, "My Movie (2020)")
        b = MagnetSynthesizer().synthesize(HASH, "My Movie (2020)")
        self.assertEqual(a, b)

    def test_hash_survives_round_trip(self):
        uri = self.magnets.synthesize(HASH, "x")
        self.assertEqual(extract_infohash(uri), HASH.lower())

    def test_missing_title_uses_placeholder(self):
        self.assertIn("&dn=Unknown&", self.magnets.synthesize(HASH))
        self.assertIn("&dn=Unknown&", self.magnets.synthesize(HASH, ""))

    def test_custom_trackers(self):
        magnets = MagnetSynthesizer(["udp://one.example:1/announce"])
        uri = magnets.synthesize(HASH, "A")
        self.assertEqual(uri, f"magnet:?xt=urn:btih:{HASH}&dn=A&tr=udp%3A%2F%2Fone.example%3A1%2Fannounce")

    def test_no_trackers(self):
        self.assertEqual(MagnetSynthesizer([]).synthesize(HASH, "A"), f"magnet:?xt=urn:btih:{HASH}&dn=A")

    def test_default_tracker_list(self):
        self.assertEqual(len(DEFAULT_TRACKERS), 20)
        self.assertEqual(len(set(DEFAULT_TRACKERS)), 20)

    def test_encode_component_reserved_characters(self):
        self.assertEqual(encode_component("a&b=c/d?e#f"), "a%26b%3Dc%2Fd%3Fe%23f")
        self.assertEqual(encode_component("it's (ok)!*~"), "it's%20(ok)!*~")


if __name__ == "__main__":
    unittest.main()
