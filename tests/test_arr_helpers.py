import os
import sys
import unittest
from datetime import datetime
from unittest.mock import patch
from wsgiref.util import setup_testing_defaults

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from descargarr.api import get_app
from descargarr.api.arr import _build_caps_xml, _build_rss, _build_rss_item, _decode_payload, _encode_payload
from descargarr.providers import categories
from descargarr.providers import shared_state
from descargarr.providers.release import Release, ReleaseType
from descargarr.storage.config import Config

DETAILS_URL = "https://descargas2020.org/descargar/serie/lost/capitulo-105/"


def make_release(title="Lost.S01E05.HDTV & More"):
    return Release(ReleaseType.TV,
                   title,
                   DETAILS_URL,
                   series_name="Lost",
                   season=1,
                   episode=5,
                   size=1024,
                   publish_date=datetime(2018, 10, 5, 12, 30, 0),
                   categories=[categories.TV_HD])


class ArrIndexerHelperTests(unittest.TestCase):
    def test_caps_advertise_search_modes_and_categories(self):
        caps = _build_caps_xml("1.0.0")

        self.assertIn('<server version="1.0.0" title="Descargarr" />', caps)
        self.assertIn('<tv-search available="yes" supportedParams="q,season,ep" />', caps)
        self.assertIn('<movie-search available="yes" supportedParams="q" />', caps)
        self.assertIn('<category id="5000" name="TV">', caps)
        self.assertIn('<subcat id="5040" name="HD" />', caps)
        self.assertIn('<category id="2000" name="Movies" />', caps)

    def test_payload_survives_encoding(self):
        payload = _encode_payload(DETAILS_URL)

        self.assertNotIn("/", payload)
        self.assertEqual(_decode_payload(payload), DETAILS_URL)

    def test_invalid_payload(self):
        self.assertIsNone(_decode_payload("abcde"))

    def test_rss_item(self):
        item = _build_rss_item(make_release().to_details(), "http://127.0.0.1:9797", "secret")

        self.assertIn("<title>Lost.S01E05.HDTV &amp; More</title>", item)
        self.assertIn(f'<guid isPermaLink="true">{DETAILS_URL}</guid>', item)
        self.assertIn("<pubDate>Fri, 05 Oct 2018 12:30:00 +0000</pubDate>", item)
        self.assertIn('<torznab:attr name="category" value="5040" />', item)
        self.assertIn('<torznab:attr name="size" value="1024" />', item)
        self.assertIn(f"/download/?payload={_encode_payload(DETAILS_URL)}&amp;apikey=secret", item)
        self.assertIn('type="application/x-bittorrent"', item)

    def test_empty_rss_is_valid_channel(self):
        rss = _build_rss([], "http://127.0.0.1:9797", "secret")

        self.assertIn("<channel>", rss)
        self.assertNotIn("<item>", rss)


def call(app, path, query=""):
    environ = {}
    setup_testing_defaults(environ)
    environ["PATH_INFO"] = path
    environ["QUERY_STRING"] = query
    captured = {}

    def start_response(status, headers, exc_info=None):
        captured["status"] = status
        captured["headers"] = dict(headers)

    body = b"".join(app(environ, start_response))
    return int(captured["status"].split()[0]), captured["headers"], body


class ArrRoutesTests(unittest.TestCase):
    def setUp(self):
        Config.load()
        self.api_key = Config("API").get("key")
        self.previous = dict(shared_state.values)
        shared_state.update("internal_address", "http://127.0.0.1:9797")
        self.app = get_app()

    def tearDown(self):
        shared_state.values.clear()
        shared_state.values.update(self.previous)
        Config.reset()

    def test_api_key_is_required(self):
        status, _, _ = call(self.app, "/api", "t=caps")
        self.assertEqual(status, 401)

        status, _, _ = call(self.app, "/api", "t=caps&apikey=wrong")
        self.assertEqual(status, 403)

    def test_caps(self):
        status, _, body = call(self.app, "/api", f"t=caps&apikey={self.api_key}")

        self.assertEqual(status, 200)
        self.assertIn(b"<caps>", body)

    def test_tvsearch_defaults_to_tv_category(self):
        with patch("descargarr.api.arr.get_search_results", return_value=[make_release()]) as mock_search:
            status, _, body = call(self.app, "/api", f"t=tvsearch&q=Lost&season=1&ep=5&apikey={self.api_key}")

        self.assertEqual(status, 200)
        self.assertIn(b"Lost.S01E05.HDTV", body)
        kwargs = mock_search.call_args.kwargs
        self.assertEqual(kwargs["categories"], [categories.TV])
        self.assertEqual((kwargs["search_string"], kwargs["season"], kwargs["episode"]), ("Lost", "1", "5"))

    def test_search_failure_returns_empty_feed(self):
        with patch("descargarr.api.arr.get_search_results", side_effect=RuntimeError("boom")):
            status, _, body = call(self.app, "/api", f"t=movie&q=Avatar&apikey={self.api_key}")

        self.assertEqual(status, 200)
        self.assertIn(b"<channel>", body)
        self.assertNotIn(b"<item>", body)

    def test_download_returns_torrent(self):
        payload = _encode_payload(DETAILS_URL)
        with patch("descargarr.api.arr.download", return_value=b"torrent-bytes") as mock_download:
            status, headers, body = call(self.app, "/download/", f"payload={payload}&apikey={self.api_key}")

        self.assertEqual(status, 200)
        self.assertEqual(body, b"torrent-bytes")
        self.assertEqual(headers["Content-Type"], "application/x-bittorrent")
        self.assertEqual(mock_download.call_args.args[2], DETAILS_URL)

    def test_download_not_found(self):
        payload = _encode_payload(DETAILS_URL)
        with patch("descargarr.api.arr.download", return_value=None):
            status, _, _ = call(self.app, "/download/", f"payload={payload}&apikey={self.api_key}")

        self.assertEqual(status, 404)

    def test_debug_stats_and_logs(self):
        status, _, body = call(self.app, "/debug/api/stats")
        self.assertEqual(status, 200)
        self.assertIn(b'"total"', body)

        status, _, body = call(self.app, "/debug/api/logs", "limit=5&level=error")
        self.assertEqual(status, 200)
        self.assertIn(b'"entries"', body)


if __name__ == "__main__":
    unittest.main()
