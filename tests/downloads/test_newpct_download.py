import os
import sys
import unittest
from unittest.mock import patch

import requests

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))

from descargarr.downloads import download
from descargarr.downloads.sources import newpct as download_newpct

DETAILS_URL = "https://descargas2020.org/descargar/serie/lost/capitulo-105/"

DETAILS_WITH_LINK = """
<div class="entry">
  <a class="btn-torrent" href="https://descargas2020.org/descargar-torrent/12345_lost-105/">Descargar</a>
</div>
"""

DETAILS_WITH_NALT = """
<script type="text/javascript">
  var nalt = '98765';
  window.location = nalt;
</script>
"""


class DummyResponse:
    def __init__(self, body=b"", url="", status_code=200):
        self.content = body if isinstance(body, bytes) else body.encode("utf-8")
        self.text = self.content.decode("utf-8", errors="replace")
        self.url = url
        self.status_code = status_code
        self.is_redirect = False
        self.headers = {}
        self.encoding = None

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}")


class FakeSharedState:
    def __init__(self):
        self.values = {"user_agent": "test-agent"}


class ExtractDownloadUrlTests(unittest.TestCase):
    def test_literal_torrent_link(self):
        self.assertEqual(
            download_newpct.extract_download_url(DETAILS_WITH_LINK, DETAILS_URL),
            "https://descargas2020.org/descargar-torrent/12345_lost-105/",
        )

    def test_id_based_link_uses_page_origin(self):
        self.assertEqual(
            download_newpct.extract_download_url(DETAILS_WITH_NALT, "https://pctnew.site/descargar/lost/"),
            "https://pctnew.site/download/98765.torrent",
        )

    def test_no_link(self):
        self.assertIsNone(download_newpct.extract_download_url("<html></html>", DETAILS_URL))


class GetDownloadTests(unittest.TestCase):
    def test_falls_back_to_next_mirror(self):
        requested = []

        def fake_get(url, headers=None, timeout=10, allow_redirects=False):
            requested.append(url)
            if url.startswith("https://descargas2020.org/"):
                return DummyResponse("Server error", url, status_code=500)
            if url.endswith(".torrent"):
                return DummyResponse(b"d8:announce...e", url)
            return DummyResponse(DETAILS_WITH_NALT, url)

        with patch("descargarr.providers.http.requests.get", side_effect=fake_get):
            content = download_newpct.get_newpct_download(FakeSharedState(), DETAILS_URL)

        self.assertEqual(content, b"d8:announce...e")
        self.assertEqual(requested, [
            DETAILS_URL,
            "http://www.tvsinpagar.com/descargar/serie/lost/capitulo-105/",
            "http://www.tvsinpagar.com/download/98765.torrent",
        ])

    def test_page_without_link_tries_next_mirror(self):
        def fake_get(url, headers=None, timeout=10, allow_redirects=False):
            if "descargar-torrent" in url:
                return DummyResponse(b"torrent-bytes", url)
            if url.startswith("https://descargas2020.org/"):
                return DummyResponse("<html>No link here</html>", url)
            return DummyResponse(DETAILS_WITH_LINK, url)

        with patch("descargarr.providers.http.requests.get", side_effect=fake_get):
            content = download_newpct.get_newpct_download(FakeSharedState(), DETAILS_URL)

        self.assertEqual(content, b"torrent-bytes")

    def test_no_mirror_delivers(self):
        with patch("descargarr.providers.http.requests.get",
                   side_effect=requests.ConnectionError("unreachable")) as mock_get:
            content = download_newpct.get_newpct_download(FakeSharedState(), DETAILS_URL)

        self.assertIsNone(content)
        self.assertEqual(mock_get.call_count, len(download_newpct.get_link_uris(DETAILS_URL)))

    def test_invalid_links_are_refused(self):
        with patch("descargarr.downloads.get_newpct_download") as mock_download:
            self.assertIsNone(download(FakeSharedState(), "Sonarr", "ftp://descargas2020.org/x"))
            self.assertIsNone(download(FakeSharedState(), "Sonarr", "not a link"))

        mock_download.assert_not_called()


if __name__ == "__main__":
    unittest.main()
