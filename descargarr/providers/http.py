# -*- coding: utf-8 -*-
# Descargarr

from collections import namedtuple
from urllib.parse import urljoin

import requests

from descargarr.providers.log import debug

SITE_ENCODING = "windows-1252"
TIMEOUT = 10

FetchResult = namedtuple("FetchResult", ["text", "content", "url"])


class FetchError(requests.RequestException):
    """Raised when a mirror answers without a usable body."""


def _request(url, headers, data=None):
    if data is None:
        return requests.get(url, headers=headers, timeout=TIMEOUT, allow_redirects=False)
    return requests.post(url, data=data, headers=headers, timeout=TIMEOUT, allow_redirects=False)


def fetch(shared_state, url, data=None, encoding=None):
    """GET ``url`` (or POST ``data`` to it) and return its body.

    Redirects are not followed by the transport: a single hop is re-fetched
    explicitly so the final location can be reported back to mirror
    selection. POSTed ``data`` is sent again to the redirect target.
    Non-2xx answers raise ``requests.HTTPError``.
    """
    headers = {"User-Agent": shared_state.values["user_agent"]}

    response = _request(url, headers, data)
    final_url = url

    if response.is_redirect:
        location = response.headers.get("Location")
        if location:
            final_url = urljoin(url, location)
            debug(f"Following redirect {url} -> {final_url}", source="http")
            response = _request(final_url, headers, data)

    response.raise_for_status()

    if encoding:
        response.encoding = encoding

    return FetchResult(response.text, response.content, final_url)


def fetch_page(shared_state, url, data=None):
    """Fetch a catalog page; an empty body raises ``FetchError``."""
    result = fetch(shared_state, url, data=data, encoding=SITE_ENCODING)
    if not result.text or not result.text.strip():
        raise FetchError(f"Empty response from {url}")
    return result
