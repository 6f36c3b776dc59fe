# -*- coding: utf-8 -*-
# Descargarr

import re
from urllib.parse import urljoin

import requests

from descargarr.providers.http import SITE_ENCODING, fetch
from descargarr.providers.log import debug, info, log_event, warning
from descargarr.providers.mirrors import get_link_uris

hostname = "newpct"

# ordered: a literal torrent path first, then the id-based template
DOWNLOAD_MATCHERS = (
    (re.compile(r'([^"]*/descargar-torrent/[^"]*)'), None),
    (re.compile(r"nalt\s*=\s*'([^/']*)"), lambda match: f"/download/{match.group(1)}.torrent"),
)


def extract_download_url(content, base_url):
    """Direct torrent link found in a details page, or ``None``."""
    for regex, build in DOWNLOAD_MATCHERS:
        match = regex.search(content or "")
        if not match:
            continue
        link = build(match) if build else match.group(1)
        return urljoin(base_url, link)
    return None


def get_newpct_download(shared_state, url):
    """Torrent bytes for the release whose details page is ``url``.

    Every mirror of ``url`` is tried in order; the first torrent that can be
    fetched is returned. ``None`` when no mirror delivers one.
    """
    for candidate in get_link_uris(url):
        log_event("download_attempt", source=hostname, url=candidate)
        try:
            page = fetch(shared_state, candidate, encoding=SITE_ENCODING)
            download_url = extract_download_url(page.text, page.url)
            if download_url is None:
                warning(f"{hostname.upper()} download link not found in {candidate}", source=hostname)
                continue

            debug(f"{hostname.upper()} resolved {candidate} to {download_url}", source=hostname)
            torrent = fetch(shared_state, download_url)
            if torrent.content:
                info(f"{hostname.upper()} downloaded torrent from {download_url}", source=hostname)
                return torrent.content
        except requests.RequestException as exc:
            warning(f"{hostname.upper()} download failed on {candidate}: {exc}", source=hostname)

    info(f"{hostname.upper()} no mirror delivered a torrent for {url}", source=hostname)
    return None
