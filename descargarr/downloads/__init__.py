# -*- coding: utf-8 -*-
# Descargarr

from urllib.parse import urlparse

from descargarr.downloads.sources.newpct import get_newpct_download
from descargarr.providers.log import info


def download(shared_state, request_from, url):
    """Torrent payload for a details URL previously handed out by a search."""
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        info(f"Refusing download of invalid link '{url}' requested by {request_from}")
        return None

    info(f'Resolving torrent for "{url}" requested by {request_from}')
    return get_newpct_download(shared_state, url)
