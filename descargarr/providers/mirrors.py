# -*- coding: utf-8 -*-
# Descargarr

from urllib.parse import urlparse, urlunparse

import requests

from descargarr.providers.log import debug, log_event

DEFAULT_SITE_LINK = "https://descargas2020.org/"

EXTRA_SITE_LINKS = (
    "http://www.tvsinpagar.com/",
    "http://torrentlocura.com/",
    "https://pctnew.site/",
    "https://descargas2020.site/",
    "http://torrentrapid.com/",
    "http://tumejortorrent.com/",
    "http://pctnew.com/",
)


def _origin(url):
    parsed = urlparse(url)
    return parsed.scheme.lower(), parsed.netloc.lower()


def site_root(url):
    scheme, netloc = _origin(url)
    return f"{scheme}://{netloc}/"


def site_link_from_hostname(host):
    host = (host or "").strip()
    if not host:
        return DEFAULT_SITE_LINK
    if "://" in host:
        return site_root(host)
    return f"https://{host.strip('/')}/"


def get_link_uris(reference_link):
    """Candidate URLs for ``reference_link`` on every known mirror.

    Order: the reference mirror itself, the default mirror, then the
    alternates; mirrors sharing scheme and host are listed once. Every
    candidate keeps the path of ``reference_link``.
    """
    reference = urlparse(reference_link)
    candidates = []
    seen = set()

    for base in (reference_link, DEFAULT_SITE_LINK) + EXTRA_SITE_LINKS:
        origin = _origin(base)
        if origin in seen:
            continue
        seen.add(origin)
        candidates.append(urlunparse((origin[0], origin[1], reference.path or "/", "", "", "")))

    return candidates


def first_success(candidates, load, accept=bool, source=""):
    """Try ``candidates`` strictly in order until one yields an accepted result.

    ``load(candidate)`` returns ``(final_location, result)``. Network errors and
    non-2xx answers move on to the next candidate. Returns
    ``(candidate, final_location, result)`` or ``(None, None, None)``.
    """
    for candidate in candidates:
        try:
            location, result = load(candidate)
        except requests.RequestException as exc:
            debug(f"Mirror attempt failed for {candidate}: {exc}", source=source)
            continue

        if accept(result):
            log_event("mirror_pinned", source=source, candidate=str(candidate), location=location)
            return candidate, location, result

        debug(f"Mirror {candidate} answered without usable content", source=source)

    return None, None, None
