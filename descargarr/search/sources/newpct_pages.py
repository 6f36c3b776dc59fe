# -*- coding: utf-8 -*-
# Descargarr

"""Page parsers for the newpct catalog.

Every parser turns one response body into ``RawItem`` tuples. Search parsers
distinguish a page without result rows (``None``) from a page whose rows were
all skipped (``[]``) so callers can tell "wrong format" from "nothing here".
"""

import json
import re
from collections import namedtuple
from datetime import datetime, timedelta
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, NavigableString

from descargarr.providers.log import debug, report_parse_failure
from descargarr.providers.release import ReleaseType
from descargarr.providers.shared_state import convert_to_bytes

hostname = "newpct"

VO_URL_MARKERS = ("serie-vo", "serievo")
GAME_MARKER = "pcdvd"

RawItem = namedtuple("RawItem", [
    "release_type",
    "title",
    "details_url",
    "quality",
    "language",
    "size",
    "publish_date",
])


def _collapse_whitespace(text):
    return re.sub(r"\s+", " ", text or "").strip()


def _node_text(node):
    if isinstance(node, NavigableString):
        return str(node)
    return node.get_text()


def _meaningful_children(tag):
    return [child for child in tag.contents if _node_text(child).strip()]


def _parse_date(text, fmt):
    try:
        return datetime.strptime((text or "").strip(), fmt)
    except ValueError:
        return None


def release_type_from_quality(quality):
    if (quality or "").strip().lower().startswith("hdtv"):
        return ReleaseType.TV
    return ReleaseType.MOVIE


def is_vo_link(details_url):
    lowered = (details_url or "").lower()
    return any(marker in lowered for marker in VO_URL_MARKERS)


def parse_daily(content, include_vo=False, now=None, offset=0):
    """Rows of the "latest downloads" listing.

    The listing has no per-row timestamp, so each row gets ``now`` minus an
    increasing number of milliseconds; feed order survives as date order.
    ``offset`` is the number of rows already taken from previous pages.
    """
    now = now or datetime.now()
    items = []

    try:
        soup = BeautifulSoup(content, "html.parser")
        for row in soup.select(".content .info"):
            anchor = row.select_one("a")
            title = _collapse_whitespace(anchor.get_text())
            attribute_title = _collapse_whitespace(anchor.get("title", ""))
            # the visible text is truncated by the site
            if len(attribute_title) >= len(title):
                title = attribute_title

            details_url = anchor.get("href", "")
            if not include_vo and is_vo_link(details_url):
                debug(f"Skipping original version item '{title}'", source=hostname)
                continue

            span = row.select_one("span")
            quality = _node_text(span.contents[0]).strip()
            release_type = release_type_from_quality(quality)
            size_text = _node_text(span.contents[1]).replace("Tamaño", "").strip()

            div = row.select_one("div")
            language = _node_text(div.contents[1]).strip()

            offset += 1
            if release_type == ReleaseType.TV:
                shaped_title = f"Serie {title} - {language} Calidad [{quality}]"
            else:
                shaped_title = f"{title} [{quality}][{language}]"

            items.append(RawItem(
                release_type,
                shaped_title,
                details_url,
                quality,
                language,
                convert_to_bytes(size_text),
                now - timedelta(milliseconds=offset),
            ))
    except Exception as exc:
        report_parse_failure(content, exc, source=hostname)

    return items


def parse_series_list(content, series_name):
    """Link of the series called ``series_name`` on a letter index page."""
    wanted = (series_name or "").strip().lower()
    try:
        soup = BeautifulSoup(content, "html.parser")
        for anchor in soup.select(".pelilist li a"):
            heading = anchor.select_one("h2")
            if heading is not None and heading.get_text().strip().lower() == wanted:
                return anchor.get("href")
    except Exception as exc:
        report_parse_failure(content, exc, source=hostname)
    return None


def parse_episodes(content):
    items = []
    try:
        soup = BeautifulSoup(content, "html.parser")
        for row in soup.select(".content .info"):
            anchor = row.select_one("a")
            title = anchor.get_text().replace("\t", "").strip()
            details_url = anchor.get("href", "")

            children = _meaningful_children(row)
            anchor_index = children.index(anchor)
            date_text = _node_text(children[anchor_index + 1]).strip()
            size_text = _node_text(children[anchor_index + 2]).strip()

            publish_date = datetime.strptime(date_text, "%d-%m-%Y")
            items.append(RawItem(
                ReleaseType.TV,
                title,
                details_url,
                None,
                None,
                convert_to_bytes(size_text),
                publish_date,
            ))
    except Exception as exc:
        report_parse_failure(content, exc, source=hostname)

    return items


def _is_excluded(title, is_series):
    return is_series or GAME_MARKER in title.lower()


def parse_search(content):
    some_found = False
    items = []

    try:
        soup = BeautifulSoup(content, "html.parser")
        rows = soup.select(".content .info")
        if not rows:
            return None

        for row in rows:
            anchor = row.select_one("a")
            heading = anchor.select_one("h2")
            title = _collapse_whitespace(heading.get_text())
            details_url = anchor.get("href", "")

            some_found = True

            is_series = heading.select_one("span") is not None and "calidad" in heading.get_text().lower()
            if _is_excluded(title, is_series):
                debug(f"Skipping non-movie search row '{title}'", source=hostname)
                continue

            spans = row.select("span")
            publish_date = _parse_date(spans[1].get_text(), "%d-%m-%Y") if len(spans) > 1 else None
            size = convert_to_bytes(spans[2].get_text()) if len(spans) > 2 else 0

            items.append(RawItem(ReleaseType.MOVIE, title, details_url, None, None, size, publish_date))
    except Exception as exc:
        report_parse_failure(content, exc, source=hostname)
        return None

    if not some_found:
        return None

    return items


def parse_search_json(url, content):
    """Search API answer; links are resolved against the API's own origin."""
    some_found = False
    items = []

    parsed = urlparse(url)
    origin = f"{parsed.scheme}://{parsed.netloc}/"

    try:
        document = json.loads(content)
    except ValueError:
        debug(f"Search answer from {url} is not JSON", source=hostname)
        return None

    try:
        data = document["data"]
        item_count = int(data["items"])
        for index in range(item_count):
            item = data["torrents"]["0"][str(index)]

            title = str(item["torrentName"])
            quality = str(item.get("calidad") or "")

            some_found = True

            if _is_excluded(title, "hdtv" in quality.lower()):
                debug(f"Skipping non-movie search item '{title}'", source=hostname)
                continue

            items.append(RawItem(
                ReleaseType.MOVIE,
                title,
                urljoin(origin, str(item["guid"])),
                quality,
                None,
                convert_to_bytes(str(item.get("torrentSize") or "")),
                _parse_date(str(item.get("torrentDateAdded") or ""), "%d/%m/%Y"),
            ))
    except Exception as exc:
        report_parse_failure(content, exc, source=hostname)
        return None

    if not some_found:
        return None

    return items
