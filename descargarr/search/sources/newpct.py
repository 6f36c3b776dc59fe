# -*- coding: utf-8 -*-
# Descargarr

"""Newpct search source: latest-downloads feed, series walk and movie search."""

import re
import time
from collections import namedtuple
from datetime import datetime
from urllib.parse import urljoin, urlparse

import requests

from descargarr.providers import categories as cats
from descargarr.providers.http import fetch_page
from descargarr.providers.log import debug, info, log_event
from descargarr.providers.mirrors import first_success, get_link_uris, site_link_from_hostname, site_root
from descargarr.providers.scoring import is_full_match, score_releases
from descargarr.providers.shared_state import strip_diacritics
from descargarr.providers.titles import build_release
from descargarr.search.sources.newpct_pages import (
    parse_daily,
    parse_episodes,
    parse_search,
    parse_search_json,
    parse_series_list,
)

hostname = "newpct"

DAILY_URL = "/ultimas-descargas/pg/{}"
SEARCH_URL = "/buscar"
SEARCH_JSON_URL = "/get/result/"
SERIES_LETTER_URLS = ("/series/letter/{}", "/series-hd/letter/{}")
SERIES_VO_LETTER_URLS = ("/series-vo/letter/{}",)
SERIES_PAGE_URL = "{}/pg/{}"

MAX_DAILY_PAGES = 7
MAX_MOVIES_PAGES = 30
MAX_EPISODES_LIST_PAGES = 100

_SEARCH_STRING_REGEX = re.compile(r"(.+?)S0?(\d+)(E0?(\d+))?$", re.IGNORECASE)

SearchSettings = namedtuple("SearchSettings", ["include_vo", "filter_movies", "remove_movie_accents"])


def load_settings(shared_state):
    config = shared_state.values["config"]("Newpct")
    return SearchSettings(
        include_vo=bool(config.get("include_vo")),
        filter_movies=bool(config.get("filter_movies")),
        remove_movie_accents=bool(config.get("remove_movie_accents")),
    )


def get_site_link(shared_state):
    host = shared_state.values["config"]("Hostnames").get(hostname)
    return site_link_from_hostname(host)


def _to_int(value):
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_releases(items, base_url):
    return [
        build_release(item.release_type,
                      item.title,
                      urljoin(base_url, item.details_url),
                      item.quality,
                      item.language,
                      item.size,
                      item.publish_date)
        for item in items
    ]


# ---------------------------------------------------------------------------
# Feed
# ---------------------------------------------------------------------------

def newpct_feed(shared_state, start_time, settings=None):
    settings = settings or load_settings(shared_state)
    site_link = get_site_link(shared_state)
    cursor = shared_state.values["feed_cursor"]
    now = datetime.now()
    releases = []
    pinned = None
    new_items_boundary = None

    def load(url):
        result = fetch_page(shared_state, url)
        items = parse_daily(result.text, settings.include_vo, now, len(releases))
        return result.url, _to_releases(items, result.url)

    for page in range(1, MAX_DAILY_PAGES + 1):
        path = DAILY_URL.format(page)

        if pinned:
            try:
                _, items = load(urljoin(pinned, path))
            except requests.RequestException as exc:
                debug(f"{hostname.upper()} feed page {page} failed on {pinned}: {exc}", source=hostname)
                break
        else:
            _, location, items = first_success(get_link_uris(urljoin(site_link, path)), load, source=hostname)
            if items:
                pinned = site_root(location)

        if not items:
            break

        position = cursor.position_in(items)
        if page == 1:
            cursor.update(items[0])

        if position is not None:
            releases.extend(items[:position])
            new_items_boundary = page
            break

        releases.extend(items)

    log_event("feed_poll",
              source=hostname,
              releases=len(releases),
              mirror=pinned,
              stopped_at_cursor=new_items_boundary)
    debug(f"Time taken: {time.time() - start_time:.2f}s ({hostname})")
    return releases


# ---------------------------------------------------------------------------
# TV
# ---------------------------------------------------------------------------

def series_list_uris(site_link, series_name, include_vo=False):
    letter_urls = SERIES_LETTER_URLS + SERIES_VO_LETTER_URLS if include_vo else SERIES_LETTER_URLS
    first = series_name.strip()[0]
    letter = "0-9" if first.isdigit() else first.lower()
    return [urljoin(site_link, url.format(letter)) for url in letter_urls]


def _episodes_url_from_list(shared_state, list_url, series_name):
    def load(url):
        result = fetch_page(shared_state, url)
        href = parse_series_list(result.text, series_name)
        return result.url, urljoin(result.url, href) if href else ""

    _, _, episodes_url = first_success(get_link_uris(list_url),
                                       load,
                                       accept=lambda href: href is not None,
                                       source=hostname)
    return episodes_url or None


def _releases_from_episode_pages(shared_state, episodes_url):
    releases = []
    pinned = None
    base_path = urlparse(episodes_url).path.rstrip("/")

    def load(url):
        result = fetch_page(shared_state, url)
        return result.url, _to_releases(parse_episodes(result.text), result.url)

    for page in range(1, MAX_EPISODES_LIST_PAGES):
        page_path = SERIES_PAGE_URL.format(base_path, page)

        if pinned:
            try:
                _, items = load(urljoin(pinned, page_path))
            except requests.RequestException as exc:
                debug(f"{hostname.upper()} episode page {page} failed on {pinned}: {exc}", source=hostname)
                break
        else:
            _, location, items = first_success(get_link_uris(urljoin(episodes_url, page_path)),
                                               load,
                                               source=hostname)
            if items:
                pinned = site_root(location)

        if not items:
            break

        releases.extend(items)

    return releases


def _walk_series(shared_state, settings, site_link, series_name):
    releases = []
    for list_url in series_list_uris(site_link, series_name, settings.include_vo):
        episodes_url = _episodes_url_from_list(shared_state, list_url, series_name)
        if not episodes_url:
            debug(f"{hostname.upper()} series '{series_name}' not listed on {list_url}", source=hostname)
            continue
        releases.extend(_releases_from_episode_pages(shared_state, episodes_url))
    return releases


def _collect_series(shared_state, settings, site_link, series_name):
    releases = _walk_series(shared_state, settings, site_link, series_name)

    # callers often strip the leading article
    if not releases and not series_name.lower().startswith("the"):
        releases = _walk_series(shared_state, settings, site_link, "The " + series_name)

    info(f"{hostname.upper()} collected {len(releases)} episodes for '{series_name}'", source=hostname)
    return releases


def parse_search_string(search_string):
    """Split "Name S01E02" shorthand into ``(name, season, episode)``."""
    match = _SEARCH_STRING_REGEX.search(search_string or "")
    if not match:
        return search_string, None, None
    episode = int(match.group(4)) if match.group(4) else None
    return match.group(1).strip(), int(match.group(2)), episode


def _episode_matches(release, season, episode):
    # unknown on exactly one side cannot be compared and is kept
    if (release.season is None) != (season is None):
        return True
    if release.season is None or release.season != season:
        return False
    if (release.episode is None) != (episode is None):
        return True
    if release.episode is None:
        return False
    if release.episode == episode:
        return True
    return release.episode_to is not None and release.episode <= episode <= release.episode_to


def filter_episodes(releases, season=None, episode=None):
    return [release for release in releases if _episode_matches(release, season, episode)]


def tv_search(shared_state, settings, site_link, search_string, season=None, episode=None):
    series_name = search_string
    season = _to_int(season)
    if season is not None and season <= 0:
        season = None
    episode = _to_int(episode)

    if season is None and episode is None:
        series_name, season, episode = parse_search_string(search_string)

    series_name = (series_name or "").strip()
    if not series_name:
        return []

    cache = shared_state.values["query_cache"]
    releases = cache.get_or_populate(
        series_name,
        lambda: _collect_series(shared_state, settings, site_link, series_name),
    )
    return filter_episodes(releases, season, episode)


# ---------------------------------------------------------------------------
# Movies
# ---------------------------------------------------------------------------

def _search_candidates(site_link):
    json_uris = get_link_uris(urljoin(site_link, SEARCH_JSON_URL))
    markup_uris = get_link_uris(urljoin(site_link, SEARCH_URL))
    for json_uri, markup_uri in zip(json_uris, markup_uris):
        yield json_uri, True
        yield markup_uri, False


def _load_search_page(shared_state, candidate, form):
    url, uses_json = candidate
    result = fetch_page(shared_state, url, data=form)
    if uses_json:
        items = parse_search_json(result.url, result.text)
    else:
        items = parse_search(result.text)
    if items is None:
        return result.url, None
    return result.url, _to_releases(items, result.url)


def movie_search(shared_state, settings, site_link, search_string):
    search_str = search_string
    if settings.remove_movie_accents:
        search_str = strip_diacritics(search_str)

    releases = []
    pinned = None

    for page in range(1, MAX_MOVIES_PAGES + 1):
        form = {"q": search_str, "s": search_str, "pg": str(page)}

        if pinned:
            root, uses_json = pinned
            url = urljoin(root, SEARCH_JSON_URL if uses_json else SEARCH_URL)
            try:
                _, items = _load_search_page(shared_state, (url, uses_json), form)
            except requests.RequestException as exc:
                debug(f"{hostname.upper()} search page {page} failed on {root}: {exc}", source=hostname)
                break
        else:
            candidate, location, items = first_success(
                _search_candidates(site_link),
                lambda c: _load_search_page(shared_state, c, form),
                accept=lambda result: result is not None,
                source=hostname,
            )
            if candidate is not None:
                pinned = (site_root(location), candidate[1])

        if items is None:
            break

        releases.extend(items)

    score_releases(releases, search_str)

    if settings.filter_movies:
        kept = []
        for release in releases:
            if not is_full_match(release):
                log_event("release_filtered",
                          source=hostname,
                          title=release.title,
                          reason=f"missing words of '{search_str}'")
                continue
            kept.append(release)
        releases = kept

    releases.sort(key=lambda release: release.score)
    return releases


def newpct_search(shared_state,
                  start_time,
                  search_string,
                  categories=None,
                  season=None,
                  episode=None,
                  settings=None):
    settings = settings or load_settings(shared_state)
    site_link = get_site_link(shared_state)
    releases = []

    if cats.wants_tv(categories):
        releases.extend(tv_search(shared_state, settings, site_link, search_string, season, episode))

    if cats.wants_movies(categories):
        releases.extend(movie_search(shared_state, settings, site_link, search_string))

    debug(f"Time taken: {time.time() - start_time:.2f}s ({hostname})")
    return releases
