# -*- coding: utf-8 -*-
# Descargarr

"""Series/episode metadata recovered from catalog titles.

Titles are tried against an ordered list of matchers; the first one that
recognizes the title wins. A title nobody recognizes is kept as scraped.
"""

import re
from collections import namedtuple
from typing import Optional

from descargarr.providers import categories
from descargarr.providers.release import Release, ReleaseType

TitleMatch = namedtuple("TitleMatch", [
    "series_name",
    "season",
    "episode",
    "episode_to",
    "quality",
    "language",
    "title",
])

_TITLE_LIST_REGEX = re.compile(
    r"Serie( *Descargar)?(.+?)(Temporada(.+?)(\d+)(.+?))?Capitulos?(.+?)(\d+)((.+?)(\d+))?(.+?)-(.+?)Calidad(.*)",
    re.IGNORECASE,
)
_TITLE_CLASSIC_REGEX = re.compile(
    r"(\[[^\]]*\])?\[Cap\.(\d{1,2})(\d{2})([_-](\d{1,2})(\d{2}))?\]",
    re.IGNORECASE,
)

_SPANISH_MARKERS = ("español", "espanol", "castellano")


def sanitize_title(title: str) -> str:
    return (title or "").replace("\t", "").replace("\u2013", "-")


def _range_end(episode, episode_to):
    # a range may not end before it starts
    if episode_to is None or episode_to < episode:
        return None
    return episode_to


def _match_structured(title: str) -> Optional[TitleMatch]:
    match = _TITLE_LIST_REGEX.search(title)
    if not match:
        return None

    series_name = match.group(2).strip(" -")
    # single-season shows usually leave the season out
    season = int(match.group(5).strip() if match.group(5) else "1")
    episode = int(match.group(8).strip().zfill(2))
    episode_to = _range_end(episode, int(match.group(11).strip()) if match.group(11) else None)
    audio_quality = match.group(13).strip(" []")
    quality = match.group(14).strip(" []")

    season_text = str(season)
    episode_text = season_text + str(episode).zfill(2)
    episode_to_text = f"_{season_text}{str(episode_to).zfill(2)}" if episode_to is not None else ""

    rebuilt = (f"{series_name} - Temporada {season_text} "
               f"[{quality}][Cap.{episode_text}{episode_to_text}][{audio_quality}]")

    return TitleMatch(series_name, season, episode, episode_to, quality, audio_quality, rebuilt)


def _match_classic(title: str) -> Optional[TitleMatch]:
    match = _TITLE_CLASSIC_REGEX.search(title)
    if not match:
        return None

    quality = match.group(1).strip(" []") if match.group(1) else None
    episode = int(match.group(3))

    return TitleMatch(
        series_name="",
        season=int(match.group(2)),
        episode=episode,
        episode_to=_range_end(episode, int(match.group(6)) if match.group(6) else None),
        quality=quality or None,
        language=None,
        title=None,
    )


TITLE_MATCHERS = (
    _match_structured,
    _match_classic,
)


def parse_title(title: str) -> Optional[TitleMatch]:
    title = sanitize_title(title)
    for matcher in TITLE_MATCHERS:
        result = matcher(title)
        if result is not None:
            return result
    return None


def build_release(release_type, title, details_url, quality=None, language=None, size=0, publish_date=None):
    """Assemble a normalized ``Release`` from one scraped item."""
    title = sanitize_title(title)
    release = Release(release_type=release_type, title=title, details_url=details_url)

    match = parse_title(title)
    if match is not None:
        release.series_name = match.series_name
        release.season = match.season
        release.episode = match.episode
        release.episode_to = match.episode_to
        if match.quality is not None:
            quality = match.quality
        if not language and match.language:
            language = match.language
        if match.title is not None:
            release.title = match.title

    if release_type == ReleaseType.TV:
        quality = quality or "HDTV"
        if "720" in quality or "1080" in quality:
            release.categories = [categories.TV_HD]
        else:
            release.categories = [categories.TV]
    else:
        release.title = title
        release.categories = [categories.MOVIES]

    release.quality = quality or ""
    release.language = language or ""
    if size and size > 0:
        release.size = size
    release.publish_date = publish_date

    release.title = fixed_title(release, quality, language)
    return release


def fixed_title(release: Release, quality, language) -> str:
    """Dotted scene-like title: ``Series.SxxEyy[-zz].Quality.Language[.Spanish]``."""
    if not release.series_name:
        release.series_name = release.title
        if release.release_type == ReleaseType.TV and "-" in release.series_name:
            release.series_name = release.title.split("-", 1)[0].strip()

    title_parts = [release.series_name]

    if release.release_type == ReleaseType.TV:
        if not quality:
            quality = "HDTV"

        season_and_episode = f"S{release.season or 0:02d}E{release.episode or 0:02d}"
        if release.episode_to and release.episode_to != release.episode:
            season_and_episode += f"-{release.episode_to:02d}"
        title_parts.append(season_and_episode)

    if quality and quality not in release.series_name:
        title_parts.append(quality)

    if language and language.strip() and language not in release.series_name:
        title_parts.append(language)

    working_title = release.title.lower()
    if any(marker in working_title for marker in _SPANISH_MARKERS) or working_title.endswith("espa"):
        title_parts.append("Spanish")

    result = ".".join(title_parts)
    result = re.sub(r"\s*[\[\]]+\s*", ".", result)
    result = re.sub(r"\.[ .]*\.", ".", result)
    return result.strip(" .")
