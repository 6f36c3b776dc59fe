# -*- coding: utf-8 -*-
# Descargarr

"""Torznab category ids used by the catalog."""

MOVIES = 2000
MOVIES_SUBCATEGORIES = {
    2010: "Foreign",
    2020: "Other",
    2030: "SD",
    2040: "HD",
    2045: "UHD",
    2050: "BluRay",
    2060: "3D",
    2070: "DVD",
    2080: "WEB-DL",
}

TV = 5000
TV_SD = 5030
TV_HD = 5040
TV_SUBCATEGORIES = {
    5010: "WEB-DL",
    5020: "Foreign",
    5030: "SD",
    5040: "HD",
    5045: "UHD",
    5050: "Other",
    5060: "Sport",
    5070: "Anime",
    5080: "Documentary",
}

ALL_TV_CATEGORIES = frozenset([TV, *TV_SUBCATEGORIES])
ALL_MOVIE_CATEGORIES = frozenset([MOVIES, *MOVIES_SUBCATEGORIES])

# categories advertised in the caps document
ADVERTISED = (
    (TV, "TV", ((TV_SD, "SD"), (TV_HD, "HD"))),
    (MOVIES, "Movies", ()),
)


def parse_category_ids(raw):
    """Turn a Torznab ``cat`` parameter ("5000,5040") into a list of ints."""
    ids = []
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(int(part))
        except ValueError:
            continue
    return ids


def wants_tv(categories):
    return not categories or any(c in ALL_TV_CATEGORIES for c in categories)


def wants_movies(categories):
    return not categories or any(c in ALL_MOVIE_CATEGORIES for c in categories)
