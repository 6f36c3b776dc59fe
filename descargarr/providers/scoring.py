# -*- coding: utf-8 -*-
# Descargarr

import re

WORD_NOT_FOUND_SCORE = 100000

_WORD_SEPARATORS = re.compile(r"[ .,;()\[\]\-_]")


def tokenize(text):
    return [word.strip() for word in _WORD_SEPARATORS.split((text or "").lower()) if word.strip()]


def score_title(search, title):
    """Positional distance between a query and a title, lower is better.

    Each query word adds the index of its first unused occurrence in the
    title, or ``WORD_NOT_FOUND_SCORE`` when it is missing.
    """
    title_words = tokenize(title)
    score = 0
    for word in tokenize(search):
        try:
            index = title_words.index(word)
        except ValueError:
            score += WORD_NOT_FOUND_SCORE
            continue
        score += index
        title_words[index] = None
    return score


def score_releases(releases, search):
    for release in releases:
        release.score = score_title(search, release.title)
    return releases


def is_full_match(release):
    return release.score < WORD_NOT_FOUND_SCORE
