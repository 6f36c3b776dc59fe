# -*- coding: utf-8 -*-
# Descargarr

import re
import threading
import unicodedata

from descargarr.providers.cache import FeedCursor, QueryCache
from descargarr.storage.config import Config

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0 Safari/537.36"
)

values = {}
lock = threading.Lock()


def update(key, value):
    with lock:
        values[key] = value


def init(config_path=None, internal_address="http://127.0.0.1:9797", user_agent=DEFAULT_USER_AGENT):
    Config.load(config_path)
    update("config", Config)
    update("user_agent", user_agent)
    update("internal_address", internal_address)
    update("query_cache", QueryCache(ttl=Config("Cache").get("ttl")))
    update("feed_cursor", FeedCursor())


_SIZE_UNITS = {
    "B": 1,
    "KB": 1024,
    "MB": 1024 ** 2,
    "GB": 1024 ** 3,
    "TB": 1024 ** 4,
}
_SIZE_REGEX = re.compile(r"(\d+(?:[.,]\d+)?)\s*([KMGT]?i?B|[KMGT])\b", re.IGNORECASE)


def convert_to_bytes(size_text):
    """Parse a human size ("1.2 GB", "700 MB", "Tamaño 1,5 GB") into bytes.

    Returns 0 when no size can be read.
    """
    if not size_text:
        return 0

    match = _SIZE_REGEX.search(str(size_text))
    if not match:
        return 0

    raw_value, unit = match.groups()
    unit = unit.upper().replace("I", "")
    if len(unit) == 1 and unit != "B":
        unit += "B"

    try:
        size = float(raw_value.replace(",", "."))
    except ValueError:
        return 0

    return int(size * _SIZE_UNITS.get(unit, 1))


def strip_diacritics(text):
    if not text:
        return text
    normalized = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in normalized if unicodedata.category(ch) != "Mn")
    return unicodedata.normalize("NFC", stripped)
