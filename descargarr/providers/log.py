# -*- coding: utf-8 -*-
# Descargarr

import datetime
import os
import threading
import traceback
from collections import deque

# ---------------------------------------------------------------------------
# Recent entries are kept in memory for /debug/api/logs.
# Request threads and the search sources write concurrently.
# ---------------------------------------------------------------------------

_MAX_ENTRIES = 500
_MAX_ATTACHED_CONTENT = 64 * 1024
_buffer_lock = threading.Lock()
_log_buffer: deque = deque(maxlen=_MAX_ENTRIES)
_last_id = 0

# event type -> counter reported by get_log_stats()
_EVENT_COUNTERS = {
    "search_request": "searches",
    "feed_poll": "feed_polls",
    "cache_hit": "cache_hits",
    "parse_failure": "parse_failures",
    "release_filtered": "releases_filtered",
    "download_attempt": "downloads",
}


def _entry(level, message, source, data):
    entry = {
        "timestamp": datetime.datetime.now().isoformat(),
        "level": level,
        "source": source,
        "message": message,
    }
    data = {k: v for k, v in data.items() if v is not None}
    if data:
        entry["data"] = data
        if "event_type" in data:
            entry["event_type"] = data["event_type"]
    return entry


def _store(entry):
    global _last_id
    with _buffer_lock:
        _last_id += 1
        entry["id"] = _last_id
        _log_buffer.append(entry)
    return entry


def _print(entry):
    day, clock = entry["timestamp"].split("T")
    source = f" [{entry['source'].upper()}]" if entry["source"] else ""
    level = "" if entry["level"] == "INFO" else f" {entry['level']}"
    print(f"[{day} {clock[:8]}]{source}{level} {entry['message']}", flush=True)


def _emit(level: str, message: str, source: str = "", **data):
    """Buffer one entry and print it.

    ``data`` holds whatever structured context the caller has (titles, URLs,
    counts); ``None`` values are dropped.
    """
    _print(_store(_entry(level, message, source, data)))


def info(message: str, source: str = "", **data):
    _emit("INFO", message, source=source, **data)


def debug(message: str, source: str = "", **data):
    if os.getenv("DEBUG"):
        _emit("DEBUG", message, source=source, **data)


def warning(message: str, source: str = "", **data):
    _emit("WARNING", message, source=source, **data)


def error(message: str, source: str = "", include_traceback: bool = True, **data):
    if include_traceback:
        tb = traceback.format_exc()
        if tb.strip() != "NoneType: None":
            data["traceback"] = tb
    _emit("ERROR", message, source=source, **data)


def report_parse_failure(content, exc, source: str = ""):
    """Record a page that could not be parsed, raw content included.

    Never raises: a single malformed page must not abort the query that
    fetched it.
    """
    raw = content if isinstance(content, str) else repr(content)
    error(f"Unable to parse page: {exc}",
          source=source,
          event_type="parse_failure",
          content=raw[:_MAX_ATTACHED_CONTENT],
          truncated=len(raw) > _MAX_ATTACHED_CONTENT or None)


def log_event(event_type: str, source: str = "", level: str = "DEBUG", **data):
    """Record a decision point, e.g. ``log_event("mirror_pinned", source="newpct", location=url)``.

    DEBUG events are buffered even when the DEBUG env var is unset; they are
    only printed with it.
    """
    details = " | ".join(f"{key}={value}" for key, value in data.items() if value is not None)
    message = f"{event_type} | {details}" if details else event_type

    entry = _entry(level, message, source, dict(data, event_type=event_type))
    _store(entry)
    if level != "DEBUG" or os.getenv("DEBUG"):
        _print(entry)


def get_log_entries(limit: int = 200, level: str = None, source: str = None, since_id: int = 0):
    """Newest entries first, optionally narrowed by level, source substring or id."""
    with _buffer_lock:
        snapshot = list(_log_buffer)

    checks = []
    if since_id:
        checks.append(lambda e: e["id"] > since_id)
    if level:
        checks.append(lambda e: e["level"] == level.upper())
    if source:
        checks.append(lambda e: source.lower() in (e.get("source") or "").lower())

    selected = [e for e in reversed(snapshot) if all(check(e) for check in checks)]
    return selected[:limit]


def get_log_stats():
    with _buffer_lock:
        snapshot = list(_log_buffer)

    stats = {"total": len(snapshot), "debug": 0, "info": 0, "warning": 0, "error": 0}
    stats.update({counter: 0 for counter in _EVENT_COUNTERS.values()})

    for entry in snapshot:
        level = entry["level"].lower()
        if level in stats:
            stats[level] += 1
        counter = _EVENT_COUNTERS.get(entry.get("event_type"))
        if counter:
            stats[counter] += 1

    return stats


def clear_log_buffer():
    with _buffer_lock:
        _log_buffer.clear()
