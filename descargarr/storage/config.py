# -*- coding: utf-8 -*-
# Descargarr

import configparser
import os
import secrets
import threading

from descargarr.providers.log import info

_lock = threading.RLock()
_parser = None
_path = None


class Config(object):
    """Typed access to one section of the settings file.

    Values live in a ``configparser`` document, written back to disk when
    ``Config.load`` was given a path and kept in memory otherwise.
    """

    _DEFAULT_CONFIG = {
        'API': [
            ("key", "secret", ""),
        ],
        'Hostnames': [
            ("newpct", "str", "descargas2020.org"),
        ],
        'Newpct': [
            ("include_vo", "bool", "False"),
            ("filter_movies", "bool", "True"),
            ("remove_movie_accents", "bool", "True"),
        ],
        'Cache': [
            ("ttl", "int", "3300"),
        ],
    }

    def __init__(self, section):
        self._section = section
        if section not in self._DEFAULT_CONFIG:
            raise KeyError(f"Unknown config section: {section}")
        self._types = {key: kind for key, kind, _ in self._DEFAULT_CONFIG[section]}
        _ensure_loaded()

    @staticmethod
    def load(path=None):
        """(Re)load settings from ``path``, creating the file when missing."""
        global _parser, _path
        with _lock:
            parser = configparser.ConfigParser()
            if path and os.path.exists(path):
                parser.read(path, encoding="utf-8")
            _parser = parser
            _path = path
            _apply_defaults(parser)
            _write()

    @staticmethod
    def reset():
        """Drop the loaded document; the next access starts from defaults."""
        global _parser, _path
        with _lock:
            _parser = None
            _path = None

    def get(self, key):
        with _lock:
            kind = self._types.get(key, "str")
            if kind == "bool":
                return _parser.getboolean(self._section, key, fallback=False)
            if kind == "int":
                try:
                    return _parser.getint(self._section, key)
                except (ValueError, configparser.Error):
                    return int(self._default(key))
            return _parser.get(self._section, key, fallback="")

    def save(self, key, value):
        with _lock:
            if isinstance(value, bool):
                value = "True" if value else "False"
            _parser.set(self._section, key, str(value))
            _write()

    def _default(self, key):
        for name, _, default in self._DEFAULT_CONFIG[self._section]:
            if name == key:
                return default
        return ""


def _apply_defaults(parser):
    for section, entries in Config._DEFAULT_CONFIG.items():
        if not parser.has_section(section):
            parser.add_section(section)
        for key, kind, default in entries:
            if parser.has_option(section, key):
                continue
            if kind == "secret" and not default:
                default = secrets.token_hex(16)
                info(f"Generated new {section} {key}")
            parser.set(section, key, default)


def _write():
    if not _path:
        return
    directory = os.path.dirname(_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(_path, "w", encoding="utf-8") as handle:
        _parser.write(handle)


def _ensure_loaded():
    with _lock:
        if _parser is None:
            Config.load()
