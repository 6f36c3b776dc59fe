# -*- coding: utf-8 -*-
# Descargarr

import json

from bottle import request, response

from descargarr.providers import shared_state
from descargarr.providers.log import get_log_entries, get_log_stats


def _int_param(name, default):
    try:
        return int(request.query.get(name, default))
    except (TypeError, ValueError):
        return default


def setup_debug_routes(app):
    @app.get('/debug/api/logs')
    def api_logs():
        response.content_type = 'application/json'

        entries = get_log_entries(
            limit=_int_param('limit', 200),
            level=request.query.get('level', '') or None,
            source=request.query.get('source', '') or None,
            since_id=_int_param('since_id', 0),
        )
        return json.dumps({"entries": entries}, default=str)

    @app.get('/debug/api/stats')
    def api_stats():
        response.content_type = 'application/json'
        stats = get_log_stats()
        query_cache = shared_state.values.get("query_cache")
        if query_cache is not None:
            stats["cache"] = query_cache.stats()
        return json.dumps(stats)
