# -*- coding: utf-8 -*-
# Descargarr

import time

from descargarr.providers.log import info, log_event
from descargarr.search.sources.newpct import load_settings, newpct_feed, newpct_search


def get_search_results(shared_state,
                       request_from,
                       search_string="",
                       categories=None,
                       season=None,
                       episode=None):
    start_time = time.time()

    shared_state.values["query_cache"].clean()
    settings = load_settings(shared_state)

    search_string = (search_string or "").strip()
    log_event("search_request",
              source="search",
              requester=request_from,
              query=search_string or None,
              categories=",".join(str(c) for c in categories) if categories else None,
              season=season,
              episode=episode)

    if not search_string:
        releases = newpct_feed(shared_state, start_time, settings=settings)
        info(f"Providing {len(releases)} feed releases to {request_from}", source="search")
    else:
        releases = newpct_search(shared_state,
                                 start_time,
                                 search_string,
                                 categories=categories,
                                 season=season,
                                 episode=episode,
                                 settings=settings)
        info(f"Providing {len(releases)} releases to {request_from} for '{search_string}'", source="search")

    elapsed = time.time() - start_time
    info(f"Search took {elapsed:.2f}s", source="search")
    return releases
