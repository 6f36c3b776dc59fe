# -*- coding: utf-8 -*-
# Descargarr

import binascii
import xml.sax.saxutils as sax_utils
from base64 import urlsafe_b64decode, urlsafe_b64encode
from datetime import datetime
from functools import wraps

from bottle import HTTPResponse, abort, request, response

from descargarr.downloads import download
from descargarr.providers import categories as cats
from descargarr.providers import shared_state
from descargarr.providers.log import debug, error, info
from descargarr.providers.version import get_version
from descargarr.search import get_search_results
from descargarr.storage.config import Config

RSS_DATE_FORMAT = "%a, %d %b %Y %H:%M:%S +0000"


def require_api_key(func):
    @wraps(func)
    def decorated(*args, **kwargs):
        api_key = Config('API').get('key')
        if not request.query.apikey:
            return abort(401, "Missing API key")
        if request.query.apikey != api_key:
            return abort(403, "Invalid API key")
        return func(*args, **kwargs)

    return decorated


def _encode_payload(url):
    return urlsafe_b64encode(url.encode("utf-8")).decode("utf-8")


def _decode_payload(payload):
    try:
        return urlsafe_b64decode(payload.encode("utf-8")).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None


def _build_caps_xml(version):
    categories = ""
    for category_id, name, subcategories in cats.ADVERTISED:
        if subcategories:
            categories += f'    <category id="{category_id}" name="{name}">\n'
            for sub_id, sub_name in subcategories:
                categories += f'      <subcat id="{sub_id}" name="{sub_name}" />\n'
            categories += '    </category>\n'
        else:
            categories += f'    <category id="{category_id}" name="{name}" />\n'

    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<caps>\n'
        f'  <server version="{version}" title="Descargarr" />\n'
        '  <limits max="100" default="100" />\n'
        '  <searching>\n'
        '    <search available="yes" supportedParams="q" />\n'
        '    <tv-search available="yes" supportedParams="q,season,ep" />\n'
        '    <movie-search available="yes" supportedParams="q" />\n'
        '  </searching>\n'
        '  <categories>\n'
        f'{categories}'
        '  </categories>\n'
        '</caps>'
    )


def _build_rss_item(details, internal_address, api_key):
    title = sax_utils.escape(details.get("title", ""))
    source = sax_utils.escape(details.get("source", ""))
    link = sax_utils.escape(
        f"{internal_address}/download/?payload={_encode_payload(details.get('source', ''))}&apikey={api_key}"
    )
    size = details.get("size", 0) or 0
    date = details.get("date") or datetime.now().strftime(RSS_DATE_FORMAT)

    attrs = ""
    for category_id in details.get("categories") or []:
        attrs += f'\n    <torznab:attr name="category" value="{category_id}" />'
    attrs += f'\n    <torznab:attr name="size" value="{size}" />'
    attrs += '\n    <torznab:attr name="seeders" value="1" />'
    attrs += '\n    <torznab:attr name="peers" value="1" />'
    attrs += '\n    <torznab:attr name="downloadvolumefactor" value="0" />'
    attrs += '\n    <torznab:attr name="uploadvolumefactor" value="1" />'

    category = details.get("category")
    category_tag = f"\n    <category>{category}</category>" if category else ""

    return (
        '  <item>\n'
        f'    <title>{title}</title>\n'
        f'    <guid isPermaLink="true">{source}</guid>\n'
        f'    <link>{link}</link>\n'
        f'    <comments>{source}</comments>\n'
        f'    <pubDate>{date}</pubDate>\n'
        f'    <size>{size}</size>{category_tag}\n'
        f'    <enclosure url="{link}" length="{size}" type="application/x-bittorrent" />{attrs}\n'
        '  </item>\n'
    )


def _build_rss(releases, internal_address, api_key):
    items = "".join(
        _build_rss_item(release.to_details(), internal_address, api_key) for release in releases
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<rss version="2.0" xmlns:torznab="http://torznab.com/schemas/2015/feed">\n'
        '<channel>\n'
        '  <title>Descargarr</title>\n'
        '  <description>Newpct Torznab bridge</description>\n'
        '  <language>es-es</language>\n'
        f'{items}'
        '</channel>\n'
        '</rss>'
    )


def setup_arr_routes(app):
    @app.get('/download/')
    @require_api_key
    def torrent_file():
        url = _decode_payload(request.query.payload or "")
        if not url:
            return abort(400, "Invalid payload")

        request_from = request.headers.get('User-Agent')
        content = download(shared_state, request_from, url)
        if not content:
            return abort(404, "Torrent not found on any mirror")

        return HTTPResponse(body=content,
                            status=200,
                            headers={"Content-Type": "application/x-bittorrent"})

    @app.post('/api/cache/clear')
    @require_api_key
    def clear_cache():
        name = request.query.q or None
        shared_state.values["query_cache"].invalidate(name)
        info(f"Cache cleared for {name or 'all series'}")
        return {"status": True}

    @app.get('/api')
    @require_api_key
    def torznab_api():
        mode = request.query.t
        request_from = request.headers.get('User-Agent')
        response.content_type = 'application/xml; charset=UTF-8'

        try:
            if mode == 'caps':
                info(f"Providing indexer capability information to {request_from}")
                return _build_caps_xml(get_version())

            if mode in ['search', 'tvsearch', 'movie']:
                try:
                    offset = int(getattr(request.query, 'offset', 0) or 0)
                except ValueError:
                    offset = 0

                if offset > 0:
                    debug(f"Ignoring offset parameter: {offset} - all pages are returned at once")
                    releases = []
                else:
                    categories = cats.parse_category_ids(request.query.cat)
                    if mode == 'tvsearch' and not categories:
                        categories = [cats.TV]
                    elif mode == 'movie' and not categories:
                        categories = [cats.MOVIES]

                    releases = get_search_results(shared_state,
                                                  request_from,
                                                  search_string=request.query.q,
                                                  categories=categories,
                                                  season=request.query.season or None,
                                                  episode=request.query.ep or None)

                return _build_rss(releases,
                                  shared_state.values["internal_address"],
                                  request.query.apikey)
        except Exception as e:
            error(f"Error loading search results: {e}", source="api")

        info(f"[ERROR] Unknown indexer request: {dict(request.query)}")
        return _build_rss([], shared_state.values["internal_address"], request.query.apikey)
