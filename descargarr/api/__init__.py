# -*- coding: utf-8 -*-
# Descargarr

from bottle import Bottle

from descargarr.api.arr import setup_arr_routes
from descargarr.api.debug import setup_debug_routes
from descargarr.providers.log import info


def get_app():
    app = Bottle()
    setup_arr_routes(app)
    setup_debug_routes(app)
    return app


def run_server(host, port):
    info(f"Descargarr listening on http://{host}:{port}/api")
    get_app().run(host=host, port=port, server="wsgiref", quiet=True)
