# -*- coding: utf-8 -*-
# Descargarr

import argparse
import os

from descargarr.providers import shared_state
from descargarr.providers.version import get_version


def run():
    parser = argparse.ArgumentParser(description="Torznab indexer for the newpct catalog")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", 9797)), help="Port to listen on")
    parser.add_argument("--host", default=os.environ.get("HOST", "0.0.0.0"), help="Interface to bind")
    parser.add_argument("--config", default=os.environ.get("CONFIG", "./descargarr.ini"), help="Settings file")
    parser.add_argument("--internal_address", default=None, help="Address *arr clients use to reach this server")
    arguments = parser.parse_args()

    internal_address = arguments.internal_address or f"http://127.0.0.1:{arguments.port}"
    shared_state.init(config_path=arguments.config, internal_address=internal_address)

    from descargarr.api import run_server

    print(f"Descargarr {get_version()}")
    run_server(arguments.host, arguments.port)
