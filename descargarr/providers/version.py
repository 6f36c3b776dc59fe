# -*- coding: utf-8 -*-
# Descargarr


def get_version():
    return "1.0.0"
