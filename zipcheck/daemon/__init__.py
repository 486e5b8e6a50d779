# -*- coding:utf-8 -*-
# ZipCheck - ZIP entry listing engine

"""
ZipCheck Daemon

REST API server exposing the listing engine.
"""
