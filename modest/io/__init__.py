# -*- coding: utf-8 -*-
"""MoDeST 'io' module for reading and writing MODIS L1B swath files."""
