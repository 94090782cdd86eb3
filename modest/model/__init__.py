# -*- coding: utf-8 -*-
"""MoDeST 'model' module containing the band configuration and the MODIS band lookup tables."""
