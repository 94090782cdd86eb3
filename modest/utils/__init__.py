# -*- coding: utf-8 -*-
"""MoDeST utilities module."""
