# -*- coding: utf-8 -*-
"""MoDeST options module."""
