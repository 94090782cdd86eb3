# -*- coding: utf-8 -*-
"""MoDeST execution module."""
