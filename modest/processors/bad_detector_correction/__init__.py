# -*- coding: utf-8 -*-
"""MoDeST 'bad detector correction' module for replacing permanently bad detectors."""

from .bad_detector_correction import Bad_Detector_Corrector, find_nearest_good_detector

__all__ = ['Bad_Detector_Corrector', 'find_nearest_good_detector']
