# -*- coding: utf-8 -*-
"""MoDeST 'processors' module containing all MoDeST processor sub-modules."""

from .destriping.destriping import EDF_Destriper
from .bad_detector_correction.bad_detector_correction import Bad_Detector_Corrector

__all__ = [
    "EDF_Destriper",
    "Bad_Detector_Corrector"
]
