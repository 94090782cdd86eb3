# -*- coding: utf-8 -*-
"""MoDeST 'destriping' module for equalizing the detectors of MODIS L1B swath data."""

from .destriping import \
    EDF_Destriper, \
    DestripingError, \
    InsufficientData, \
    DegenerateDetector, \
    AllocationFailure, \
    get_detector_rows, \
    create_edf, \
    create_edfs, \
    create_lut, \
    apply_lut, \
    interp_linear, \
    compute_median, \
    count_valid

__all__ = ['EDF_Destriper',
           'DestripingError',
           'InsufficientData',
           'DegenerateDetector',
           'AllocationFailure',
           'get_detector_rows',
           'create_edf',
           'create_edfs',
           'create_lut',
           'apply_lut',
           'interp_linear',
           'compute_median',
           'count_valid']
