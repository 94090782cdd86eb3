# -*- coding: utf-8 -*-
import os

import numpy as np

from modest.io.l1b_swath import write_swath_file

modestRepo_rootpath = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))


def create_test_swath(path_out: str,
                      n_scans: int = 4,
                      n_pixels: int = 32,
                      resolution: str = '1km',
                      mirror_side: list = None,
                      dtype=np.uint16,
                      seed: int = 0) -> np.ndarray:
    """Write a synthetic, striped MODIS L1B swath file and return the data of its test dataset.

    All detectors see the same scene distribution, shifted by a detector dependent offset (50 counts per detector).
    """
    stripsize, sds_name, n_bands_sds = (10, 'EV_1KM_Emissive', 16) if resolution == '1km' else \
                                       (20, 'EV_500_RefSB', 5)
    rng = np.random.default_rng(seed)

    n_lines = n_scans * stripsize
    data = rng.integers(1000, 3000, (n_bands_sds, n_lines, n_pixels))
    data += (np.arange(n_lines) % stripsize * 50)[None, :, None]
    data = data.astype(dtype)

    if mirror_side is None:
        mirror_side = [i % 2 for i in range(n_scans)]

    write_swath_file(path_out, {sds_name: data}, mirror_side)

    return data
