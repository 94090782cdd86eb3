# -*- coding: utf-8 -*-

# MoDeST, MODIS Destriping Tool - A Python package for destriping MODIS Level-1B swath data
#
# Copyright (C) 2004-2024 University of Wisconsin-Madison MODIS Group
#
# The destriping algorithm is based on the empirical distribution function (EDF) matching
# of Weinreb et al. (1989) as implemented in the MOD_PRDS package by Liam Gumley (CIMSS/SSEC).
#
# This program is free software: you can redistribute it and/or modify it under
# the terms of the GNU General Public License as published by the Free Software
# Foundation, either version 3 of the License, or (at your option) any later
# version. Please note the following exception: `MoDeST` depends on tqdm, which
# is distributed under the Mozilla Public Licence (MPL) v2.0 except for the files
# "tqdm/_tqdm.py", "setup.py", "README.rst", "MANIFEST.in" and ".gitignore".
# Details can be found here: https://github.com/tqdm/tqdm/blob/master/LICENCE.
#
# This program is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS
# FOR A PARTICULAR PURPOSE. See the GNU Lesser General Public License for more
# details.
#
# You should have received a copy of the GNU Lesser General Public License along
# with this program.  If not, see <https://www.gnu.org/licenses/>.

"""MoDeST 'bad detector correction' module.

Replaces the scan lines of detectors flagged as permanently bad by the lines of the nearest good detector.
"""

import logging
from typing import Union

import numpy as np

from ...model.band_config import ConfigurationError


class Bad_Detector_Corrector(object):
    """MoDeST bad detector correction class.

    For every physical detector flagged as bad, the nearest detector that is not flagged (smallest index difference,
    the lower index wins a tie) is searched. The image lines of the bad detector are then overwritten scan by scan
    with the lines of that good neighbour. The correction is meant to run after destriping, so that the replaced lines
    carry destriped values.
    """

    def __init__(self, stripsize: int, logger: logging.Logger = None):
        """Get an instance of Bad_Detector_Corrector.

        :param stripsize:   number of detectors per scan (10 for 1km, 20 for 500m)
        :param logger:
        """
        self.stripsize = stripsize
        self.logger = logger or logging.getLogger(__name__)

    def _validate_inputs(self, image: np.ndarray, bad_detectors: np.ndarray):
        if bad_detectors.ndim != 1 or bad_detectors.size != self.stripsize:
            raise ConfigurationError('Expected %d bad detector flags. Received %s.'
                                     % (self.stripsize, bad_detectors.tolist()))
        if image.ndim != 2:
            raise ValueError('Expected a 2D image (lines x pixels). Received a %dD array.' % image.ndim)
        if image.shape[0] < self.stripsize:
            raise ValueError('The image must contain at least one scan (%d lines). Received %d lines.'
                             % (self.stripsize, image.shape[0]))

    def correct(self,
                image: np.ndarray,
                bad_detectors: Union[list, np.ndarray],
                inplace: bool = False) -> np.ndarray:
        """Run the bad detector correction.

        :param image:           image to correct (lines x pixels)
        :param bad_detectors:   one flag per physical detector (True/1: detector is bad)
        :param inplace:         whether to modify the given image instead of a copy
        :return:    corrected image
        """
        image = np.asarray(image)
        bad_detectors = np.asarray(bad_detectors).astype(bool)
        self._validate_inputs(image, bad_detectors)

        image_corrected = image if inplace else image.copy()

        if not bad_detectors.any():
            self.logger.debug('Bad detector correction skipped because no detector is flagged as bad.')
            return image_corrected

        # lines exceeding the last complete scan are left untouched
        n_scans = image.shape[0] // self.stripsize
        scans = image_corrected[:n_scans * self.stripsize].reshape(n_scans, self.stripsize, image.shape[1])

        for det in np.flatnonzero(bad_detectors):
            det_good = find_nearest_good_detector(bad_detectors, det)
            self.logger.info('Replacing bad detector %d by detector %d.' % (det, det_good))
            scans[:, det, :] = scans[:, det_good, :]

        # reshape returns a copy for non-contiguous input
        image_corrected[:n_scans * self.stripsize] = scans.reshape(-1, image.shape[1])

        return image_corrected


def find_nearest_good_detector(bad_detectors: Union[list, np.ndarray], detector: int) -> int:
    """Return the index of the nearest detector that is not flagged as bad.

    :param bad_detectors:   one flag per physical detector (True/1: detector is bad)
    :param detector:        index of the detector to find a replacement for
    :return:    index of the nearest good detector (the lower index wins a tie)
    """
    bad_detectors = np.asarray(bad_detectors).astype(bool)
    good = np.flatnonzero(~bad_detectors)
    good = good[good != detector]

    if not good.size:
        raise ConfigurationError('There is no good detector to replace detector %d with (bad detector flags: %s).'
                                 % (detector, bad_detectors.astype(int).tolist()))

    # np.argmin returns the first occurrence, i.e., the lower index in case of a tie
    return int(good[np.argmin(np.abs(good - detector))])
