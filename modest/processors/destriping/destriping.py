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

"""MoDeST 'destriping' module.

Performs the detector equalization of MODIS Level-1B scaled integers using the empirical distribution function (EDF)
algorithm of Weinreb et al. (1989): the distribution of digital counts of every detector is matched to the
distribution of a reference detector.

MODIS scans the earth with a double-sided scan mirror. Each scan is recorded by a group of 'stripsize' detectors
(10 for 1km, 20 for 500m data). As both mirror sides see slightly different optical paths, every physical detector
crossed with the two mirror sides is treated as an own statistical population ('virtual detector'), i.e., there are
2 * stripsize virtual detectors and two consecutive scans form one block of scan lines.
"""

import logging
from multiprocessing import Pool, cpu_count
from typing import List, Sequence, Union

import numpy as np

from ...model.band_config import ConfigurationError

MAX_VALUE = 32767  # largest valid MODIS L1B scaled integer
N_VALUES = MAX_VALUE + 1


class EDF_Destriper(object):
    """MoDeST EDF destriping class.

    Destriping of a single band runs the following steps:

    1. compute one EDF per virtual detector from all valid digital counts of its scan lines
    2. build a lookup table (LUT) per virtual detector which maps its digital counts to those counts of the reference
       detector that belong to the same quantile (histogram matching)
    3. apply the LUTs to all valid pixels of all detectors except the reference detector
    4. reset output values outside the valid range to the input values
    5. shift the destriped image so that its median equals the median of the input image
    """

    def __init__(self,
                 stripsize: int,
                 median_shift_mode: str = 'valid_only',
                 CPUs: int = None,
                 logger: logging.Logger = None):
        """Get an instance of EDF_Destriper.

        :param stripsize:           number of detectors per scan (10 for 1km, 20 for 500m)
        :param median_shift_mode:   which pixels are shifted when restoring the median of the input image
                                    'valid_only': only pixels within the valid range 0-32767
                                    'all':        all pixels including fill values
        :param CPUs:                number of CPUs to use for computing EDFs and LUTs
        :param logger:
        """
        if stripsize < 1:
            raise ValueError('The stripsize must be a positive integer. Received %s.' % stripsize)
        if median_shift_mode not in ['valid_only', 'all']:
            raise ValueError("The median shift mode must be 'valid_only' or 'all'. Received %s." % median_shift_mode)

        self.stripsize = stripsize
        self.n_det = 2 * stripsize
        self.median_shift_mode = median_shift_mode
        self.CPUs = CPUs or cpu_count()
        self.logger = logger or logging.getLogger(__name__)

        # results of the last run
        self.ref_index = None
        self.edfs = None
        self.lut = None
        self.median_delta = None

    def _validate_inputs(self,
                         image: np.ndarray,
                         ref_detector: int,
                         mirror_side: Sequence[int]):
        if image.ndim != 2:
            raise ValueError('Expected a 2D image (lines x pixels). Received a %dD array.' % image.ndim)
        if image.shape[0] == 0 or image.shape[0] % self.stripsize:
            raise ValueError('The number of image lines (%d) must be a non-zero multiple of the stripsize (%d).'
                             % (image.shape[0], self.stripsize))
        if not 0 <= ref_detector < self.stripsize:
            raise ConfigurationError('The reference detector must be within 0 and %d. Received %s.'
                                     % (self.stripsize - 1, ref_detector))
        if len(mirror_side) == 0 or mirror_side[0] not in (0, 1):
            raise ValueError('The mirror side of the first scan must be 0 or 1. Received %s.'
                             % (mirror_side[0] if len(mirror_side) else 'an empty mirror side table'))

    def get_reference_index(self, ref_detector: int, mirror_side: Sequence[int]) -> int:
        """Return the virtual detector index of the reference detector on mirror side zero.

        :param ref_detector:    physical index of the reference detector
        :param mirror_side:     mirror side (0 or 1) of each scan
        """
        return ref_detector + self.stripsize if mirror_side[0] == 1 else ref_detector

    def get_virtual_detectors(self, physical_detectors: Sequence[int]) -> List[int]:
        """Return the virtual detector indices (both mirror sides) of the given physical detectors."""
        return sorted([int(det) for det in physical_detectors] +
                      [int(det) + self.stripsize for det in physical_detectors])

    def correct(self,
                image: np.ndarray,
                ref_detector: int,
                mirror_side: Sequence[int],
                bad_detectors: Union[Sequence[int], np.ndarray] = None) -> np.ndarray:
        """Destripe one band of MODIS L1B scaled integers.

        :param image:           image to destripe (lines x pixels); it is not modified
        :param ref_detector:    physical index of the reference detector
        :param mirror_side:     mirror side (0 or 1) of each scan
        :param bad_detectors:   optional flags of physical detectors which are replaced by a good neighbour later
                                (True/1: detector is bad); their lines are excluded from EDF and LUT computation and
                                left unmodified here
        :return:    destriped image (int32)
        """
        image = np.asarray(image)
        self._validate_inputs(image, ref_detector, mirror_side)
        n_pixels = image.shape[1]

        skip = []
        if bad_detectors is not None:
            bad_detectors = np.asarray(bad_detectors).astype(bool)
            if bad_detectors.ndim != 1 or bad_detectors.size != self.stripsize:
                raise ConfigurationError('Expected %d bad detector flags. Received %s.'
                                         % (self.stripsize, bad_detectors.astype(int).tolist()))
            if bad_detectors[ref_detector]:
                raise ConfigurationError('The reference detector %d is flagged as bad.' % ref_detector)
            skip = self.get_virtual_detectors(np.flatnonzero(bad_detectors))

        try:
            image = image.astype(np.int32)

            # check if there is enough valid data
            n_valid = count_valid(image)
            if n_valid < self.stripsize * n_pixels:
                raise InsufficientData('Found %d valid pixels, at least %d (one strip) are needed for destriping.'
                                       % (n_valid, self.stripsize * n_pixels))
            self.logger.debug('Percentage of valid pixels: %.2f' % (n_valid / image.size * 100))

            # create the EDF for each virtual detector
            self.edfs = create_edfs(image, self.stripsize, CPUs=self.CPUs, skip_detectors=skip)

            # create the LUTs mapping each virtual detector to the reference detector on mirror side zero
            self.ref_index = self.get_reference_index(ref_detector, mirror_side)
            self.logger.debug('Using virtual detector %d as reference.' % self.ref_index)
            self.lut = create_lut(self.edfs, self.ref_index, CPUs=self.CPUs, skip_detectors=skip)

            # apply the LUTs to all detectors except the reference detector
            destriped = apply_lut(image, image.copy(), self.lut, self.stripsize, self.ref_index, skip_detectors=skip)

            # replace destriped values outside the valid range by the input values
            outside = ~is_valid(destriped)
            destriped[outside] = image[outside]

            # set the median of the destriped image to the median of the input image
            self.median_delta = compute_median(destriped) - compute_median(image)
            if self.median_delta != 0:
                self.logger.debug('Shifting destriped image by %d counts to restore the input median.'
                                  % -self.median_delta)
                if self.median_shift_mode == 'valid_only':
                    destriped[is_valid(destriped)] -= self.median_delta
                else:
                    destriped -= self.median_delta

        except MemoryError as e:
            raise AllocationFailure('Could not allocate the buffers needed for destriping: %s' % e) from e

        return destriped


def is_valid(data: np.ndarray) -> np.ndarray:
    """Return a boolean mask of the values within the valid range of MODIS scaled integers (0-32767)."""
    return (data >= 0) & (data <= MAX_VALUE)


def count_valid(image: np.ndarray) -> int:
    """Count the number of valid values (0-32767) in an array of MODIS scaled integers."""
    return int(np.count_nonzero(is_valid(image)))


def compute_median(image: np.ndarray) -> int:
    """Compute the histogram median of an array of MODIS scaled integers.

    The median is the smallest digital count at which the cumulative histogram of the valid values reaches half the
    number of all pixels (rounded up). Fill values thus count as pixels but are never the median. If the valid values
    are less than half of all pixels, the largest valid count (32767) is returned.

    :param image:   array of MODIS scaled integers
    :return:        median
    """
    data = np.asarray(image).ravel()
    hist = np.bincount(data[is_valid(data)], minlength=N_VALUES)
    n_half = -(-data.size // 2)

    return int(min(np.searchsorted(np.cumsum(hist), n_half, side='left'), MAX_VALUE))


def get_detector_rows(n_scans: int, stripsize: int, detector: int) -> np.ndarray:
    """Compute the indices of the image lines recorded by the given virtual detector.

    Two consecutive scans form a block of 2 * stripsize lines and virtual detector 'v' recorded line 'v' of each
    block. If the number of scans is odd, the virtual detectors of the first scan of a block additionally own their
    line of the remaining scan. The lines of all virtual detectors thus partition the image.

    :param n_scans:     number of scans in the image
    :param stripsize:   number of detectors per scan
    :param detector:    virtual detector index (0 <= detector < 2 * stripsize)
    :return:    line indices
    """
    n_det = 2 * stripsize
    if n_scans < 1 or stripsize < 1:
        raise ValueError('The number of scans and the stripsize must be positive integers. Received %s and %s.'
                         % (n_scans, stripsize))
    if not 0 <= detector < n_det:
        raise ValueError('The virtual detector index must be within 0 and %d. Received %s.' % (n_det - 1, detector))

    n_blocks = n_scans // 2
    rows = np.arange(n_blocks) * n_det + detector

    # handle an odd number of scans
    if n_scans % 2 == 1 and detector < stripsize:
        rows = np.append(rows, n_blocks * n_det + detector)

    return rows


def _edf_from_samples(samples: np.ndarray, detector: int) -> np.ndarray:
    valid = samples[is_valid(samples)]
    if not valid.size:
        raise DegenerateDetector('Virtual detector %d has no valid samples. Its EDF cannot be computed.' % detector)

    return np.cumsum(np.bincount(valid, minlength=N_VALUES)) / valid.size


def create_edf(image: np.ndarray, stripsize: int, detector: int) -> np.ndarray:
    """Compute the empirical distribution function (EDF) of the valid digital counts of a virtual detector.

    :param image:       image (lines x pixels)
    :param stripsize:   number of detectors per scan
    :param detector:    virtual detector index
    :return:    EDF (cumulative probability for each digital count 0-32767)
    """
    rows = get_detector_rows(image.shape[0] // stripsize, stripsize, detector)

    return _edf_from_samples(image[rows, :].ravel(), detector)


def create_edfs(image: np.ndarray,
                stripsize: int,
                CPUs: int = 1,
                skip_detectors: Sequence[int] = ()) -> np.ndarray:
    """Compute the EDFs of all virtual detectors.

    :param image:           image (lines x pixels)
    :param stripsize:       number of detectors per scan
    :param CPUs:            number of CPUs to use
    :param skip_detectors:  virtual detectors for which no EDF is computed (their rows are set to NaN)
    :return:    EDFs (2 * stripsize x 32768)
    """
    n_scans, n_det = image.shape[0] // stripsize, 2 * stripsize
    detectors = [det for det in range(n_det) if det not in skip_detectors]

    if CPUs and CPUs > 1 and detectors:
        with Pool(min(CPUs, len(detectors))) as pool:
            args = [[image[get_detector_rows(n_scans, stripsize, det), :].ravel(), det] for det in detectors]
            edfs_computed = pool.starmap(_edf_from_samples, args)

            pool.close()  # needed for coverage to work in multiprocessing
            pool.join()

    else:
        edfs_computed = [create_edf(image, stripsize, det) for det in detectors]

    edfs = np.full((n_det, N_VALUES), np.nan)
    for det, edf in zip(detectors, edfs_computed):
        edfs[det] = edf

    return edfs


def interp_linear(xold: np.ndarray, yold: np.ndarray, xnew: np.ndarray) -> np.ndarray:
    """Interpolate piecewise linearly between the two table entries bracketing each new abscissa value.

    - Values below the first or above the last table abscissa are set to the first or last table value.
    - Tie-break: If several consecutive table entries share the same abscissa (plateau), a query equal to that
      abscissa returns the value of the FIRST of these entries. A query between two plateaus is interpolated between
      the last entry of the lower and the first entry of the upper plateau.

    :param xold:    table abscissa values (monotonically nondecreasing)
    :param yold:    table values
    :param xnew:    abscissa values to interpolate
    :return:    interpolated values
    """
    xold, yold = np.asarray(xold, dtype=float), np.asarray(yold, dtype=float)
    xnew = np.asarray(xnew, dtype=float)

    if xold.ndim != 1 or xold.size == 0 or xold.shape != yold.shape:
        raise ValueError('Expected two non-empty 1D table arrays of equal size. Received shapes %s and %s.'
                         % (xold.shape, yold.shape))
    if np.any(np.diff(xold) < 0):
        raise ValueError('The table abscissa values must be monotonically nondecreasing.')

    # index of the first table entry >= query
    hi = np.searchsorted(xold, xnew, side='left')
    below, above = hi == 0, hi == xold.size
    inner = ~below & ~above

    ynew = np.empty(xnew.shape, dtype=float)
    ynew[below] = yold[0]
    ynew[above] = yold[-1]

    hi, x = hi[inner], xnew[inner]
    x_lo, x_hi, y_lo, y_hi = xold[hi - 1], xold[hi], yold[hi - 1], yold[hi]
    with np.errstate(divide='ignore', invalid='ignore'):
        ynew[inner] = np.where(x_hi == x, y_hi, y_lo + (x - x_lo) * (y_hi - y_lo) / (x_hi - x_lo))

    return ynew


def _match_histogram(edf: np.ndarray, edf_ref: np.ndarray) -> np.ndarray:
    counts = np.arange(N_VALUES, dtype=float)

    return np.floor(interp_linear(edf_ref, counts, edf) + .5).astype(np.int32)


def create_lut(edfs: np.ndarray,
               ref_index: int,
               CPUs: int = 1,
               skip_detectors: Sequence[int] = ()) -> np.ndarray:
    """Create the lookup tables which map the digital counts of each virtual detector to the reference detector.

    :param edfs:            EDFs of all virtual detectors (n_det x 32768)
    :param ref_index:       virtual detector index of the reference detector
    :param CPUs:            number of CPUs to use
    :param skip_detectors:  virtual detectors for which no LUT is computed (identity)
    :return:    LUT (n_det x 32768); the rows of the reference and the skipped detectors hold the identity
    """
    n_det = edfs.shape[0]
    if not 0 <= ref_index < n_det:
        raise ValueError('The reference detector index must be within 0 and %d. Received %s.' % (n_det - 1, ref_index))
    if ref_index in skip_detectors:
        raise ValueError('The reference detector %d cannot be skipped.' % ref_index)

    detectors = [det for det in range(n_det) if det != ref_index and det not in skip_detectors]

    if CPUs and CPUs > 1 and detectors:
        with Pool(min(CPUs, len(detectors))) as pool:
            luts = pool.starmap(_match_histogram, [[edfs[det], edfs[ref_index]] for det in detectors])

            pool.close()  # needed for coverage to work in multiprocessing
            pool.join()

    else:
        luts = [_match_histogram(edfs[det], edfs[ref_index]) for det in detectors]

    lut = np.tile(np.arange(N_VALUES, dtype=np.int32), (n_det, 1))
    for det, lut_det in zip(detectors, luts):
        lut[det] = lut_det

    return lut


def apply_lut(image: np.ndarray,
              destriped: np.ndarray,
              lut: np.ndarray,
              stripsize: int,
              ref_index: int,
              skip_detectors: Sequence[int] = ()) -> np.ndarray:
    """Apply the lookup tables to the valid pixels of all virtual detectors except the reference detector.

    :param image:           input image (lines x pixels)
    :param destriped:       output image (modified in place; invalid input pixels are left untouched)
    :param lut:             LUT (n_det x 32768)
    :param stripsize:       number of detectors per scan
    :param ref_index:       virtual detector index of the reference detector
    :param skip_detectors:  virtual detectors whose lines are left untouched
    :return:    output image
    """
    n_scans = image.shape[0] // stripsize

    for det in range(lut.shape[0]):
        if det == ref_index or det in skip_detectors:
            continue

        rows = get_detector_rows(n_scans, stripsize, det)
        lines_in, lines_out = image[rows, :], destriped[rows, :]
        valid = is_valid(lines_in)
        lines_out[valid] = lut[det][lines_in[valid]]
        destriped[rows, :] = lines_out

    return destriped


class DestripingError(RuntimeError):
    """Base class of all errors that make a band not destripable."""

    pass


class InsufficientData(DestripingError):
    """Raised if a band contains too little valid data to compute detector statistics."""

    pass


class DegenerateDetector(DestripingError):
    """Raised if a virtual detector has no valid samples, so its EDF cannot be normalized."""

    pass


class AllocationFailure(DestripingError):
    """Raised if the buffers needed for destriping cannot be allocated."""

    pass
