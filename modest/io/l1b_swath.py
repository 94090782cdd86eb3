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

"""MoDeST module for reading and writing MODIS Level-1B swath files.

Swath files are netCDF4 files laid out like the MODIS L1B HDF products:

    - 3D science datasets named like the MODIS L1B datasets ('EV_1KM_Emissive', 'EV_500_RefSB', ...) with the
      dimensions (band within dataset, line, pixel)
    - a 1D variable 'Mirror_Side' holding the scan mirror side (0 or 1) of each scan
    - after destriping, the global attributes 'MODEST_DESTRIPE' (processor version) and 'MODEST_DESTRIPE_CONFIG'
      (header of the band configuration used)

Image data are read as stored (no automatic masking or scaling) and converted to 32-bit signed integers. When
writing, the data are converted back to the data type of the dataset, clipped to its value range.
"""

import logging
import os
from typing import Dict

import netCDF4 as nc
import numpy as np

from ..model.modis_bands import InstrumentMode, get_instrument_mode, get_sds_name, get_band_index

varname_mirror_side = 'Mirror_Side'
attrname_destripe = 'MODEST_DESTRIPE'
attrname_destripe_config = 'MODEST_DESTRIPE_CONFIG'


class L1B_Swath(object):
    """Image store for MODIS L1B swath files."""

    def __init__(self,
                 path_swath: str,
                 resolution: str = '1km',
                 writable: bool = False,
                 logger: logging.Logger = None):
        """Get an instance of L1B_Swath.

        :param path_swath:  path of the netCDF4 swath file
        :param resolution:  '1km' or '500m'
        :param writable:    whether to open the file for writing (the file is modified in place)
        :param logger:      instance of logging.Logger
        """
        self.path_swath = path_swath
        self.mode: InstrumentMode = get_instrument_mode(resolution)
        self.writable = writable
        self.logger = logger or logging.getLogger(__name__)

        self._ds = None

    def open(self) -> 'L1B_Swath':
        if not os.path.isfile(self.path_swath):
            raise FileNotFoundError('MODIS L1B swath file not found at %s.' % self.path_swath)

        self.logger.debug('Opening MODIS L1B swath file %s.' % self.path_swath)
        self._ds = nc.Dataset(self.path_swath, 'r+' if self.writable else 'r')
        self._ds.set_auto_maskandscale(False)

        try:
            self._validate()
        except Exception:
            self.close()
            raise

        return self

    def close(self):
        if self._ds is not None and self._ds.isopen():
            self._ds.close()
        self._ds = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def dataset(self) -> nc.Dataset:
        if self._ds is None:
            raise RuntimeError('The swath file %s is not open.' % self.path_swath)

        return self._ds

    def _validate(self):
        variables = self.dataset.variables

        if self.mode.test_sds not in variables:
            raise ValueError('MODIS %s were not found in the input file %s. Is it a %s L1B product?'
                             % (self.mode.test_sds, self.path_swath, self.mode.resolution))
        if variables[self.mode.test_sds].ndim != 3:
            raise ValueError('Expected a 3D %s dataset. Received %d dimensions.'
                             % (self.mode.test_sds, variables[self.mode.test_sds].ndim))
        if varname_mirror_side not in variables:
            raise ValueError('The input file %s contains no mirror side data.' % self.path_swath)
        if self.n_scans <= 1:
            raise ValueError('Number of MODIS L1B scans is <= 1.')
        if variables[varname_mirror_side].size < self.n_scans:
            raise ValueError('The mirror side data (%d values) do not cover all %d scans.'
                             % (variables[varname_mirror_side].size, self.n_scans))

    @property
    def n_lines(self) -> int:
        return self.dataset.variables[self.mode.test_sds].shape[1]

    @property
    def n_pixels(self) -> int:
        return self.dataset.variables[self.mode.test_sds].shape[2]

    @property
    def n_scans(self) -> int:
        return self.n_lines // self.mode.stripsize

    @property
    def mirror_side(self) -> np.ndarray:
        """Return the scan mirror side (0 or 1) of each scan."""
        return np.asarray(self.dataset.variables[varname_mirror_side][:self.n_scans]).astype(np.int32)

    @property
    def is_destriped(self) -> bool:
        return attrname_destripe in self.dataset.ncattrs()

    def has_band(self, band: int) -> bool:
        """Check if the science dataset containing the given band is present in the swath file."""
        return get_sds_name(band, self.mode.resolution) in self.dataset.variables

    def _get_band_variable(self, band: int):
        sds_name = get_sds_name(band, self.mode.resolution)
        if sds_name not in self.dataset.variables:
            raise KeyError('Could not find the dataset %s containing band %d.' % (sds_name, band))

        var = self.dataset.variables[sds_name]
        idx = get_band_index(band)
        if var.ndim != 3 or idx >= var.shape[0]:
            raise KeyError('The dataset %s does not contain band %d (index %d).' % (sds_name, band, idx))
        if var.shape[1:] != (self.n_lines, self.n_pixels):
            raise ValueError('The dataset %s has %s lines/pixels, expected %s.'
                             % (sds_name, var.shape[1:], (self.n_lines, self.n_pixels)))

        return var, idx

    def read_band(self, band: int) -> np.ndarray:
        """Read the image of a band (lines x pixels) as 32-bit signed integers.

        :param band:    MODIS band number
        """
        var, idx = self._get_band_variable(band)
        self.logger.debug('Reading band %d from dataset %s (index %d).' % (band, var.name, idx))

        return to_canonical(var[idx, :, :])

    def write_band(self, band: int, image: np.ndarray):
        """Write the image of a band back to the swath file.

        :param band:    MODIS band number
        :param image:   image (lines x pixels)
        """
        if not self.writable:
            raise PermissionError('The swath file %s has been opened read-only.' % self.path_swath)

        var, idx = self._get_band_variable(band)
        if image.shape != var.shape[1:]:
            raise ValueError('Expected an image with shape %s for band %d. Received %s.'
                             % (var.shape[1:], band, image.shape))

        self.logger.debug('Writing band %d to dataset %s (index %d).' % (band, var.name, idx))
        var[idx, :, :] = from_canonical(image, var.dtype)

    def set_provenance(self, processor_id: str, config_header: str):
        """Record that the swath file has been destriped and which band configuration has been used."""
        if not self.writable:
            raise PermissionError('The swath file %s has been opened read-only.' % self.path_swath)

        self.dataset.setncattr(attrname_destripe, processor_id)
        self.dataset.setncattr(attrname_destripe_config, config_header)


def to_canonical(data: np.ndarray) -> np.ndarray:
    """Convert image data of any numeric type to 32-bit signed integers.

    Floating point values are rounded; NaN and infinite values become -1 (invalid).
    """
    data = np.asarray(data)
    i32 = np.iinfo(np.int32)

    if np.issubdtype(data.dtype, np.integer):
        return np.clip(data.astype(np.int64), i32.min, i32.max).astype(np.int32)

    if np.issubdtype(data.dtype, np.floating):
        out = np.full(data.shape, -1, dtype=np.int32)
        finite = np.isfinite(data)
        out[finite] = np.rint(np.clip(data[finite], i32.min, i32.max)).astype(np.int32)
        return out

    raise TypeError('Unsupported image data type %s.' % data.dtype)


def from_canonical(image: np.ndarray, dtype) -> np.ndarray:
    """Convert a 32-bit signed integer image to the given data type, clipped to its value range."""
    dtype = np.dtype(dtype)

    if np.issubdtype(dtype, np.integer):
        info = np.iinfo(dtype)
        return np.clip(np.asarray(image, dtype=np.int64), info.min, info.max).astype(dtype)

    return np.asarray(image).astype(dtype)


def write_swath_file(path_out: str,
                     datasets: Dict[str, np.ndarray],
                     mirror_side: np.ndarray,
                     attributes: dict = None):
    """Write a new MODIS L1B swath file.

    :param path_out:    output path
    :param datasets:    dictionary of science dataset names and 3D arrays (band within dataset x lines x pixels)
    :param mirror_side: mirror side (0 or 1) of each scan
    :param attributes:  global attributes
    """
    with nc.Dataset(path_out, 'w', format='NETCDF4') as nc_out:
        for k, v in (attributes or {}).items():
            nc_out.setncattr(k, v)

        nc_out.createDimension('scan', len(mirror_side))
        var = nc_out.createVariable(varname_mirror_side, 'i2', ('scan',))
        var[:] = np.asarray(mirror_side)

        for sds_name, arr in datasets.items():
            if arr.ndim != 3:
                raise ValueError('Expected a 3D array for dataset %s. Received %d dimensions.' % (sds_name, arr.ndim))

            dims = tuple('%s_%s' % (dimname, sds_name) for dimname in ('band', 'line', 'pixel'))
            for dimname, size in zip(dims, arr.shape):
                nc_out.createDimension(dimname, size)

            var = nc_out.createVariable(sds_name, arr.dtype, dims)
            var[:] = arr
