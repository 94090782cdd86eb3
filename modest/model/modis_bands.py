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

"""MoDeST lookup tables for MODIS Level-1B bands, science datasets and instrument modes.

MODIS 1km L1B files contain the following science datasets (SDS):

    EV_250_Aggr1km_RefSB and
    EV_250_RefSB contain bands    1,2

    EV_500_Aggr1km_RefSB and
    EV_500_RefSB contain bands    3,4,5,6,7

    EV_1KM_RefSB contains bands    8,9,10,11,12,13lo,13hi,14lo,14hi,15,16,17,18,19,26

    EV_1KM_Emissive contains bands 20,21,22,23,24,25,27,28,29,30,31,32,33,34,35,36
"""

from types import MappingProxyType
from typing import NamedTuple


class InstrumentMode(NamedTuple):
    """Constants of one MODIS L1B product type (1km or 500m resolution)."""

    resolution: str
    stripsize: int  # detectors (= lines) per scan
    n_bands: int
    test_sds: str  # dataset used to derive the image dimensions
    config_prefix: dict  # platform -> prefix of the bundled band configuration file


instrument_modes = MappingProxyType({
    '1km': InstrumentMode(resolution='1km', stripsize=10, n_bands=36, test_sds='EV_1KM_Emissive',
                          config_prefix=MappingProxyType({'terra': 'MOD021KM', 'aqua': 'MYD021KM'})),
    '500m': InstrumentMode(resolution='500m', stripsize=20, n_bands=7, test_sds='EV_500_RefSB',
                           config_prefix=MappingProxyType({'terra': 'MOD02HKM', 'aqua': 'MYD02HKM'})),
})

# index of a band (1-36) within its science dataset
band_index = (
    0, 1,
    0, 1, 2, 3, 4,
    0, 1, 2, 3, 4, 5, 7, 9, 10, 11, 12, 13,
    0, 1, 2, 3, 4, 5, 14, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15
)

_sds_bands_1km = (
    ('EV_250_Aggr1km_RefSB', (1, 2)),
    ('EV_500_Aggr1km_RefSB', (3, 4, 5, 6, 7)),
    ('EV_1KM_RefSB', (8, 9, 10, 11, 12, 13, 14, 15, 16, 17, 18, 19, 26)),
    ('EV_1KM_Emissive', (20, 21, 22, 23, 24, 25, 27, 28, 29, 30, 31, 32, 33, 34, 35, 36)),
)

_sds_bands_500m = (
    ('EV_250_Aggr500_RefSB', (1, 2)),
    ('EV_500_RefSB', (3, 4, 5, 6, 7)),
)

sds_names = MappingProxyType({
    '1km': MappingProxyType({band: sds for sds, bands in _sds_bands_1km for band in bands}),
    '500m': MappingProxyType({band: sds for sds, bands in _sds_bands_500m for band in bands}),
})


def get_instrument_mode(resolution: str) -> InstrumentMode:
    if resolution not in instrument_modes:
        raise ValueError("Unknown MODIS L1B resolution '%s'. Choose one out of %s."
                         % (resolution, ', '.join(instrument_modes)))

    return instrument_modes[resolution]


def get_sds_name(band: int, resolution: str) -> str:
    """Return the name of the science dataset containing the given band.

    :param band:        MODIS band number (1-36 for 1km, 1-7 for 500m)
    :param resolution:  '1km' or '500m'
    :return:            dataset name, e.g., 'EV_1KM_Emissive'
    """
    try:
        return sds_names[get_instrument_mode(resolution).resolution][band]
    except KeyError:
        raise KeyError('Unknown band number %s for %s MODIS L1B data.' % (band, resolution))


def get_band_index(band: int) -> int:
    """Return the index of the given band within its science dataset."""
    if not 1 <= band <= len(band_index):
        raise KeyError('Unknown band number %s.' % band)

    return band_index[band - 1]
