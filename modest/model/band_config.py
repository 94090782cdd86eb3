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

"""MoDeST module for handling the per-band destriping configuration.

The band configuration is a text table shipped per platform and MODIS L1B product type. The first line is a free
text header which is recorded in the destriped file. All remaining lines contain comma separated integers:

    band number, reference detector, stripsize flags (0: good detector, 1: bad detector)

e.g. for 1km data (10 detectors per scan):

    27, 4, 0, 0, 0, 0, 0, 0, 0, 0, 1, 0
"""

import logging
import os
from typing import Iterator, List, Union

import numpy as np
import pandas as pd

from .modis_bands import get_instrument_mode

path_resources = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'resources'))


class BandEntry(object):
    def __init__(self, band_number: int, ref_detector: int, bad_detectors: Union[list, np.ndarray]):
        """Get an instance of BandEntry holding the destriping configuration of a single band.

        :param band_number:     MODIS band number
        :param ref_detector:    physical index of the reference detector (0 <= ref_detector < stripsize)
        :param bad_detectors:   one flag per physical detector (True/1: detector is permanently bad)
        """
        self.band_number = int(band_number)
        self.ref_detector = int(ref_detector)

        flags = np.asarray(bad_detectors)
        if flags.ndim != 1 or flags.size == 0:
            raise ConfigurationError('Band %d: expected a 1D sequence of bad detector flags. Received %s.'
                                     % (self.band_number, bad_detectors))
        if not np.isin(flags, [0, 1]).all():
            raise ConfigurationError('Band %d: bad detector flags must be 0 or 1. Received %s.'
                                     % (self.band_number, flags.tolist()))
        self.bad_detectors = flags.astype(bool)

        if not 0 <= self.ref_detector < self.stripsize:
            raise ConfigurationError('Band %d: the reference detector must be within 0 and %d. Received %d.'
                                     % (self.band_number, self.stripsize - 1, self.ref_detector))

    @property
    def stripsize(self) -> int:
        return self.bad_detectors.size

    @property
    def has_bad_detectors(self) -> bool:
        return bool(self.bad_detectors.any())

    def __eq__(self, other):
        return isinstance(other, BandEntry) and \
            (self.band_number, self.ref_detector) == (other.band_number, other.ref_detector) and \
            np.array_equal(self.bad_detectors, other.bad_detectors)

    def __repr__(self):
        return 'BandEntry(band_number=%d, ref_detector=%d, bad_detectors=%s)' \
               % (self.band_number, self.ref_detector, self.bad_detectors.astype(int).tolist())


class BandConfig(object):
    def __init__(self, header: str, entries: List[BandEntry], stripsize: int):
        """Get an instance of BandConfig.

        :param header:      header line of the configuration table (recorded in the destriped output)
        :param entries:     list of BandEntry instances
        :param stripsize:   number of detectors per scan
        """
        self.header = header
        self.stripsize = stripsize
        self._entries = {}

        for entry in entries:
            if entry.stripsize != stripsize:
                raise ConfigurationError('Band %d: expected %d bad detector flags. Received %d.'
                                         % (entry.band_number, stripsize, entry.stripsize))
            self._entries[entry.band_number] = entry

    @classmethod
    def from_file(cls, path_config: str, stripsize: int, n_bands: int,
                  logger: logging.Logger = None) -> 'BandConfig':
        """Read a destriping band configuration table.

        :param path_config: path of the configuration table
        :param stripsize:   number of detectors per scan (10 for 1km, 20 for 500m)
        :param n_bands:     number of bands of the product type (36 for 1km, 7 for 500m),
                            entries with band numbers outside 1..n_bands are skipped
        :param logger:      instance of logging.Logger
        :return:            BandConfig instance
        """
        logger = logger or logging.getLogger(__name__)

        if not os.path.isfile(path_config):
            raise FileNotFoundError('Band configuration file not found at %s.' % path_config)

        with open(path_config, 'r') as inF:
            header = inF.readline().strip()
            if not header:
                raise ConfigurationError('The band configuration file %s has no header line.' % path_config)

            try:
                table = pd.read_csv(inF, header=None, skipinitialspace=True, skip_blank_lines=True, dtype=str)
            except pd.errors.EmptyDataError:
                raise ConfigurationError('The band configuration file %s contains no band entries.' % path_config)
            except pd.errors.ParserError as e:
                raise ConfigurationError('The band configuration file %s is malformed: %s' % (path_config, e))

        if table.shape[1] != stripsize + 2:
            raise ConfigurationError('Each line of the band configuration file %s must contain %d values '
                                     '(band number, reference detector and %d bad detector flags). Found %d.'
                                     % (path_config, stripsize + 2, stripsize, table.shape[1]))
        if table.isnull().values.any():
            raise ConfigurationError('The band configuration file %s contains incomplete lines.' % path_config)

        try:
            table = table.apply(lambda col: col.str.strip()).astype(np.int64)
        except ValueError as e:
            raise ConfigurationError('The band configuration file %s contains non-integer values: %s'
                                     % (path_config, e))

        entries = []
        for row in table.itertuples(index=False):
            band, ref_det, flags = row[0], row[1], list(row[2:])
            if not 1 <= band <= n_bands:
                logger.warning('Skipping band %d of the band configuration as it is not within 1 and %d.'
                               % (band, n_bands))
                continue
            if band in [e.band_number for e in entries]:
                logger.warning('Band %d is configured more than once. Using the last entry.' % band)
                entries = [e for e in entries if e.band_number != band]

            entries.append(BandEntry(band, ref_det, flags))

        return cls(header, entries, stripsize)

    @classmethod
    def from_defaults(cls, platform: str, resolution: str, logger: logging.Logger = None) -> 'BandConfig':
        """Read the band configuration bundled with MoDeST for the given platform and product type."""
        mode = get_instrument_mode(resolution)

        return cls.from_file(get_default_band_config_path(platform, resolution),
                             stripsize=mode.stripsize, n_bands=mode.n_bands, logger=logger)

    @property
    def band_numbers(self) -> List[int]:
        return sorted(self._entries)

    def __getitem__(self, band_number: int) -> BandEntry:
        try:
            return self._entries[band_number]
        except KeyError:
            raise KeyError('No destriping configuration available for band %s.' % band_number)

    def __contains__(self, band_number: int) -> bool:
        return band_number in self._entries

    def __iter__(self) -> Iterator[BandEntry]:
        for band in self.band_numbers:
            yield self._entries[band]

    def __len__(self):
        return len(self._entries)


def get_default_band_config_path(platform: str, resolution: str) -> str:
    """Return the path of the bundled band configuration table, e.g., .../resources/MOD021KM_destripe_config.dat."""
    mode = get_instrument_mode(resolution)
    if platform not in mode.config_prefix:
        raise ValueError("Unknown platform '%s'. Choose one out of %s." % (platform, ', '.join(mode.config_prefix)))

    return os.path.join(path_resources, '%s_destripe_config.dat' % mode.config_prefix[platform])


class ConfigurationError(ValueError):
    """Raised if the destriping configuration of a band is missing or contradictory."""

    pass
