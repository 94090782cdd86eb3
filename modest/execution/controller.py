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

"""MoDeST process controller module."""

import os
import shutil
from collections import OrderedDict
from time import time
from datetime import timedelta

import numpy as np
from tqdm import tqdm

from ..options.config import ModestConfig
from ..io.l1b_swath import L1B_Swath
from ..model.band_config import BandConfig, BandEntry, ConfigurationError
from ..model.modis_bands import get_instrument_mode
from ..processors.destriping import EDF_Destriper, DestripingError
from ..processors.bad_detector_correction import Bad_Detector_Corrector
from ..utils.logging import Modest_Logger, close_logger
from ..version import __version__, __versionalias__


class Modest_Controller(object):
    """Class of MoDeST process controller."""

    def __init__(self, config: ModestConfig = None, **config_kwargs):
        """Initialize the Process Controller.

        :param config:          an instance of the ModestConfig class (overrides config_kwargs)
        :param config_kwargs:   configuration parameters to be passed to ModestConfig class
        """
        self.cfg: ModestConfig = config or ModestConfig(**config_kwargs)
        self.mode = get_instrument_mode(self.cfg.resolution)

        # record startup time
        self._time_startup = time()

        self.logger = Modest_Logger('log__MoDeST_%s' % id(self),
                                    path_logfile=self._get_path_logfile(),
                                    log_level=self.cfg.log_level,
                                    append=True)

        # defaults
        self.path_swath = None
        self.band_config = None
        self.band_status = OrderedDict()

    def _get_path_logfile(self):
        if not self.cfg.create_logfile or not self.cfg.path_l1b_image:
            return None

        outdir = self.cfg.output_dir or os.path.dirname(self.cfg.path_l1b_image)
        basename = os.path.splitext(os.path.basename(self.cfg.path_l1b_image))[0]

        return os.path.join(outdir, '%s__MoDeST.log' % basename)

    def prepare_output(self) -> str:
        """Check the input swath file and copy it to the output directory (if given).

        :return:    path of the swath file to be destriped
        """
        path_in = self.cfg.path_l1b_image
        if not path_in:
            raise ValueError("No MODIS L1B swath file given. Set the 'path_l1b_image' parameter.")

        with L1B_Swath(path_in, resolution=self.cfg.resolution, logger=self.logger) as swath:
            if swath.is_destriped:
                raise RuntimeError('The input file %s has already been destriped.' % path_in)

            self.logger.info('Input file %s: %d pixels, %d lines, %d scans.'
                             % (path_in, swath.n_pixels, swath.n_lines, swath.n_scans))

        if self.cfg.output_dir:
            os.makedirs(self.cfg.output_dir, exist_ok=True)
            self.path_swath = os.path.join(self.cfg.output_dir, os.path.basename(path_in))

            if os.path.abspath(self.path_swath) != os.path.abspath(path_in):
                self.logger.info('Copying %s to %s.' % (path_in, self.path_swath))
                shutil.copyfile(path_in, self.path_swath)
        else:
            self.logger.info('No output directory given. Destriping %s in place.' % path_in)
            self.path_swath = path_in

        return self.path_swath

    def read_band_config(self) -> BandConfig:
        """Read the custom band configuration given in config or the one bundled with MoDeST."""
        if self.cfg.path_band_config:
            self.logger.info('Reading band configuration from %s.' % self.cfg.path_band_config)
            self.band_config = BandConfig.from_file(self.cfg.path_band_config,
                                                    stripsize=self.mode.stripsize,
                                                    n_bands=self.mode.n_bands,
                                                    logger=self.logger)
        else:
            self.logger.info('Using the default band configuration for MODIS/%s %s data.'
                             % (self.cfg.platform.capitalize(), self.cfg.resolution))
            self.band_config = BandConfig.from_defaults(self.cfg.platform, self.cfg.resolution, logger=self.logger)

        return self.band_config

    def process_band(self,
                     swath: L1B_Swath,
                     entry: BandEntry,
                     destriper: EDF_Destriper,
                     corrector: Bad_Detector_Corrector) -> np.ndarray:
        """Destripe and repair a single band and write it back to the swath file.

        :return:    the corrected image of the band
        """
        image = swath.read_band(entry.band_number)

        # lines exceeding the last complete scan are left untouched
        n_lines = swath.n_scans * self.mode.stripsize
        corrected = image[:n_lines]
        repair = self.cfg.run_baddet_P and entry.has_bad_detectors

        if self.cfg.run_destriping_P:
            self.logger.debug('Destriping band %d (reference detector %d).' % (entry.band_number, entry.ref_detector))
            # bad detectors are replaced afterwards and thus excluded from the detector statistics
            corrected = destriper.correct(corrected, entry.ref_detector, swath.mirror_side,
                                          bad_detectors=entry.bad_detectors if repair else None)

        if repair:
            corrected = corrector.correct(corrected, entry.bad_detectors)

        image_out = image.copy()
        image_out[:n_lines] = corrected
        swath.write_band(entry.band_number, image_out)

        return image_out

    def run_destriping(self) -> 'OrderedDict[int, str]':
        """Run destriping and bad detector replacement for all configured bands.

        Each band is processed independently. Bands that cannot be processed are skipped and left unmodified.

        :return:    processing status of each band ('destriped', 'failed: <reason>' or 'skipped: <reason>')
        """
        destriper = EDF_Destriper(self.mode.stripsize,
                                  median_shift_mode=self.cfg.median_shift_mode,
                                  CPUs=self.cfg.CPUs,
                                  logger=self.logger)
        corrector = Bad_Detector_Corrector(self.mode.stripsize, logger=self.logger)
        self.band_status = OrderedDict()

        with L1B_Swath(self.path_swath, resolution=self.cfg.resolution, writable=True, logger=self.logger) as swath:
            if swath.is_destriped:
                raise RuntimeError('The file %s has already been destriped.' % self.path_swath)

            for entry in tqdm(self.band_config, desc='Destriping bands', disable=self.cfg.disable_progress_bars):
                band = entry.band_number

                if not swath.has_band(band):
                    self.logger.warning('Skipping band %d as its dataset is not contained in the input file.' % band)
                    self.band_status[band] = 'skipped: dataset not found'
                    continue

                try:
                    self.process_band(swath, entry, destriper, corrector)
                    self.band_status[band] = 'destriped'

                except (DestripingError, ConfigurationError, KeyError, ValueError) as e:
                    self.logger.warning('Skipping band %d: %s' % (band, e))
                    self.band_status[band] = 'failed: %s' % e

            n_done = list(self.band_status.values()).count('destriped')
            if n_done:
                swath.set_provenance('MoDeST %s (%s)' % (__version__, __versionalias__), self.band_config.header)

        self.logger.info('Processed %d of %d bands (%d failed, %d skipped).'
                         % (n_done, len(self.band_status),
                            sum(s.startswith('failed') for s in self.band_status.values()),
                            sum(s.startswith('skipped') for s in self.band_status.values())))

        return self.band_status

    def run_all_processors(self) -> 'OrderedDict[int, str]':
        """Run all processors at once."""
        try:
            if self.cfg.log_level == 'DEBUG':
                self._print_received_configuration()

            self.prepare_output()
            self.read_band_config()
            self.run_destriping()

            self.logger.info('Total runtime of the processing chain: %s'
                             % timedelta(seconds=time() - self._time_startup))

        finally:
            self.cleanup()

        return self.band_status

    def _print_received_configuration(self):
        self.logger.debug('MoDeST Controller received the following configuration:\n%s' % repr(self.cfg))

    def cleanup(self):
        """Clean up (to be called directly)."""
        close_logger(self.logger)
