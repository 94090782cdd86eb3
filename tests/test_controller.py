#!/usr/bin/env python
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

"""
test_controller
---------------

Tests for `execution.controller` module.
"""
from unittest import TestCase
import shutil
import tempfile
import os
import pytest

import numpy as np

from modest.execution.controller import Modest_Controller
from modest.io.l1b_swath import L1B_Swath, write_swath_file
from . import create_test_swath

band_config_for_testing = """MODIS/Terra 1km test configuration
31, 4, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0
32, 2, 0, 0, 0, 0, 0, 0, 1, 0, 0, 0
33, 4, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0
1, 4, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0
"""


def std_detector_means(image, stripsize=10):
    return np.std([image[det::stripsize].mean() for det in range(stripsize)])


class Test_Modest_Controller(TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp(prefix='modest_test_')
        self.path_swath = os.path.join(self.tmpdir, 'MOD021KM_test.nc')
        self.data = create_test_swath(self.path_swath, n_scans=6, n_pixels=32)

        # band 33 contains fill values only
        with L1B_Swath(self.path_swath, writable=True) as swath:
            swath.write_band(33, np.full((60, 32), 65535, np.int32))

        self.path_band_config = os.path.join(self.tmpdir, 'band_config.dat')
        with open(self.path_band_config, 'w') as outF:
            outF.write(band_config_for_testing)

        self.output_dir = os.path.join(self.tmpdir, 'output')
        self.config = dict(path_l1b_image=self.path_swath,
                           path_band_config=self.path_band_config,
                           output_dir=self.output_dir,
                           CPUs=1,
                           log_level='DEBUG',
                           create_logfile=True,
                           disable_progress_bars=True)

    def tearDown(self):
        # NOTE: ignore_errors deletes the folder, regardless of whether it contains read-only files
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_run_all_processors(self):
        CTR = Modest_Controller(**self.config)
        status = CTR.run_all_processors()

        assert status[31] == 'destriped'
        assert status[32] == 'destriped'
        assert status[33].startswith('failed')
        assert status[1].startswith('skipped')

        path_out = os.path.join(self.output_dir, 'MOD021KM_test.nc')
        assert os.path.isfile(path_out)
        assert os.path.isfile(os.path.join(self.output_dir, 'MOD021KM_test__MoDeST.log'))

        with L1B_Swath(path_out) as swath:
            assert swath.is_destriped
            assert swath.dataset.getncattr('MODEST_DESTRIPE_CONFIG') == 'MODIS/Terra 1km test configuration'

            # band 31 is destriped
            band31 = swath.read_band(31)
            assert std_detector_means(band31) < std_detector_means(self.data[10]) / 2

            # bad detector 6 of band 32 is replaced by detector 5
            band32 = swath.read_band(32)
            assert np.array_equal(band32[6::10], band32[5::10])

            # failed and unconfigured bands are left unmodified
            assert np.all(swath.read_band(33) == 65535)
            assert np.array_equal(swath.read_band(34), self.data[13])

        # the input file is not modified
        with L1B_Swath(self.path_swath) as swath:
            assert not swath.is_destriped
            assert np.array_equal(swath.read_band(31), self.data[10])

    def test_run_in_place(self):
        self.config['output_dir'] = None
        self.config['create_logfile'] = False
        Modest_Controller(**self.config).run_all_processors()

        with L1B_Swath(self.path_swath) as swath:
            assert swath.is_destriped
            assert not np.array_equal(swath.read_band(31), self.data[10])

    def test_refuse_destriped_file(self):
        Modest_Controller(**self.config).run_all_processors()

        self.config['path_l1b_image'] = os.path.join(self.output_dir, 'MOD021KM_test.nc')
        self.config['output_dir'] = os.path.join(self.tmpdir, 'output2')
        with pytest.raises(RuntimeError):
            Modest_Controller(**self.config).run_all_processors()

    def test_bad_detector_replacement_only(self):
        self.config['run_destriping_P'] = False
        status = Modest_Controller(**self.config).run_all_processors()

        assert status[31] == 'destriped'
        assert status[33] == 'destriped'

        with L1B_Swath(os.path.join(self.output_dir, 'MOD021KM_test.nc')) as swath:
            assert np.array_equal(swath.read_band(31), self.data[10])

            band32 = swath.read_band(32)
            assert np.array_equal(band32[6::10], self.data[11][5::10])

    def test_default_band_config(self):
        self.config['path_band_config'] = None
        status = Modest_Controller(**self.config).run_all_processors()

        assert len(status) == 36
        assert status[20] == 'destriped'
        assert status[33].startswith('failed')
        assert status[26].startswith('skipped')

    def test_no_input_file(self):
        self.config['path_l1b_image'] = ''
        with pytest.warns(UserWarning):
            CTR = Modest_Controller(**self.config)

        with pytest.raises(ValueError):
            CTR.run_all_processors()

    def test_misshaped_dataset_is_skipped(self):
        rng = np.random.default_rng(0)
        striping = (np.arange(40) % 10 * 50)[None, :, None]
        path_swath = os.path.join(self.tmpdir, 'MOD021KM_misshaped.nc')
        write_swath_file(path_swath,
                         {'EV_250_Aggr1km_RefSB': (rng.integers(1000, 3000, (2, 40, 16)) + striping).astype(np.uint16),
                          'EV_1KM_RefSB': rng.integers(1000, 3000, (15, 30, 16)).astype(np.uint16),
                          'EV_1KM_Emissive': (rng.integers(1000, 3000, (16, 40, 16)) + striping).astype(np.uint16)},
                         [0, 1, 0, 1])

        with open(self.path_band_config, 'w') as outF:
            outF.write('MODIS/Terra 1km test configuration\n'
                       '1, 4, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0\n'
                       '8, 4, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0\n'
                       '31, 4, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0\n')

        self.config['path_l1b_image'] = path_swath
        status = Modest_Controller(**self.config).run_all_processors()

        assert status[1] == 'destriped'
        assert status[8].startswith('failed')
        assert status[31] == 'destriped'

        with L1B_Swath(os.path.join(self.output_dir, 'MOD021KM_misshaped.nc')) as swath:
            assert swath.is_destriped


if __name__ == '__main__':
    pytest.main()
