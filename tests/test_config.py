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
test_config
-----------

Tests for `options.config` module.
"""
import os
import shutil
import tempfile
from json import \
    dumps, \
    JSONDecodeError

from unittest import TestCase

from modest.options.config import \
    get_options, \
    path_options_default, \
    json_to_python, \
    python_to_json, \
    ModestConfig, \
    ModestValidator, \
    modest_schema_config_output


class Test_get_options(TestCase):
    def test_target_is_file_no_validation(self):
        opts_dict = get_options(os.path.join(path_options_default), validation=False)
        self.assertIsInstance(opts_dict, dict)

    def test_target_is_file_validation(self):
        opts_dict = get_options(os.path.join(path_options_default))
        self.assertIsInstance(opts_dict, dict)
        self.assertEqual(opts_dict['processors']['destriping']['median_shift_mode'], 'valid_only')

    def test_target_not_found(self):
        with self.assertRaises(FileNotFoundError):
            get_options('/nonexisting/options.json')


class Test_ModestConfig(TestCase):
    def test_plain_args(self):
        cfg = ModestConfig(CPUs=10)
        self.assertIsInstance(cfg, ModestConfig)
        self.assertTrue(cfg.CPUs == 10)

    def test_defaults(self):
        cfg = ModestConfig()
        self.assertEqual(cfg.platform, 'terra')
        self.assertEqual(cfg.resolution, '1km')
        self.assertEqual(cfg.median_shift_mode, 'valid_only')
        self.assertIsNone(cfg.output_dir)
        self.assertIsNone(cfg.path_band_config)
        self.assertTrue(cfg.run_destriping_P)
        self.assertTrue(cfg.run_baddet_P)

    def test_jsonconfig_str_allfine(self):
        cfg = '{"a": 1 /*comment*/, "b":2}'
        cfg = ModestConfig(json_config=cfg)
        self.assertIsInstance(cfg, ModestConfig)

    def test_jsonconfig_str_nojson(self):
        cfg = 'dict(a=1 /*comment*/, b=2)'
        with self.assertRaises(ValueError):
            ModestConfig(json_config=cfg)

    def test_jsonconfig_str_badcomment(self):
        cfg = '{"a": 1 /comment*/, "b":2}'
        with self.assertWarns(UserWarning), self.assertRaises(JSONDecodeError):
            ModestConfig(json_config=cfg)

    def test_jsonconfig_str_undecodable_val(self):
        cfg = '{"a": None /comment*/, "b":2}'
        with self.assertWarns(UserWarning), self.assertRaises(JSONDecodeError):
            ModestConfig(json_config=cfg)

    def test_jsonconfig_str_schema_violation(self):
        for cfg in ['{"general_opts": {"CPUs": "badvalue"}}',
                    '{"general_opts": {"resolution": "250m"}}',
                    '{"general_opts": {"platform": "envisat"}}',
                    '{"processors": {"destriping": {"median_shift_mode": "some"}}}']:
            with self.assertRaises(ValueError):
                ModestConfig(json_config=cfg)

    def test_user_opts_schema_violation(self):
        with self.assertRaises(ValueError):
            ModestConfig(median_shift_mode='some')
        with self.assertRaises(ValueError):
            ModestConfig(CPUs=0)

    def test_jsonconfig_file(self):
        cfg = os.path.join(path_options_default)
        cfg = ModestConfig(json_config=cfg)
        self.assertIsInstance(cfg, ModestConfig)

    def test_jsonconfig_param_acceptance(self):
        cfg = ModestConfig(json_config='{"general_opts": {"CPUs": 10}, '
                                       '"processors": {"destriping": {"median_shift_mode": "all"}}}')
        self.assertIsInstance(cfg, ModestConfig)
        self.assertTrue(cfg.CPUs == 10)
        self.assertEqual(cfg.median_shift_mode, 'all')

    def test_user_opts_override_jsonconfig(self):
        cfg = ModestConfig(json_config='{"general_opts": {"CPUs": 10}}', CPUs=4)
        self.assertEqual(cfg.CPUs, 4)

    def test_nonexisting_paths(self):
        with self.assertRaises(FileNotFoundError):
            ModestConfig(path_l1b_image='/nonexisting/MOD021KM.nc')
        with self.assertRaises(FileNotFoundError):
            ModestConfig(path_band_config='/nonexisting/band_config.dat')

    def test_to_jsonable_dict(self):
        cfg = ModestConfig()
        jsonable_dict = cfg.to_jsonable_dict()
        self.assertIsInstance(cfg.to_jsonable_dict(), dict)

        # test if dict is jsonable
        dumps(jsonable_dict)

    def test_to_dict_validity(self):
        cfg = ModestConfig()
        params = cfg.to_dict()
        self.assertIsInstance(cfg.to_jsonable_dict(), dict)

        # check validity
        ModestValidator(allow_unknown=True, schema=modest_schema_config_output).validate(params)

    def test_save_and_reload(self):
        tmpdir = tempfile.mkdtemp(prefix='modest_test_')
        try:
            path_json = os.path.join(tmpdir, 'config.json')
            ModestConfig(CPUs=3, median_shift_mode='all', run_baddet_P=False).save(path_json)

            cfg = ModestConfig(json_config=path_json)
            self.assertEqual(cfg.CPUs, 3)
            self.assertEqual(cfg.median_shift_mode, 'all')
            self.assertFalse(cfg.run_baddet_P)
            self.assertIsNone(cfg.output_dir)
        finally:
            shutil.rmtree(tmpdir, ignore_errors=True)

    def test_repr(self):
        self.assertIn('median_shift_mode', repr(ModestConfig()))


class Test_json_conversion(TestCase):
    def test_json_to_python(self):
        self.assertEqual(json_to_python({'a': 'None', 'b': 'true', 'c': '2', 'd': ['false', 'text']}),
                         {'a': None, 'b': True, 'c': 2, 'd': [False, 'text']})

    def test_python_to_json(self):
        self.assertEqual(python_to_json({'a': None, 'b': True, 'c': [False, 2]}),
                         {'a': 'None', 'b': 'true', 'c': ['false', 2]})


if __name__ == '__main__':
    import pytest
    pytest.main()
