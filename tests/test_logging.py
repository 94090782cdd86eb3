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
test_logging
------------

Tests for `utils.logging` module.
"""

import os
import shutil
import tempfile
from io import StringIO
from unittest import TestCase, mock
import pytest

from modest.utils.logging import Modest_Logger, close_logger


class Test_Modest_Logger(TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp(prefix='modest_test_')

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    @mock.patch('sys.stderr', new_callable=StringIO)
    @mock.patch('sys.stdout', new_callable=StringIO)
    def test_console_streams(self, mock_stdout, mock_stderr):
        logger = Modest_Logger('log__test_console_streams', log_level='DEBUG')
        try:
            logger.debug('debug message')
            logger.info('info message')
            logger.warning('warning message')
        finally:
            close_logger(logger)

        assert 'debug message' in mock_stdout.getvalue()
        assert 'info message' in mock_stdout.getvalue()
        assert 'warning message' not in mock_stdout.getvalue()
        assert 'warning message' in mock_stderr.getvalue()
        assert 'info message' not in mock_stderr.getvalue()

    def test_logfile(self):
        path_logfile = os.path.join(self.tmpdir, 'subdir', 'MOD021KM_test__MoDeST.log')
        logger = Modest_Logger('log__test_logfile', fmt_suffix='MOD021KM_test', path_logfile=path_logfile,
                               log_level='INFO')
        try:
            logger.debug('not written')
            logger.info('band 31 destriped')
        finally:
            close_logger(logger)

        assert not logger.handlers

        with open(path_logfile) as inF:
            content = inF.read()
        assert '[MOD021KM_test] INFO:   band 31 destriped' in content
        assert 'not written' not in content

    def test_logfile_overwrite(self):
        path_logfile = os.path.join(self.tmpdir, 'MoDeST.log')
        for i, append in enumerate([True, False]):
            logger = Modest_Logger('log__test_logfile_overwrite_%d' % i, path_logfile=path_logfile, append=append)
            logger.info('run %d' % i)
            close_logger(logger)

        with open(path_logfile) as inF:
            content = inF.read()
        assert 'run 0' not in content
        assert 'run 1' in content

    def test_close_logger_none(self):
        close_logger(None)


if __name__ == '__main__':
    pytest.main()
