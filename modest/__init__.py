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

"""MODIS Destriping Tool (MoDeST) for correcting detector striping in MODIS Level-1B swath data."""

from .version import __version__, __versionalias__   # noqa (E402 + F401)
from .options.config import ModestConfig
from .execution.controller import Modest_Controller

__all__ = ['__version__',
           '__versionalias__',
           'ModestConfig',
           'Modest_Controller'
           ]
