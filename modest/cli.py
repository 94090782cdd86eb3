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

"""MoDeST console argument parser."""

import argparse
import sys

from modest import __version__
from modest.options.config import ModestConfig
from modest.execution.controller import Modest_Controller


def get_modest_argparser():
    """Return argument parser for the 'modest' program."""

    ###################################################
    # CONFIGURE MAIN PARSER FOR THE MoDeST PROCESSING #
    ###################################################

    parser = argparse.ArgumentParser(
        prog='modest',
        description='=' * 70 + '\n' + 'MODIS Destriping Tool console argument parser. ',
        epilog="use '>>> modest -h' for detailed documentation and usage hints.")

    add = parser.add_argument
    add('--version', action='version', version=__version__)

    # NOTE: don't define any defaults here for parameters that are passed to ModestConfig!
    #       -> otherwise, we cannot distinguish between explicity given parameters and default values
    #       => see docs in parsedArgs_to_user_opts() for explanation
    add('-jc', '--json_config', nargs='?', type=str,
        help='file path of a JSON file containing options. See modest/options/options_default.json for an example.')
    add('--CPUs', type=int, default=None,
        help='number of CPU cores to be used for building the EDFs and LUTs (default: "None" -> use all available)')
    add('--log_level', type=str, default=None,
        help="the logging level to be used ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'; default: 'INFO')")
    add('--create_logfile', type=_str2bool, default=None, nargs='?', const=True,
        help='whether to write all log messages to a file (within the output directory)')
    add('-im', '--path_l1b_image', type=str, default=None,
        help='input path of the MODIS L1B swath file to be processed (netCDF4; must be given if not contained in '
             '--json-config.)')
    add('-plat', '--platform', type=str, default=None,
        help="satellite platform of the MODIS instrument ('terra' or 'aqua'; default: 'terra')")
    add('-res', '--resolution', type=str, default=None,
        help="MODIS L1B product type ('1km' or '500m'; default: '1km')")
    add('-bc', '--path_band_config', type=str, default=None,
        help='input path of a custom band configuration table (reference detector and bad detector flags per band; '
             'default: use the table bundled for the given platform and resolution)')
    add('-dpb', '--disable_progress_bars', type=_str2bool, default=None, nargs='?', const=True,
        help='whether to disable all progress bars during processing')
    add('-od', '--output_dir', type=str, default=None,
        help='output directory where the destriped file and log files are saved '
             '(default: the input file is destriped in place)')
    add('--run_destriping_P', type=_str2bool, default=None, nargs='?', const=True,
        help='Enable EDF destriping')
    add('--median_shift_mode', type=str, default=None,
        help="which pixels are shifted to restore the image median after destriping "
             "('valid_only': only pixels that stay within 0 and 32767, 'all': all pixels; default: 'valid_only')")
    add('--run_baddet_P', type=_str2bool, default=None, nargs='?', const=True,
        help='Enable the replacement of bad detectors by their nearest good neighbour')

    # link parser to run function
    parser.set_defaults(func=run_job)

    return parser


def parsedArgs_to_user_opts(cli_args: argparse.Namespace) -> dict:
    """Convert argparse Namespace object to dictionary of explicitly given parameters.

    NOTE:   All options that have not been given explicitly (None values) are removed. Reason: ModestConfig prefers
            directly passed arguments against those that are passed within a JSON config file.
            So, e.g., if CPUs=None (default), the 'CPUs' parameter given within a JSON config file would be overridden.

            => only override JSON configuration if parameters are explicitly given (e.g., CPUs is set to 10)
            => if json_opts are given: default options are overridden with the options in the JSON config.

    :param cli_args:    options as parsed by the argparse.ArgumentParser
    """
    # convert argparse Namespace object to dictionary
    opts = {k: v for k, v in vars(cli_args).items() if not k.startswith('_') and k != 'func'}

    # remove those options that have not been given explicitly (None values)
    user_opts = dict()
    for k, v in opts.items():
        # values are None if they are not given by the user -> don't pass to set_config
        if v is None:
            continue
        else:
            user_opts.update({k: v})

    return user_opts


def get_config(cli_args: argparse.Namespace):
    return ModestConfig(**parsedArgs_to_user_opts(cli_args))


def run_job(config: ModestConfig):
    CTR = Modest_Controller(config)
    return CTR.run_all_processors()


def _str2bool(v):
    """Convert string parameter to bool.

    From: https://stackoverflow.com/a/43357954/2952871

    :param v:
    :return:
    """
    if isinstance(v, bool):
        return v
    if v.lower() in ('yes', 'true', 't', 'y', '1'):
        return True
    elif v.lower() in ('no', 'false', 'f', 'n', '0'):
        return False
    else:
        raise argparse.ArgumentTypeError('Boolean value expected.')


def main(parsed_args: argparse.Namespace = None) -> int:
    """Run the argument parser and forward the arguments to the linked functions.

    :param parsed_args:     argparse.Namespace instance of already parsed arguments
                            (allows to call main() from test_cli_parser.py while passing specific arguments)

    :return:  exitcode (0: all fine, 1: no band could be processed)
    """
    if not parsed_args:
        parsed_args = get_modest_argparser().parse_args()  # type: argparse.Namespace

    band_status = parsed_args.func(get_config(parsed_args))

    if 'destriped' not in band_status.values():
        print('\nNo band could be processed.', file=sys.stderr)
        return 1

    print('\nready.')

    return 0


if __name__ == '__main__':
    sys.exit(main())  # pragma: no cover
