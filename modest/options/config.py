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

"""MoDeST configuration module.

Provides the configuration that is later passed to individual submodules.
"""

import os
import json
from json import JSONDecodeError
import datetime
import warnings
from pprint import pformat

from jsmin import jsmin
from cerberus import Validator
from collections import OrderedDict
from collections.abc import Mapping
import numpy as np
from multiprocessing import cpu_count

from .options_schema import \
    modest_schema_input, \
    modest_schema_config_output, \
    parameter_mapping, \
    get_param_from_json_config
from ..version import \
    __version__, \
    __versionalias__


path_modestlib = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
path_options_default = os.path.join(path_modestlib, 'options', 'options_default.json')


class ModestConfig(object):
    def __init__(self, json_config='', **user_opts):
        """Create a job configuration.

        :arg json_config:
             path to JSON file containing configuration parameters or a string in JSON format

        :key CPUs:
             number of CPU cores to be used for building the EDFs and LUTs (default: "None" -> use all available)

        :key log_level:
            the logging level to be used ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'; default: 'INFO')

        :key create_logfile:
            whether to write all log messages to a file (within the output directory)

        :key path_l1b_image:
            input path of the MODIS L1B swath file to be processed (netCDF4; must be given if not contained in
            --json-config.)

        :key platform:
            satellite platform of the MODIS instrument ('terra' or 'aqua'; default: 'terra')

        :key resolution:
            MODIS L1B product type ('1km' or '500m'; default: '1km')

        :key path_band_config:
            input path of a custom band configuration table (reference detector and bad detector flags per band);
            if not given, the table bundled for the given platform and resolution is used

        :key disable_progress_bars:
            whether to disable all progress bars during processing

        :key output_dir:
            output directory where the destriped file and log files are saved; if not given, the input file is
            destriped in place

        :key run_destriping_P:
            Enable EDF destriping

        :key median_shift_mode:
            Which pixels are shifted to restore the image median after destriping
            - 'valid_only': only pixels that stay within 0 and 32767 (default)
            - 'all': all pixels

        :key run_baddet_P:
            Enable the replacement of bad detectors by their nearest good neighbour
        """
        # fixed attributes
        self.version = __version__
        self.versionalias = __versionalias__

        #######################
        # POPULATE PARAMETERS #
        #######################

        # args
        self.json_config = json_config
        self.kwargs = user_opts

        # get validated options dict from JSON-options
        self.json_opts_fused_valid = self.get_json_opts(validate=True)

        gp = self.get_parameter

        ###################
        # general options #
        ###################

        self.CPUs = gp('CPUs', fallback=cpu_count())
        self.log_level = gp('log_level')
        self.create_logfile = gp('create_logfile')
        self.path_l1b_image = self.absPath(gp('path_l1b_image'))
        self.platform = gp('platform')
        self.resolution = gp('resolution')
        self.path_band_config = self.absPath(gp('path_band_config')) or None
        self.disable_progress_bars = gp('disable_progress_bars')

        ##################
        # output options #
        ##################

        self.output_dir = self.absPath(gp('output_dir')) or None

        ###########################
        # processor configuration #
        ###########################

        # destriping
        self.run_destriping_P = gp('run_destriping_P')
        self.median_shift_mode = gp('median_shift_mode')

        # bad_detector
        self.run_baddet_P = gp('run_baddet_P')

        #########################
        # validate final config #
        #########################

        ModestValidator(allow_unknown=True, schema=modest_schema_config_output).validate(self.to_dict())

        # check if given paths point to existing files
        paths = {k: v for k, v in self.__dict__.items() if k.startswith('path_')}
        for k, fp in paths.items():
            if fp and not os.path.isfile(fp):
                raise FileNotFoundError("The file path provided at the '%s' parameter does not point "
                                        "to an existing file (%s)." % (k, fp))

        if not self.path_l1b_image:
            warnings.warn("No MODIS L1B swath file provided. Set the 'path_l1b_image' parameter to run the "
                          "processing chain.", UserWarning, stacklevel=2)

        if not self.run_destriping_P and not self.run_baddet_P:
            warnings.warn('Destriping and bad detector replacement are both disabled. '
                          'The processing chain will not modify any band.', UserWarning, stacklevel=2)

    @staticmethod
    def absPath(path):
        return path if not path or os.path.isabs(path) else os.path.abspath(path)

    def get_parameter(self, key_user_opts, fallback=None):
        # 1. priority: parameters that have directly passed to ModestConfig within user_opts
        if key_user_opts in self.kwargs:
            return self.kwargs[key_user_opts]

        # 2. priority: default options, overridden by eventually provided json_config
        else:
            param = get_param_from_json_config(key_user_opts, self.json_opts_fused_valid)
            if not param:
                if fallback:
                    return fallback
            return param

    def get_json_opts(self, validate=True):
        """Get a dictionary of MoDeST config parameters.

        NOTE: Reads the default options from options_default.json and updates the values with those from the given
              JSON configuration.
        """
        def update_dict(d, u):
            for k, v in u.items():
                if isinstance(v, Mapping):
                    d[k] = update_dict(d.get(k, {}), v)
                else:
                    d[k] = v
            return d

        # read options_default.json
        default_options = get_options(path_options_default, validation=validate)

        ###############################################################################################################
        # if json config is provided (via python bindings or CLI parser -> override all options with that json config #
        ###############################################################################################################

        if self.json_config:
            if self.json_config.startswith("{"):
                try:
                    params_dict = json.loads(jsmin(self.json_config))
                except JSONDecodeError:
                    warnings.warn('The given JSON options string could not be decoded. '
                                  'JSON decoder failed with the following error:')
                    raise
            elif os.path.isfile(self.json_config):
                try:
                    with open(self.json_config, 'r') as inF:
                        params_dict = json.loads(jsmin(inF.read()))
                except JSONDecodeError:
                    warnings.warn('The given JSON options file %s could not be decoded. '
                                  'JSON decoder failed with the following error:' % self.json_config)
                    raise

            else:
                raise ValueError("The parameter 'json_config' must be a JSON formatted string or a JSON file on disk.")

            # convert values to useful data types and update the default values
            params_dict = json_to_python(params_dict)
            update_dict(default_options, params_dict)

        if validate:
            ModestValidator(allow_unknown=True, schema=modest_schema_input).validate(default_options)

        json_options = default_options
        return json_options

    def to_dict(self):
        """Generate a dictionary in the same structure like the one in options_default.json from the current config."""

        def nested_set(dic, keys, value):
            for k in keys[:-1]:
                dic = dic.setdefault(k, {})
            dic[keys[-1]] = value

        outdict = dict()
        for key_user_opts, subkeys in parameter_mapping.items():
            nested_set(outdict, subkeys, getattr(self, key_user_opts))

        return outdict

    def to_jsonable_dict(self):
        return python_to_json(self.to_dict())

    def save(self, path_outfile):
        """Save the ModestConfig instance to a JSON file in the same structure like the one in options_default.json.

        :param path_outfile:    path of the output JSON file
        """
        with open(path_outfile, 'w') as outF:
            json.dump(self.to_jsonable_dict(), outF, skipkeys=False, indent=4)

    def __repr__(self):
        return pformat(self.to_dict())


def json_to_python(value):
    def is_number(s):
        try:
            float(s)
            return True
        except (TypeError, ValueError):
            return False

    if type(value) is dict:
        return {json_to_python(k): json_to_python(v) for k, v in value.items()}
    elif type(value) is list:
        return [json_to_python(v) for v in value]
    else:
        if value == "None":
            return None
        if value is True or value == "true":
            return True
        if value is False or value == "false":
            return False
        if is_number(value):
            try:
                if str(int(value)) != str(float(value)):
                    return int(value)
                else:
                    return float(value)
            except ValueError:
                return float(value)
        else:
            return value


def python_to_json(value):
    if type(value) in [dict, OrderedDict]:
        return {python_to_json(k): python_to_json(v) for k, v in value.items()}
    elif type(value) is list:
        return [python_to_json(v) for v in value]
    elif type(value) is np.ndarray:
        return [python_to_json(v) for v in value.tolist()]
    else:
        if value is None:
            return "None"
        if value is True:
            return "true"
        if value is False:
            return "false"
        if type(value) is datetime.datetime:
            return datetime.datetime.strftime(value, '%Y-%m-%d %H:%M:%S.%f%z')
        else:
            return value


class ModestValidator(Validator):
    def __init__(self, *args, **kwargs):
        """Get an instance of ModestValidator.

        :param args:    Arguments to be passed to cerberus.Validator
        :param kwargs:  Keyword arguments to be passed to cerberus.Validator
        """
        super(ModestValidator, self).__init__(*args, **kwargs)

    def validate(self, document2validate, **kwargs):
        if super(ModestValidator, self).validate(document=document2validate, **kwargs) is False:
            raise ValueError("Options is malformed: %s" % str(self.errors))


def get_options(target: str, validation: bool = True):
    """Return dictionary with all options.

    :param target:      if path to file, then json is used to load, otherwise the default template is used
    :param validation:  True / False, whether to validate options read from files or not
    :return: dictionary with options
    """
    if os.path.isfile(target):
        with open(target, "r") as fl:
            options = json_to_python(json.loads(jsmin(fl.read())))

        if validation is True:
            ModestValidator(allow_unknown=True, schema=modest_schema_input).validate(options)

        return options
    else:
        raise FileNotFoundError("Options file not found at file path %s." % target)
