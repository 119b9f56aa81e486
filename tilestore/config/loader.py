# This file is part of the TileStore project.
# Copyright (C) 2026 The TileStore Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Configuration loading.
"""

import os

import yaml

from tilestore.cache.sql import SQLTileCache, DEFAULT_TABLE_NAME
from tilestore.config.validator import validate
from tilestore.exception import ConfigurationError
from tilestore.image import ImageSource

import logging
log = logging.getLogger('tilestore.config')

CONNECTION_ENV = 'TILESTORE_CONNECTION'

DEFAULT_TIMEOUT = 30

# libyaml is optional
SafeLoader = getattr(yaml, 'CSafeLoader', yaml.SafeLoader)


def load_yaml(doc, name='<string>'):
    """
    Load the configuration dict from a YAML string or file object.
    Syntax errors and documents that are not a dictionary raise
    `ConfigurationError` with the `name` of the document.
    """
    try:
        data = yaml.load(doc, Loader=SafeLoader)
    except yaml.YAMLError as ex:
        raise ConfigurationError('invalid YAML in %s: %s' % (name, ex))
    if not isinstance(data, dict):
        raise ConfigurationError('%s is not a YAML dictionary' % (name, ))
    return data


def load_configuration_file(conf_file):
    """
    Return the validated configuration dict of `conf_file` (filename or
    file object).
    """
    if not isinstance(conf_file, str):
        return check_configuration(load_yaml(conf_file, getattr(conf_file, 'name', '<file>')))

    log.info('reading: %s', conf_file)
    try:
        with open(conf_file, 'rb') as f:
            conf_dict = load_yaml(f, conf_file)
    except OSError as ex:
        raise ConfigurationError('unable to read configuration: %s' % (ex, ))
    return check_configuration(conf_dict)


def check_configuration(conf_dict):
    if CONNECTION_ENV in os.environ and isinstance(conf_dict.get('cache'), dict):
        conf_dict['cache']['connection'] = os.environ[CONNECTION_ENV]

    errors = validate(conf_dict)
    if errors:
        for error in errors:
            log.warning(error)
        raise ConfigurationError('invalid configuration: ' + '; '.join(errors))
    return conf_dict


def load_configuration(conf, decoder=None, on_error=None):
    """
    Create a `SQLTileCache` from a configuration file or dict.

    :param conf: filename, file object or configuration dict
    :param decoder: decoder for the cached tiles, defaults to `ImageSource`
    """
    if isinstance(conf, dict):
        # do not modify the dict of the caller
        conf_dict = dict(conf)
        if isinstance(conf_dict.get('cache'), dict):
            conf_dict['cache'] = dict(conf_dict['cache'])
        conf_dict = check_configuration(conf_dict)
    else:
        conf_dict = load_configuration_file(conf)

    cache_conf = conf_dict['cache']
    return SQLTileCache(
        cache_conf['connection'],
        decoder or ImageSource,
        table_name=cache_conf.get('table_name', DEFAULT_TABLE_NAME),
        timeout=cache_conf.get('timeout', DEFAULT_TIMEOUT),
        wal=cache_conf.get('wal', False),
        on_error=on_error,
    )
