# -*- coding: utf-8 -*-

"""Manages settings and config file.

Settings are loaded from the ``vow.ini`` file of the user config directory.
If they don't exists, default values are provided.
When an option is set, the config file is updated.

``load()`` should be called before reading the settings; otherwise, only the
default values are returned.
"""

import configparser
import logging
import os.path
from . import path as vow_path

_logger = logging.getLogger(__name__)


# Default config dict. Values not present in this dict are not valid.
# Each entry contains the type expected, and the default value.
_default_config = {
    'scheduler': {'type': str, 'default': 'thread'},
    'thread_pool_workers': {'type': int, 'default': 4},
    'debug_mode': {'type': bool, 'default': False},
    'log_levels': {'type': dict, 'default': {}}
}

# Actual config parser
_config_parser = configparser.ConfigParser()
_config_parser.add_section('config')


def _get_config_file_path():
    return os.path.join(vow_path.get_config_dir(), 'vow.ini')


def load():
    """Find and load the config file."""
    config_file_path = _get_config_file_path()

    if not _config_parser.read(config_file_path):
        _logger.info('No config file found at %s. Default values will be '
                     'used.', config_file_path)


def get(key):
    """Find and return a configuration entry

    If the entry is not specified in the config file, a default value is
    returned. It's also the case when the stored value can't be converted to
    the expected type.

    Args:
        key (string): the entry key.
    Returns:
        The corresponding value found.
    Raises:
        KeyError: if the config entry doesn't exists.
    """
    if key not in _default_config:
        raise KeyError(key)
    try:
        if _default_config[key]['type'] is bool:
            return _config_parser.getboolean('config', key)
        elif _default_config[key]['type'] is int:
            return _config_parser.getint('config', key)
        elif _default_config[key]['type'] is dict:
            # Dict entries are in the form 'key=value;key2=value2'
            dict_str = _config_parser.get('config', key)
            result = {}
            for pair in filter(None, dict_str.split(';')):
                try:
                    (k, v) = pair.split('=')
                    result[k.strip()] = v.strip()
                except ValueError:
                    _logger.warning('Unable to parse pair key=value: "%s"'
                                    % pair)
            return result
        else:
            return _config_parser.get('config', key)
    except configparser.NoOptionError:
        return _default_config[key]['default']
    except ValueError:
        _logger.warning('Invalid value for config entry "%s". The default '
                        'value will be used.', key)
        return _default_config[key]['default']


def set(key, value):
    """Set a configuration entry.

    Args:
        key (string): the entry key.
        value: the new value to set. It will be converted to string. Dict
            values are serialized in the form 'key=value;key2=value2'.
    Raises:
        KeyError: if the config entry is not valid.
    """
    if key not in _default_config:
        raise KeyError(key)
    if isinstance(value, dict):
        value = ';'.join('%s=%s' % item for item in value.items())
    _config_parser.set('config', key, str(value))
    config_file_path = _get_config_file_path()
    try:
        with open(config_file_path, 'w') as config_file:
            _config_parser.write(config_file)
        _logger.debug('Config file modified.')
    except IOError:
        _logger.warning('Unable to write in the config file', exc_info=True)


def reset():
    """Forget all values loaded or set. Defaults values are used again."""
    _config_parser.remove_section('config')
    _config_parser.add_section('config')
