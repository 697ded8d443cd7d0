# -*- coding: utf-8 -*-

from .__version__ import __version__  # noqa

import logging

from .common import config
from .common import log
from .promise import Deferred, Promise, defer
from .promise import scheduler

__all__ = ['Deferred', 'Promise', 'defer', 'configure']


def configure():
    """Load the config file and apply it.

    Only the levels of the vow loggers are set: the root logger is left to
    the application. The default scheduler is replaced by the one of the
    config. Promises already created keep their scheduler.
    """
    config.load()
    if config.get('debug_mode'):
        logging.getLogger('vow').setLevel(logging.DEBUG)
    else:
        logging.getLogger('vow').setLevel(logging.INFO)
    log.set_logs_level(config.get('log_levels'))
    scheduler.set_default_scheduler(None)
    logging.getLogger(__name__).debug('Default scheduler: %r',
                                      scheduler.get_default_scheduler())
