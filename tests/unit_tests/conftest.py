# -*- coding: utf-8 -*-

import logging
import pytest

from vow.common import config
from vow.promise import QueueScheduler, ThreadScheduler, \
    set_default_scheduler


@pytest.fixture
def scheduler():
    """Single-threaded scheduler, executed on demand by `scheduler.run()`.

    Returns:
        QueueScheduler
    """
    return QueueScheduler()


@pytest.fixture(autouse=True)
def thread_scheduler(request):
    """Use a new ThreadScheduler as default scheduler for each test.

    The scheduler is stopped at the end of the test.

    Returns:
        ThreadScheduler: the default scheduler.
    """
    default_scheduler = ThreadScheduler(name='test')
    set_default_scheduler(default_scheduler)

    def _stop():
        set_default_scheduler(None)
        default_scheduler.shutdown()
    request.addfinalizer(_stop)
    return default_scheduler


@pytest.fixture
def config_dir(tmpdir, monkeypatch):
    """Redirect the config file in a temporary directory.

    The values already loaded are forgotten before and after the test.

    Returns:
        str: path of the config directory.
    """
    monkeypatch.setattr('vow.common.path.get_config_dir',
                        lambda: str(tmpdir))
    config.reset()
    yield str(tmpdir)
    config.reset()


@pytest.fixture
def restore_levels(request):
    """Restore the levels of the main loggers at the end of the test."""
    levels = {name: logging.getLogger(name).level
              for name in ('', 'vow', 'vow.promise')}

    def _restore():
        for name, level in levels.items():
            logging.getLogger(name).setLevel(level)
    request.addfinalizer(_restore)
