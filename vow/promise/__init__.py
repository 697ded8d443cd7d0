# -*- coding: utf-8 -*-

from .decorators import wrap_promise
from .deferred import Deferred, defer
from .errors import RejectionError, SelfResolutionError, TimeoutError
from .promise import Promise
from .reduce_coroutine import reduce_coroutine
from .scheduler import (AsyncioScheduler, QueueScheduler, Scheduler,
                        ThreadScheduler, get_default_scheduler,
                        set_default_scheduler)
from .thread_pool import ThreadPoolExecutor
from .util import is_thenable

__all__ = ['is_thenable', 'Deferred', 'defer', 'Promise', 'RejectionError',
           'SelfResolutionError', 'TimeoutError', 'reduce_coroutine',
           'ThreadPoolExecutor', 'wrap_promise', 'Scheduler',
           'QueueScheduler', 'ThreadScheduler', 'AsyncioScheduler',
           'get_default_scheduler', 'set_default_scheduler']
