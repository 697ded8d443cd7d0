# -*- coding: utf-8 -*-

from .promise import Promise


class Deferred(object):
    """The "creator" side of an async task.

    A Deferred is the "creator" side of an async task, whereas a Promise
    represents the asynchronous value from the "consumer" side. Only the
    holder of the Deferred can settle the promise.

    Attributes:
        promise (Promise): the Promise associated to the Deferred.
        resolve (function): resolve the promise with a value. If the value is
            a thenable, the promise will follow it.
        fulfill (function): fulfill the promise with the value as is, even
            if it's a thenable.
        reject (function): reject the promise with a reason.
    """

    def __init__(self, scheduler=None, _name=None):
        self.promise = Promise(self._executor, scheduler=scheduler,
                               _name=_name or 'DEFERRED')
        self.fulfill = self.promise._fulfill
        self.reject = self.promise._reject

    def _executor(self, resolve, reject):
        self.resolve = resolve


def defer(scheduler=None):
    """Create a new Deferred, with its pending promise.

    This is the factory used by the test suites of the Promises/A+ standard.

    Args:
        scheduler (Scheduler, optional): scheduler used by the promise.
    Returns:
        Deferred
    """
    return Deferred(scheduler=scheduler)
