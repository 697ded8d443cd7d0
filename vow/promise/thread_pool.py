# -*- coding: utf-8 -*-

from concurrent.futures import ThreadPoolExecutor as Executor

from ..common import config
from .deferred import Deferred


class ThreadPoolExecutor(object):
    """Execute callables asynchronously on demand, in another threads."""

    def __init__(self, max_workers=None, scheduler=None):
        """Initialize the thread pool

        Args:
            max_workers: The maximum number of threads that can be used to
                execute the given calls. Default to the "thread_pool_workers"
                config entry.
            scheduler (Scheduler, optional): scheduler of the promises
                returned by `submit()`.
        """
        if max_workers is None:
            max_workers = config.get('thread_pool_workers')
        self._executor = Executor(max_workers)
        self._scheduler = scheduler

    def submit(self, callback, *args, **kwargs):
        """Schedule the callable to be executed and return a Promise.

        Args:
            callback (callable): callback who will run in another thread.
            *args: argument passed to callback.
            **kwargs: keywords arguments passed to callback.
        Returns:
            Promise: Promise who resolve after the callback has been executed.
                It's fulfilled with the value returned by the callback.
                If the callback raise an exception, the promise is rejected
                with this exception.
        """
        df = Deferred(scheduler=self._scheduler,
                      _name=getattr(callback, '__name__', None))

        def on_future_done(f):
            error = f.exception()
            if error is not None:
                df.reject(error)
            else:
                df.resolve(f.result())

        f = self._executor.submit(callback, *args, **kwargs)
        f.add_done_callback(on_future_done)

        return df.promise

    def shutdown(self, wait=True):
        """Free the threads once all submitted callables are done."""
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, _type, _value, _tb):
        self.shutdown()
