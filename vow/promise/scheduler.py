# -*- coding: utf-8 -*-

"""Schedulers used by the promises to execute their callbacks.

A scheduler accepts a callable without arguments, and guarantees it will be
executed later, never in the stack frame of the caller of ``schedule()``.
Tasks scheduled by the same scheduler are executed in FIFO order.

Every promise has a scheduler. By default, it's the one returned by
``get_default_scheduler()``, built from the "scheduler" config entry.
"""

from collections import deque
import logging
import queue
import threading

from ..common import config

_logger = logging.getLogger(__name__)


class Scheduler(object):
    """Base class of the schedulers."""

    def schedule(self, task):
        """Register a task to be executed later.

        Args:
            task (callable): function called without argument.
        """
        raise NotImplementedError()

    @staticmethod
    def _run_task(task):
        try:
            task()
        except Exception:
            _logger.exception('Scheduled task %r raised an exception!', task)


class QueueScheduler(Scheduler):
    """Single-threaded scheduler, executing its tasks on demand.

    Tasks are appended to a queue, and are executed only when ``run()`` is
    called. It's the equivalent of one "tick" of an event loop: all tasks,
    including the ones added during the execution, are executed before
    ``run()`` returns.
    """

    def __init__(self):
        self._tasks = deque()
        self._running = False

    def schedule(self, task):
        self._tasks.append(task)

    def run(self):
        """Execute all pending tasks, until the queue is empty.

        A call to ``run()`` from inside a task does nothing: the task
        currently running must return before the next one starts.

        Returns:
            int: number of tasks executed.
        """
        if self._running:
            return 0

        self._running = True
        nb_tasks = 0
        try:
            while self._tasks:
                self._run_task(self._tasks.popleft())
                nb_tasks += 1
        finally:
            self._running = False
        return nb_tasks

    @property
    def nb_pending_tasks(self):
        return len(self._tasks)


class ThreadScheduler(Scheduler):
    """Scheduler executing its tasks in a dedicated thread.

    The worker thread is started at the first call to ``schedule()``. It's a
    daemon thread: it will not prevent the program to exit.

    As all callbacks are executed by the same thread, a callback must never
    wait for another promise using the same scheduler (eg: by calling
    ``Promise.result()``). It would wait forever.
    """

    _STOP = object()

    def __init__(self, name='scheduler'):
        """
        Args:
            name (str): name of the worker thread.
        """
        self._name = name
        self._tasks = None
        self._thread = None
        self._lock = threading.Lock()

    def schedule(self, task):
        with self._lock:
            if self._thread is None:
                _logger.debug('Start scheduler thread "%s"', self._name)
                # Each thread has its own queue: a stopping thread must not
                # consume the tasks of its successor.
                self._tasks = queue.Queue()
                self._thread = threading.Thread(target=self._run_worker,
                                                args=(self._tasks,),
                                                name='Worker %s' % self._name)
                self._thread.daemon = True
                self._thread.start()
            self._tasks.put(task)

    def shutdown(self, wait=True):
        """Stop the worker thread, once all tasks already scheduled are done.

        The scheduler can be reused after: a new thread will be started.

        Args:
            wait (boolean): if True, returns only when the thread is joined.
        """
        with self._lock:
            thread, self._thread = self._thread, None
            if thread is None:
                return
            _logger.debug('Stop scheduler thread "%s"', self._name)
            self._tasks.put(self._STOP)
        if wait and thread is not threading.current_thread():
            thread.join()

    def is_worker_thread(self):
        """Returns True if the caller is executed by the worker thread."""
        with self._lock:
            return threading.current_thread() is self._thread

    def __enter__(self):
        return self

    def __exit__(self, _type, _value, _tb):
        self.shutdown()

    def _run_worker(self, tasks):
        while True:
            task = tasks.get()
            if task is self._STOP:
                break
            self._run_task(task)
        _logger.debug('Scheduler thread "%s" has returned.', self._name)


class AsyncioScheduler(Scheduler):
    """Scheduler using an asyncio event loop.

    Tasks are executed by the loop, as soon as possible. It's safe to
    schedule tasks from any thread.
    """

    def __init__(self, loop):
        """
        Args:
            loop (asyncio.AbstractEventLoop): loop executing the tasks.
        """
        self._loop = loop

    def schedule(self, task):
        self._loop.call_soon_threadsafe(self._run_task, task)


_schedulers = {
    'thread': ThreadScheduler,
    'queue': QueueScheduler
}

_default_scheduler = None
_default_lock = threading.Lock()


def get_default_scheduler():
    """Returns the scheduler used by promises created without scheduler.

    If not set by ``set_default_scheduler()``, it's created at the first call,
    from the "scheduler" config entry.

    Returns:
        Scheduler
    """
    global _default_scheduler

    with _default_lock:
        if _default_scheduler is None:
            name = config.get('scheduler')
            if name not in _schedulers:
                _logger.warning('Unknown scheduler "%s" in config. The '
                                'thread scheduler will be used.', name)
                name = 'thread'
            _default_scheduler = _schedulers[name]()
            _logger.debug('Default scheduler is now %r', _default_scheduler)
        return _default_scheduler


def set_default_scheduler(scheduler):
    """Replace the default scheduler.

    Promises already created keep their scheduler.

    Args:
        scheduler (Scheduler): the new default scheduler. If None, the next
            call to ``get_default_scheduler()`` will create a new one from the
            config.
    """
    global _default_scheduler

    with _default_lock:
        _default_scheduler = scheduler
