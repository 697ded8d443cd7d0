# -*- coding: utf-8 -*-

import logging
from functools import partial
from threading import Condition

from .errors import RejectionError, TimeoutError
from .resolution import _ResolutionContext, resolve_promise
from .scheduler import get_default_scheduler

_logger = logging.getLogger(__name__)

_MAX_REPR_LENGTH = 10


class Promise(object):
    """It represents an operation expected to be completed in the future.

    A Promise is used for asynchronous computation. It contains a value not yet
    known when the Promise is created. It allows to set callbacks who will be
    called as soon as the result is known. It's a "promise" of a future value.

    A Promise is settled only once: it's either fulfilled with a value, or
    rejected with a reason (usually an exception). Once settled, its state
    and its result never change.

    The callbacks are never called directly: they're always executed by the
    scheduler of the Promise, after the call to `then()` has returned.

    All calls to the methods are thread-safe.
    """

    PENDING = 'pending'
    FULFILLED = 'fulfilled'
    REJECTED = 'rejected'

    def __init__(self, executor, scheduler=None, _name=None, _previous=None):
        """Constructor of the Promise.

        Generate the two callbacks for the executor, then call the `executor`.
        It means the executor will be fully executed before the constructor
        returns.
        If the executor raises an exception, it's caught and the Promise is
        rejected with this exception.

        Args:
            executor (callable): Takes 2 callable arguments:
                The first one, `resolve()` should be called when the Promise
                is fulfilled (ie the tasks is done) and must accept the
                result's value as its only argument. If this value is another
                Promise (or any thenable), this Promise will follow it.
                The second, `reject()`, should be called when an error
                occurs. Its argument should be an instance of `Exception`.
                Only the first call to one of these callbacks has an effect.
            scheduler (Scheduler, optional): scheduler used to execute the
                callbacks. By default, the default scheduler is used.
            _name (str): if set, name used when converted to text.
        """

        self._state = self.PENDING
        self._result = None
        self._condition = Condition()
        if scheduler is None:
            scheduler = get_default_scheduler()
        self._scheduler = scheduler
        self._name = _name or getattr(executor, '__name__', '???')
        self._previous = _previous

        # List of (next_promise, on_fulfilled, on_rejected)
        self._subscribers = []

        context = _ResolutionContext()

        def resolve(value):
            if context.acquire():
                resolve_promise(self, value)

        def reject(reason):
            if context.acquire():
                self._reject(reason)

        try:
            executor(resolve, reject)
        except Exception as error:
            reject(error)

    @property
    def state(self):
        """str: one of PENDING, FULFILLED or REJECTED."""
        with self._condition:
            return self._state

    @property
    def scheduler(self):
        return self._scheduler

    def result(self, timeout=None):
        """Wait for the result and returns it as soon as it's available.

        Args:
            timeout (int, optional): if set, maximum time to wait the promise
                to be fulfilled. By default, it can wait indefinitely.
        Returns:
            *: value encapsulated, defined by the operation.
        Raises:
            TimeoutError: if the promise is not settled within the delay.
            RejectionError: if the promise is rejected with a value who is not
                an exception.
            *: If the promise is rejected, the rejection cause is raised.
        """
        with self._condition:
            if not self._condition.wait_for(self._is_settled, timeout):
                raise TimeoutError()
            state, result = self._state, self._result

        if state == self.REJECTED:
            if isinstance(result, BaseException):
                raise result
            raise RejectionError(result)
        return result

    def exception(self, timeout=None):
        """Wait for the promise rejection and returns it's error.

        Args:
            timeout (int, optional): if set, maximum time to wait the promise
                to be settled. By default, it can wait indefinitely.
        Returns:
            *: the reason of the rejection of the Promise.
            None: if the promise is fulfilled.
        Raises:
            TimeoutError: if the promise is not settled within the delay.
        """
        with self._condition:
            if not self._condition.wait_for(self._is_settled, timeout):
                raise TimeoutError()
            if self._state == self.REJECTED:
                return self._result
            return None

    def then(self, on_fulfilled=None, on_rejected=None):
        """Create a new promise from callbacks called when this one is settled.

        If the promise is fulfilled, the `on_fulfilled` callback will be
        called. Otherwise (the promise has been rejected), the `on_rejected`
        callback is called. In both cases, the callback is called by the
        scheduler, after `then()` has returned, even if the promise is already
        settled.

        The callback will define the state of the returned Promise. If the
        callback raises an exception, the new Promise is rejected. The
        callback can returns:
        - A value: the new promise will be fulfilled with this value.
        - Another Promise, or any object with a `then` method: when fulfilled
            or rejected, will transfer its status (state and result/error) to
            the Promise returned by this method.

        If a callback is not defined (or not callable), the state of the self
        promise is transferred to the new promise (the state and the
        value/error).

        Args:
            on_fulfilled (callable, optional):  This callback will receive the
                result of the original promise as argument.
            on_rejected (callable, optional): This callback will receive the
                exception raised by the original promise as argument.
        Returns:
            Promise<*>: new promise depending of self.
        """
        if not on_rejected:
            name = '%s' % getattr(on_fulfilled, '__name__', '???')
        elif not on_fulfilled:
            name = '<None, %s>' % getattr(on_rejected, '__name__', '???')
        else:
            name = '<%s, %s>' % (getattr(on_fulfilled, '__name__', '???'),
                                 getattr(on_rejected, '__name__', '???'))

        next_promise = Promise(_wait, scheduler=self._scheduler, _name=name,
                               _previous=self)
        self._subscribe(next_promise, on_fulfilled, on_rejected)
        return next_promise

    def catch(self, on_rejected):
        """Create a new promise with a callback called when an error occurs.

        Alias of `self.then(None, on_rejected)`

        Args:
            on_rejected (callable): Must take an argument instance of Exception
                (or one of its subclass). Will be called if `self` is rejected.
        returns:
            Promise<*>: new Promise chained to `self`. If `self` is fulfilled,
                the promised value will be the same as `self`. Otherwise, the
                value returned by the `on_rejected()` callback.
        """
        return self.then(None, on_rejected)

    def safeguard(self):
        """Catch all errors and log them with the most details possible.

        This method is aimed to protect the program from uncaught rejected
        Promise. If no error handler has been set (via then() or catch()), the
        default behavior is to do nothing, and thus, errors are silently
        ignored.
        Calling `safeguard()` after all chains are set will catch these errors,
        and log them as ERROR with the maximum of details possible.
        """
        def guard(error):
            if isinstance(error, BaseException):
                _logger.error('[SAFEGUARD] %s', self,
                              exc_info=(type(error), error,
                                        error.__traceback__))
            else:
                _logger.error('[SAFEGUARD] %s rejected with %r', self, error)

        self.then(None, guard)

    def __repr__(self):
        return 'Promise(%s)' % self._inner_print()

    def _inner_print(self):
        """Describe the chain of promises ending with this one.

        Only the last `_MAX_REPR_LENGTH` promises of the chain are listed.
        """
        items = []
        promise = self
        while promise is not None and len(items) < _MAX_REPR_LENGTH:
            items.append('%s %s' % (promise._name, promise._state_letter()))
            promise = promise._previous
        if promise is not None:
            items.append('...')
        return ' -> '.join(reversed(items))

    def _state_letter(self):
        with self._condition:
            if self._state == self.REJECTED:
                return 'R'
            elif self._state == self.FULFILLED:
                return 'F'
            return 'P'

    @classmethod
    def resolve(cls, value, scheduler=None):
        """Create a promise who resolves the selected value.

        Args:
            value: result of the promise. If it's a Promise, it's returned as
                is. If it's another thenable, the new Promise follows it.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise: new Promise resolved with the value passed in parameter.
        """
        if isinstance(value, Promise):
            return value
        return cls(lambda ok, error: ok(value), scheduler=scheduler,
                   _name='RESOLVE')

    @classmethod
    def reject(cls, reason, scheduler=None):
        """Create a Promise rejected for the reason specified.

        Args:
            reason: Exception set to the Promise
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise: new Promise already rejected.
        """
        return cls(lambda ok, error: error(reason), scheduler=scheduler,
                   _name='REJECT')

    def _is_settled(self):
        return self._state != self.PENDING

    def _fulfill(self, value):
        self._settle(self.FULFILLED, value)

    def _reject(self, reason):
        self._settle(self.REJECTED, reason)

    def _settle(self, state, result):
        """Set the final state of the promise, then notify the subscribers.

        If the promise is already settled, nothing is done.
        """
        with self._condition:
            if self._state != self.PENDING:
                _logger.debug('Try to settle Promise %r already settled. New '
                              'state %s will be ignored: %r', self, state,
                              result)
                return
            self._state = state
            self._result = result
            subscribers, self._subscribers = self._subscribers, None

            self._condition.notify_all()

        for next_promise, on_fulfilled, on_rejected in subscribers:
            self._dispatch(next_promise, on_fulfilled, on_rejected)

    def _subscribe(self, next_promise, on_fulfilled, on_rejected):
        with self._condition:
            if self._state == self.PENDING:
                self._subscribers.append(
                    (next_promise, on_fulfilled, on_rejected))
                return

        self._dispatch(next_promise, on_fulfilled, on_rejected)

    def _dispatch(self, next_promise, on_fulfilled, on_rejected):
        """Schedule the callback matching the state, or the pass-through."""
        if self._state == self.FULFILLED:
            callback = on_fulfilled
        else:
            callback = on_rejected

        if callable(callback):
            task = partial(_execute_callback, next_promise, callback,
                           self._result)
        else:
            task = partial(_transfer_state, next_promise, self._state,
                           self._result)
        self._scheduler.schedule(task)


def _wait(resolve, reject):
    """Executor of the promises created by `then()`.

    They are settled by the subscription of the previous promise.
    """
    pass


def _execute_callback(next_promise, callback, value):
    try:
        x = callback(value)
    except Exception as error:
        _logger.debug('Callback %s of %r raised an exception: %r',
                      getattr(callback, '__name__', '???'), next_promise,
                      error)
        next_promise._reject(error)
        return
    resolve_promise(next_promise, x)


def _transfer_state(next_promise, state, result):
    try:
        next_promise._settle(state, result)
    except Exception as error:
        next_promise._reject(error)
