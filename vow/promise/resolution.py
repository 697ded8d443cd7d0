# -*- coding: utf-8 -*-

"""Promise resolution procedure.

This is the algorithm used each time a promise is resolved with a value `x`
(by its executor, or by the value returned by a callback of `then()`). It
decides if `x` is the result, or if `x` is a "thenable" whose state must be
adopted.

Any object with a callable `then` attribute is a thenable, whatever its
origin. This is how promises of other libraries, or any object respecting the
same interface, can be mixed with our promises.
"""

import logging
from functools import partial
from threading import Lock, local
from types import MemberDescriptorType

from .errors import SelfResolutionError

_logger = logging.getLogger(__name__)

# Number of nested thenables unwrapped in the same stack before the next
# step is delegated to the scheduler.
MAX_SYNC_DEPTH = 32

_depth = local()


class _ResolutionContext(object):
    """One-shot guard of a resolution attempt.

    A foreign thenable may call both of its callbacks, call them several
    times, or raise an error after having called one of them. Only the first
    of these signals has an effect.
    """

    def __init__(self):
        self.settled = False
        self._lock = Lock()

    def acquire(self):
        """Mark the context as settled.

        Returns:
            boolean: True if the caller is the first to settle the context.
        """
        with self._lock:
            if self.settled:
                return False
            self.settled = True
            return True


def resolve_promise(promise, x):
    """Resolve a promise with a value or a thenable.

    - If `x` is the promise itself, it's rejected with a
      `SelfResolutionError`.
    - If `x` is a thenable, `x.then()` is called, and the promise will take
      the state of `x` when it's settled. If `x` is fulfilled with another
      thenable, the procedure is applied again.
    - Otherwise, the promise is fulfilled with `x`.

    If reading or calling `x.then` raises an error, the promise is rejected
    with this error, unless `x` has already called one of its callbacks.
    An `AttributeError` raised by the getter of a `then` declared by the
    class of `x` is such an error; it's not the absence of `then`.

    Nested thenables are unwrapped in the current stack up to
    `MAX_SYNC_DEPTH` levels. Deeper levels are continued by the scheduler of
    the promise.

    Args:
        promise (Promise): pending promise to resolve.
        x: the value.
    """
    if x is promise:
        promise._reject(SelfResolutionError(
            'Promise "%s" can\'t be resolved with itself.' % promise._name))
        return

    # `then` must be read only once: it can be a property.
    try:
        then = x.then
    except AttributeError as error:
        if _defines_then(x):
            _logger.debug('Unable to read "then" of %r: %r', x, error)
            promise._reject(error)
            return
        then = None
    except Exception as error:
        _logger.debug('Unable to read "then" of %r: %r', x, error)
        promise._reject(error)
        return

    if not callable(then):
        promise._fulfill(x)
        return

    context = _ResolutionContext()

    def on_fulfilled(value):
        if context.acquire():
            _resolve_nested(promise, value)

    def on_rejected(reason):
        if context.acquire():
            promise._reject(reason)

    try:
        then(on_fulfilled, on_rejected)
    except Exception as error:
        if context.acquire():
            promise._reject(error)
        else:
            _logger.debug('Thenable %r raised an error after being settled. '
                          'Error ignored: %r', x, error)


def _defines_then(x):
    """Returns True if the class of `x` declares a `then` attribute.

    An `AttributeError` raised when reading `x.then` means either there is no
    `then` at all, or the getter of an existing `then` has failed. Only the
    latter is an error. An empty slot is an absent attribute.
    """
    for klass in type(x).__mro__:
        if 'then' in vars(klass):
            return not isinstance(vars(klass)['then'], MemberDescriptorType)
    return False


def _resolve_nested(promise, value):
    """Apply the resolution procedure to the value of a thenable.

    A chain of thenables calling their callbacks synchronously would unwrap
    each level in a new stack frame. Past `MAX_SYNC_DEPTH` levels, the next
    step is executed by the scheduler of the promise, from a fresh stack.
    """
    depth = getattr(_depth, 'value', 0)
    if depth >= MAX_SYNC_DEPTH:
        promise.scheduler.schedule(partial(resolve_promise, promise, value))
        return

    _depth.value = depth + 1
    try:
        resolve_promise(promise, value)
    finally:
        _depth.value = depth
