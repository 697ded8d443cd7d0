# -*- coding: utf-8 -*-

import functools

from .deferred import Deferred
from .errors import RejectionError
from .util import is_thenable


def reduce_coroutine(safeguard=False, scheduler=None):
    """Decorator who converts a coroutine of promises into a single promise.

    The greatest interest is the ability to write a function in an
    synchronous-like style, using many asynchronous Promises.
    Whatever is the number of Promises or async calls used, the result will
    always be an unique Promise wrapping the whole process.

    Each time the generator yields a thenable, the generator is resumed with
    its value when fulfilled. If it's rejected, the reason is thrown in the
    generator (wrapped in a `RejectionError` if it's not an exception). The
    last value yielded (or the returned value) is the result of the Promise.

    Args:
        safeguard (boolean): if true, use `Promise.safeguard()` on the
            resulting promise.
        scheduler (Scheduler, optional): scheduler of the resulting promise.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            """
            Args:
                *args
                **kwargs
            Returns:
                Promise<*>
            """
            df = Deferred(scheduler=scheduler,
                          _name='COROUTINE %s' % func.__name__)
            if safeguard:
                df.promise.safeguard()

            try:
                # Create generator; Initialization phase
                gen = func(*args, **kwargs)
            except Exception as error:
                df.reject(error)
                return df.promise

            def _call_next_or_set_result(value):
                if is_thenable(value):
                    value.then(iter_next, iter_error)
                else:
                    gen.close()
                    df.resolve(value)

            def iter_next(yielded_value):
                try:
                    next_value = gen.send(yielded_value)
                except StopIteration as stop:
                    if stop.value is not None:
                        return df.resolve(stop.value)
                    return df.resolve(yielded_value)
                except Exception as error:
                    return df.reject(error)
                _call_next_or_set_result(next_value)

            def iter_error(raised_error):
                if isinstance(raised_error, BaseException):
                    thrown = raised_error
                else:
                    thrown = RejectionError(raised_error)
                try:
                    next_value = gen.throw(thrown)
                except StopIteration as stop:
                    if stop.value is not None:
                        return df.resolve(stop.value)
                    return df.reject(raised_error)
                except Exception as error:
                    # Not caught by the generator: keep the original reason.
                    if error is thrown:
                        return df.reject(raised_error)
                    return df.reject(error)
                _call_next_or_set_result(next_value)

            # Start and resolve loop.
            try:
                f = next(gen)
            except StopIteration as stop:
                df.resolve(stop.value)
                return df.promise
            except Exception as error:
                df.reject(error)
                return df.promise
            _call_next_or_set_result(f)

            return df.promise

        return wrapper
    return decorator
