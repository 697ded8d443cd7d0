# -*- coding: utf-8 -*-

import functools

from .promise import Promise


def wrap_promise(f):
    """Decorator who converts the result in a Promise object.

    If the function decorated returns a Promise, it's transmitted as is.
    Else, a new Promise is created with the returned value as result. If the
    function raises an exception, the Promise is rejected with it.
    """
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return Promise.resolve(f(*args, **kwargs))
        except Exception as error:
            return Promise.reject(error)

    return wrapper
