# -*- coding: utf-8 -*-


def is_thenable(value):
    """Check if an object can be chained, like a Promise, or is a "result".

    The promise module uses this function to differentiate "chainable" objects
    and direct return values, when using a callback who can returns both.

    Note that reading the `then` attribute may execute arbitrary code (if it's
    a property). An error raised that way is considered as "not thenable".
    The resolution procedure reads the attribute by itself, as it must
    reject the promise with such an error.

    Returns:
        boolean: True if the value has an attribute 'then' who is callable.
            False if not.
    """
    try:
        return callable(getattr(value, 'then', None))
    except Exception:
        return False
