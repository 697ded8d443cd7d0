# -*- coding: utf-8 -*-


class TimeoutError(Exception):
    """An operation could not be executed within the time allowed."""
    pass


class SelfResolutionError(TypeError):
    """A promise has been resolved with itself.

    Adopting its own state would make the promise wait for itself forever.
    """
    pass


class RejectionError(Exception):
    """A promise has been rejected with a value who is not an exception.

    Raised by ``Promise.result()``, as a non-exception value can't be raised.

    Attributes:
        reason: the original rejection reason.
    """

    def __init__(self, reason):
        Exception.__init__(self, 'Promise rejected with a non-exception '
                                 'value: %r' % (reason,))
        self.reason = reason
