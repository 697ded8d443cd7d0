# -*- coding: utf-8 -*-

import pytest

from vow.promise import Deferred, Promise, TimeoutError, defer


class TestDeferred(object):

    def test_deferred_resolve_promise(self):
        df = Deferred()
        assert isinstance(df.promise, Promise)

        with pytest.raises(TimeoutError):
            df.promise.result(0.001)
        df.resolve('Value')
        assert df.promise.result(0.001) == 'Value'

    def test_deferred_reject_promise(self):
        class MyException(Exception):
            pass

        df = Deferred()
        with pytest.raises(TimeoutError):
            df.promise.result(0.001)
        df.reject(MyException())

        with pytest.raises(MyException):
            df.promise.result(0.001)

    def test_deferred_resolve_with_promise(self):
        """resolve() follows the state of a thenable."""
        df = Deferred()
        other_df = Deferred()
        df.resolve(other_df.promise)

        with pytest.raises(TimeoutError):
            df.promise.result(0.001)
        other_df.resolve(12)
        assert df.promise.result(1) == 12

    def test_deferred_fulfill_with_promise(self):
        """fulfill() settles the promise directly, even with a thenable."""
        df = Deferred()
        other = Promise.resolve(12)
        df.fulfill(other)
        assert df.promise.result(0.001) is other

    def test_settle_twice(self):
        class MyException(Exception):
            pass

        df = defer()
        df.fulfill(1)
        df.fulfill(2)
        df.reject(MyException())
        df.resolve(3)
        assert df.promise.state == Promise.FULFILLED
        assert df.promise.result(0.001) == 1

    def test_defer_with_scheduler(self, scheduler):
        df = defer(scheduler)
        assert df.promise.scheduler is scheduler
        assert df.promise.then().scheduler is scheduler
