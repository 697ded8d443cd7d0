# -*- coding: utf-8 -*-

"""Resolution of promises with values, thenables and foreign thenables."""

import sys

from vow.promise import Promise, SelfResolutionError, defer


class Thenable(object):
    """Foreign thenable, calling its callbacks with a custom executor."""

    def __init__(self, executor):
        self._executor = executor
        self.nb_calls = 0

    def then(self, on_fulfilled, on_rejected=None):
        self.nb_calls += 1
        return self._executor(on_fulfilled, on_rejected)


def _settled(scheduler, promise):
    """Run the scheduler, then returns the state and the result or reason."""
    scheduler.run()
    if promise.state == Promise.FULFILLED:
        return promise.state, promise.result(0)
    elif promise.state == Promise.REJECTED:
        return promise.state, promise.exception(0)
    return promise.state, None


class TestResolutionProcedure(object):

    def test_resolve_with_plain_value(self, scheduler):
        df = defer(scheduler)
        p = df.promise.then(lambda v: {'value': v})
        df.resolve(5)
        assert _settled(scheduler, p) == (Promise.FULFILLED, {'value': 5})

    def test_resolve_with_none(self, scheduler):
        df = defer(scheduler)
        p = df.promise.then(lambda v: None)
        df.resolve(5)
        assert _settled(scheduler, p) == (Promise.FULFILLED, None)

    def test_self_resolution_is_rejected(self, scheduler):
        df = defer(scheduler)
        holder = []
        p = df.promise.then(lambda v: holder[0])
        holder.append(p)
        df.resolve(1)

        state, reason = _settled(scheduler, p)
        assert state == Promise.REJECTED
        assert isinstance(reason, SelfResolutionError)
        assert isinstance(reason, TypeError)

    def test_executor_resolving_with_itself(self, scheduler):
        holder = []
        p = Promise(lambda ok, error: holder.append(ok), scheduler=scheduler)
        holder[0](p)
        assert p.state == Promise.REJECTED
        assert isinstance(p.exception(0), SelfResolutionError)

    def test_thenable_fulfilled_synchronously(self, scheduler):
        thenable = Thenable(lambda ok, error: ok('sync'))
        df = defer(scheduler)
        df.resolve(thenable)
        assert df.promise.state == Promise.FULFILLED
        assert df.promise.result(0) == 'sync'
        assert thenable.nb_calls == 1

    def test_thenable_rejected_asynchronously(self, scheduler):
        error = ValueError()
        callbacks = []
        thenable = Thenable(lambda ok, ko: callbacks.append(ko))

        p = Promise.resolve(None, scheduler=scheduler).then(
            lambda _: thenable)
        scheduler.run()
        assert p.state == Promise.PENDING

        callbacks[0](error)
        assert p.exception(0) is error

    def test_thenable_calling_fulfill_twice(self, scheduler):
        def executor(ok, error):
            ok('first')
            ok('second')

        df = defer(scheduler)
        df.resolve(Thenable(executor))
        assert df.promise.result(0) == 'first'

    def test_thenable_fulfill_then_reject(self, scheduler):
        def executor(ok, error):
            ok('first')
            error(ValueError())

        df = defer(scheduler)
        df.resolve(Thenable(executor))
        assert df.promise.result(0) == 'first'

    def test_thenable_reject_then_fulfill(self, scheduler):
        reason = ValueError()

        def executor(ok, error):
            error(reason)
            ok('second')

        df = defer(scheduler)
        df.resolve(Thenable(executor))
        assert df.promise.exception(0) is reason

    def test_thenable_late_callbacks_are_ignored(self, scheduler):
        callbacks = []
        df = defer(scheduler)
        df.resolve(Thenable(lambda ok, ko: callbacks.extend([ok, ko])))
        ok, ko = callbacks
        ok(1)
        ko(ValueError())
        ok(2)
        assert df.promise.result(0) == 1

    def test_then_raising_before_callback(self, scheduler):
        error = KeyError('then')

        def executor(ok, ko):
            raise error

        df = defer(scheduler)
        df.resolve(Thenable(executor))
        assert df.promise.exception(0) is error

    def test_then_raising_after_callback(self, scheduler):
        """The error is ignored: the thenable has already fulfilled."""
        def executor(ok, ko):
            ok('value')
            raise KeyError('then')

        df = defer(scheduler)
        df.resolve(Thenable(executor))
        assert df.promise.result(0) == 'value'

    def test_then_getter_raising(self, scheduler):
        error = RuntimeError('no access')

        class Evil(object):
            @property
            def then(self):
                raise error

        p = Promise.resolve(1, scheduler=scheduler).then(lambda _: Evil())
        state, reason = _settled(scheduler, p)
        assert state == Promise.REJECTED
        assert reason is error

    def test_then_getter_raising_attribute_error(self, scheduler):
        """An AttributeError raised by an existing `then` is not an absence."""
        error = AttributeError('broken getter')

        class Evil(object):
            @property
            def then(self):
                raise error

        p = Promise.resolve(1, scheduler=scheduler).then(lambda _: Evil())
        state, reason = _settled(scheduler, p)
        assert state == Promise.REJECTED
        assert reason is error

    def test_missing_then_is_plain_value(self, scheduler):
        class Dynamic(object):
            __slots__ = ('then',)

            def __getattr__(self, name):
                raise AttributeError(name)

        value = Dynamic()
        df = defer(scheduler)
        df.resolve(value)
        assert df.promise.result(0) is value

    def test_then_read_only_once(self, scheduler):
        reads = []

        class Counting(object):
            @property
            def then(self):
                reads.append(True)
                return lambda ok, ko: ok('once')

        df = defer(scheduler)
        df.resolve(Counting())
        assert df.promise.result(0) == 'once'
        assert len(reads) == 1

    def test_non_callable_then(self, scheduler):
        """An object with a non-callable "then" is a plain value."""
        class NotThenable(object):
            then = 42

        value = NotThenable()
        df = defer(scheduler)
        df.resolve(value)
        assert df.promise.result(0) is value

    def test_nested_thenables(self, scheduler):
        """A thenable resolving to a thenable resolving to a value."""
        inner = Thenable(lambda ok, ko: ok('V'))
        middle = Thenable(lambda ok, ko: ok(inner))
        outer = Thenable(lambda ok, ko: ok(middle))

        p = Promise.resolve(None, scheduler=scheduler).then(lambda _: outer)
        assert _settled(scheduler, p) == (Promise.FULFILLED, 'V')

    def test_deeply_nested_promises(self, scheduler):
        value = Promise.resolve('deep', scheduler=scheduler)
        for _ in range(50):
            value = Thenable(lambda ok, ko, value=value: ok(value))

        df = defer(scheduler)
        df.resolve(value)
        scheduler.run()
        assert df.promise.result(0) == 'deep'

    def test_nesting_deeper_than_recursion_limit(self, scheduler):
        depth = sys.getrecursionlimit() + 100
        value = 'deep'
        for _ in range(depth):
            value = Thenable(lambda ok, ko, value=value: ok(value))

        df = defer(scheduler)
        df.resolve(value)
        assert _settled(scheduler, df.promise) == (Promise.FULFILLED, 'deep')

    def test_callback_returning_deep_nesting(self, scheduler):
        depth = sys.getrecursionlimit() + 100
        value = 'deep'
        for _ in range(depth):
            value = Thenable(lambda ok, ko, value=value: ok(value))

        p = Promise.resolve(None, scheduler=scheduler).then(lambda _: value)
        assert _settled(scheduler, p) == (Promise.FULFILLED, 'deep')

    def test_deep_nesting_ending_with_rejection(self, scheduler):
        reason = ValueError()
        value = Thenable(lambda ok, ko: ko(reason))
        for _ in range(sys.getrecursionlimit() + 100):
            value = Thenable(lambda ok, ko, value=value: ok(value))

        df = defer(scheduler)
        df.resolve(value)
        assert _settled(scheduler, df.promise) == (Promise.REJECTED, reason)

    def test_self_resolution_at_end_of_long_chain(self, scheduler):
        """The error is built without describing the whole chain."""
        df = defer(scheduler)
        p = df.promise
        for _ in range(sys.getrecursionlimit() + 200):
            p = p.then(lambda v: v)
        holder = []
        last = p.then(lambda v: holder[0])
        holder.append(last)

        df.resolve(1)
        state, reason = _settled(scheduler, last)
        assert state == Promise.REJECTED
        assert isinstance(reason, SelfResolutionError)

    def test_thenable_fulfilled_with_rejected_promise(self, scheduler):
        reason = ValueError()
        rejected = Promise.reject(reason, scheduler=scheduler)

        df = defer(scheduler)
        df.resolve(Thenable(lambda ok, ko: ok(rejected)))
        scheduler.run()
        assert df.promise.exception(0) is reason

    def test_callback_returning_promise_of_other_scheduler(self, scheduler):
        """Any thenable is followed, including our own promises."""
        other_df = defer()  # default scheduler
        p = Promise.resolve(1, scheduler=scheduler).then(
            lambda _: other_df.promise)
        scheduler.run()
        assert p.state == Promise.PENDING

        other_df.resolve('other')
        # The continuation is executed by the default scheduler (thread).
        other_df.promise.then(lambda _: None).result(1)
        scheduler.run()
        assert p.result(1) == 'other'
