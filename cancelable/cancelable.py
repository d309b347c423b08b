from .future import Future, is_future
from .executors import Synchronous, run_pending
from .exceptions import (CancelationError, CANCELED_MESSAGE,
                         PROPAGATED_MESSAGE)
from .config import Default
from threading import Lock
import functools
import inspect
import logging

logger = logging.getLogger(__name__)

CAPABILITY_TAG = '__cancelable__'


def is_cancelable(value=None):
    """Returns True if value carries the cancelable capability tag.

    The check is duck-typed so that cancelables coming from another copy of
    this package are recognized too. Anything tagged must provide ``then``
    and ``cancel(callback=None, *, message=...)``.
    """
    if value is None or isinstance(value, type):
        return False
    return getattr(value, CAPABILITY_TAG, False) is True


def _call_fitting(fn, *args):
    """Calls fn with as many leading args as its signature accepts."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return fn(*args)
    for n in range(len(args), -1, -1):
        try:
            signature.bind(*args[:n])
        except TypeError:
            continue
        return fn(*args[:n])
    return fn(*args)


class Cancelable(object):
    """Future with cooperative, propagating cancellation.

    Wraps a :class:`cancelable.future.Future` which is settled by the
    executor function. Continuations (``then``, ``catch``, ``finally_``)
    return new instances. Calling ``cancel()`` fires the handler registered
    by the executor and forces the outcome to :class:`CancelationError`.
    Aggregates built by ``all`` and ``race`` propagate cancellation to the
    cancelable inputs they track in ``children``.
    """

    __cancelable__ = True

    def __init__(self, executor, *, clb_executor=None):
        """Initializes cancelable and runs the executor synchronously.

        Args:
            executor: function accepting up to three arguments
            ``(resolve, reject, on_cancel)``.
            clb_executor: executor object used for running callbacks
            (by default taken from ``config.Default``).
        """
        if not callable(executor):
            raise TypeError("Cancelable resolver {!r} ({}) is not a function"
                            .format(executor, type(executor).__name__))

        self._executor = clb_executor or Default.get_callback_executor()
        self._future = Future(clb_executor=self._executor)
        self._canceled = False
        self._cancel_error = None
        self._on_cancel = None
        self._children = None
        self._parent = None

        settled = False

        def resolve(value=None):
            nonlocal settled
            if not settled:
                settled = True
                self._resolve(value)

        def reject(exception):
            nonlocal settled
            if not settled:
                settled = True
                if not isinstance(exception, Exception):
                    exception = TypeError("Cancelable rejected with non-exception {!r}"
                                          .format(exception))
                self._executor(self._future.try_set_exception, exception)

        def on_cancel(handler):
            assert callable(handler), "Cancelable.on_cancel expects callable"
            self._on_cancel = handler

        try:
            _call_fitting(executor, resolve, reject, on_cancel)
        except Exception as ex:
            reject(ex)

    def _resolve(self, value):
        if value is self:
            self._executor(self._future.try_set_exception,
                           TypeError("Cancelable cannot be resolved with itself"))
        elif is_cancelable(value):
            value.then(self._future.try_set_result,
                       self._future.try_set_exception)
        elif is_future(value):
            value.add_done_callback(
                lambda fut: self._executor(self._future.try_set_from, fut))
        else:
            self._executor(self._future.try_set_result, value)

    @property
    def promise(self):
        """Underlying future, for consumers unaware of cancellation."""
        return self._future

    @property
    def canceled(self):
        return self._canceled

    @property
    def children(self):
        return self._children

    @property
    def parent(self):
        return self._parent

    @property
    def on_cancel(self):
        return self._on_cancel

    def is_canceled(self):
        """Returns True if cancellation was requested."""
        return self._canceled

    def _observe(self, fun):
        """Calls fun(result, exception) once outcome becomes known.

        Outcome of a canceled instance is always its CancelationError, even
        if the underlying future got settled before cancellation.
        """
        def on_done(fut):
            exception = fut.exception()
            if self._canceled:
                exception = self._cancel_error
            fun(None if exception is not None else fut.result(), exception)

        self._future.add_done_callback(on_done)

    def _derive(self, executor):
        c = self.__class__(executor, clb_executor=self._executor)
        c._parent = self
        return c

    def then(self, on_fulfilled=None, on_rejected=None):
        """Returns cancelable set from result of applying handlers to outcome
        of this one.

        Missing handler passes the outcome through. Value returned from a
        handler resolves new cancelable (futures and cancelables are adopted),
        exception raised from a handler rejects it.

        Args:
            on_fulfilled: function that accepts result value.
            on_rejected: function that accepts Exception parameter.
        """
        assert on_fulfilled is None or callable(on_fulfilled), "Cancelable.then expects callable or None"
        assert on_rejected is None or callable(on_rejected), "Cancelable.then expects callable or None"

        def chain(resolve, reject):
            def on_done(result, exception):
                try:
                    if exception is None:
                        resolve(on_fulfilled(result) if on_fulfilled else result)
                    elif on_rejected is not None:
                        resolve(on_rejected(exception))
                    else:
                        reject(exception)
                except Exception as ex:
                    reject(ex)

            self._observe(on_done)

        return self._derive(chain)

    def catch(self, on_rejected):
        return self.then(None, on_rejected)

    def finally_(self, on_finally=None):
        """Returns cancelable settled to the same outcome as this one after
        on_finally() was called.

        on_finally is called exactly once: when this cancelable settles or
        when returned cancelable is canceled, whichever comes first.
        """
        assert on_finally is None or callable(on_finally), "Cancelable.finally_ expects callable or None"
        fired = False

        def fire():
            nonlocal fired
            if not fired and on_finally is not None:
                fired = True
                on_finally()

        def chain(resolve, reject, on_cancel):
            def on_done(result, exception):
                try:
                    fire()
                except Exception as ex:
                    reject(ex)
                    return
                if exception is None:
                    resolve(result)
                else:
                    reject(exception)

            on_cancel(fire)
            self._observe(on_done)

        return self._derive(chain)

    def cancel(self, callback=None, *, message=CANCELED_MESSAGE):
        """Cancels this cancelable and all children it tracks.

        Calls the cancel handler, rejects with CancelationError and propagates
        cancellation to children. Cancelling again has no effect besides
        calling the callback.

        Args:
            callback: function called with no arguments once done.
            message: message of the CancelationError.
        """
        if not self._canceled:
            logger.debug('Canceling %r', self)
            self._canceled = True
            self._cancel_error = CancelationError(message)

            if self._on_cancel is not None:
                Synchronous(_call_fitting, self._on_cancel, self._acknowledge)

            self._future.try_set_exception(self._cancel_error)

            children, self._children = self._children, None
            for child in children or ():
                child.cancel(message=PROPAGATED_MESSAGE)

        if callback is not None:
            callback()

        run_pending(self._executor)
        return self

    def _acknowledge(self):
        logger.debug('Cancel handler of %r acknowledged', self)

    def __await__(self):
        return self.then().promise.__await__()

    def __repr__(self):
        if self._canceled:
            return '{}<CANCELED>'.format(self.__class__.__name__)
        return '{}<{!r}>'.format(self.__class__.__name__, self._future)

    is_cancelable = staticmethod(is_cancelable)

    @classmethod
    def resolve(cls, value=None, *, clb_executor=None):
        """Returns cancelable resolved with provided value.

        Cancelables are returned as is, futures are adopted.
        """
        if is_cancelable(value):
            return value
        return cls(lambda resolve: resolve(value), clb_executor=clb_executor)

    @classmethod
    def reject(cls, exception, *, clb_executor=None):
        """Returns cancelable rejected with provided exception.

        Values which are not exceptions are rejected with TypeError.
        """
        return cls(lambda resolve, reject: reject(exception),
                   clb_executor=clb_executor)

    @classmethod
    def all(cls, iterable, *, clb_executor=None):
        """Returns cancelable that will contain list of results of all items.
        In case of any failure it will be rejected with first exception to
        occur.

        Items can be cancelables, futures or plain values. Cancelable items
        are tracked as children and get canceled with the aggregate.

        Args:
            iterable: items to combine.
            clb_executor: default executor to use for running callbacks.
        """
        items = list(iterable)
        executor = clb_executor or Default.get_callback_executor()

        def gather(resolve, reject):
            if not items:
                resolve([])
                return

            lock = Lock()
            results = [None] * len(items)
            left = len(items)

            def done(i, result):
                nonlocal left
                with lock:
                    results[i] = result
                    left -= 1
                    if not left:
                        resolve(results)

            for i, item in enumerate(items):
                cls.resolve(item, clb_executor=executor) \
                    .then(functools.partial(done, i), reject)

        return cls._aggregate(gather, items, executor)

    @classmethod
    def race(cls, iterable, *, clb_executor=None):
        """Returns cancelable which will be set from outcome of first item to
        settle, both successfully or with failure. Empty iterable gives
        cancelable that never settles.

        Cancelable items are tracked as children and get canceled with the
        aggregate.

        Args:
            iterable: items to combine.
            clb_executor: default executor to use for running callbacks.
        """
        items = list(iterable)
        executor = clb_executor or Default.get_callback_executor()

        def first(resolve, reject):
            for item in items:
                cls.resolve(item, clb_executor=executor).then(resolve, reject)

        return cls._aggregate(first, items, executor)

    @classmethod
    def _aggregate(cls, executor_fn, items, executor):
        c = cls(executor_fn, clb_executor=executor)
        c._children = [item for item in items if is_cancelable(item)]
        return c
