from .future_core import FutureCore, _PENDING
from .ensure_exception_handled import EnsureExceptionHandledGuard
from .exceptions import CancelationError, FOREIGN_CANCELED_MESSAGE
from .executors import Synchronous, run_pending
from .config import Default
import asyncio


def is_future(value):
    """Returns True for objects following the done-callback future protocol.

    Covers this package's Future as well as asyncio and
    concurrent.futures futures.
    """
    return not isinstance(value, type) and \
        callable(getattr(value, 'add_done_callback', None))


def outcome(future):
    """Returns (result, exception) pair of a done future of any kind.

    Cancelled foreign futures are reported as CancelationError.
    """
    cancelled = getattr(future, 'cancelled', None)
    if cancelled is not None and cancelled():
        return None, CancelationError(FOREIGN_CANCELED_MESSAGE)
    exception = future.exception()
    if exception is not None:
        return None, exception
    return future.result(), None


class Future(FutureCore):
    """Future to be used in cooperative multitasking concurrency environment.

    Callbacks are run through the callback executor, so notification is
    deferred: scheduled on the running asyncio loop, or queued on the
    trampoline which is drained whenever a result is read.
    """

    def __init__(self, *, clb_executor=None):
        """Initialize the future.

        The optional clb_executor argument allows to explicitly set the
        executor object used by the future for running callbacks.
        If it's not provided, the future uses the default executor.
        """
        FutureCore.__init__(self)
        self._executor = clb_executor or Default.get_callback_executor()

    @classmethod
    def successful(cls, result=None, *, clb_executor=None):
        """Returns successfully completed future.

        Args:
            result: value to complete future with.
            clb_executor: default executor to use for running callbacks.
        """
        f = cls(clb_executor=clb_executor)
        f.set_result(result)
        return f

    @classmethod
    def failed(cls, exception, *, clb_executor=None):
        """Returns failed future.

        Args:
            exception: Exception to set to future.
            clb_executor: default executor to use for running callbacks.
        """
        f = cls(clb_executor=clb_executor)
        f.set_exception(exception)
        return f

    def add_done_callback(self, fun_res, executor=None):
        """Add a callback to be run when the future becomes done.

        The callback is called with a single argument - the future object. If
        the future is already done when this is called, the callback is
        scheduled right away.
        """
        assert callable(fun_res) or fun_res is None, "Future.add_done_callback expects callable or None"
        if fun_res is not None:
            if self._state != _PENDING:
                self._run_callback(fun_res, executor)
            else:
                self._callbacks.append((fun_res, executor))

    def done(self):
        run_pending(self._executor)
        return FutureCore.done(self)

    def result(self):
        run_pending(self._executor)
        return FutureCore.result(self)

    def exception(self):
        run_pending(self._executor)
        return FutureCore.exception(self)

    def try_set_from(self, other):
        """Copies result of another future into this one.

        Other future can be of any kind supported by ``is_future``.
        Returns False if this future is already done when this method is called.
        """
        assert other.done()
        result, exception = outcome(other)
        if exception is not None:
            return self.try_set_exception(exception)
        return self.try_set_result(result)

    def __await__(self):
        if not self.done():
            loop = asyncio.get_running_loop()
            waiter = loop.create_future()

            def wake(_):
                loop.call_soon_threadsafe(_release_waiter, waiter)

            self.add_done_callback(wake, executor=Synchronous)
            yield from waiter
        return self.result()

    #override
    def _on_result_set(self):
        if self._exception is not None and \
                not isinstance(self._exception, CancelationError):
            clb = Default.UNHANDLED_FAILURE_CALLBACK
            self._ex_handler = EnsureExceptionHandledGuard(self._exception, clb)
            self._executor(self._ex_handler.activate)

        callbacks = self._callbacks[:]
        if not callbacks:
            return

        self._callbacks[:] = []
        for clb, executor in callbacks:
            self._run_callback(clb, executor)

    def _run_callback(self, clb, executor):
        executor = executor or self._executor
        executor(clb, self)


def _release_waiter(waiter):
    if not waiter.done():
        waiter.set_result(None)
