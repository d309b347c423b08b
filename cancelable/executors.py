from .config import Default
from collections import deque
from threading import Lock
import asyncio


class SynchronousExecutor(object):
    def __call__(self, fn, *args, **kwargs):
        try:
            fn(*args, **kwargs)
        except Exception as ex:
            Default.on_unhandled_error(ex)


class TrampolineExecutor(object):
    """Queues callbacks and runs them in FIFO order from run_pending().

    Default executor when no event loop is running. Callbacks are never run
    from inside the call that scheduled them, so bookkeeping done by the
    caller right after (e.g. cancellation) is seen by queued callbacks.
    The queue is drained when a future result is read, when a cancelable is
    canceled, or explicitly. Draining is not reentrant: run_pending() called
    from a queued callback returns immediately and the outer drain goes on.
    If a loop is running in the scheduling thread, a drain is also scheduled
    on it.
    """

    def __init__(self):
        self._queue = deque()
        self._draining = Lock()

    def __call__(self, fn, *args, **kwargs):
        self._queue.append((fn, args, kwargs))
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        loop.call_soon(self.run_pending)

    def run_pending(self):
        if not self._draining.acquire(blocking=False):
            return
        try:
            while self._queue:
                fn, args, kwargs = self._queue.popleft()
                Synchronous(fn, *args, **kwargs)
        finally:
            self._draining.release()

    def __len__(self):
        return len(self._queue)


class EventLoopExecutor(object):
    """Schedules callbacks on asyncio event loop.

    Safe to call from worker threads, callbacks always run on the loop.
    """

    def __init__(self, loop):
        self.loop = loop

    def __call__(self, fn, *args, **kwargs):
        self.loop.call_soon_threadsafe(self._run, fn, args, kwargs)

    @staticmethod
    def _run(fn, args, kwargs):
        Synchronous(fn, *args, **kwargs)

    def __repr__(self):
        return '{}<{!r}>'.format(self.__class__.__name__, self.loop)


def run_pending(executor):
    """Drains executor queue if executor keeps one."""
    drain = getattr(executor, 'run_pending', None)
    if drain is not None:
        drain()


# alias
Synchronous = SynchronousExecutor()
Trampoline = TrampolineExecutor()
