"""Futures with cooperative, propagating cancellation."""

from .cancelable import Cancelable, is_cancelable
from .future import Future, is_future
from .executors import Synchronous, Trampoline, EventLoopExecutor
from .exceptions import Error, CancelationError, InvalidStateError
