import asyncio
import traceback
import logging

logger = logging.getLogger(__package__)


def log_error_handler(cls, tb):
    logger.error('Cancelable exception was never retrieved:\n%s',
                 ''.join(tb))


class Default(object):
    # Called when failure of the future was not handled by any callback
    # This includes exceptions raised in continuation and cancel handlers
    UNHANDLED_FAILURE_CALLBACK = staticmethod(log_error_handler)

    # Default executor for future callbacks, None selects one per future
    CALLBACK_EXECUTOR = None

    @staticmethod
    def get_callback_executor():
        """Returns executor for callbacks of a newly created future.

        Uses ``CALLBACK_EXECUTOR`` when set. Otherwise callbacks are
        scheduled on the running asyncio loop, or queued on the shared
        trampoline when no loop is running.
        """
        if Default.CALLBACK_EXECUTOR:
            return Default.CALLBACK_EXECUTOR

        from .executors import Trampoline, EventLoopExecutor

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return Trampoline
        return EventLoopExecutor(loop)

    @staticmethod
    def on_unhandled_error(exc):
        tb = traceback.format_exception(exc.__class__, exc,
                                        exc.__traceback__)
        Default.UNHANDLED_FAILURE_CALLBACK(exc.__class__, tb)
