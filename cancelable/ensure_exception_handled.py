import traceback


class EnsureExceptionHandledGuard(object):
    """Helper for reporting exceptions nobody retrieved from a future.

    The guard is created together with the failure and activated through the
    future's callback executor. Retrieving the exception with ``result()`` or
    ``exception()`` clears the guard. If the guard is collected while still
    holding a formatted traceback, the handler is called with the exception
    class and traceback lines.

    Formatting happens in ``activate()`` rather than in the constructor so
    the common case of an exception retrieved right away stays cheap. A
    guard collected before its activation ran still reports.
    """

    __slots__ = ['exc', 'tb', 'hndl', 'cls']

    def __init__(self, exc, handler):
        self.hndl = handler
        self.cls = type(exc)
        self.exc = exc
        self.tb = None

    def activate(self):
        exc = self.exc
        if exc is not None:
            self.exc = None
            self.tb = traceback.format_exception(exc.__class__, exc,
                                                 exc.__traceback__)

    def clear(self):
        self.exc = None
        self.tb = None

    def __del__(self):
        self.activate()
        if self.tb:
            self.hndl(self.cls, self.tb)
