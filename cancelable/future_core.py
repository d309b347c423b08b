from .exceptions import InvalidStateError


# States for Future.
_PENDING = 'PENDING'
_FINISHED = 'FINISHED'


class FutureCore(object):
    """Encapsulates Future state."""
    _state = _PENDING
    _result = None
    _exception = None
    _ex_handler = None

    def __init__(self):
        self._callbacks = []

    def __repr__(self):
        res = self.__class__.__name__
        if self._state == _FINISHED:
            if self._exception is not None:
                res += '<exception={!r}>'.format(self._exception)
            else:
                res += '<result={!r}>'.format(self._result)
        elif self._callbacks:
            size = len(self._callbacks)
            if size > 2:
                res += '<{}, [{}, <{} more>, {}]>'.format(
                    self._state, self._callbacks[0],
                    size - 2, self._callbacks[-1])
            else:
                res += '<{}, {}>'.format(self._state, self._callbacks)
        else:
            res += '<{}>'.format(self._state)
        return res

    def _try_set_result(self, result, exception):
        if self._state != _PENDING:
            return False
        self._state = _FINISHED
        self._result = result
        self._exception = exception
        self._on_result_set()
        return True

    def _error_handled(self):
        if self._ex_handler is not None:
            self._ex_handler.clear()
            self._ex_handler = None

    #virtual
    def _on_result_set(self):
        pass

    def done(self):
        """Return True if the future is done."""
        return self._state != _PENDING

    def result(self):
        """Return the result this future represents.

        If the future's result isn't yet available, raises InvalidStateError.
        If the future is done and has an exception set, this exception is
        raised.
        """
        if self._state != _FINISHED:
            raise InvalidStateError('Result is not ready.')

        self._error_handled()
        if self._exception is not None:
            raise self._exception
        return self._result

    def exception(self):
        """Return the exception that was set on this future.

        The exception (or None if no exception was set) is returned only if
        the future is done. If the future isn't done yet, raises
        InvalidStateError.
        """
        if self._state != _FINISHED:
            raise InvalidStateError('Exception is not set.')

        self._error_handled()
        return self._exception

    def set_result(self, result):
        """Mark the future done and set its result.

        If the future is already done when this method is called, raises
        InvalidStateError.
        """
        if not self.try_set_result(result):
            raise InvalidStateError("result was already set")

    def try_set_result(self, result):
        """Attempts to mark the future done and set its result.

        Returns False if the future is already done when this method is called.
        """
        return self._try_set_result(result, None)

    def set_exception(self, exception):
        """Mark the future done and set an exception.

        If the future is already done when this method is called, raises
        InvalidStateError.
        """
        if not self.try_set_exception(exception):
            raise InvalidStateError("result was already set")

    def try_set_exception(self, exception):
        """Attempts to mark the future done and set an exception.

        Returns False if the future is already done when this method is called.
        """
        assert isinstance(exception, Exception), "Future.set_exception expects Exception instance"
        return self._try_set_result(None, exception)
