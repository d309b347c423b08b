CANCELED_MESSAGE = 'Cancelable was canceled'
PROPAGATED_MESSAGE = 'Cancelable was canceled by its aggregate'
FOREIGN_CANCELED_MESSAGE = 'Future was cancelled'


class Error(Exception):
    """Base class for all cancelable-related exceptions."""
    pass


class CancelationError(Error):
    """The Cancelable was canceled."""
    name = 'CancelationError'

    def __init__(self, message=CANCELED_MESSAGE):
        super().__init__(message)

    @property
    def message(self):
        return self.args[0] if self.args else ''


class InvalidStateError(Error):
    """The operation is not allowed in this state."""
    pass
