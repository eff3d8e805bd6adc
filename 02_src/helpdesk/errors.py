"""Error taxonomy for the synchronization core."""


class HelpdeskError(Exception):
    """Base class for all helpdesk errors."""


class TransportError(HelpdeskError):
    """A request or channel failed to complete."""


class ProtocolError(HelpdeskError):
    """A payload arrived but could not be parsed."""


class ValidationError(HelpdeskError):
    """The caller supplied empty or missing input."""


class NotFoundError(ValidationError):
    """No conversation id was provided."""


class SendInProgressError(ValidationError):
    """A send is already in flight for this conversation."""


class BackendRejection(HelpdeskError):
    """The backend answered with a non-success status."""

    def __init__(self, message: str, payload: dict | None = None):
        super().__init__(message)
        self.payload = payload or {}
