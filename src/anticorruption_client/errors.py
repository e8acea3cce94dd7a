"""Exception hierarchy for the reporting client.

Every failure a screen can run into is one of these. The screen layer maps
each class to a different kind of message (see ``screens.present_error``).
"""


class ClientError(Exception):
    """Base class for all client-side failures."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class TransportError(ClientError):
    """The request never produced a response (connection, TLS, timeout)."""


class MalformedResponseError(ClientError):
    """The response arrived but its shape was not what we expected."""


class ValidationError(ClientError):
    """User input was rejected before anything was sent."""


class AuthorizationError(ClientError):
    """The backend refused the request, or there is no token to send."""


class BackendError(ClientError):
    """The backend answered with a non-success status."""

    def __init__(self, message: str = "", status: str | None = None) -> None:
        super().__init__(message)
        self.status = status


class NoChangesError(ClientError):
    """An update was requested but nothing differs from the original."""
