"""Error taxonomy for worklog-client.

Every failure a caller can see is a ``WorklogError`` carrying a message fit
to show the user. Validation errors are raised before any request is made;
the rest come out of the HTTP client.
"""


class WorklogError(Exception):
    """Base class for all client errors."""

    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(WorklogError):
    """Form input rejected locally; maps field name to message."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(self.errors.values()) or "Invalid input")


class AuthRequired(WorklogError):
    default_message = "Authentication required. Please login again."


class SessionExpired(WorklogError):
    default_message = "Session expired. Please login again."


class InvalidCredentials(WorklogError):
    default_message = "Invalid email or password"


class NetworkTimeout(WorklogError):
    default_message = "Request timeout. Check your internet connection."


class NetworkUnavailable(WorklogError):
    default_message = "Network error. Please check your connection."


class ServerRejected(WorklogError):
    """The server answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class InvalidResponseShape(WorklogError):
    default_message = "Invalid data format from server"
