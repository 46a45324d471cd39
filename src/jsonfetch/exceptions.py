"""Custom exceptions for jsonfetch module."""


class JsonFetchError(Exception):
    """Base exception class for all jsonfetch exceptions.

    All custom exceptions in this library should inherit from this class.
    This allows users to catch all library-specific errors with a single except block.
    """


class HttpError(JsonFetchError):
    """Raised when a response arrives with a non-2xx status code.

    The message is extracted from the response body when the server sent a
    usable one (a JSON string, a JSON object with a string ``message`` or
    non-empty plain text). Otherwise it reads
    ``"Request failed with status <code>"``.

    Attributes:
        message: The extracted error text.
        status_code: The HTTP status of the failed response.
    """

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportError(JsonFetchError):
    """Raised when the request could not be sent or no response came back.

    Only transports raise this. It covers DNS failures, refused connections,
    TLS problems and anything else that prevented a response from existing.
    """


class FetchTimeoutError(TransportError, TimeoutError):
    """Raised when the page-side fetch was aborted by its timeout."""


class BrowserInitError(JsonFetchError):
    """Raised when the browser initialization fails.

    This error indicates that the underlying browser process (Chromium)
    could not be started or connected to.

    Common causes include:
    - Missing browser executable
    - Port conflicts
    - Invalid profile directory permissions
    - Incompatible Chromium version
    """


class BodyConsumedError(JsonFetchError):
    """Raised when a response body is read a second time."""


class ResponseDecodeError(JsonFetchError):
    """Raised when a successful response declares JSON but does not decode."""
