from typing import Optional


class HTTPSimpleError(Exception):
    """Base class for httpsimple exceptions."""


class TransportError(HTTPSimpleError, ConnectionError):
    """The request did not produce an HTTP response: the connection was
    refused, DNS resolution or the TLS handshake failed, or the operation
    timed out. The message is the diagnostic reported by the transport."""


class HTTPStatusError(HTTPSimpleError):
    """The server answered with a status outside of the 2xx range."""

    status: int
    reason: str

    def __init__(self, status: int, reason: str):
        super().__init__(f"{status} {reason}")
        self.status = status
        self.reason = reason

    def __reduce__(self):
        return (type(self), (self.status, self.reason))


class FilesystemError(HTTPSimpleError, OSError):
    """A local file could not be opened, written, closed or renamed."""

    operation: str
    path: str
    reason: str

    def __init__(self, operation: str, path: str, reason: str):
        super().__init__(f"Failed to {operation} {path}: {reason}")
        self.operation = operation
        self.path = path
        self.reason = reason

    def __reduce__(self):
        return (type(self), (self.operation, self.path, self.reason))

    @classmethod
    def from_oserror(
        cls, operation: str, path: str, error: OSError
    ) -> "FilesystemError":
        return cls(operation, path, _strerror(error))


class JSONError(HTTPSimpleError, ValueError):
    """A value could not be encoded to, or decoded from, JSON."""


def _strerror(error: OSError) -> str:
    reason: Optional[str] = error.strerror
    return reason if reason else str(error)
