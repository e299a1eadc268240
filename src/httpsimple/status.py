import enum
from typing import Optional


@enum.unique
class StatusClass(int, enum.Enum):
    """Enumeration of the classes of HTTP response status codes, keyed by the
    first digit of the code.
    """

    INFO = 1
    SUCCESS = 2
    REDIRECT = 3
    CLIENT_ERROR = 4
    SERVER_ERROR = 5

    def __repr__(self):
        return self.name

    def __str__(self):
        return self.name

    @property
    def error(self) -> bool:
        return self in {StatusClass.CLIENT_ERROR, StatusClass.SERVER_ERROR}


StatusClass.INFO.__doc__ = "Informational response (1xx)"
StatusClass.SUCCESS.__doc__ = "Successful response (2xx)"
StatusClass.REDIRECT.__doc__ = "Redirection response (3xx)"
StatusClass.CLIENT_ERROR.__doc__ = "Client error response (4xx)"
StatusClass.SERVER_ERROR.__doc__ = "Server error response (5xx)"


def classify(status: int) -> Optional[StatusClass]:
    """Returns the StatusClass of an HTTP status code, or None if the code is
    outside of the 100-599 range."""
    if 100 <= status < 600:
        return StatusClass(status // 100)
    return None


def is_info(status: int) -> bool:
    """Returns true if the status code indicates an informational response
    (1xx)."""
    return 100 <= status < 200


def is_success(status: int) -> bool:
    """Returns true if the status code indicates a successful response
    (2xx)."""
    return 200 <= status < 300


def is_redirect(status: int) -> bool:
    """Returns true if the status code indicates a redirection response
    (3xx)."""
    return 300 <= status < 400


def is_client_error(status: int) -> bool:
    """Returns true if the status code indicates a client error response
    (4xx)."""
    return 400 <= status < 500


def is_server_error(status: int) -> bool:
    """Returns true if the status code indicates a server error response
    (5xx)."""
    return 500 <= status < 600


def is_error(status: int) -> bool:
    """Returns true if the status code indicates an error response (4xx or
    5xx)."""
    return is_client_error(status) or is_server_error(status)
