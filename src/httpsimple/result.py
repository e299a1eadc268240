"""Translation of transport responses into return values or errors.

Operations returning content (get, head, postform, postjson, postfile) fail
on any response outside of the 2xx range. Operations returning a status
(getprint, getstore, mirror) only fail when no HTTP response was received,
and hand every valid HTTP status, 404 and 304 included, back to the caller.
"""

import enum
from typing import Union

from httpsimple.error import HTTPStatusError, TransportError
from httpsimple.transport import FAILURE_STATUS, Headers, Response


@enum.unique
class Projection(enum.Enum):
    """The part of a response an operation returns."""

    CONTENT = "content"
    TEXT = "text"
    HEADERS = "headers"
    STATUS = "status"


def raise_for_transport(response: Response):
    """Raise TransportError if the request did not get an HTTP response."""
    if response.status == FAILURE_STATUS:
        raise TransportError(response.text)


def raise_for_status(response: Response):
    """Raise TransportError if the request did not get an HTTP response, or
    HTTPStatusError if the response is not successful."""
    if response.success:
        return
    raise_for_transport(response)
    raise HTTPStatusError(response.status, response.reason)


def map_response(
    response: Response, projection: Projection
) -> Union[bytes, str, Headers, int]:
    if projection is Projection.STATUS:
        raise_for_transport(response)
        return response.status

    raise_for_status(response)
    match projection:
        case Projection.CONTENT:
            return response.content
        case Projection.TEXT:
            return response.text
        case Projection.HEADERS:
            return response.headers
    raise ValueError(f"unknown projection: {projection!r}")
