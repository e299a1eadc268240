"""HTTP transports used by httpsimple to perform requests.

A transport never raises for network failures: connection errors, DNS and
TLS failures, timeouts and streams cut short are all reported as a Response
with the FAILURE_STATUS status code and the diagnostic as its content.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import timezone
from email.utils import formatdate, parsedate_to_datetime
from types import MappingProxyType
from typing import (
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Protocol,
    Tuple,
    Type,
    Union,
)

from typing_extensions import TypeAlias

from httpsimple.error import FilesystemError
from httpsimple.files import AtomicFile
from httpsimple.status import is_success

logger = logging.getLogger(__name__)

FAILURE_STATUS = 599
"""Status code of responses for requests that did not get an HTTP response
from the server."""

FAILURE_REASON = "Internal Exception"

Headers: TypeAlias = Dict[str, Union[str, List[str]]]
Content: TypeAlias = Union[None, bytes, Iterable[bytes]]


@dataclass(frozen=True)
class Request:
    """An HTTP request to be sent by a transport.

    The content is either None, a bytes object, or an iterable of byte chunks
    that is consumed lazily while the request is sent.
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    content: Content = None

    def __post_init__(self):
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))


class Response:
    """The outcome of sending a Request.

    Header names are lower-cased; a header repeated in the response maps to
    the list of its values in order.

    Streamed responses deliver their body through iter_bytes(), which can be
    consumed only once. If the transport fails while the body is streamed,
    iteration stops and the response turns into a failure response in place:
    status becomes FAILURE_STATUS and content holds the diagnostic.

    Responses hold on to a connection until they are closed; use them as
    context managers.
    """

    __slots__ = (
        "url",
        "status",
        "reason",
        "headers",
        "success",
        "_content",
        "_stream",
        "_stream_errors",
        "_close",
    )

    def __init__(
        self,
        url: str,
        status: int,
        reason: str,
        headers: Optional[Headers] = None,
        content: bytes = b"",
        stream: Optional[Iterable[bytes]] = None,
        stream_errors: Tuple[Type[BaseException], ...] = (),
        close: Optional[Callable[[], None]] = None,
    ):
        self.url = url
        self.status = status
        self.reason = reason
        self.headers: Headers = headers if headers is not None else {}
        self.success = is_success(status)
        self._content = content
        self._stream = stream
        self._stream_errors = stream_errors
        self._close = close

    @classmethod
    def failure(cls, url: str, message: str) -> Response:
        """Returns a response reporting that no HTTP response was received."""
        content = message.encode("utf-8")
        return cls(
            url,
            FAILURE_STATUS,
            FAILURE_REASON,
            headers={
                "content-type": "text/plain",
                "content-length": str(len(content)),
            },
            content=content,
        )

    def __repr__(self):
        return f"Response({self.status} {self.reason}, url={self.url!r})"

    def __enter__(self) -> Response:
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    @property
    def content(self) -> bytes:
        if self._stream is not None:
            self.read()
        return self._content

    @property
    def text(self) -> str:
        """The body decoded with the charset of the Content-Type header, or
        UTF-8 if there is none."""
        return self.content.decode(self.charset or "utf-8", errors="replace")

    @property
    def charset(self) -> Optional[str]:
        content_type = first_header(self.headers, "content-type")
        if content_type is None:
            return None
        for param in content_type.split(";")[1:]:
            name, _, value = param.partition("=")
            if name.strip().lower() == "charset":
                charset = value.strip().strip('"')
                try:
                    "".encode(charset)
                except LookupError:
                    return None
                return charset
        return None

    def read(self) -> bytes:
        """Buffer the remainder of a streamed body in memory."""
        chunks = list(self.iter_bytes())
        if self.status != FAILURE_STATUS:
            self._content = b"".join(chunks)
        return self._content

    def iter_bytes(self) -> Iterator[bytes]:
        stream, self._stream = self._stream, None
        if stream is None:
            if self._content and self.status != FAILURE_STATUS:
                yield self._content
            return
        try:
            for chunk in stream:
                if chunk:
                    yield chunk
        except self._stream_errors as e:
            logger.debug("reading response from %s failed: %s", self.url, e)
            self.fail(describe_error(e))
        finally:
            self.close()

    def fail(self, message: str):
        """Turn this response into a failure response."""
        self.status = FAILURE_STATUS
        self.reason = FAILURE_REASON
        self.success = False
        self._content = message.encode("utf-8")

    def close(self):
        self._stream = None
        close, self._close = self._close, None
        if close is not None:
            close()


class Transport(Protocol):
    """Protocol for HTTP transports."""

    def send(self, request: Request, stream: bool = False) -> Response:
        """Send a request. When stream is true the body is not read up
        front, and is delivered through Response.iter_bytes()."""
        ...

    def mirror(self, url: str, path: str) -> Response:
        """Download url to path unless path is already up to date."""
        ...


class BaseTransport(ABC):
    """Base class for transports, implementing mirror() on top of send()."""

    __slots__ = ()

    @abstractmethod
    def send(self, request: Request, stream: bool = False) -> Response: ...

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def mirror(self, url: str, path: str) -> Response:
        """Download url to path with a conditional GET.

        If path exists, the request carries an If-Modified-Since header set
        to its modification time. A 304 response leaves the file untouched and
        is reported as successful. A 2xx response body replaces the file
        atomically, and the file's modification time is then set from the
        Last-Modified header when the server sent one. Any other response
        leaves the file untouched.

        Raises:
            FilesystemError: if the file cannot be written.
        """
        headers = {}
        try:
            mtime = os.stat(path).st_mtime
        except FileNotFoundError:
            pass
        except OSError as e:
            raise FilesystemError.from_oserror("stat", path, e) from e
        else:
            headers["If-Modified-Since"] = formatdate(mtime, usegmt=True)

        with self.send(Request("GET", url, headers), stream=True) as response:
            if response.status == 304:
                response.success = True
            if not is_success(response.status):
                return response

            with AtomicFile(path) as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)
                if response.status == FAILURE_STATUS:
                    return response
                f.commit()

        last_modified = first_header(response.headers, "last-modified")
        if last_modified is not None:
            set_mtime(path, last_modified)
        return response


def collect_headers(items: Iterable[Tuple[str, str]]) -> Headers:
    """Build a Headers mapping from (name, value) pairs, lower-casing names
    and collecting the values of repeated fields into lists."""
    headers: Headers = {}
    for name, value in items:
        name = name.lower()
        existing = headers.get(name)
        if existing is None:
            headers[name] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            headers[name] = [existing, value]
    return headers


def first_header(headers: Headers, name: str) -> Optional[str]:
    value = headers.get(name)
    if isinstance(value, list):
        return value[0] if value else None
    return value


def set_mtime(path: str, http_date: str):
    """Set the access and modification times of path from an HTTP date.
    Dates without a usable zone (-0000) are taken as UTC, and dates that
    cannot be parsed are ignored."""
    try:
        date = parsedate_to_datetime(http_date)
    except (TypeError, ValueError):
        logger.debug("ignoring invalid Last-Modified date %r", http_date)
        return
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    timestamp = date.timestamp()
    try:
        os.utime(path, (timestamp, timestamp))
    except OSError as e:
        raise FilesystemError.from_oserror("utime", path, e) from e


def describe_error(error: BaseException) -> str:
    return str(error) or type(error).__name__
