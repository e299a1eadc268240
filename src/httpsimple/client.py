from __future__ import annotations

import codecs
import logging
import os
import sys
from typing import Any, BinaryIO, Iterator, Optional, TextIO, cast

from httpsimple.codec import JSONCodec
from httpsimple.config import Config
from httpsimple.error import FilesystemError
from httpsimple.files import AtomicFile
from httpsimple.form import CONTENT_TYPE as FORM_CONTENT_TYPE
from httpsimple.form import FormFields, encode_form
from httpsimple.result import Projection, map_response, raise_for_transport
from httpsimple.transport import Headers, Request, Transport

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"
DEFAULT_FILE_CONTENT_TYPE = "application/octet-stream"
FILE_CHUNK_SIZE = 128 * 1024


class Client:
    """Simple HTTP client performing one request per call.

    Operations returning content raise HTTPStatusError when the server
    answers with a status outside of the 2xx range. Operations returning a
    status hand any HTTP status back to the caller. All operations raise
    TransportError when no HTTP response is received.

    Args:
        transport: Transport performing the requests. Defaults to an
            HTTPXTransport configured from config.

        codec: JSON codec used by postjson and getjson.

        config: Settings for the default transport. Uses the HTTPSIMPLE_*
            environment variables by default.
    """

    __slots__ = ("transport", "codec")

    def __init__(
        self,
        transport: Optional[Transport] = None,
        codec: Optional[JSONCodec] = None,
        config: Optional[Config] = None,
    ):
        if transport is None:
            from httpsimple.transport.httpx import HTTPXTransport

            transport = HTTPXTransport(config=config)
        self.transport = transport
        self.codec = codec if codec is not None else JSONCodec()

    def close(self):
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def get(self, url: str) -> str:
        """Retrieve the document at url with a GET request.

        Returns:
            The response body.

        Raises:
            TransportError: if no HTTP response was received.
            HTTPStatusError: if the response status is not 2xx.
        """
        response = self.transport.send(Request("GET", url))
        return cast(str, map_response(response, Projection.TEXT))

    def getjson(self, url: str) -> Any:
        """Retrieve the document at url with a GET request and decode it
        from JSON.

        Raises:
            TransportError: if no HTTP response was received.
            HTTPStatusError: if the response status is not 2xx.
            JSONError: if the body is not valid JSON.
        """
        response = self.transport.send(
            Request("GET", url, {"Accept": "application/json"})
        )
        return self.codec.decode(map_response(response, Projection.CONTENT))

    def head(self, url: str) -> Headers:
        """Retrieve the headers of url with a HEAD request.

        Returns:
            The response headers. Names are lower-cased, and the value of a
            repeated header is the list of its values.

        Raises:
            TransportError: if no HTTP response was received.
            HTTPStatusError: if the response status is not 2xx.
        """
        response = self.transport.send(Request("HEAD", url))
        return cast(Headers, map_response(response, Projection.HEADERS))

    def getprint(self, url: str, file: Optional[BinaryIO] = None) -> int:
        """Retrieve the document at url with a GET request and write it to
        standard output as it is received.

        Args:
            url: URL to retrieve.
            file: Binary file to write to instead of standard output.

        Returns:
            The HTTP status code.

        Raises:
            TransportError: if no HTTP response was received.
        """
        with self.transport.send(Request("GET", url), stream=True) as response:
            if file is None:
                file = _stdout(response.charset)
            for chunk in response.iter_bytes():
                file.write(chunk)
            file.flush()
        return cast(int, map_response(response, Projection.STATUS))

    def getstore(self, url: str, path: str | os.PathLike) -> int:
        """Retrieve the document at url with a GET request and store it at
        path. The file is replaced atomically, and only once the whole body
        was received.

        Returns:
            The HTTP status code.

        Raises:
            TransportError: if no HTTP response was received.
            FilesystemError: if the file cannot be written.
        """
        path = os.fspath(path)
        with AtomicFile(path) as f:
            with self.transport.send(Request("GET", url), stream=True) as response:
                for chunk in response.iter_bytes():
                    f.write(chunk)
            raise_for_transport(response)
            f.commit()
        logger.debug("stored %s to %s", url, path)
        return response.status

    def mirror(self, url: str, path: str | os.PathLike) -> int:
        """Mirror the document at url to path. The request is conditional on
        the modification time of path when it exists, and the modification
        time is set from the Last-Modified header of the response.

        Returns:
            The HTTP status code, 304 if path is up to date.

        Raises:
            TransportError: if no HTTP response was received.
            FilesystemError: if the file cannot be written.
        """
        response = self.transport.mirror(url, os.fspath(path))
        return cast(int, map_response(response, Projection.STATUS))

    def postform(self, url: str, fields: FormFields) -> str:
        """Send fields to url with a POST request, encoded as
        application/x-www-form-urlencoded.

        Returns:
            The response body.

        Raises:
            TransportError: if no HTTP response was received.
            HTTPStatusError: if the response status is not 2xx.
        """
        request = Request(
            "POST", url, {"Content-Type": FORM_CONTENT_TYPE}, encode_form(fields)
        )
        return cast(str, map_response(self.transport.send(request), Projection.TEXT))

    def postjson(self, url: str, data: Any) -> str:
        """Send data to url with a POST request, encoded as JSON.

        Returns:
            The response body.

        Raises:
            JSONError: if data cannot be encoded to JSON.
            TransportError: if no HTTP response was received.
            HTTPStatusError: if the response status is not 2xx.
        """
        request = Request(
            "POST", url, {"Content-Type": JSON_CONTENT_TYPE}, self.codec.encode(data)
        )
        return cast(str, map_response(self.transport.send(request), Projection.TEXT))

    def postfile(
        self,
        url: str,
        path: str | os.PathLike,
        content_type: Optional[str] = None,
    ) -> str:
        """Send the contents of the file at path to url with a POST request.
        The file is streamed rather than read in memory.

        Args:
            url: URL to send the file to.
            path: Path of the file.
            content_type: Content type of the file, application/octet-stream
                by default.

        Returns:
            The response body.

        Raises:
            FilesystemError: if the file cannot be opened.
            TransportError: if no HTTP response was received.
            HTTPStatusError: if the response status is not 2xx.
        """
        path = os.fspath(path)
        try:
            f = open(path, "rb")
        except OSError as e:
            raise FilesystemError.from_oserror("open", path, e) from e

        with f:
            request = Request(
                "POST",
                url,
                {"Content-Type": content_type or DEFAULT_FILE_CONTENT_TYPE},
                _read_chunks(f, path),
            )
            response = self.transport.send(request)
        return cast(str, map_response(response, Projection.TEXT))


def _read_chunks(f: BinaryIO, path: str) -> Iterator[bytes]:
    while True:
        try:
            chunk = f.read(FILE_CHUNK_SIZE)
        except OSError as e:
            raise FilesystemError.from_oserror("read", path, e) from e
        if not chunk:
            return
        yield chunk


def _stdout(charset: Optional[str]) -> BinaryIO:
    sys.stdout.flush()
    buffer = getattr(sys.stdout, "buffer", None)
    if buffer is not None:
        return buffer
    return cast(BinaryIO, _TextWriter(sys.stdout, charset or "utf-8"))


class _TextWriter:
    """Writes bytes to a text stream, such as a sys.stdout replaced with an
    io.StringIO, decoding them incrementally. flush() ends the decoding and
    must only be called once all the bytes were written."""

    __slots__ = ("stream", "decoder")

    def __init__(self, stream: TextIO, encoding: str):
        self.stream = stream
        self.decoder = codecs.getincrementaldecoder(encoding)(errors="replace")

    def write(self, data: bytes) -> int:
        self.stream.write(self.decoder.decode(data))
        return len(data)

    def flush(self):
        self.stream.write(self.decoder.decode(b"", final=True))
        self.stream.flush()


_default_client: Optional[Client] = None


def default_client() -> Client:
    """Returns the client used by the module-level functions of httpsimple.

    The client is created on first use, with an HTTPXTransport configured from
    the HTTPSIMPLE_* environment variables.

    Raises:
        ValueError: if an HTTPSIMPLE_* environment variable is invalid.
    """
    global _default_client
    if _default_client is None:
        _default_client = Client()
    return _default_client


def set_default_client(client: Optional[Client]):
    """Replace the client used by the module-level functions. Passing None
    resets it, so that a new default client is created on next use."""
    global _default_client
    _default_client = client
