"""Local HTTP server for testing code built on httpsimple.

    def hello(request: RecordedRequest) -> Reply:
        return Reply(200, b"hello")

    with Server({"/hello": hello, "/missing": Reply(404)}) as server:
        assert httpsimple.get(server.url_for("/hello")) == "hello"
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


@dataclass
class RecordedRequest:
    """A request received by the test server."""

    method: str
    path: str
    headers: Dict[str, str]
    body: bytes

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())


@dataclass
class Reply:
    """The response sent by the test server for a route.

    The body may be a list of chunks, sent with chunked transfer encoding.
    When truncate is true, the server announces a longer body than it sends
    and drops the connection, so clients see the stream cut short.
    """

    status: int = 200
    body: Union[bytes, List[bytes]] = b""
    headers: List[Tuple[str, str]] = field(default_factory=list)
    truncate: bool = False


Route = Union[Reply, Callable[[RecordedRequest], Reply]]


class Server:
    """Test HTTP server listening on a local port in a background thread.

    Args:
        routes: Mapping of request paths, query strings excluded, to a Reply
            or to a function building one. Unknown paths get a 404.
        hostname: Hostname to bind to.
        port: Port to bind to, or 0 to bind to any available port.
    """

    def __init__(
        self,
        routes: Mapping[str, Route],
        hostname: str = "127.0.0.1",
        port: int = 0,
    ):
        self.routes = dict(routes)
        self.requests: List[RecordedRequest] = []
        self._lock = threading.Lock()
        self._server = ThreadingHTTPServer((hostname, port), _handler(self))
        self._server.daemon_threads = True
        self._thread: Optional[threading.Thread] = None
        host, port = self._server.server_address[:2]
        self.hostname = str(host)
        self.port = int(port)

    @property
    def url(self) -> str:
        """Returns the URL of the server."""
        return f"http://{self.hostname}:{self.port}"

    def url_for(self, path: str) -> str:
        return self.url + path

    def start(self):
        """Start the server."""
        self._thread = threading.Thread(
            target=self._server.serve_forever, kwargs={"poll_interval": 0.05}
        )
        self._thread.daemon = True
        self._thread.start()

    def stop(self):
        """Stop the server."""
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def __enter__(self) -> Server:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    def _record(self, request: RecordedRequest) -> Reply:
        with self._lock:
            self.requests.append(request)
        route = self.routes.get(urlsplit(request.path).path)
        if route is None:
            return Reply(404, b"not found")
        if isinstance(route, Reply):
            return route
        return route(request)


def _handler(server: Server):
    class Handler(BaseHTTPRequestHandler):
        protocol_version = "HTTP/1.1"

        def do_GET(self):
            self._handle()

        def do_HEAD(self):
            self._handle()

        def do_POST(self):
            self._handle()

        def do_PUT(self):
            self._handle()

        def log_message(self, format, *args):
            logger.debug(format, *args)

        def _handle(self):
            request = RecordedRequest(
                method=self.command,
                path=self.path,
                headers={k.lower(): v for k, v in self.headers.items()},
                body=self._read_body(),
            )
            self._reply(server._record(request))

        def _read_body(self) -> bytes:
            if self.headers.get("Transfer-Encoding", "").lower() == "chunked":
                chunks = []
                while True:
                    size = int(self.rfile.readline().split(b";")[0].strip(), 16)
                    if size == 0:
                        while self.rfile.readline() not in (b"\r\n", b"\n", b""):
                            pass
                        return b"".join(chunks)
                    chunks.append(self.rfile.read(size))
                    self.rfile.readline()
            length = int(self.headers.get("Content-Length") or 0)
            return self.rfile.read(length) if length else b""

        def _reply(self, reply: Reply):
            self.send_response(reply.status)
            for name, value in reply.headers:
                self.send_header(name, value)

            if isinstance(reply.body, list):
                self.send_header("Transfer-Encoding", "chunked")
                self.end_headers()
                if self.command == "HEAD":
                    return
                for chunk in reply.body:
                    self.wfile.write(b"%x\r\n%s\r\n" % (len(chunk), chunk))
                    self.wfile.flush()
                if reply.truncate:
                    self.close_connection = True
                    return
                self.wfile.write(b"0\r\n\r\n")
                return

            length = len(reply.body) * 2 if reply.truncate else len(reply.body)
            if reply.status != 304 and reply.status >= 200:
                self.send_header("Content-Length", str(length))
            if reply.truncate:
                self.send_header("Connection", "close")
                self.close_connection = True
            self.end_headers()
            if self.command != "HEAD" and reply.status != 304:
                self.wfile.write(reply.body)

    return Handler
