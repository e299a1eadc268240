import io
import os
import socket
from email.utils import parsedate_to_datetime

import pytest

from httpsimple import Client, Config, HTTPStatusError, TransportError
from httpsimple.test import RecordedRequest, Reply, Server
from httpsimple.transport.httpx import HTTPXTransport
from httpsimple.transport.requests import RequestsTransport

LAST_MODIFIED = "Wed, 21 Oct 2015 07:28:00 GMT"
LAST_MODIFIED_TS = 1445412480

CONFIG = Config(user_agent="httpsimple-test/1.0", timeout=5)


def document(request: RecordedRequest) -> Reply:
    since = request.header("If-Modified-Since")
    if since is not None and parsedate_to_datetime(since) >= parsedate_to_datetime(
        LAST_MODIFIED
    ):
        return Reply(304)
    return Reply(
        200,
        b"mirrored content",
        headers=[("Content-Type", "text/plain"), ("Last-Modified", LAST_MODIFIED)],
    )


def echo(request: RecordedRequest) -> Reply:
    return Reply(200, request.body, headers=[("Content-Type", "text/plain")])


ROUTES = {
    "/hello": Reply(200, b"hello", headers=[("Content-Type", "text/plain")]),
    "/chunked": Reply(200, [b"one ", b"two ", b"three"]),
    "/cookies": Reply(
        200, b"", headers=[("Set-Cookie", "a=1"), ("Set-Cookie", "b=2")]
    ),
    "/redirect": Reply(302, b"", headers=[("Location", "/hello")]),
    "/truncated": Reply(200, b"partial body", truncate=True),
    "/document": document,
    "/echo": echo,
    "/teapot": Reply(418, b"short and stout"),
}


def closed_port_url() -> str:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"http://127.0.0.1:{port}/"


@pytest.fixture(scope="module")
def server():
    with Server(ROUTES) as server:
        yield server


@pytest.fixture(params=["httpx", "requests"])
def client(request):
    if request.param == "httpx":
        transport = HTTPXTransport(config=CONFIG)
    else:
        transport = RequestsTransport(config=CONFIG)
    with Client(transport) as client:
        yield client


def test_get(client, server):
    assert client.get(server.url_for("/hello")) == "hello"
    assert server.requests[-1].header("User-Agent") == "httpsimple-test/1.0"


def test_get_chunked(client, server):
    assert client.get(server.url_for("/chunked")) == "one two three"


def test_get_follows_redirects(client, server):
    assert client.get(server.url_for("/redirect")) == "hello"


def test_get_error_status(client, server):
    with pytest.raises(HTTPStatusError) as exc:
        client.get(server.url_for("/teapot"))
    assert exc.value.status == 418


def test_get_not_found(client, server):
    with pytest.raises(HTTPStatusError, match="^404 "):
        client.get(server.url_for("/nowhere"))


def test_get_connection_refused(client):
    with pytest.raises(TransportError):
        client.get(closed_port_url())


def test_get_malformed_host(client):
    with pytest.raises(TransportError):
        client.get("http://éé..com/")


def test_get_truncated(client, server):
    with pytest.raises(TransportError):
        client.get(server.url_for("/truncated"))


def test_head(client, server):
    headers = client.head(server.url_for("/cookies"))
    assert headers["set-cookie"] == ["a=1", "b=2"]
    assert server.requests[-1].method == "HEAD"


def test_getprint(client, server):
    out = io.BytesIO()
    assert client.getprint(server.url_for("/chunked"), out) == 200
    assert out.getvalue() == b"one two three"


def test_getprint_error_status(client, server):
    out = io.BytesIO()
    assert client.getprint(server.url_for("/teapot"), out) == 418
    assert out.getvalue() == b"short and stout"


def test_getstore(client, server, tmp_path):
    path = tmp_path / "hello.txt"
    assert client.getstore(server.url_for("/hello"), path) == 200
    assert path.read_bytes() == b"hello"


def test_getstore_truncated(client, server, tmp_path):
    path = tmp_path / "partial.txt"
    with pytest.raises(TransportError):
        client.getstore(server.url_for("/truncated"), path)
    assert os.listdir(tmp_path) == []


def test_getstore_connection_refused(client, tmp_path):
    with pytest.raises(TransportError):
        client.getstore(closed_port_url(), tmp_path / "x")
    assert os.listdir(tmp_path) == []


def test_mirror(client, server, tmp_path):
    path = tmp_path / "document.txt"
    url = server.url_for("/document")

    assert client.mirror(url, path) == 200
    assert path.read_bytes() == b"mirrored content"
    assert os.stat(path).st_mtime == LAST_MODIFIED_TS
    assert server.requests[-1].header("If-Modified-Since") is None

    inode = os.stat(path).st_ino
    assert client.mirror(url, path) == 304
    assert server.requests[-1].header("If-Modified-Since") == LAST_MODIFIED
    assert path.read_bytes() == b"mirrored content"
    assert os.stat(path).st_ino == inode
    assert os.listdir(tmp_path) == ["document.txt"]


def test_mirror_stale_file(client, server, tmp_path):
    path = tmp_path / "document.txt"
    path.write_bytes(b"stale")
    os.utime(path, (LAST_MODIFIED_TS - 3600, LAST_MODIFIED_TS - 3600))

    assert client.mirror(server.url_for("/document"), path) == 200
    assert path.read_bytes() == b"mirrored content"


def test_mirror_error_status(client, server, tmp_path):
    path = tmp_path / "teapot.txt"
    assert client.mirror(server.url_for("/teapot"), path) == 418
    assert not path.exists()


def test_postform(client, server):
    body = client.postform(server.url_for("/echo"), {"foo": ["bar", "baz"]})
    assert body == "foo=bar&foo=baz"
    assert (
        server.requests[-1].header("Content-Type")
        == "application/x-www-form-urlencoded"
    )


def test_postjson(client, server):
    assert client.postjson(server.url_for("/echo"), [{"bar": "baz"}]) == (
        '[{"bar":"baz"}]'
    )
    assert (
        server.requests[-1].header("Content-Type") == "application/json; charset=UTF-8"
    )


def test_postfile(client, server, tmp_path):
    path = tmp_path / "upload.bin"
    data = bytes(range(256)) * 1024
    path.write_bytes(data)

    client.postfile(server.url_for("/echo"), path, "application/x-test")
    assert server.requests[-1].body == data
    assert server.requests[-1].header("Content-Type") == "application/x-test"


def test_postfile_error_status(client, server, tmp_path):
    path = tmp_path / "upload.bin"
    path.write_bytes(b"data")
    with pytest.raises(HTTPStatusError, match="^418 "):
        client.postfile(server.url_for("/teapot"), path)
