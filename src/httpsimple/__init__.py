"""Simple procedural interface to HTTP clients.

The functions of this module each perform one request with the default
client, which can be configured with the HTTPSIMPLE_* environment variables
or replaced with set_default_client():

    import httpsimple

    content = httpsimple.get("https://example.com")

    if httpsimple.mirror("https://example.com", "/path/to/file.html") == 304:
        ...

    if httpsimple.is_success(httpsimple.getprint("https://example.com")):
        ...

    httpsimple.postform("https://example.com", {"foo": ["bar", "baz"]})
    httpsimple.postjson("https://example.com", [{"bar": "baz"}])
    httpsimple.postfile("https://example.com", "/path/to/file.png")
"""

from __future__ import annotations

import os
from typing import Any, BinaryIO, Optional

from httpsimple.client import Client, default_client, set_default_client
from httpsimple.codec import JSONCodec
from httpsimple.config import Config
from httpsimple.error import (
    FilesystemError,
    HTTPSimpleError,
    HTTPStatusError,
    JSONError,
    TransportError,
)
from httpsimple.form import FormFields
from httpsimple.status import (
    StatusClass,
    classify,
    is_client_error,
    is_error,
    is_info,
    is_redirect,
    is_server_error,
    is_success,
)
from httpsimple.transport import Headers
from httpsimple.version import __version__

__all__ = [
    "Client",
    "Config",
    "FilesystemError",
    "HTTPSimpleError",
    "HTTPStatusError",
    "JSONCodec",
    "JSONError",
    "StatusClass",
    "TransportError",
    "classify",
    "default_client",
    "get",
    "getjson",
    "getprint",
    "getstore",
    "head",
    "is_client_error",
    "is_error",
    "is_info",
    "is_redirect",
    "is_server_error",
    "is_success",
    "mirror",
    "postfile",
    "postform",
    "postjson",
    "set_default_client",
]


def get(url: str) -> str:
    """Retrieve the document at url and return it. Raises on connection or
    HTTP errors."""
    return default_client().get(url)


def getjson(url: str) -> Any:
    """Retrieve the document at url and return it decoded from JSON."""
    return default_client().getjson(url)


def head(url: str) -> Headers:
    """Retrieve the headers of url. Raises on connection or HTTP errors."""
    return default_client().head(url)


def getprint(url: str, file: Optional[BinaryIO] = None) -> int:
    """Print the document at url as it is received and return the HTTP status
    code. Raises on connection errors only."""
    return default_client().getprint(url, file)


def getstore(url: str, path: str | os.PathLike) -> int:
    """Store the document at url to path and return the HTTP status code."""
    return default_client().getstore(url, path)


def mirror(url: str, path: str | os.PathLike) -> int:
    """Mirror the document at url to path and return the HTTP status code,
    304 if path is up to date."""
    return default_client().mirror(url, path)


def postform(url: str, fields: FormFields) -> str:
    """POST form fields to url and return the response body."""
    return default_client().postform(url, fields)


def postjson(url: str, data: Any) -> str:
    """POST data encoded to JSON to url and return the response body."""
    return default_client().postjson(url, data)


def postfile(
    url: str, path: str | os.PathLike, content_type: Optional[str] = None
) -> str:
    """POST the contents of the file at path to url and return the response
    body."""
    return default_client().postfile(url, path, content_type)
