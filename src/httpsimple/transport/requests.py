from __future__ import annotations

import logging
from typing import Optional

import requests
import urllib3

from httpsimple.config import Config
from httpsimple.transport import (
    BaseTransport,
    Headers,
    Request,
    Response,
    collect_headers,
    describe_error,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 128 * 1024

# See https://requests.readthedocs.io/en/latest/api/#exceptions
# urllib3 raises LocationValueError for some hosts it cannot parse (empty
# IDNA labels), and requests lets it through unwrapped.
_ERRORS = (requests.RequestException, urllib3.exceptions.LocationValueError)


class RequestsTransport(BaseTransport):
    """Transport sending requests with a requests.Session.

    Args:
        session: Session to send requests with. When omitted, a session is
            created from config, sending the configured User-Agent.

        config: Settings for the session, and the timeout applied to each
            request. Uses the HTTPSIMPLE_* environment variables by default.
    """

    __slots__ = ("session", "config")

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        config: Optional[Config] = None,
    ):
        if config is None:
            config = Config.from_environment()
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = config.user_agent
            session.max_redirects = config.max_redirects
            session.verify = config.verify
        self.session = session
        self.config = config

    def close(self):
        self.session.close()

    def send(self, request: Request, stream: bool = False) -> Response:
        logger.debug("%s %s", request.method, request.url)
        try:
            raw = self.session.request(
                request.method,
                request.url,
                headers=dict(request.headers),
                data=request.content,
                timeout=self.config.timeout,
                allow_redirects=True,
                stream=True,
            )
        except _ERRORS as e:
            logger.debug("%s %s failed: %s", request.method, request.url, e)
            return Response.failure(request.url, describe_error(e))

        logger.debug(
            "%s %s: %d %s", request.method, request.url, raw.status_code, raw.reason
        )
        response = Response(
            url=raw.url,
            status=raw.status_code,
            reason=raw.reason or "",
            headers=_headers(raw),
            stream=raw.iter_content(CHUNK_SIZE),
            stream_errors=_ERRORS,
            close=raw.close,
        )
        if not stream:
            response.read()
        return response


def _headers(raw: requests.Response) -> Headers:
    # requests folds repeated fields into one comma-separated value; the
    # urllib3 headers still have them apart.
    original = raw.raw.headers
    return collect_headers(
        (name, value) for name in original for value in original.getlist(name)
    )
