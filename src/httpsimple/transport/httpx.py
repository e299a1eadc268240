from __future__ import annotations

import logging
from typing import Optional

import httpx

from httpsimple.config import Config
from httpsimple.transport import (
    BaseTransport,
    Request,
    Response,
    collect_headers,
    describe_error,
)

logger = logging.getLogger(__name__)

# See https://www.python-httpx.org/exceptions/
_ERRORS = (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError)


class HTTPXTransport(BaseTransport):
    """Transport sending requests with an httpx.Client.

    Args:
        client: Client to send requests with. When omitted, a client is
            created from config, following redirects and sending the
            configured User-Agent.

        config: Settings for the client created when none is passed. Uses
            the HTTPSIMPLE_* environment variables by default.
    """

    __slots__ = ("client",)

    def __init__(
        self, client: Optional[httpx.Client] = None, config: Optional[Config] = None
    ):
        if client is None:
            if config is None:
                config = Config.from_environment()
            client = httpx.Client(
                headers={"User-Agent": config.user_agent},
                timeout=config.timeout,
                follow_redirects=True,
                max_redirects=config.max_redirects,
                verify=config.verify,
            )
        self.client = client

    def close(self):
        self.client.close()

    def send(self, request: Request, stream: bool = False) -> Response:
        logger.debug("%s %s", request.method, request.url)
        try:
            raw = self.client.send(
                self.client.build_request(
                    request.method,
                    request.url,
                    headers=dict(request.headers),
                    content=request.content,
                ),
                stream=True,
            )
        except _ERRORS as e:
            logger.debug("%s %s failed: %s", request.method, request.url, e)
            return Response.failure(request.url, describe_error(e))

        logger.debug(
            "%s %s: %d %s",
            request.method,
            request.url,
            raw.status_code,
            raw.reason_phrase,
        )
        response = Response(
            url=str(raw.url),
            status=raw.status_code,
            reason=raw.reason_phrase,
            headers=collect_headers(raw.headers.multi_items()),
            stream=raw.iter_bytes(),
            stream_errors=_ERRORS,
            close=raw.close,
        )
        if not stream:
            response.read()
        return response
