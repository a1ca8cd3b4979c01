"""
Transport decorators that observe token endpoint responses.

:class:`ReplayingTransport` wraps another :class:`httpx.BaseTransport`. For
requests to the designated URL it drains the response body, logs it, and hands
the caller a fresh response carrying the same bytes, so the interception is
invisible to whatever drives the client (the token-fetching auth flow). All
other requests are delegated untouched.

The raw stream is drained directly, so the captured bytes are still
content-encoded and the replayed response decodes exactly as the original
would have.

Example::

    transport = ReplayingTransport(httpx.HTTPTransport(), token_url)
    with httpx.Client(transport=transport) as client:
        client.post(token_url, data=form)
"""

from typing import Tuple

import httpx

from shared.logging import get_logger

logger = get_logger("client.transport")


def _target(url: httpx.URL) -> Tuple[str, str, int, str]:
    # The query string is not part of the match
    return url.scheme, url.host, url.port or (443 if url.scheme == "https" else 80), url.path


def _replay(request: httpx.Request, response: httpx.Response, body: bytes) -> httpx.Response:
    logger.info(
        "Token retrieval intercepted",
        url=str(request.url),
        status_code=response.status_code,
        body=body.decode("utf-8", errors="replace"),
    )
    return httpx.Response(
        status_code=response.status_code,
        headers=response.headers,
        stream=httpx.ByteStream(body),
        extensions=response.extensions,
        request=request,
    )


class ReplayingTransport(httpx.BaseTransport):
    """Logs and replays response bodies for one URL."""

    def __init__(self, transport: httpx.BaseTransport, url: str):
        self._transport = transport
        self.url = httpx.URL(url)

    def matches(self, request: httpx.Request) -> bool:
        return _target(request.url) == _target(self.url)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        if not self.matches(request):
            return self._transport.handle_request(request)

        try:
            response = self._transport.handle_request(request)
        except httpx.HTTPError as e:
            logger.warning("Token retrieval intercepted: request failed", url=str(request.url), error=str(e))
            raise

        # On a failed read the original stays open; the caller hits the same error reading it
        try:
            body = b"".join(response.stream)
        except (httpx.HTTPError, httpx.StreamError) as e:
            logger.warning("Token retrieval intercepted: read failed", url=str(request.url), error=str(e))
            return response
        response.close()

        return _replay(request, response, body)

    def close(self) -> None:
        self._transport.close()


class AsyncReplayingTransport(httpx.AsyncBaseTransport):
    """Async counterpart of :class:`ReplayingTransport`."""

    def __init__(self, transport: httpx.AsyncBaseTransport, url: str):
        self._transport = transport
        self.url = httpx.URL(url)

    def matches(self, request: httpx.Request) -> bool:
        return _target(request.url) == _target(self.url)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if not self.matches(request):
            return await self._transport.handle_async_request(request)

        try:
            response = await self._transport.handle_async_request(request)
        except httpx.HTTPError as e:
            logger.warning("Token retrieval intercepted: request failed", url=str(request.url), error=str(e))
            raise

        try:
            body = b"".join([chunk async for chunk in response.stream])
        except (httpx.HTTPError, httpx.StreamError) as e:
            logger.warning("Token retrieval intercepted: read failed", url=str(request.url), error=str(e))
            return response
        await response.aclose()

        return _replay(request, response, body)

    async def aclose(self) -> None:
        await self._transport.aclose()
