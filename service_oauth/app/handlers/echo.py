"""
Protected echo endpoint.
"""

from typing import Dict, List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.requests import ClientDisconnect

from shared.errors import BodyReadError, TokenValidationFailure
from shared.logging import get_logger, set_client_context
from shared.metrics import MetricsCollector
from shared.responses import json_reply, remote_addr, request_uri
from ..tokens import TokenVerifier


def bearer_token(authorization: str) -> str:
    """Text after the first whitespace run of an Authorization header value.

    The scheme itself is not checked. A missing header or a value with no
    remainder yields an empty string.
    """
    parts = authorization.split(None, 1)
    return parts[1] if len(parts) == 2 else ""


def request_headers(request: Request) -> Dict[str, List[str]]:
    headers: Dict[str, List[str]] = {}
    for name, value in request.headers.items():
        headers.setdefault(name, []).append(value)
    return headers


class EchoHandler:
    """Verifies the bearer token, then describes the request back to the caller."""

    def __init__(self, verifier: TokenVerifier, metrics: Optional[MetricsCollector] = None):
        self.verifier = verifier
        self.metrics = metrics
        self.logger = get_logger("oauth.echo")

    async def handle(self, request: Request) -> JSONResponse:
        context = {
            "remote_addr": remote_addr(request),
            "method": request.method,
            "path": request_uri(request),
        }

        token = bearer_token(request.headers.get("authorization", ""))

        try:
            claims = self.verifier.decode(token)
        except TokenValidationFailure as e:
            self.logger.warning(
                "Bad access token",
                decision="401 unauthorized",
                error_code=e.code,
                error=e.message,
                **context,
            )
            self._count(result=e.code.lower())
            raise

        self._count(result="valid")
        set_client_context(claims.client_id)

        try:
            body = await request.body()
        except (ClientDisconnect, RuntimeError) as e:
            self.logger.error("Request body read failed", decision="500 server error", error=str(e), **context)
            raise BodyReadError(f"Request body read failed: {e}") from e

        self.logger.info("Echo", decision="200 ok", **context)

        return json_reply({
            "request_headers": request_headers(request),
            "request_body": body.decode("utf-8", errors="replace"),
            "request_method": request.method,
            "request_url": request_uri(request),
            "request_host": request.headers.get("host", ""),
        })

    def _count(self, result: str):
        if self.metrics is not None:
            self.metrics.increment_counter("token_verifications_total", result=result)
