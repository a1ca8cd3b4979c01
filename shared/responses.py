"""
JSON reply helpers shared by oauthtoy services.

Every error leaving a service uses the same envelope::

    {"message": "unauthorized", "status": "401", "path": "/echo",
     "method": "GET", "host": "localhost:8080", "serverHostname": "box"}
"""

import socket
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from shared.logging import get_logger

JSON_MEDIA_TYPE = "application/json; charset=utf-8"

logger = get_logger("shared.responses")


def json_reply(content: Any, status_code: int = 200) -> JSONResponse:
    """Build a JSON response with the headers every oauthtoy reply carries."""
    return JSONResponse(
        content=content,
        status_code=status_code,
        media_type=JSON_MEDIA_TYPE,
        headers={"X-Content-Type-Options": "nosniff"},
    )


def request_uri(request: Request) -> str:
    """Path plus query string, as sent on the request line."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def remote_addr(request: Request) -> str:
    if request.client is None:
        return "-"
    return f"{request.client.host}:{request.client.port}"


def server_hostname() -> str:
    try:
        return socket.gethostname()
    except OSError as e:
        logger.warning("Hostname lookup failed", error=str(e))
        return ""


def error_envelope(request: Request, status_code: int, message: str) -> JSONResponse:
    """Reply with the structured error envelope."""
    return json_reply(
        {
            "message": message,
            "status": str(status_code),
            "path": request_uri(request),
            "method": request.method,
            "host": request.headers.get("host", ""),
            "serverHostname": server_hostname(),
        },
        status_code=status_code,
    )
