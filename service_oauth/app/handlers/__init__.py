"""
Request handlers for the token server.

- issuance: the client credentials token endpoint.
- echo: the bearer-protected echo endpoint.
"""

from .echo import EchoHandler, bearer_token
from .issuance import RequestParameters, TokenIssuanceHandler, TokenResponse

__all__ = [
    "EchoHandler",
    "bearer_token",
    "RequestParameters",
    "TokenIssuanceHandler",
    "TokenResponse",
]
