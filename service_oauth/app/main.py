"""
Token server for oauthtoy.
"""

import argparse
import os
import sys
from typing import Optional

from fastapi import Request

from shared.base_service import BaseService
from shared.config import ServerConfig, get_server_config
from shared.version import get_version
from .credentials import ClientCredentialRecord, CredentialAuthenticator
from .handlers import EchoHandler, TokenIssuanceHandler
from .tokens import TokenSigner, TokenVerifier

ECHO_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


class OAuthService(BaseService):
    """Token server implementation."""

    def __init__(self, config: Optional[ServerConfig] = None):
        super().__init__("oauth", config or get_server_config())

        secret = self.config.secret_bytes()
        record = ClientCredentialRecord(
            client_id=self.config.client_id,
            client_secret=self.config.client_secret,
        )

        self.issuance_handler = TokenIssuanceHandler(
            CredentialAuthenticator(record),
            TokenSigner(secret, self.config.signing_algorithm),
            self.config.access_token_ttl,
            metrics=self.metrics,
        )
        self.echo_handler = EchoHandler(
            TokenVerifier(secret, self.config.signing_algorithm),
            metrics=self.metrics,
        )

        self._setup_oauth_routes()

    def _setup_oauth_routes(self):
        """Set up token and echo routes."""

        @self.app.api_route(self.config.token_route, methods=["GET", "POST"])
        async def token(request: Request):
            """Client credentials token endpoint."""
            return await self.issuance_handler.handle(request)

        @self.app.api_route(self.config.echo_route, methods=ECHO_METHODS)
        async def echo(request: Request):
            """Bearer-protected echo endpoint."""
            return await self.echo_handler.handle(request)

        self.logger.info(
            "Routes registered",
            addr=self.config.addr,
            token_route=self.config.token_route,
            echo_route=self.config.echo_route,
        )


def create_app(config: Optional[ServerConfig] = None):
    """Create FastAPI application."""
    service = OAuthService(config)
    return service.app


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="oauthtoy token server")
    parser.add_argument("--version", action="store_true", help="show version")
    args = parser.parse_args(argv)

    banner = get_version(os.path.basename(sys.argv[0]))
    if args.version:
        print(banner)
        return 0

    service = OAuthService()
    service.logger.info(banner)
    service.logger.info("Listening", addr=service.config.addr)
    service.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
