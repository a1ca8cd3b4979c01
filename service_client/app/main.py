"""
Polling client for oauthtoy.
"""

import argparse
import os
import sys
from typing import Optional

import httpx

from shared.config import ClientConfig, get_client_config
from shared.errors import PollError
from shared.logging import configure_logging, get_logger
from shared.version import get_version
from .auth import ClientCredentialsAuth
from .poller import EchoPoller
from .transport import ReplayingTransport

logger = get_logger("client.main")


def build_client(config: ClientConfig, transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
    """httpx client that fetches tokens on demand and logs token responses."""
    return httpx.Client(
        transport=ReplayingTransport(transport or httpx.HTTPTransport(), config.token_url),
        auth=ClientCredentialsAuth(
            config.token_url,
            config.client_id,
            config.client_secret,
            expiry_margin=config.expiry_margin,
        ),
    )


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="oauthtoy polling client")
    parser.add_argument("--version", action="store_true", help="show version")
    args = parser.parse_args(argv)

    banner = get_version(os.path.basename(sys.argv[0]))
    if args.version:
        print(banner)
        return 0

    config = get_client_config()
    configure_logging("client", config.log_level)
    logger.info(banner)

    with build_client(config) as client:
        poller = EchoPoller(
            client,
            config.echo_url,
            interval=config.poll_interval,
            fail_fast=config.fail_fast,
        )
        try:
            poller.run()
        except PollError as e:
            logger.error("Polling stopped", error=e.message)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
