"""
Polling loop for the protected echo endpoint.
"""

import sys
import time
from dataclasses import dataclass
from typing import Callable, Optional, TextIO

import httpx

from shared.errors import OAuthToyException, PollError
from shared.logging import get_logger


@dataclass
class PollResult:
    """Outcome of one polling cycle."""
    ok: bool
    status_code: Optional[int] = None
    body: str = ""
    error: Optional[str] = None


class EchoPoller:
    """Calls the echo endpoint on a fixed interval and prints each body.

    Failures are logged and the loop moves on to the next interval. With
    ``fail_fast`` the first failure raises :class:`PollError` instead.
    """

    def __init__(
        self,
        client: httpx.Client,
        echo_url: str,
        interval: float = 2.0,
        fail_fast: bool = False,
        sleep: Callable[[float], None] = time.sleep,
        out: TextIO = sys.stdout,
    ):
        self.client = client
        self.echo_url = echo_url
        self.interval = interval
        self.fail_fast = fail_fast
        self._sleep = sleep
        self._out = out
        self.logger = get_logger("client.poller")

    def poll_once(self) -> PollResult:
        try:
            response = self.client.get(self.echo_url)
        except (httpx.HTTPError, httpx.StreamError) as e:
            self.logger.error("Echo request failed", url=self.echo_url, error=str(e))
            return PollResult(ok=False, error=f"request failed: {e}")
        except OAuthToyException as e:
            self.logger.error("Echo request failed", url=self.echo_url, code=e.code, error=e.message)
            return PollResult(ok=False, error=e.message)

        body = response.text
        self._out.write(f"response: {body}")
        self._out.flush()
        return PollResult(ok=True, status_code=response.status_code, body=body)

    def run(self, max_cycles: Optional[int] = None) -> int:
        """Poll until *max_cycles* cycles have run (forever when None).

        Returns the number of failed cycles.
        """
        failures = 0
        cycle = 0
        while max_cycles is None or cycle < max_cycles:
            result = self.poll_once()
            cycle += 1
            if not result.ok:
                failures += 1
                if self.fail_fast:
                    raise PollError(result.error or "poll failed", details={"cycle": cycle})

            if max_cycles is not None and cycle >= max_cycles:
                break
            self.logger.info("Sleeping", interval=self.interval)
            self._sleep(self.interval)

        return failures
