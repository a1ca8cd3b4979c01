"""OAuth2 client credentials auth for httpx clients.

This module provides :class:`ClientCredentialsAuth`, an :class:`httpx.Auth`
that performs the Client Credentials grant (:rfc:`6749` section 4.4) against a
token endpoint and attaches the resulting access token as an
``Authorization: Bearer <token>`` header.

The token request is yielded from the auth flow, so it travels through the
same client (and transport) as the request it authorizes. Tokens are cached in
memory until ``expires_in`` minus a safety margin has elapsed.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Generator, Optional

import httpx

from shared.errors import TokenRequestError
from shared.logging import get_logger

DEFAULT_TOKEN_LIFETIME = 3600.0


class ClientCredentialsAuth(httpx.Auth):
    """Fetch, cache and attach client credentials access tokens.

    Args:
        token_url: Token endpoint URL.
        client_id: Client identifier sent as ``client_id``.
        client_secret: Client secret sent as ``client_secret``.
        expiry_margin: Seconds subtracted from ``expires_in`` so a token is
            refreshed shortly before the server would reject it.
        clock: Monotonic clock used for expiry tracking.
    """

    requires_response_body = True

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        expiry_margin: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.expiry_margin = expiry_margin
        self._clock = clock
        self._access_token: Optional[str] = None
        self._token_type: str = "Bearer"
        self._token_expiry: float = 0.0
        self.logger = get_logger("client.auth")

    @property
    def token_valid(self) -> bool:
        return self._access_token is not None and self._clock() < self._token_expiry

    def invalidate(self) -> None:
        """Drop the cached token so the next request fetches a new one."""
        self._access_token = None
        self._token_expiry = 0.0

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if not self.token_valid:
            token_response = yield self.build_token_request()
            self._cache_token(self._parse_token_response(token_response))

        request.headers["Authorization"] = f"{self._token_type} {self._access_token}"
        yield request

    def build_token_request(self) -> httpx.Request:
        """Form-encoded ``grant_type=client_credentials`` request."""
        return httpx.Request(
            "POST",
            self.token_url,
            data={
                "grant_type": "client_credentials",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            },
            headers={"Accept": "application/json"},
        )

    def _parse_token_response(self, response: httpx.Response) -> dict[str, Any]:
        if response.status_code != 200:
            raise TokenRequestError(
                f"Token request failed with status {response.status_code}: {response.text}",
                details={"status_code": response.status_code},
            )

        try:
            token_data = response.json()
        except ValueError as exc:
            raise TokenRequestError(f"Token response is not JSON: {exc}") from exc

        if not isinstance(token_data, dict) or "access_token" not in token_data:
            raise TokenRequestError("Token response missing 'access_token' field")

        if not isinstance(token_data["access_token"], str) or not token_data["access_token"]:
            raise TokenRequestError("Token response 'access_token' is not a non-empty string")

        token_type = token_data.get("token_type")
        if token_type is not None and not isinstance(token_type, str):
            raise TokenRequestError(f"Token response 'token_type' is not a string: {token_type!r}")

        expires_in = token_data.get("expires_in")
        if expires_in is not None and (isinstance(expires_in, bool) or not isinstance(expires_in, (int, float))):
            raise TokenRequestError(f"Token response 'expires_in' is not a number: {expires_in!r}")

        return token_data

    def _cache_token(self, token_data: dict[str, Any]) -> None:
        """Cache the access token and compute its expiry time."""
        self._access_token = token_data["access_token"]
        token_type = token_data.get("token_type") or "Bearer"
        self._token_type = "Bearer" if token_type.lower() == "bearer" else token_type

        expires_in = token_data.get("expires_in")
        lifetime = float(expires_in) if expires_in is not None else DEFAULT_TOKEN_LIFETIME
        self._token_expiry = self._clock() + lifetime - self.expiry_margin

        self.logger.info("Access token acquired", token_url=self.token_url, expires_in=expires_in)
