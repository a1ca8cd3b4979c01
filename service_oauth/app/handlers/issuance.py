"""
Token issuance for the client credentials grant.
"""

from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.datastructures import FormData

from shared.errors import AuthenticationFailure, SerializationError, SigningError
from shared.logging import get_logger, set_client_context
from shared.metrics import MetricsCollector
from shared.responses import json_reply, remote_addr, request_uri
from ..credentials import CredentialAuthenticator
from ..tokens import TokenSigner, build_claims


class TokenResponse(BaseModel):
    """Successful token endpoint reply."""
    access_token: str
    token_type: str = "Bearer"
    refresh_token: str
    expires_in: int


class RequestParameters:
    """Form-style parameter lookup for one request.

    The query string is consulted first. The form body is parsed only when a
    key is missing from the query, and at most once.
    """

    def __init__(self, request: Request):
        self._request = request
        self._form = None
        self.logger = get_logger("oauth.params")

    @property
    def form_parsed(self) -> bool:
        return self._form is not None

    async def get(self, key: str) -> str:
        values = self._request.query_params.getlist(key)
        if values:
            return values[0]

        form = await self._load_form()
        for value in form.getlist(key):
            if isinstance(value, str):
                return value
        return ""

    async def _load_form(self):
        if self._form is None:
            try:
                self._form = await self._request.form()
            except Exception as e:
                # An unparseable body reads as an empty form; the grant check rejects it.
                self.logger.warning("Form parse failed", path=request_uri(self._request), error=str(e))
                self._form = FormData()
        return self._form


class TokenIssuanceHandler:
    """Authenticates a client and answers with an access/refresh token pair."""

    def __init__(
        self,
        authenticator: CredentialAuthenticator,
        signer: TokenSigner,
        access_token_ttl: int,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.authenticator = authenticator
        self.signer = signer
        self.access_token_ttl = access_token_ttl
        self.metrics = metrics
        self.logger = get_logger("oauth.issuance")

    async def handle(self, request: Request) -> JSONResponse:
        params = RequestParameters(request)
        grant_type = await params.get("grant_type")
        client_id = await params.get("client_id")
        client_secret = await params.get("client_secret")

        context = {
            "remote_addr": remote_addr(request),
            "method": request.method,
            "path": request_uri(request),
            "grant_type": grant_type,
            "client_id": client_id,
        }

        reason = self.authenticator.rejection_reason(grant_type, client_id, client_secret)
        if reason is not None:
            self.logger.warning("Token request rejected", decision="401 unauthorized", reason=reason, **context)
            self._count("token_requests_rejected_total", reason=reason.replace(" ", "_"))
            raise AuthenticationFailure(reason, details={"client_id": client_id})

        set_client_context(client_id)

        try:
            access_token = self.signer.sign(build_claims(client_id, self.access_token_ttl))
            refresh_token = self.signer.sign(build_claims(client_id, 0))
        except (SigningError, SerializationError) as e:
            self.logger.error("Token signing failed", decision="500 server error", error=e.message, **context)
            raise

        reply = TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.access_token_ttl,
        )

        self._count("tokens_issued_total", token_type="access")
        self._count("tokens_issued_total", token_type="refresh")
        self.logger.info("Token issued", decision="200 ok", expires_in=self.access_token_ttl, **context)

        return json_reply(reply.model_dump())

    def _count(self, metric_name: str, **labels):
        if self.metrics is not None:
            self.metrics.increment_counter(metric_name, **labels)
