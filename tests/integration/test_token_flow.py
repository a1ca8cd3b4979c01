"""
Integration tests for the client credentials flow, client to server.
"""

import io
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

from service_client.app.auth import ClientCredentialsAuth
from service_client.app.main import build_client
from service_client.app.poller import EchoPoller
from service_client.app.transport import AsyncReplayingTransport
from service_oauth.app.main import create_app
from shared.config import ClientConfig, ServerConfig
from shared.test_helpers import TestCredentials, create_mock_jwt_token, mock_transport_for

BASE_URL = "http://testserver"
TOKEN_URL = f"{BASE_URL}/oauth/token"
ECHO_URL = f"{BASE_URL}/echo"


class TestTokenFlow:
    """Integration tests for the complete token flow."""

    @pytest.fixture
    def app(self):
        return create_app(ServerConfig())

    @pytest.fixture
    def client_config(self):
        return ClientConfig(token_url=TOKEN_URL, echo_url=ECHO_URL)

    def test_server_scenarios(self, app):
        client = TestClient(app)

        # 1. Issue a token
        issued = client.post("/oauth/token", data=TestCredentials().as_form())
        assert issued.status_code == 200
        assert issued.json()["token_type"] == "Bearer"
        assert issued.json()["expires_in"] == 30

        # 2. Wrong grant type
        rejected = client.post("/oauth/token", data=TestCredentials(grant_type="password").as_form())
        assert rejected.status_code == 401

        # 3. Echo with the issued token
        token = issued.json()["access_token"]
        echoed = client.get("/echo", headers={"Authorization": f"Bearer {token}"})
        assert echoed.status_code == 200
        assert echoed.json()["request_method"] == "GET"

        # 4. Echo without a token
        assert client.get("/echo").status_code == 401

        # 5. Echo with a token signed by another secret
        forged = create_mock_jwt_token(secret=b"NotTheServerSecret")
        assert client.get("/echo", headers={"Authorization": f"Bearer {forged}"}).status_code == 401

    def test_poller_acquires_token_once_and_reaches_echo(self, app, client_config):
        transport, bridge = mock_transport_for(app)
        out = io.StringIO()

        with patch("service_client.app.transport.logger") as transport_logger:
            with build_client(client_config, transport=transport) as client:
                failures = EchoPoller(client, ECHO_URL, sleep=lambda s: None, out=out).run(max_cycles=3)

        assert failures == 0
        assert bridge.paths() == ["/oauth/token", "/echo", "/echo", "/echo"]
        assert out.getvalue().count("response: ") == 3
        assert '"request_method":"GET"' in out.getvalue()

        transport_logger.info.assert_called_once()
        assert '"token_type":"Bearer"' in transport_logger.info.call_args.kwargs["body"]

    def test_poller_reports_bad_credentials(self, app):
        transport, bridge = mock_transport_for(app)
        config = ClientConfig(token_url=TOKEN_URL, echo_url=ECHO_URL, client_secret="wrong")

        with build_client(config, transport=transport) as client:
            result = EchoPoller(client, ECHO_URL, sleep=lambda s: None, out=io.StringIO()).poll_once()

        assert result.ok is False
        assert bridge.paths() == ["/oauth/token"]

    @pytest.mark.asyncio
    async def test_async_client_through_replaying_transport(self, app):
        transport = AsyncReplayingTransport(httpx.ASGITransport(app=app), TOKEN_URL)
        auth = ClientCredentialsAuth(TOKEN_URL, "admin", "admin")

        async with httpx.AsyncClient(transport=transport, auth=auth, base_url=BASE_URL) as client:
            first = await client.post("/echo", content=b"ping")
            second = await client.get("/echo")

        assert first.status_code == 200
        assert first.json()["request_body"] == "ping"
        assert second.status_code == 200
        assert first.json()["request_headers"]["authorization"] == second.json()["request_headers"]["authorization"]
