"""
Tests for the token server application.
"""

import time
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from service_oauth.app.main import OAuthService, create_app, main
from service_oauth.app.tokens import TokenSigner, TokenVerifier, build_claims
from shared.config import ServerConfig
from shared.errors import SigningError

SECRET = b"SecretYouShouldHide"
CREDENTIALS = {
    "grant_type": "client_credentials",
    "client_id": "admin",
    "client_secret": "admin",
}
ENVELOPE_FIELDS = {"message", "status", "path", "method", "host", "serverHostname"}


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(create_app(ServerConfig()))


@pytest.fixture
def access_token(client):
    response = client.post("/oauth/token", data=CREDENTIALS)
    assert response.status_code == 200
    return response.json()["access_token"]


def test_token_issued_for_valid_credentials(client):
    response = client.post("/oauth/token", data=CREDENTIALS)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json; charset=utf-8"
    assert response.headers["x-content-type-options"] == "nosniff"

    data = response.json()
    assert data["token_type"] == "Bearer"
    assert data["expires_in"] == 30
    assert data["access_token"] != data["refresh_token"]

    verifier = TokenVerifier(SECRET)
    access = verifier.decode(data["access_token"])
    refresh = verifier.decode(data["refresh_token"])
    assert access.client_id == refresh.client_id == "admin"
    assert access.expires_at == access.issued_at + 30
    assert refresh.expires_at is None


def test_token_issued_from_query_parameters(client):
    response = client.get("/oauth/token", params=CREDENTIALS)
    assert response.status_code == 200
    assert response.json()["token_type"] == "Bearer"


def test_query_takes_precedence_over_form(client):
    response = client.post(
        "/oauth/token",
        params={"client_secret": "wrong"},
        data=CREDENTIALS,
    )
    assert response.status_code == 401


def test_wrong_grant_type_is_unauthorized(client):
    response = client.post("/oauth/token", data={**CREDENTIALS, "grant_type": "password"})

    assert response.status_code == 401
    data = response.json()
    assert set(data) == ENVELOPE_FIELDS
    assert data["message"] == "unauthorized"
    assert data["status"] == "401"
    assert data["path"] == "/oauth/token"
    assert data["method"] == "POST"
    assert data["host"] == "testserver"
    assert "access_token" not in data


@pytest.mark.parametrize("overrides", [
    {"client_id": "root"},
    {"client_secret": "nope"},
    {"client_id": "", "client_secret": ""},
])
def test_bad_credentials_are_unauthorized(client, overrides):
    response = client.post("/oauth/token", data={**CREDENTIALS, **overrides})
    assert response.status_code == 401
    assert response.json()["message"] == "unauthorized"


def test_missing_parameters_are_unauthorized(client):
    response = client.post("/oauth/token")
    assert response.status_code == 401


def test_signing_failure_is_server_error():
    client = TestClient(create_app(ServerConfig(signing_secret="")))

    response = client.post("/oauth/token", data=CREDENTIALS)

    assert response.status_code == 500
    data = response.json()
    assert data["message"] == "server error"
    assert data["status"] == "500"
    assert "access_token" not in data


def test_refresh_signing_failure_leaks_no_partial_output():
    service = OAuthService(ServerConfig())
    signer = service.issuance_handler.signer
    real_sign = signer.sign
    calls = []

    def flaky_sign(claims):
        calls.append(claims)
        if claims.expires_at is None:
            raise SigningError("refresh token rejected")
        return real_sign(claims)

    signer.sign = flaky_sign
    response = TestClient(service.app).post("/oauth/token", data=CREDENTIALS)

    assert len(calls) == 2
    assert response.status_code == 500
    assert "eyJ" not in response.text


def test_rejection_logs_internal_error_detail():
    service = OAuthService(ServerConfig())

    with patch.object(service.logger, "warning") as warning:
        response = TestClient(service.app).post("/oauth/token", data={**CREDENTIALS, "client_secret": "nope"})

    assert response.status_code == 401
    assert response.json()["message"] == "unauthorized"
    warning.assert_called_once_with(
        "Request failed",
        code="AUTHENTICATION_FAILURE",
        message="bad credentials",
        status_code=401,
        details={"client_id": "admin"},
    )


def test_echo_with_valid_token(client, access_token):
    response = client.get("/echo?probe=1", headers={"Authorization": f"Bearer {access_token}"})

    assert response.status_code == 200
    data = response.json()
    assert data["request_method"] == "GET"
    assert data["request_url"] == "/echo?probe=1"
    assert data["request_host"] == "testserver"
    assert data["request_body"] == ""
    assert data["request_headers"]["authorization"] == [f"Bearer {access_token}"]


def test_echo_returns_request_body(client, access_token):
    response = client.post(
        "/echo",
        content=b"hello there",
        headers={"Authorization": f"Bearer {access_token}"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["request_method"] == "POST"
    assert data["request_body"] == "hello there"


def test_echo_accepts_any_scheme_word(client, access_token):
    response = client.get("/echo", headers={"Authorization": f"Token {access_token}"})
    assert response.status_code == 200


def test_echo_without_authorization_is_unauthorized(client):
    response = client.get("/echo")

    assert response.status_code == 401
    data = response.json()
    assert set(data) == ENVELOPE_FIELDS
    assert data["message"] == "unauthorized"
    assert data["path"] == "/echo"


@pytest.mark.parametrize("header", ["Bearer", "Bearer ", "garbage", "Bearer not.a.token"])
def test_echo_with_malformed_authorization_is_unauthorized(client, header):
    response = client.get("/echo", headers={"Authorization": header})
    assert response.status_code == 401


def test_echo_with_token_from_other_secret_is_unauthorized(client):
    token = TokenSigner(b"AnotherSecret").sign(build_claims("admin", 30))

    response = client.get("/echo", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_echo_with_expired_token_is_unauthorized(client):
    token = TokenSigner(SECRET).sign(build_claims("admin", 30, now=time.time() - 120))

    response = client.get("/echo", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_echo_accepts_refresh_token(client):
    refresh = client.post("/oauth/token", data=CREDENTIALS).json()["refresh_token"]
    response = client.get("/echo", headers={"Authorization": f"Bearer {refresh}"})
    assert response.status_code == 200


def test_unknown_path_is_not_found(client):
    response = client.get("/nowhere?x=1")

    assert response.status_code == 404
    data = response.json()
    assert data["message"] == "not found"
    assert data["status"] == "404"
    assert data["path"] == "/nowhere?x=1"


def test_root_is_not_found(client):
    assert client.get("/").status_code == 404


def test_wrong_method_on_token_route(client):
    response = client.delete("/oauth/token")
    assert response.status_code == 405
    assert response.json()["message"] == "method not allowed"


def test_custom_routes():
    client = TestClient(create_app(ServerConfig(token_route="/token", echo_route="/mirror")))

    token = client.post("/token", data=CREDENTIALS).json()["access_token"]

    assert client.post("/oauth/token", data=CREDENTIALS).status_code == 404
    assert client.get("/mirror", headers={"Authorization": f"Bearer {token}"}).status_code == 200


def test_custom_access_token_ttl():
    client = TestClient(create_app(ServerConfig(access_token_ttl=300)))
    assert client.post("/oauth/token", data=CREDENTIALS).json()["expires_in"] == 300


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "oauth"
    assert data["status"] == "ok"


def test_metrics_count_issued_tokens(client):
    client.post("/oauth/token", data=CREDENTIALS)
    client.post("/oauth/token", data={**CREDENTIALS, "grant_type": "password"})

    body = client.get("/metrics").text

    assert 'tokens_issued_total{token_type="access"} 1.0' in body
    assert 'token_requests_rejected_total{reason="wrong_grant_type"} 1.0' in body


def test_version_flag(capsys):
    assert main(["--version"]) == 0
    assert "version=" in capsys.readouterr().out
