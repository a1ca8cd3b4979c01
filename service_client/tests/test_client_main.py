"""
Tests for the polling client entry point.
"""

from unittest.mock import patch

import httpx

from service_client.app.main import main


def test_version_flag(capsys):
    assert main(["--version"]) == 0

    out = capsys.readouterr().out
    assert "version=" in out
    assert "runtime=python" in out


def test_fail_fast_exits_nonzero(monkeypatch):
    monkeypatch.setenv("OAUTHTOY_FAIL_FAST", "true")

    def refuse(request):
        raise httpx.ConnectError("connection refused")

    with patch("service_client.app.main.httpx.HTTPTransport", return_value=httpx.MockTransport(refuse)):
        assert main([]) == 1
