"""Tests for OAuth callback server module."""

import tempfile
from pathlib import Path
from unittest import mock

import pytest

from mondokit.oauth.auth_server import AuthorizationResult, OAuthCallbackServer
from mondokit.oauth.config import MondoOAuthConfig


class TestAuthorizationResult:
    """Tests for AuthorizationResult dataclass."""

    def test_authorization_result_success(self):
        """AuthorizationResult can represent success."""
        result = AuthorizationResult(success=True, authorization_code="code_123", state="s1")

        assert result.success is True
        assert result.authorization_code == "code_123"
        assert result.state == "s1"
        assert result.error is None

    def test_authorization_result_failure(self):
        """AuthorizationResult can represent failure."""
        result = AuthorizationResult(
            success=False, error="access_denied", error_description="User denied access"
        )

        assert result.success is False
        assert result.authorization_code is None
        assert result.error == "access_denied"
        assert result.error_description == "User denied access"


class TestOAuthCallbackServer:
    """Tests for OAuthCallbackServer class."""

    @pytest.fixture
    def config(self):
        """Create test OAuth config."""
        return MondoOAuthConfig(
            client_id="test_client_id",
            client_secret="test_client_secret",
            callback_host="localhost",
            callback_port=9443,
        )

    def test_server_initialization(self, config):
        """OAuthCallbackServer can be initialized."""
        server = OAuthCallbackServer(config)

        assert server.config == config
        assert server.app is not None
        assert server.result is None
        assert server.server is None

    def test_callback_route_registered(self, config):
        server = OAuthCallbackServer(config)

        rules = {rule.rule for rule in server.app.url_map.iter_rules()}

        assert "/oauth/callback" in rules
        assert "/oauth/status" in rules

    def test_handle_callback_success(self, config):
        """_handle_callback records the code and state."""
        server = OAuthCallbackServer(config)

        with server.app.test_request_context("/oauth/callback?code=auth_code_123&state=xyz"):
            response = server._handle_callback()

        assert response.status_code == 200
        assert b"Authorization Successful" in response.data
        assert server.result.success is True
        assert server.result.authorization_code == "auth_code_123"
        assert server.result.state == "xyz"

    def test_handle_callback_error(self, config):
        """_handle_callback records provider errors."""
        server = OAuthCallbackServer(config)

        with server.app.test_request_context(
            "/oauth/callback?error=access_denied&error_description=User+denied+access"
        ):
            response = server._handle_callback()

        assert response.status_code == 400
        assert b"Authorization Failed" in response.data
        assert server.result.success is False
        assert server.result.error == "access_denied"
        assert server.result.error_description == "User denied access"

    def test_handle_callback_escapes_error_text(self, config):
        server = OAuthCallbackServer(config)

        with server.app.test_request_context("/oauth/callback?error=%3Cscript%3E"):
            response = server._handle_callback()

        assert b"<script>" not in response.data
        assert b"&lt;script&gt;" in response.data

    def test_handle_callback_missing_code(self, config):
        """_handle_callback reports a missing code."""
        server = OAuthCallbackServer(config)

        with server.app.test_request_context("/oauth/callback"):
            response = server._handle_callback()

        assert response.status_code == 400
        assert server.result.success is False
        assert server.result.error == "missing_code"

    def test_callback_through_test_client(self, config):
        server = OAuthCallbackServer(config)

        response = server.app.test_client().get("/oauth/callback?code=abc")

        assert response.status_code == 200
        assert server.wait_for_callback(timeout=1).authorization_code == "abc"

    def test_status_endpoint(self, config):
        server = OAuthCallbackServer(config)

        response = server.app.test_client().get("/oauth/status")

        assert response.status_code == 200
        assert response.get_json()["status"] == "running"

    def test_wait_for_callback_timeout(self, config):
        """wait_for_callback returns a timeout result when nothing arrives."""
        server = OAuthCallbackServer(config)

        result = server.wait_for_callback(timeout=0.01)

        assert result.success is False
        assert result.error == "timeout"
        assert "No callback received" in result.error_description

    def test_ssl_context_none_without_certificates(self, config):
        server = OAuthCallbackServer(config)

        assert server._ssl_context() is None

    def test_start_raises_when_certificate_missing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config = MondoOAuthConfig(
                client_id="id",
                client_secret="secret",
                ssl_cert_path=str(Path(tmpdir) / "cert.pem"),
                ssl_key_path=str(Path(tmpdir) / "key.pem"),
            )
            server = OAuthCallbackServer(config)

            with pytest.raises(FileNotFoundError, match="SSL certificate not found"):
                server.start()

    def test_start_raises_when_key_missing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cert = Path(tmpdir) / "cert.pem"
            cert.write_text("cert")
            config = MondoOAuthConfig(
                client_id="id",
                client_secret="secret",
                ssl_cert_path=str(cert),
                ssl_key_path=str(Path(tmpdir) / "key.pem"),
            )
            server = OAuthCallbackServer(config)

            with pytest.raises(FileNotFoundError, match="SSL key not found"):
                server.start()

    @mock.patch("mondokit.oauth.auth_server.make_server")
    def test_start_and_stop(self, mock_make_server, config):
        """start() serves on a background thread and stop() shuts it down."""
        fake_server = mock.Mock()
        mock_make_server.return_value = fake_server
        server = OAuthCallbackServer(config)

        server.start()

        args, kwargs = mock_make_server.call_args
        assert args[0] == "127.0.0.1"
        assert args[1] == 9443
        assert kwargs["ssl_context"] is None

        server.stop()

        fake_server.shutdown.assert_called_once()
        assert server.server is None

    def test_stop_without_start_is_noop(self, config):
        OAuthCallbackServer(config).stop()
