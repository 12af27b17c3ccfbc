"""Tests for OAuth coordinator module."""

import tempfile
from pathlib import Path
from unittest import mock
from urllib.parse import parse_qs, urlparse

import pytest

from mondokit.oauth.auth_server import AuthorizationResult
from mondokit.oauth.config import MondoOAuthConfig
from mondokit.oauth.coordinator import OAuthCoordinator
from mondokit.oauth.exceptions import AuthorizationError, TokenNotAvailableError
from mondokit.oauth.presenters import AuthorizationPresenter
from mondokit.oauth.token_storage import TokenData


class FakePresenter(AuthorizationPresenter):
    """Presenter returning a canned result, echoing the request state by default."""

    def __init__(self, result=None):
        self.result = result
        self.requests = []

    def present(self, auth_request):
        self.requests.append(auth_request)
        if self.result is not None:
            return self.result
        return AuthorizationResult(
            success=True, authorization_code="code_1", state=auth_request.state
        )


def make_token():
    return TokenData(
        access_token="token_abc", expires_in=21600, issued_at="2030-01-01T00:00:00+00:00"
    )


class TestOAuthCoordinator:
    """Tests for OAuthCoordinator class."""

    @pytest.fixture
    def config(self):
        """Create test OAuth config."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield MondoOAuthConfig(
                client_id="test_client_id",
                client_secret="test_client_secret",
                callback_port=9443,
                token_file=str(Path(tmpdir) / "tokens.json"),
            )

    def test_coordinator_initialization(self, config):
        """OAuthCoordinator initializes correctly."""
        coordinator = OAuthCoordinator(config)

        assert coordinator.config == config
        assert coordinator.storage is not None
        assert coordinator.token_manager is not None

    @mock.patch.dict(
        "os.environ", {"MONDO_CLIENT_ID": "env_id", "MONDO_CLIENT_SECRET": "env_secret"}
    )
    def test_coordinator_loads_config_from_env(self):
        """OAuthCoordinator loads config from environment if not provided."""
        coordinator = OAuthCoordinator()

        assert coordinator.config.client_id == "env_id"
        assert coordinator.config.client_secret == "env_secret"

    def test_begin_authorization_builds_url(self, config):
        coordinator = OAuthCoordinator(config)

        auth_request = coordinator.begin_authorization()
        url = urlparse(auth_request.url)
        params = parse_qs(url.query)

        assert auth_request.url.startswith("https://auth.getmondo.co.uk/?")
        assert params["client_id"] == ["test_client_id"]
        assert params["redirect_uri"] == ["http://localhost:9443/oauth/callback"]
        assert params["response_type"] == ["code"]
        assert params["state"] == [auth_request.state]
        assert auth_request.redirect_uri == "http://localhost:9443/oauth/callback"

    def test_begin_authorization_uses_fresh_state(self, config):
        coordinator = OAuthCoordinator(config)

        first = coordinator.begin_authorization()
        second = coordinator.begin_authorization()

        assert first.state != second.state

    def test_complete_authorization_exchanges_code(self, config):
        coordinator = OAuthCoordinator(config)
        auth_request = coordinator.begin_authorization()
        coordinator.token_manager.exchange_code_for_tokens = mock.Mock(return_value=make_token())

        token = coordinator.complete_authorization("code_1", auth_request.state)

        assert token.access_token == "token_abc"
        coordinator.token_manager.exchange_code_for_tokens.assert_called_once_with("code_1")

    def test_complete_authorization_rejects_state_mismatch(self, config):
        coordinator = OAuthCoordinator(config)
        coordinator.begin_authorization()
        coordinator.token_manager.exchange_code_for_tokens = mock.Mock()

        with pytest.raises(AuthorizationError, match="State mismatch"):
            coordinator.complete_authorization("code_1", "forged")
        coordinator.token_manager.exchange_code_for_tokens.assert_not_called()

    def test_complete_authorization_rejects_empty_code(self, config):
        coordinator = OAuthCoordinator(config)

        with pytest.raises(AuthorizationError, match="cannot be empty"):
            coordinator.complete_authorization("")

    def test_authorize_runs_presenter_flow(self, config):
        coordinator = OAuthCoordinator(config)
        coordinator.token_manager.exchange_code_for_tokens = mock.Mock(return_value=make_token())
        presenter = FakePresenter()

        token = coordinator.authorize(presenter)

        assert token.access_token == "token_abc"
        assert len(presenter.requests) == 1
        coordinator.token_manager.exchange_code_for_tokens.assert_called_once_with("code_1")

    def test_authorize_reports_cancellation(self, config):
        coordinator = OAuthCoordinator(config)
        coordinator.token_manager.exchange_code_for_tokens = mock.Mock()
        presenter = FakePresenter(
            AuthorizationResult(
                success=False,
                error="access_denied",
                error_description="Authorization cancelled by user",
            )
        )

        with pytest.raises(AuthorizationError, match="access_denied"):
            coordinator.authorize(presenter)
        coordinator.token_manager.exchange_code_for_tokens.assert_not_called()
        assert coordinator.is_authorized() is False

    @pytest.mark.parametrize("state", [None, "", "forged"], ids=["missing", "empty", "wrong"])
    def test_authorize_rejects_redirect_without_matching_state(self, config, state):
        coordinator = OAuthCoordinator(config)
        coordinator.token_manager.exchange_code_for_tokens = mock.Mock()
        presenter = FakePresenter(
            AuthorizationResult(success=True, authorization_code="code_1", state=state)
        )

        with pytest.raises(AuthorizationError, match="State mismatch"):
            coordinator.authorize(presenter)
        coordinator.token_manager.exchange_code_for_tokens.assert_not_called()
        assert coordinator.is_authorized() is False

    def test_get_access_token_requires_authorization(self, config):
        coordinator = OAuthCoordinator(config)

        with pytest.raises(TokenNotAvailableError):
            coordinator.get_access_token()

    def test_get_authorization_header(self, config):
        coordinator = OAuthCoordinator(config)
        coordinator.token_manager.set_tokens(make_token())

        assert coordinator.get_authorization_header() == {"Authorization": "Bearer token_abc"}

    def test_revoke(self, config):
        coordinator = OAuthCoordinator(config)
        coordinator.token_manager.set_tokens(make_token())

        coordinator.revoke()

        assert coordinator.is_authorized() is False
        assert coordinator.get_status()["authorized"] is False
