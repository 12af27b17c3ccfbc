"""Tests for OAuth exceptions."""

import pytest

from mondokit.oauth.exceptions import (
    AuthError,
    AuthorizationError,
    ConfigurationError,
    TokenExchangeError,
    TokenNotAvailableError,
    TokenRefreshError,
    TokenStorageError,
)


class TestOAuthExceptions:
    """Tests for OAuth exception hierarchy."""

    def test_auth_error_is_base_exception(self):
        """AuthError is base for all OAuth errors."""
        error = AuthError("test error")
        assert isinstance(error, Exception)
        assert str(error) == "test error"

    @pytest.mark.parametrize(
        "exc_class",
        [
            ConfigurationError,
            AuthorizationError,
            TokenExchangeError,
            TokenRefreshError,
            TokenNotAvailableError,
            TokenStorageError,
        ],
    )
    def test_subclasses_inherit_from_base(self, exc_class):
        """Every OAuth error can be caught as AuthError."""
        with pytest.raises(AuthError, match="boom"):
            raise exc_class("boom")
