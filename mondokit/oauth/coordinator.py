"""
OAuth coordinator for high-level OAuth operations.

This module provides the session-level interface for OAuth: it builds the
authorization request, drives a presenter, exchanges the returned code and
hands out access tokens to the API client.
"""

import logging
import secrets
from typing import Optional
from urllib.parse import urlencode

from .config import MondoOAuthConfig
from .exceptions import AuthorizationError
from .presenters import AuthorizationPresenter, AuthorizationRequest
from .token_manager import TokenManager
from .token_storage import TokenData, TokenStorage

logger = logging.getLogger(__name__)


class OAuthCoordinator:
    """
    High-level coordinator for OAuth operations.

    Example:
        coordinator = OAuthCoordinator(MondoOAuthConfig.from_env())
        coordinator.authorize(CallbackServerPresenter(coordinator.config))
        headers = coordinator.get_authorization_header()
    """

    def __init__(
        self,
        config: Optional[MondoOAuthConfig] = None,
        storage: Optional[TokenStorage] = None,
    ):
        """
        Initialize OAuth coordinator.

        Args:
            config: OAuth configuration (loads from environment if not provided)
            storage: Token storage (defaults to config.token_file, if set)
        """
        self.config = config or MondoOAuthConfig.from_env()
        self.token_manager = TokenManager(self.config, storage)
        self._pending_state: Optional[str] = None

    @property
    def storage(self) -> Optional[TokenStorage]:
        return self.token_manager.storage

    def begin_authorization(self) -> AuthorizationRequest:
        """
        Build the authorization request to present to the user.

        A fresh random state is generated for every request and remembered
        for verification in complete_authorization().
        """
        state = secrets.token_urlsafe(16)
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.callback_url,
            "response_type": "code",
            "state": state,
        }
        url = f"{self.config.authorization_url}?{urlencode(params)}"
        self._pending_state = state
        logger.debug(f"Generated authorization URL for redirect {self.config.callback_url}")
        return AuthorizationRequest(url=url, state=state, redirect_uri=self.config.callback_url)

    def complete_authorization(self, code: str, state: Optional[str] = None) -> TokenData:
        """
        Exchange an authorization code for tokens.

        Args:
            code: Authorization code from the redirect
            state: State echoed by the redirect; checked against the pending
                request when given

        Returns:
            The new token set

        Raises:
            AuthorizationError: If code is empty or state does not match
            TokenExchangeError: If the exchange fails
        """
        if not code:
            raise AuthorizationError("Authorization code cannot be empty")

        if state is not None and state != self._pending_state:
            logger.error("OAuth state mismatch, rejecting authorization code")
            raise AuthorizationError("State mismatch in authorization redirect")

        token_data = self.token_manager.exchange_code_for_tokens(code)
        self._pending_state = None
        logger.info("Authorization complete")
        return token_data

    def authorize(self, presenter: AuthorizationPresenter) -> TokenData:
        """
        Run the complete authorization flow through a presenter.

        The redirect must echo the state of the request it answers; a
        redirect without it is rejected.

        Raises:
            AuthorizationError: If the user cancels, the provider reports an
                error or the state does not match
            TokenExchangeError: If the code exchange fails
        """
        auth_request = self.begin_authorization()
        result = presenter.present(auth_request)

        if not result.success:
            logger.error(
                f"Authorization failed: {result.error} - {result.error_description}"
            )
            raise AuthorizationError(
                f"Authorization failed: {result.error} - {result.error_description}"
            )

        if result.state != auth_request.state:
            logger.error("OAuth state missing or mismatched, rejecting authorization code")
            raise AuthorizationError("State mismatch in authorization redirect")

        return self.complete_authorization(result.authorization_code, result.state)

    def get_access_token(self) -> str:
        """
        Get a valid access token for API calls.

        Raises:
            TokenNotAvailableError: If not authorized
        """
        return self.token_manager.get_valid_access_token()

    def get_authorization_header(self) -> dict:
        """
        Get Authorization header dict for API requests.

        Returns:
            Dict with Authorization header: {"Authorization": "Bearer <token>"}

        Raises:
            TokenNotAvailableError: If not authorized
        """
        return {"Authorization": f"Bearer {self.get_access_token()}"}

    def is_authorized(self) -> bool:
        """Check if an access token is held."""
        return self.token_manager.is_authorized()

    def get_status(self) -> dict:
        """Get current authorization status for diagnostics."""
        return self.token_manager.get_token_status()

    def revoke(self) -> None:
        """Discard the current tokens (local only)."""
        self.token_manager.revoke()
        logger.info("Authorization revoked locally. Re-authorization required.")
