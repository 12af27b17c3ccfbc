"""
Token manager for Mondo OAuth integration.

This module owns the session's token set:
- Authorization code exchange (``grant_type=authorization_code``)
- Refresh (``grant_type=refresh_token``), proactive when close to expiry
- Status reporting and local revocation

Both grants go to the same token endpoint with the client credentials in the
form body, so they share one request helper.
"""

import logging
import threading
import time
from typing import Dict, Optional

import requests

from .config import MondoOAuthConfig
from .exceptions import TokenExchangeError, TokenNotAvailableError, TokenRefreshError
from .token_storage import TokenData, TokenStorage

logger = logging.getLogger(__name__)


class TokenManager:
    """
    Manages OAuth token lifecycle.

    The manager is the single writer of the session's token set. Reads from
    API calls and writes from authorization or refresh are serialized by a
    lock. When no storage is given, tokens live only for the process.
    """

    def __init__(
        self,
        config: MondoOAuthConfig,
        storage: Optional[TokenStorage] = None,
        timeout: int = 30,
    ):
        """
        Args:
            config: OAuth configuration
            storage: Token storage (defaults to config.token_file, if set)
            timeout: Token endpoint request timeout in seconds
        """
        self.config = config
        if storage is None and config.token_file:
            storage = TokenStorage(config.token_file)
        self.storage = storage
        self.timeout = timeout
        self._token: Optional[TokenData] = None
        self._loaded = False
        self._lock = threading.RLock()

    def _post_token_request(self, grant: Dict[str, str]) -> requests.Response:
        form = {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            **grant,
        }
        return requests.post(
            self.config.token_url,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            data=form,
            timeout=self.timeout,
        )

    def exchange_code_for_tokens(self, authorization_code: str) -> TokenData:
        """
        Exchange an authorization code for a token set and install it.

        Raises:
            TokenExchangeError: If the exchange fails
        """
        logger.info("Exchanging authorization code for tokens")

        try:
            response = self._post_token_request(
                {
                    "grant_type": "authorization_code",
                    "redirect_uri": self.config.callback_url,
                    "code": authorization_code,
                }
            )
        except requests.RequestException as e:
            logger.error(f"Network error during token exchange: {e}")
            raise TokenExchangeError(f"Network error during token exchange: {e}") from e

        if response.status_code != 200:
            logger.error(f"Token exchange failed: {response.status_code} - {response.text}")
            raise TokenExchangeError(
                f"Token exchange failed with status {response.status_code}. "
                f"Check the client credentials and that the code was not already used."
            )

        try:
            token_data = TokenData.from_token_response(response.json())
        except (KeyError, ValueError, TypeError) as e:
            logger.error(f"Invalid response from token endpoint: {e}")
            raise TokenExchangeError(f"Invalid response from token endpoint: {e}") from e

        self._store(token_data)
        logger.info(f"Obtained tokens for user {token_data.user_id}")
        return token_data

    def refresh_tokens(self, max_retries: int = 0, retry_delay: float = 1.0) -> TokenData:
        """
        Replace the access token using the refresh token.

        A single attempt is made unless ``max_retries`` is raised, in which
        case network errors and 5xx responses are retried with exponential
        backoff. A 4xx response means the refresh token itself was rejected
        and is never retried.

        Raises:
            TokenNotAvailableError: If no refresh token is held
            TokenRefreshError: If refresh fails
        """
        current = self._current()
        if current is None or not current.can_refresh:
            raise TokenNotAvailableError(
                "No refresh token available. Run authorization flow first."
            )

        grant = {"grant_type": "refresh_token", "refresh_token": current.refresh_token}
        attempts = max_retries + 1
        for attempt in range(attempts):
            if attempt:
                delay = retry_delay * (2 ** (attempt - 1))
                logger.warning(f"Retrying token refresh in {delay}s ({attempt}/{max_retries})")
                time.sleep(delay)

            logger.info("Refreshing access token")
            try:
                response = self._post_token_request(grant)
            except requests.RequestException as e:
                logger.error(f"Network error during token refresh: {e}")
                if attempt + 1 < attempts:
                    continue
                raise TokenRefreshError(
                    f"Network error during token refresh after {attempts} attempts: {e}"
                ) from e

            if response.status_code >= 500 and attempt + 1 < attempts:
                logger.error(f"Token endpoint error: {response.status_code}")
                continue
            break

        if 400 <= response.status_code < 500:
            logger.error(f"Refresh token rejected: {response.status_code} - {response.text}")
            raise TokenRefreshError(
                f"Token refresh failed with status {response.status_code}. "
                f"Your refresh token may have expired. "
                f"Please run the authorization flow again."
            )
        if response.status_code != 200:
            raise TokenRefreshError(
                f"Token refresh failed with status {response.status_code} "
                f"after {attempts} attempts"
            )

        try:
            token_data = TokenData.from_token_response(response.json(), current)
        except (KeyError, ValueError, TypeError) as e:
            logger.error(f"Invalid response from token endpoint: {e}")
            raise TokenRefreshError(f"Invalid response from token endpoint: {e}") from e

        self._store(token_data)
        logger.info("Access token refreshed")
        return token_data

    def get_valid_access_token(self) -> str:
        """
        Get the access token, refreshing it first when it is about to expire.

        Without a refresh token a near-expiry token is returned as is and the
        API decides.

        Raises:
            TokenNotAvailableError: If no token is held (need to authorize)
            TokenRefreshError: If a due refresh fails
        """
        with self._lock:
            token = self._current()
            if token is None:
                raise TokenNotAvailableError(
                    "No tokens available. Run authorization flow first."
                )

            if token.can_refresh and token.expires_within(self.config.refresh_buffer_seconds):
                logger.info(
                    f"Token expires within {self.config.refresh_buffer_seconds}s, refreshing"
                )
                token = self.refresh_tokens()

            return token.access_token

    def set_tokens(self, token_data: TokenData) -> None:
        """Install an externally obtained token set."""
        self._store(token_data)

    def is_authorized(self) -> bool:
        return self._current() is not None

    def get_token_status(self) -> dict:
        """
        Get current token status for diagnostics.

        Returns:
            Dictionary with keys authorized, expired, expires_at,
            expires_in_seconds, can_refresh and user_id (or message when
            not authorized)
        """
        token = self._current()
        if token is None:
            return {"authorized": False, "message": "No tokens held"}

        return {
            "authorized": True,
            "expired": token.is_expired,
            "expires_at": token.expires_at.isoformat(),
            "expires_in_seconds": max(0.0, token.seconds_remaining()),
            "can_refresh": token.can_refresh,
            "user_id": token.user_id,
        }

    def revoke(self) -> None:
        """
        Discard held tokens (local revocation).

        Tokens are not revoked on Mondo's servers.
        """
        with self._lock:
            if self.storage:
                self.storage.delete()
            self._token = None
            self._loaded = True
        logger.info("Tokens revoked (local)")

    def _store(self, token_data: TokenData) -> None:
        with self._lock:
            if self.storage:
                self.storage.save(token_data)
            self._token = token_data
            self._loaded = True

    def _current(self) -> Optional[TokenData]:
        with self._lock:
            if not self._loaded:
                self._token = self._load_stored()
                self._loaded = True
            return self._token

    def _load_stored(self) -> Optional[TokenData]:
        if self.storage is None:
            return None
        token = self.storage.load()
        # Tokens are bound to the client that obtained them
        if token is not None and token.client_id and token.client_id != self.config.client_id:
            logger.warning(
                f"Ignoring stored tokens issued to client {token.client_id}, "
                f"configured client is {self.config.client_id}"
            )
            return None
        return token
