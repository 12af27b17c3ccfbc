"""
Mondo API client with OAuth authentication.

This module provides the synchronous HTTP core for the Mondo API. It
handles:

- Bearer token retrieval (with proactive refresh) from the OAuth coordinator
- Request construction, execution and response decoding
- Optional retry with exponential backoff (off by default: one attempt)
- Error mapping to the client exception hierarchy

Every call either returns a decoded model or raises. The callback-based
facade in ``mondokit.mondo_api`` is built on top of this client.
"""

import logging
import time
from typing import Any, List, Optional, Union

import requests

from ..oauth.coordinator import OAuthCoordinator
from ..oauth.exceptions import TokenNotAvailableError
from . import endpoints
from .config import MondoClientConfig
from .exceptions import DecodeError, NotAuthenticatedError, TransportError
from .models import Account, AccountBalance, Transaction, WhoAmI
from .pagination import Pagination
from .parsers import (
    decode_response,
    parse_accounts,
    parse_balance,
    parse_transactions,
    parse_whoami,
)
from .request_builder import RequestDescriptor, build_request

logger = logging.getLogger(__name__)

AccountRef = Union[Account, str]


def resolve_account_id(account: AccountRef) -> str:
    account_id = account.account_id if isinstance(account, Account) else account
    if not account_id:
        raise ValueError("An account is required")
    return account_id


class MondoClient:
    """
    Authenticated HTTP client for the Mondo API.

    Example:
        oauth = OAuthCoordinator(MondoOAuthConfig.from_env())
        client = MondoClient(oauth)
        for account in client.list_accounts():
            print(client.get_balance(account))
    """

    def __init__(
        self,
        oauth_coordinator: OAuthCoordinator,
        config: Optional[MondoClientConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize Mondo API client.

        Args:
            oauth_coordinator: Source of access tokens
            config: Client configuration (defaults: single attempt, no timeout)
            session: HTTP session to use (a new one is created if not provided)
        """
        self.oauth = oauth_coordinator
        self.config = config or MondoClientConfig()
        self.session = session or requests.Session()

        logger.info("MondoClient initialized")

    def _access_token(self) -> str:
        try:
            return self.oauth.get_access_token()
        except TokenNotAvailableError as e:
            logger.error(f"Not authorized: {e}")
            raise NotAuthenticatedError(
                "No access token available. Run the authorization flow first."
            ) from e

    def _build(
        self,
        endpoint: str,
        params: Optional[dict] = None,
        pagination: Optional[Pagination] = None,
    ) -> RequestDescriptor:
        return build_request(
            endpoint,
            self._access_token(),
            params=params,
            pagination=pagination,
            base_url=self.config.base_url,
        )

    def _execute(self, descriptor: RequestDescriptor) -> Any:
        """
        Perform a request and return its decoded JSON body.

        Raises:
            TransportError: On network failure
            APIError: On a non-200 response
            DecodeError: On a 200 response whose body is not JSON
        """
        attempt = 0
        while True:
            logger.debug(f"{descriptor.method} {descriptor.url}")
            if descriptor.params:
                logger.debug(f"  Params: {descriptor.params}")

            try:
                response = self.session.request(
                    descriptor.method,
                    descriptor.url,
                    params=descriptor.params,
                    headers=descriptor.headers,
                    timeout=self.config.timeout,
                )
            except requests.exceptions.RequestException as e:
                if attempt < self.config.max_retries:
                    delay = self._backoff(attempt)
                    logger.warning(
                        f"Network error: {e}. Retrying in {delay}s "
                        f"(attempt {attempt + 1}/{self.config.max_retries})"
                    )
                    time.sleep(delay)
                    attempt += 1
                    continue
                logger.error(f"Network error: {e}")
                raise TransportError(str(e)) from e

            if response.status_code >= 500 and attempt < self.config.max_retries:
                delay = self._backoff(attempt)
                logger.warning(
                    f"Server error ({response.status_code}). "
                    f"Retrying in {delay}s (attempt {attempt + 1}/{self.config.max_retries})"
                )
                time.sleep(delay)
                attempt += 1
                continue
            break

        logger.debug(f"Response: {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            body = None
            if response.status_code == 200:
                raise DecodeError("Response body is not valid JSON")

        if response.status_code != 200:
            logger.error(f"API error ({response.status_code}): {response.text}")
        return decode_response(response.status_code, body)

    def _backoff(self, attempt: int) -> float:
        return self.config.retry_delay * (2 ** attempt)

    def list_accounts(self) -> List[Account]:
        """
        List the user's accounts.

        Accounts that fail to decode are skipped.

        Raises:
            NotAuthenticatedError: If no token is held (no request is made)
            TransportError: On network failure
            APIError: On a non-200 response
        """
        logger.info("Fetching accounts")
        body = self._execute(self._build(endpoints.ACCOUNTS))
        return parse_accounts(body)

    def get_balance(self, account: AccountRef) -> AccountBalance:
        """
        Get the balance of an account.

        Args:
            account: Account (or account id)

        Raises:
            NotAuthenticatedError: If no token is held (no request is made)
            TransportError: On network failure
            APIError: On a non-200 response
            DecodeError: If the balance cannot be decoded
        """
        account_id = resolve_account_id(account)
        logger.info(f"Fetching balance for {account_id}")
        body = self._execute(self._build(endpoints.BALANCE, {"account_id": account_id}))
        return parse_balance(body)

    def list_transactions(
        self,
        account: AccountRef,
        expand: Optional[str] = None,
        pagination: Optional[Pagination] = None,
    ) -> List[Transaction]:
        """
        List an account's transactions.

        Args:
            account: Account (or account id)
            expand: Value for the ``expand[]`` parameter (e.g. "merchant")
            pagination: Cursor constraint

        Raises:
            NotAuthenticatedError: If no token is held (no request is made)
            TransportError: On network failure
            APIError: On a non-200 response
            DecodeError: If any transaction cannot be decoded
        """
        account_id = resolve_account_id(account)
        params = {"account_id": account_id}
        if expand:
            params["expand[]"] = expand

        logger.info(f"Fetching transactions for {account_id}")
        body = self._execute(self._build(endpoints.TRANSACTIONS, params, pagination))
        return parse_transactions(body)

    def whoami(self) -> WhoAmI:
        """Introspect the current access token."""
        body = self._execute(self._build(endpoints.WHOAMI))
        return parse_whoami(body)

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
        logger.info("MondoClient closed")

    def __enter__(self) -> "MondoClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
