"""
Callback-style facade over the Mondo API.

``MondoAPI`` is constructed explicitly and passed to whoever needs it. Each
call runs one HTTP round trip on a worker thread and reports back through a
``completion(result, error)`` callback, run by the configured
:class:`~mondokit.dispatch.ResultDispatcher`. Exactly one of ``result`` and
``error`` is not None.

Typical use:

    api = MondoAPI(dispatcher=QueueDispatcher())
    api.initialize(client_id, client_secret)
    api.authorize(CallbackServerPresenter(api.oauth.config), on_authorized)
    api.list_accounts(on_accounts)
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, List, Optional, TypeVar

import requests

from .api.client import AccountRef, MondoClient, resolve_account_id
from .api.config import MondoClientConfig
from .api.exceptions import InitializationError, NotAuthenticatedError
from .api.models import Account, AccountBalance, Transaction, WhoAmI
from .api.pagination import Pagination
from .dispatch import ImmediateDispatcher, ResultDispatcher
from .oauth.config import MondoOAuthConfig
from .oauth.coordinator import OAuthCoordinator
from .oauth.presenters import AuthorizationPresenter, AuthorizationRequest
from .oauth.token_storage import TokenData, TokenStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")
Completion = Callable[[Optional[T], Optional[Exception]], None]


class MondoAPI:
    """
    Mondo API facade.

    Call initialize() before anything else, then authorize, then use
    list_accounts(), get_balance_for_account() and
    list_transactions_for_account().
    """

    def __init__(
        self,
        dispatcher: Optional[ResultDispatcher] = None,
        client_config: Optional[MondoClientConfig] = None,
        session: Optional[requests.Session] = None,
        max_workers: int = 4,
    ):
        """
        Args:
            dispatcher: Where completions run (default: on the worker thread)
            client_config: HTTP client configuration
            session: HTTP session shared by all calls
            max_workers: Size of the worker pool
        """
        self.dispatcher = dispatcher or ImmediateDispatcher()
        self.client_config = client_config or MondoClientConfig()
        self._session = session
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="mondokit"
        )
        self.oauth: Optional[OAuthCoordinator] = None
        self.client: Optional[MondoClient] = None

    @property
    def initialized(self) -> bool:
        return self.oauth is not None

    def initialize(self, client_id: str, client_secret: str, **oauth_options: Any) -> None:
        """
        Set the OAuth client credentials.

        Args:
            client_id: OAuth client ID
            client_secret: OAuth client secret
            **oauth_options: Extra MondoOAuthConfig fields (callback_port, token_file, ...)

        Raises:
            InitializationError: If already initialized
            ConfigurationError: If credentials are empty
        """
        self.initialize_with_config(
            MondoOAuthConfig(client_id=client_id, client_secret=client_secret, **oauth_options)
        )

    def initialize_with_config(
        self, config: MondoOAuthConfig, storage: Optional[TokenStorage] = None
    ) -> None:
        """
        Initialize from a prepared OAuth configuration.

        Raises:
            InitializationError: If already initialized
        """
        if self.initialized:
            raise InitializationError("MondoAPI already initialized")

        self.oauth = OAuthCoordinator(config, storage)
        self.client = MondoClient(self.oauth, self.client_config, self._session)
        logger.info("MondoAPI initialized")

    def _require_initialized(self) -> OAuthCoordinator:
        if self.oauth is None:
            raise InitializationError("MondoAPI not initialized, call initialize() first")
        return self.oauth

    @property
    def is_authorized(self) -> bool:
        return self.oauth is not None and self.oauth.is_authorized()

    # Authorization

    def begin_authorization(self) -> AuthorizationRequest:
        """
        Build the authorization request for a presenter to show.

        Raises:
            InitializationError: If not initialized
        """
        return self._require_initialized().begin_authorization()

    def complete_authorization(self, code: str, state: Optional[str] = None) -> TokenData:
        """
        Exchange an authorization code and install the new tokens.

        Raises:
            InitializationError: If not initialized
            AuthorizationError: On state mismatch
            TokenExchangeError: If the exchange fails
        """
        return self._require_initialized().complete_authorization(code, state)

    def authorize(
        self,
        presenter: AuthorizationPresenter,
        completion: Optional[Completion[TokenData]] = None,
    ) -> "Future[TokenData]":
        """
        Run the whole authorization flow on a worker thread.

        The completion receives the new TokenData, or the error: an AuthError
        (cancellation, provider error, failed exchange) or whatever the
        presenter raised (e.g. OSError when the callback port is taken).

        Raises:
            InitializationError: If not initialized
        """
        oauth = self._require_initialized()
        return self._submit(lambda: oauth.authorize(presenter), completion)

    # Data calls

    def list_accounts(self, completion: Completion[List[Account]]) -> "Future[List[Account]]":
        """
        List the user's accounts.

        Raises:
            InitializationError: If not initialized
        """
        return self._call(lambda client: client.list_accounts(), completion)

    def get_balance_for_account(
        self, account: AccountRef, completion: Completion[AccountBalance]
    ) -> "Future[AccountBalance]":
        """
        Get an account's balance.

        Raises:
            InitializationError: If not initialized
            ValueError: If no account is given
        """
        self._require_initialized()
        resolve_account_id(account)
        return self._call(lambda client: client.get_balance(account), completion)

    def list_transactions_for_account(
        self,
        account: AccountRef,
        completion: Completion[List[Transaction]],
        expand: Optional[str] = None,
        pagination: Optional[Pagination] = None,
    ) -> "Future[List[Transaction]]":
        """
        List an account's transactions.

        Args:
            account: Account (or account id)
            completion: Receives the transactions or the error
            expand: Value for ``expand[]`` (e.g. "merchant")
            pagination: Cursor constraint

        Raises:
            InitializationError: If not initialized
            ValueError: If no account is given
        """
        self._require_initialized()
        resolve_account_id(account)
        return self._call(
            lambda client: client.list_transactions(account, expand=expand, pagination=pagination),
            completion,
        )

    def whoami(self, completion: Completion[WhoAmI]) -> "Future[WhoAmI]":
        """Introspect the current access token."""
        return self._call(lambda client: client.whoami(), completion)

    # Plumbing

    def _call(
        self, operation: Callable[[MondoClient], T], completion: Optional[Completion[T]]
    ) -> "Future[T]":
        """
        Submit a data call, or report NotAuthenticatedError through the
        completion without any network call when no token is held.
        """
        oauth = self._require_initialized()
        if not oauth.is_authorized():
            logger.warning("API call attempted before authorization")
            error = NotAuthenticatedError(
                "No access token available. Run the authorization flow first."
            )
            self._deliver(completion, None, error)
            return self._failed(error)

        client = self.client
        return self._submit(lambda: operation(client), completion)

    def _submit(self, operation: Callable[[], T], completion: Optional[Completion[T]]) -> "Future[T]":
        def run() -> T:
            try:
                result = operation()
            except Exception as e:
                # Every failure reaches the completion; the Future fails too
                logger.debug(f"Call failed: {e!r}")
                self._deliver(completion, None, e)
                raise
            self._deliver(completion, result, None)
            return result

        return self._executor.submit(run)

    def _deliver(
        self,
        completion: Optional[Completion[Any]],
        result: Any,
        error: Optional[Exception],
    ) -> None:
        if completion is not None:
            self.dispatcher.dispatch(lambda: completion(result, error))

    @staticmethod
    def _failed(error: Exception) -> Future:
        future: Future = Future()
        future.set_exception(error)
        return future

    def close(self) -> None:
        """Wait for in-flight calls and release the worker pool and HTTP session."""
        self._executor.shutdown(wait=True)
        if self.client is not None:
            self.client.close()

    def __enter__(self) -> "MondoAPI":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
