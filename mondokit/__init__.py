"""
MondoKit - a Python client for the Mondo banking API.

Start with :class:`MondoAPI` for the callback-style interface, or use
:class:`MondoClient` with an :class:`OAuthCoordinator` directly for
synchronous calls.
"""

from .api import (
    Account,
    AccountBalance,
    APIError,
    DecodeError,
    InitializationError,
    Merchant,
    MondoAPIError,
    MondoClient,
    MondoClientConfig,
    NotAuthenticatedError,
    Pagination,
    Transaction,
    TransportError,
)
from .dispatch import ImmediateDispatcher, QueueDispatcher, ResultDispatcher
from .mondo_api import MondoAPI
from .oauth import (
    AuthError,
    CallbackServerPresenter,
    ManualPresenter,
    MondoOAuthConfig,
    OAuthCoordinator,
)

__version__ = "0.1.0"

__all__ = [
    "MondoAPI",
    "MondoClient",
    "MondoClientConfig",
    "MondoOAuthConfig",
    "OAuthCoordinator",
    "CallbackServerPresenter",
    "ManualPresenter",
    "ResultDispatcher",
    "ImmediateDispatcher",
    "QueueDispatcher",
    "Account",
    "AccountBalance",
    "Merchant",
    "Transaction",
    "Pagination",
    "MondoAPIError",
    "APIError",
    "DecodeError",
    "InitializationError",
    "NotAuthenticatedError",
    "TransportError",
    "AuthError",
]
