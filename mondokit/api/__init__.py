"""
Mondo API client module.

This module provides the synchronous client for the Mondo banking API:

- MondoClient: Authenticated HTTP client
- Request building and response decoding
- Data models: Account, AccountBalance, Transaction, Merchant
- Pagination: cursor-based paging constraint

Authentication is handled via the OAuth module.
"""

from .client import MondoClient
from .config import MondoClientConfig
from .exceptions import (
    APIError,
    DecodeError,
    InitializationError,
    MondoAPIError,
    NotAuthenticatedError,
    TransportError,
)
from .models import Account, AccountBalance, Address, Merchant, Transaction, WhoAmI
from .pagination import Pagination
from .request_builder import RequestDescriptor, build_request

__all__ = [
    "MondoClient",
    "MondoClientConfig",
    "MondoAPIError",
    "APIError",
    "DecodeError",
    "InitializationError",
    "NotAuthenticatedError",
    "TransportError",
    "Account",
    "AccountBalance",
    "Address",
    "Merchant",
    "Transaction",
    "WhoAmI",
    "Pagination",
    "RequestDescriptor",
    "build_request",
]
