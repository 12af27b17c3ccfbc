"""
OAuth 2.0 module for Mondo API integration.

This module implements the OAuth 2.0 authorization-code flow used to obtain
bearer tokens for the Mondo API.

Public API:
    MondoOAuthConfig: OAuth configuration management
    TokenData: Token data structure
    TokenStorage: File-based token persistence
    TokenManager: Token lifecycle management
    OAuthCoordinator: High-level OAuth interface
    AuthorizationPresenter: Host capability presenting the authorization page
    CallbackServerPresenter / ManualPresenter: Provided presenters

Exceptions:
    AuthError: Base exception
    ConfigurationError: Configuration error
    AuthorizationError: Authorization flow error
    TokenExchangeError: Token exchange failed
    TokenRefreshError: Token refresh failed
    TokenNotAvailableError: No valid tokens
    TokenStorageError: Storage operation failed
"""

from .auth_server import AuthorizationResult, OAuthCallbackServer
from .config import MondoOAuthConfig
from .coordinator import OAuthCoordinator
from .exceptions import (
    AuthError,
    AuthorizationError,
    ConfigurationError,
    TokenExchangeError,
    TokenNotAvailableError,
    TokenRefreshError,
    TokenStorageError,
)
from .presenters import (
    AuthorizationPresenter,
    AuthorizationRequest,
    CallbackServerPresenter,
    ManualPresenter,
    parse_redirect_url,
)
from .token_manager import TokenManager
from .token_storage import TokenData, TokenStorage

__all__ = [
    # Configuration
    "MondoOAuthConfig",
    # Token Storage
    "TokenData",
    "TokenStorage",
    # Token Manager
    "TokenManager",
    # Authorization Server
    "OAuthCallbackServer",
    "AuthorizationResult",
    # Presenters
    "AuthorizationPresenter",
    "AuthorizationRequest",
    "CallbackServerPresenter",
    "ManualPresenter",
    "parse_redirect_url",
    # Coordinator
    "OAuthCoordinator",
    # Exceptions
    "AuthError",
    "ConfigurationError",
    "AuthorizationError",
    "TokenExchangeError",
    "TokenRefreshError",
    "TokenNotAvailableError",
    "TokenStorageError",
]
