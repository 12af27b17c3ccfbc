"""
OAuth exception classes for Mondo API integration.

This module defines the exception hierarchy for all errors raised while
obtaining, refreshing and storing Mondo access tokens.
"""


class AuthError(Exception):
    """Base exception for all Mondo OAuth errors."""

    pass


class ConfigurationError(AuthError):
    """OAuth configuration error (missing or invalid configuration)."""

    pass


class AuthorizationError(AuthError):
    """OAuth authorization flow error (cancelled, denied or state mismatch)."""

    pass


class TokenExchangeError(AuthError):
    """Failed to exchange authorization code for tokens."""

    pass


class TokenRefreshError(AuthError):
    """Failed to refresh access token using refresh token."""

    pass


class TokenNotAvailableError(AuthError):
    """No valid tokens available (need to authorize first)."""

    pass


class TokenStorageError(AuthError):
    """Token storage operation failed (file I/O error)."""

    pass
