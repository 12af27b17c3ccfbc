"""
OAuth configuration for Mondo API integration.

This module provides configuration management for the OAuth 2.0
authorization-code flow used by the Mondo API. Configuration can be loaded
from environment variables or provided programmatically.
"""

import os
from dataclasses import dataclass
from typing import Optional

from .exceptions import ConfigurationError


@dataclass
class MondoOAuthConfig:
    """
    Configuration for Mondo OAuth 2.0.

    Attributes:
        client_id: OAuth client ID from the Mondo developer portal
        client_secret: OAuth client secret from the Mondo developer portal
        callback_host: Host the redirect URI points at (default: localhost)
        callback_port: Port for the local callback server (default: 8765)
        callback_path: URL path for callback (default: /oauth/callback)
        authorization_url: Mondo authorization endpoint
        token_url: Mondo token endpoint
        token_file: Path to token storage file, or None to keep tokens in memory
        ssl_cert_path: Path to SSL certificate (enables an HTTPS callback server)
        ssl_key_path: Path to SSL private key
        refresh_buffer_seconds: Refresh tokens this many seconds before expiry
    """

    client_id: str
    client_secret: str

    # Callback configuration
    callback_host: str = "localhost"
    callback_port: int = 8765
    callback_path: str = "/oauth/callback"

    # Mondo OAuth endpoints
    authorization_url: str = "https://auth.getmondo.co.uk/"
    token_url: str = "https://api.getmondo.co.uk/oauth2/token"

    token_file: Optional[str] = None

    ssl_cert_path: Optional[str] = None
    ssl_key_path: Optional[str] = None

    refresh_buffer_seconds: int = 300  # Refresh 5 min before expiry

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.client_id:
            raise ConfigurationError("client_id cannot be empty")

        if not self.client_secret:
            raise ConfigurationError("client_secret cannot be empty")

        if not isinstance(self.callback_port, int) or not (
            1 <= self.callback_port <= 65535
        ):
            raise ConfigurationError(
                f"callback_port must be between 1 and 65535, got {self.callback_port}"
            )

        if not self.callback_path.startswith("/"):
            raise ConfigurationError(
                f"callback_path must start with '/', got {self.callback_path!r}"
            )

        if bool(self.ssl_cert_path) != bool(self.ssl_key_path):
            raise ConfigurationError(
                "ssl_cert_path and ssl_key_path must be set together"
            )

        if self.refresh_buffer_seconds < 0:
            raise ConfigurationError("refresh_buffer_seconds cannot be negative")

    @property
    def use_ssl(self) -> bool:
        """Whether the callback server is served over HTTPS."""
        return bool(self.ssl_cert_path and self.ssl_key_path)

    @property
    def callback_url(self) -> str:
        """
        Full callback URL registered as the OAuth redirect URI.

        Returns:
            Callback URL (e.g., http://localhost:8765/oauth/callback)
        """
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.callback_host}:{self.callback_port}{self.callback_path}"

    @classmethod
    def from_env(cls) -> "MondoOAuthConfig":
        """
        Load configuration from environment variables.

        Required environment variables:
            MONDO_CLIENT_ID: OAuth client ID
            MONDO_CLIENT_SECRET: OAuth client secret

        Optional environment variables:
            MONDO_CALLBACK_HOST: Callback host (default: localhost)
            MONDO_CALLBACK_PORT: Callback port (default: 8765)
            MONDO_CALLBACK_PATH: Callback path (default: /oauth/callback)
            MONDO_TOKEN_FILE: Token file path (default: tokens kept in memory)
            MONDO_SSL_CERT_PATH: SSL certificate path
            MONDO_SSL_KEY_PATH: SSL private key path

        Returns:
            MondoOAuthConfig instance

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        client_id = os.environ.get("MONDO_CLIENT_ID")
        client_secret = os.environ.get("MONDO_CLIENT_SECRET")

        if not client_id or not client_secret:
            raise ConfigurationError(
                "Missing Mondo OAuth credentials. Set environment variables:\n"
                "  MONDO_CLIENT_ID=your_client_id\n"
                "  MONDO_CLIENT_SECRET=your_client_secret\n"
                "\n"
                "Get credentials from: https://developers.getmondo.co.uk"
            )

        try:
            callback_port = int(os.environ.get("MONDO_CALLBACK_PORT", "8765"))
        except ValueError as e:
            raise ConfigurationError(f"MONDO_CALLBACK_PORT must be an integer: {e}") from e

        return cls(
            client_id=client_id,
            client_secret=client_secret,
            callback_host=os.environ.get("MONDO_CALLBACK_HOST", "localhost"),
            callback_port=callback_port,
            callback_path=os.environ.get("MONDO_CALLBACK_PATH", "/oauth/callback"),
            token_file=os.environ.get("MONDO_TOKEN_FILE") or None,
            ssl_cert_path=os.environ.get("MONDO_SSL_CERT_PATH") or None,
            ssl_key_path=os.environ.get("MONDO_SSL_KEY_PATH") or None,
        )
