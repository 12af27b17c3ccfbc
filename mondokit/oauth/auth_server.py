"""
OAuth callback server for Mondo API integration.

This module provides a small local HTTP(S) server that captures the OAuth
redirect during the authorization flow. It replaces the embedded web view of
a mobile host: the user authorizes in the system browser and Mondo redirects
to the callback URL served here.

The server is single-use. It runs for the duration of one authorization and
shuts down after receiving the callback.
"""

import logging
import ssl
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from flask import Flask, Response, request
from markupsafe import escape
from werkzeug.serving import make_server

from .config import MondoOAuthConfig

logger = logging.getLogger(__name__)


@dataclass
class AuthorizationResult:
    """
    Result of OAuth authorization flow.

    Attributes:
        success: Whether authorization succeeded
        authorization_code: Authorization code from callback (if successful)
        state: State value echoed back by the authorization server
        error: Error code from OAuth provider (if failed)
        error_description: Human-readable error description (if failed)
    """

    success: bool
    authorization_code: Optional[str] = None
    state: Optional[str] = None
    error: Optional[str] = None
    error_description: Optional[str] = None


def result_from_params(params: Mapping[str, str]) -> AuthorizationResult:
    """
    Interpret the query parameters of an OAuth redirect.

    A provider ``error`` wins over any code; a redirect with neither is
    reported as ``missing_code``.
    """
    state = params.get("state")

    error = params.get("error")
    if error:
        return AuthorizationResult(
            success=False,
            state=state,
            error=error,
            error_description=params.get("error_description") or "Unknown error",
        )

    code = params.get("code")
    if not code:
        return AuthorizationResult(
            success=False,
            state=state,
            error="missing_code",
            error_description="No authorization code received",
        )

    return AuthorizationResult(success=True, authorization_code=code, state=state)


_PAGE = """<html>
<head><title>{title}</title></head>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 50px auto; padding: 20px;">
    <h1 style="color: {color};">{title}</h1>
    {body}
    <p style="margin-top: 30px; color: #666;">You can close this window.</p>
</body>
</html>"""


def _page(title: str, body: str, status: int, color: str) -> Response:
    return Response(
        _PAGE.format(title=title, body=body, color=color),
        status=status,
        content_type="text/html",
    )


class OAuthCallbackServer:
    """
    Local server to handle the OAuth redirect.

    The server:
    1. Starts a listener on the configured port (HTTPS when SSL paths are set)
    2. Waits for the OAuth callback
    3. Records the code (or error) and signals the waiting thread
    4. Shuts down
    """

    def __init__(self, config: MondoOAuthConfig, bind_host: str = "127.0.0.1"):
        """
        Initialize callback server.

        Args:
            config: OAuth configuration
            bind_host: Interface to listen on
        """
        self.config = config
        self.bind_host = bind_host
        self.app = Flask(__name__)
        self.app.logger.setLevel(logging.WARNING)
        self.server = None
        self.result: Optional[AuthorizationResult] = None
        self._thread: Optional[threading.Thread] = None
        self._callback_event = threading.Event()

        self.app.add_url_rule(
            self.config.callback_path,
            "oauth_callback",
            self._handle_callback,
            methods=["GET"],
        )

        self.app.add_url_rule(
            "/oauth/status", "oauth_status", self._handle_status, methods=["GET"]
        )

    def _handle_callback(self) -> Response:
        """Handle OAuth redirect from Mondo."""
        logger.info("Received OAuth callback")
        result = result_from_params(request.args)
        self._finish(result)

        if result.success:
            logger.info("Authorization code received successfully")
            return _page(
                "Authorization Successful",
                "<p>Your application has been authorized to access your Mondo account.</p>",
                200,
                "#4caf50",
            )

        logger.error(f"OAuth error: {result.error} - {result.error_description}")
        return _page(
            "Authorization Failed",
            f"<p><strong>Error:</strong> {escape(result.error)}</p>"
            f"<p><strong>Description:</strong> {escape(result.error_description)}</p>",
            400,
            "#d32f2f",
        )

    def _handle_status(self) -> Response:
        """Status endpoint for debugging."""
        return Response(
            '{"status": "running", "waiting_for": "oauth_callback"}',
            status=200,
            content_type="application/json",
        )

    def _finish(self, result: AuthorizationResult) -> None:
        self.result = result
        self._callback_event.set()

    def _ssl_context(self) -> Optional[ssl.SSLContext]:
        if not self.config.use_ssl:
            return None
        cert_path = Path(self.config.ssl_cert_path)
        key_path = Path(self.config.ssl_key_path)
        if not cert_path.exists():
            raise FileNotFoundError(f"SSL certificate not found at {cert_path}")
        if not key_path.exists():
            raise FileNotFoundError(f"SSL key not found at {key_path}")

        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        context.load_cert_chain(str(cert_path), str(key_path))
        logger.info(f"Using SSL certificate: {cert_path}")
        return context

    def start(self) -> None:
        """
        Start the callback server in a background thread.

        Raises:
            FileNotFoundError: If configured SSL files are missing
            OSError: If the port cannot be bound
        """
        logger.info(
            f"Starting OAuth callback server on {self.bind_host}:{self.config.callback_port}"
        )
        self.server = make_server(
            self.bind_host,
            self.config.callback_port,
            self.app,
            threaded=True,
            ssl_context=self._ssl_context(),
        )
        self._thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self._thread.start()
        logger.info("OAuth callback server started successfully")

    def wait_for_callback(self, timeout: int = 300) -> AuthorizationResult:
        """
        Wait for OAuth callback.

        Args:
            timeout: Maximum seconds to wait (default: 300 = 5 minutes)

        Returns:
            AuthorizationResult with code or error
        """
        logger.info(f"Waiting for OAuth callback (timeout: {timeout}s)")

        if self._callback_event.wait(timeout=timeout):
            return self.result or AuthorizationResult(
                success=False,
                error="unknown",
                error_description="Server shutdown without result",
            )

        logger.warning(f"Timeout waiting for callback after {timeout}s")
        return AuthorizationResult(
            success=False,
            error="timeout",
            error_description=f"No callback received within {timeout} seconds. "
            f"Please ensure you completed the authorization in your browser.",
        )

    def stop(self) -> None:
        """Stop the callback server."""
        if self.server is not None:
            logger.info("OAuth callback server shutting down")
            self.server.shutdown()
            self.server = None
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
