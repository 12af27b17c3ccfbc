"""
Authorization presenters.

A presenter is the host-provided capability that shows the Mondo
authorization page to the user and captures the redirect. The coordinator
builds an :class:`AuthorizationRequest`, hands it to a presenter and gets an
:class:`AuthorizationResult` back.

Two presenters are provided:

- CallbackServerPresenter: opens the system browser and captures the
  redirect with a local callback server
- ManualPresenter: headless hosts; prints the URL and reads the pasted
  redirect URL (or bare code) back
"""

import logging
import webbrowser
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import parse_qs, urlparse

import click

from .auth_server import AuthorizationResult, OAuthCallbackServer, result_from_params
from .config import MondoOAuthConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizationRequest:
    """
    A presentable authorization flow.

    Attributes:
        url: Authorization URL to show the user
        state: Anti-forgery value the redirect must echo back
        redirect_uri: Redirect URI registered with Mondo
    """

    url: str
    state: str
    redirect_uri: str


class AuthorizationPresenter(ABC):
    """Shows an authorization request to the user and captures the result."""

    @abstractmethod
    def present(self, auth_request: AuthorizationRequest) -> AuthorizationResult:
        """Present the request and block until the user finishes or gives up."""


def parse_redirect_url(url: str) -> AuthorizationResult:
    """
    Extract the authorization outcome from a redirect URL.

    Args:
        url: Full redirect URL (or just its query string)

    Returns:
        AuthorizationResult carrying either the code or the error
    """
    query = urlparse(url).query if "?" in url else url
    params = {key: values[0] for key, values in parse_qs(query).items()}
    return result_from_params(params)


class CallbackServerPresenter(AuthorizationPresenter):
    """Opens the system browser and captures the redirect on a local server."""

    def __init__(
        self,
        config: MondoOAuthConfig,
        open_browser: bool = True,
        timeout: int = 300,
        echo: Callable[[str], None] = click.echo,
    ):
        self.config = config
        self.open_browser = open_browser
        self.timeout = timeout
        self.echo = echo

    def present(self, auth_request: AuthorizationRequest) -> AuthorizationResult:
        server = OAuthCallbackServer(self.config)

        try:
            server.start()

            self.echo("Please authorize the application by visiting:")
            self.echo(f"\n  {auth_request.url}\n")

            if self.open_browser:
                try:
                    webbrowser.open(auth_request.url)
                except webbrowser.Error as e:
                    logger.warning(f"Could not open browser automatically: {e}")
                    self.echo("Copy the URL above and paste it in your browser.")

            self.echo("Waiting for authorization...")
            return server.wait_for_callback(self.timeout)

        finally:
            server.stop()


class ManualPresenter(AuthorizationPresenter):
    """
    Headless presenter.

    The user opens the URL on any device and pastes back the URL the browser
    was redirected to. An empty answer counts as cancellation.
    """

    def __init__(
        self,
        prompt: Optional[Callable[[str], str]] = None,
        echo: Callable[[str], None] = click.echo,
    ):
        self.prompt = prompt or (lambda text: click.prompt(text, default="", show_default=False))
        self.echo = echo

    def present(self, auth_request: AuthorizationRequest) -> AuthorizationResult:
        self.echo("Open this URL in a browser and authorize the application:")
        self.echo(f"\n  {auth_request.url}\n")

        try:
            answer = self.prompt("Paste the URL you were redirected to").strip()
        except click.Abort:
            # Ctrl-C or end of input at the prompt
            answer = ""

        if not answer:
            return AuthorizationResult(
                success=False,
                error="access_denied",
                error_description="Authorization cancelled by user",
            )

        if "=" not in answer:
            # A bare code was pasted
            return AuthorizationResult(
                success=True, authorization_code=answer, state=auth_request.state
            )

        return parse_redirect_url(answer)
