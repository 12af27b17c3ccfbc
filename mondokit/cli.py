"""
Click CLI for the Mondo API client.

This module provides command-line commands to authorize against Mondo and
inspect accounts, balances and transactions.
"""

import dataclasses
import json
import logging
import sys
from datetime import datetime
from typing import Optional, Union

import click

from .api.client import MondoClient
from .api.config import MondoClientConfig
from .api.exceptions import MondoAPIError
from .api.models import AccountBalance, Transaction
from .api.pagination import Pagination
from .oauth.config import MondoOAuthConfig
from .oauth.coordinator import OAuthCoordinator
from .oauth.exceptions import AuthError, ConfigurationError
from .oauth.presenters import CallbackServerPresenter, ManualPresenter

logger = logging.getLogger(__name__)


def _get_oauth(ctx: click.Context) -> OAuthCoordinator:
    """Get the OAuthCoordinator from context."""
    return ctx.obj["oauth"]


def _get_client(ctx: click.Context) -> MondoClient:
    """Get the MondoClient from context."""
    return ctx.obj["client"]


def _print_error(message: str) -> None:
    """Print error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def _print_success(message: str) -> None:
    """Print success message."""
    click.secho(message, fg="green")


def _format_amount(amount: int, currency: str) -> str:
    """Format a minor-unit amount (e.g. -510 GBP -> -5.10 GBP)."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{abs(amount) / 100:,.2f} {currency}"


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2))


def _print_balance(balance: AccountBalance) -> None:
    click.echo(f"Balance:     {_format_amount(balance.balance, balance.currency)}")
    click.echo(f"Spent today: {_format_amount(balance.spend_today, balance.currency)}")


def _print_transaction(transaction: Transaction, verbose: bool = False) -> None:
    created = transaction.created.strftime("%Y-%m-%d %H:%M")
    amount = _format_amount(transaction.amount, transaction.currency)
    line = f"{created}  {amount:>14}  {transaction.description}"
    if transaction.is_declined:
        click.secho(f"{line}  (declined: {transaction.decline_reason})", fg="yellow")
    else:
        click.echo(line)

    if verbose:
        click.echo(f"    id: {transaction.transaction_id}")
        if transaction.merchant_id:
            click.echo(f"    merchant: {transaction.merchant_id}")
        if transaction.notes:
            click.echo(f"    notes: {transaction.notes}")


def _parse_cli_datetime(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise click.BadParameter(f"Not an ISO-8601 date-time: {value}")


def _parse_since(value: Optional[str]) -> Union[datetime, str, None]:
    """A date-time when the value parses as one, otherwise a transaction id."""
    if not value:
        return None
    try:
        return _parse_cli_datetime(value)
    except click.BadParameter:
        return value


@click.group()
@click.option(
    "--token-file",
    default="~/.mondokit/tokens.json",
    help="Token file path",
    envvar="MONDO_TOKEN_FILE",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--json", "output_json", is_flag=True, help="JSON output (where supported)")
@click.pass_context
def cli(ctx: click.Context, token_file: str, verbose: bool, output_json: bool) -> None:
    """
    MondoKit - talk to the Mondo banking API.

    Credentials are read from MONDO_CLIENT_ID and MONDO_CLIENT_SECRET.
    """
    ctx.ensure_object(dict)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        oauth_config = dataclasses.replace(MondoOAuthConfig.from_env(), token_file=token_file)
        client_config = MondoClientConfig.from_env()
    except (ConfigurationError, ValueError) as e:
        _print_error(str(e))
        sys.exit(1)

    oauth = OAuthCoordinator(config=oauth_config)
    ctx.obj["oauth"] = oauth
    ctx.obj["client"] = MondoClient(oauth, client_config)
    ctx.obj["verbose"] = verbose
    ctx.obj["json"] = output_json


@cli.command()
@click.option("--no-browser", is_flag=True, help="Print the URL instead of opening a browser")
@click.option("--manual", is_flag=True, help="Paste the redirect URL instead of running a callback server")
@click.option("--timeout", default=300, type=int, help="Seconds to wait for the callback")
@click.pass_context
def authorize(ctx: click.Context, no_browser: bool, manual: bool, timeout: int) -> None:
    """Authorize this client against your Mondo account."""
    oauth = _get_oauth(ctx)

    if manual:
        presenter = ManualPresenter()
    else:
        presenter = CallbackServerPresenter(
            oauth.config, open_browser=not no_browser, timeout=timeout
        )

    try:
        token = oauth.authorize(presenter)
    except (AuthError, OSError) as e:
        _print_error(str(e))
        sys.exit(1)

    _print_success("Authorization successful!")
    if token.user_id:
        click.echo(f"Authorized user: {token.user_id}")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the current authorization status."""
    token_status = _get_oauth(ctx).get_status()

    if ctx.obj["json"]:
        _echo_json(token_status)
        return

    if not token_status["authorized"]:
        click.echo("Not authorized. Run: mondokit authorize")
        return

    click.echo("Authorized")
    if token_status.get("user_id"):
        click.echo(f"User:       {token_status['user_id']}")
    click.echo(f"Expires at: {token_status['expires_at']}")
    if token_status["expired"]:
        click.secho("Access token has expired", fg="yellow")
    click.echo(f"Refreshable: {'yes' if token_status['can_refresh'] else 'no'}")


@cli.command()
@click.pass_context
def revoke(ctx: click.Context) -> None:
    """Forget the stored tokens."""
    try:
        _get_oauth(ctx).revoke()
    except AuthError as e:
        _print_error(str(e))
        sys.exit(1)
    _print_success("Tokens removed. Run 'mondokit authorize' to authorize again.")


@cli.command()
@click.pass_context
def whoami(ctx: click.Context) -> None:
    """Check the access token with the API."""
    try:
        info = _get_client(ctx).whoami()
    except (MondoAPIError, AuthError) as e:
        _print_error(str(e))
        sys.exit(1)

    if ctx.obj["json"]:
        _echo_json(info.to_dict())
        return

    click.echo(f"Authenticated: {'yes' if info.authenticated else 'no'}")
    if info.user_id:
        click.echo(f"User:   {info.user_id}")
    if info.client_id:
        click.echo(f"Client: {info.client_id}")


@cli.command()
@click.pass_context
def accounts(ctx: click.Context) -> None:
    """List your accounts."""
    try:
        account_list = _get_client(ctx).list_accounts()
    except (MondoAPIError, AuthError) as e:
        _print_error(str(e))
        sys.exit(1)

    if ctx.obj["json"]:
        _echo_json([account.to_dict() for account in account_list])
        return

    if not account_list:
        click.echo("No accounts found")
        return

    for account in account_list:
        click.echo(
            f"{account.account_id}  {account.description}  "
            f"(opened {account.created.strftime('%Y-%m-%d')})"
        )


@cli.command()
@click.argument("account_id")
@click.pass_context
def balance(ctx: click.Context, account_id: str) -> None:
    """Show the balance of ACCOUNT_ID."""
    try:
        account_balance = _get_client(ctx).get_balance(account_id)
    except (MondoAPIError, AuthError) as e:
        _print_error(str(e))
        sys.exit(1)

    if ctx.obj["json"]:
        _echo_json(account_balance.to_dict())
        return

    _print_balance(account_balance)


@cli.command()
@click.argument("account_id")
@click.option("--expand", help="Expand a related object (e.g. merchant)")
@click.option("--limit", type=int, help="Maximum number of transactions")
@click.option("--since", help="ISO-8601 date-time or transaction id")
@click.option("--before", help="ISO-8601 date-time")
@click.pass_context
def transactions(
    ctx: click.Context,
    account_id: str,
    expand: Optional[str],
    limit: Optional[int],
    since: Optional[str],
    before: Optional[str],
) -> None:
    """List transactions of ACCOUNT_ID."""
    since_value = _parse_since(since)

    try:
        pagination = Pagination(limit=limit, since=since_value, before=_parse_cli_datetime(before))
    except ValueError as e:
        raise click.BadParameter(str(e))

    try:
        transaction_list = _get_client(ctx).list_transactions(
            account_id, expand=expand, pagination=pagination
        )
    except (MondoAPIError, AuthError) as e:
        _print_error(str(e))
        sys.exit(1)

    if ctx.obj["json"]:
        _echo_json([transaction.to_dict() for transaction in transaction_list])
        return

    if not transaction_list:
        click.echo("No transactions found")
        return

    for transaction in transaction_list:
        _print_transaction(transaction, verbose=ctx.obj["verbose"])


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
