"""
Mondo API response parsers.

This module turns raw responses into models. Non-200 responses become
:class:`APIError`; bodies that do not match the expected schema become
:class:`DecodeError`, except inside the accounts list where a malformed
entry is logged and skipped.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .exceptions import APIError, DecodeError
from .models import Account, AccountBalance, Address, Merchant, Transaction, WhoAmI

logger = logging.getLogger(__name__)


def parse_datetime(value: Any) -> datetime:
    """
    Parse an API timestamp.

    Accepts RFC 3339 timestamps with a ``Z`` suffix or numeric offset and
    optional fractional seconds (e.g. ``2015-09-04T14:28:40.227Z``).

    Raises:
        ValueError: If the value is not a timestamp string
    """
    if not isinstance(value, str) or not value:
        raise ValueError(f"Expected timestamp string, got {value!r}")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"

    # fromisoformat only accepts 3 or 6 fractional digits before Python 3.11
    if "." in text:
        head, _, rest = text.partition(".")
        digits = ""
        while rest and rest[0].isdigit():
            digits, rest = digits + rest[0], rest[1:]
        text = f"{head}.{digits[:6].ljust(6, '0')}{rest}"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _optional_datetime(value: Any) -> Optional[datetime]:
    # Unsettled transactions carry "" rather than null
    if value is None or value == "":
        return None
    return parse_datetime(value)


def _require(data: Dict[str, Any], key: str, expected: type) -> Any:
    value = data[key]
    if expected is int and isinstance(value, bool):
        raise TypeError(f"Field {key!r} must be int, got bool")
    if not isinstance(value, expected):
        raise TypeError(
            f"Field {key!r} must be {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _as_object(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"Expected JSON object for {what}, got {type(data).__name__}")
    return data


def error_from_response(status_code: int, body: Any) -> APIError:
    """
    Build the APIError for a non-200 response.

    Args:
        status_code: HTTP status
        body: Decoded JSON body, or None when the body was not JSON

    Returns:
        APIError carrying the server's ``message`` ("" when absent)
    """
    message = ""
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        message = body["message"]
    return APIError(status_code, message)


def decode_response(status_code: int, body: Any) -> Any:
    """
    Check a response and return its decoded JSON body.

    Raises:
        APIError: If status is not 200
    """
    if status_code != 200:
        raise error_from_response(status_code, body)
    return body


def parse_account(data: Any) -> Account:
    """
    Parse a single account object.

    Raises:
        DecodeError: If required fields are missing or malformed
    """
    data = _as_object(data, "account")
    try:
        return Account(
            account_id=_require(data, "id", str),
            description=_require(data, "description", str),
            created=parse_datetime(data["created"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"Could not decode account: {e}") from e


def parse_accounts(data: Any) -> List[Account]:
    """
    Parse a list-accounts response.

    Entries that fail to decode are logged and left out of the result.
    """
    data = _as_object(data, "accounts response")
    accounts_data = data.get("accounts")
    if not isinstance(accounts_data, list):
        logger.warning("Accounts response has no 'accounts' array")
        return []

    accounts: List[Account] = []
    for account_data in accounts_data:
        try:
            accounts.append(parse_account(account_data))
        except DecodeError as e:
            logger.warning(f"Skipping account {account_data!r}: {e}")

    logger.debug(f"Parsed {len(accounts)} of {len(accounts_data)} accounts")
    return accounts


def parse_balance(data: Any) -> AccountBalance:
    """
    Parse a balance response.

    Raises:
        DecodeError: If required fields are missing or malformed
    """
    data = _as_object(data, "balance")
    try:
        return AccountBalance(
            balance=_require(data, "balance", int),
            currency=_require(data, "currency", str),
            spend_today=_require(data, "spend_today", int),
        )
    except (KeyError, TypeError) as e:
        raise DecodeError(f"Could not decode balance: {e}") from e


def parse_address(data: Dict[str, Any]) -> Address:
    return Address(
        address=data.get("address") or "",
        city=data.get("city") or "",
        region=data.get("region") or "",
        country=data.get("country") or "",
        postcode=data.get("postcode") or "",
        latitude=data.get("latitude"),
        longitude=data.get("longitude"),
    )


def parse_merchant(data: Any) -> Merchant:
    """
    Parse an expanded merchant object.

    Raises:
        DecodeError: If required fields are missing or malformed
    """
    data = _as_object(data, "merchant")
    try:
        address = data.get("address")
        return Merchant(
            merchant_id=_require(data, "id", str),
            name=_require(data, "name", str),
            group_id=data.get("group_id"),
            logo=data.get("logo") or None,
            emoji=data.get("emoji") or None,
            category=data.get("category"),
            created=_optional_datetime(data.get("created")),
            address=parse_address(address) if isinstance(address, dict) else None,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"Could not decode merchant: {e}") from e


def parse_transaction(data: Any) -> Transaction:
    """
    Parse a single transaction object.

    ``merchant`` is kept as an id string unless the response expanded it.

    Raises:
        DecodeError: If required fields are missing or malformed
    """
    data = _as_object(data, "transaction")
    try:
        merchant_data = data.get("merchant")
        if isinstance(merchant_data, dict):
            merchant = parse_merchant(merchant_data)
        elif merchant_data:
            merchant = str(merchant_data)
        else:
            merchant = None

        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise TypeError("Field 'metadata' must be an object")

        return Transaction(
            transaction_id=_require(data, "id", str),
            amount=_require(data, "amount", int),
            currency=_require(data, "currency", str),
            description=_require(data, "description", str),
            created=parse_datetime(data["created"]),
            settled=_optional_datetime(data.get("settled")),
            category=data.get("category"),
            notes=data.get("notes") or "",
            is_load=bool(data.get("is_load", False)),
            account_balance=data.get("account_balance"),
            decline_reason=data.get("decline_reason"),
            merchant=merchant,
            metadata={str(key): str(value) for key, value in metadata.items()},
        )
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"Could not decode transaction: {e}") from e


def parse_transactions(data: Any) -> List[Transaction]:
    """
    Parse a list-transactions response.

    The array is decoded as a unit: one malformed transaction fails the call.

    Raises:
        DecodeError: If the array is missing or any entry is malformed
    """
    data = _as_object(data, "transactions response")
    transactions_data = data.get("transactions")
    if not isinstance(transactions_data, list):
        raise DecodeError("Transactions response has no 'transactions' array")

    transactions = [parse_transaction(item) for item in transactions_data]
    logger.debug(f"Parsed {len(transactions)} transactions")
    return transactions


def parse_whoami(data: Any) -> WhoAmI:
    """
    Parse a whoami response.

    Raises:
        DecodeError: If ``authenticated`` is missing
    """
    data = _as_object(data, "whoami")
    try:
        return WhoAmI(
            authenticated=_require(data, "authenticated", bool),
            client_id=data.get("client_id"),
            user_id=data.get("user_id"),
        )
    except (KeyError, TypeError) as e:
        raise DecodeError(f"Could not decode whoami: {e}") from e
