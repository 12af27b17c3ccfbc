"""
Mondo data models.

This module defines the value objects decoded from Mondo API responses.
Amounts are integers in the currency's minor unit (pence for GBP), as the
API returns them. ``to_dict()`` re-encodes a model with the wire field
names.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Union


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime the way the API does (UTC, ``Z`` suffix)."""
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class Account:
    """
    A user's bank account.

    Attributes:
        account_id: Mondo account id (e.g. "acc_00009237aqC8c5umZmrRdh")
        description: Account description
        created: When the account was opened
    """

    account_id: str
    description: str
    created: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.account_id,
            "description": self.description,
            "created": format_datetime(self.created),
        }


@dataclass(frozen=True)
class AccountBalance:
    """
    A snapshot of an account's balance.

    Attributes:
        balance: Available balance in minor units
        currency: ISO 4217 currency code
        spend_today: Amount spent today in minor units (negative for spend)
    """

    balance: int
    currency: str
    spend_today: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "balance": self.balance,
            "currency": self.currency,
            "spend_today": self.spend_today,
        }


@dataclass(frozen=True)
class Address:
    """Merchant address as returned with an expanded merchant."""

    address: str = ""
    city: str = ""
    region: str = ""
    country: str = ""
    postcode: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "city": self.city,
            "region": self.region,
            "country": self.country,
            "postcode": self.postcode,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


@dataclass(frozen=True)
class Merchant:
    """
    A merchant, present on transactions listed with ``expand[]=merchant``.

    Attributes:
        merchant_id: Mondo merchant id
        group_id: Id shared by all branches of the same merchant
        name: Display name
        logo: Logo URL
        emoji: Emoji shown for the merchant
        category: Spending category (e.g. "eating_out")
        created: When Mondo first saw the merchant
        address: Merchant address, if known
    """

    merchant_id: str
    name: str
    group_id: Optional[str] = None
    logo: Optional[str] = None
    emoji: Optional[str] = None
    category: Optional[str] = None
    created: Optional[datetime] = None
    address: Optional[Address] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.merchant_id,
            "group_id": self.group_id,
            "name": self.name,
            "logo": self.logo,
            "emoji": self.emoji,
            "category": self.category,
            "created": format_datetime(self.created),
            "address": self.address.to_dict() if self.address else None,
        }


@dataclass(frozen=True)
class Transaction:
    """
    A single ledger entry.

    Attributes:
        transaction_id: Mondo transaction id
        amount: Amount in minor units (negative for debits)
        currency: ISO 4217 currency code
        description: Raw description from the card network
        created: When the transaction was created
        settled: When the transaction settled (None while pending)
        category: Spending category
        notes: User notes
        is_load: Whether this is a top-up
        account_balance: Account balance after this transaction
        decline_reason: Set for declined transactions
        merchant: Merchant id, or the expanded Merchant
        metadata: Free-form key/value annotations
    """

    transaction_id: str
    amount: int
    currency: str
    description: str
    created: datetime
    settled: Optional[datetime] = None
    category: Optional[str] = None
    notes: str = ""
    is_load: bool = False
    account_balance: Optional[int] = None
    decline_reason: Optional[str] = None
    merchant: Union[str, Merchant, None] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def is_declined(self) -> bool:
        return self.decline_reason is not None

    @property
    def merchant_id(self) -> Optional[str]:
        if isinstance(self.merchant, Merchant):
            return self.merchant.merchant_id
        return self.merchant

    def to_dict(self) -> Dict[str, Any]:
        merchant = self.merchant.to_dict() if isinstance(self.merchant, Merchant) else self.merchant
        return {
            "id": self.transaction_id,
            "amount": self.amount,
            "currency": self.currency,
            "description": self.description,
            "created": format_datetime(self.created),
            "settled": format_datetime(self.settled),
            "category": self.category,
            "notes": self.notes,
            "is_load": self.is_load,
            "account_balance": self.account_balance,
            "decline_reason": self.decline_reason,
            "merchant": merchant,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class WhoAmI:
    """Result of the token introspection endpoint."""

    authenticated: bool
    client_id: Optional[str] = None
    user_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "authenticated": self.authenticated,
            "client_id": self.client_id,
            "user_id": self.user_id,
        }
