"""Tests for Mondo data models."""

import dataclasses
from datetime import datetime, timezone

import pytest

from mondokit.api.models import (
    Account,
    AccountBalance,
    Merchant,
    Transaction,
    WhoAmI,
    format_datetime,
)
from mondokit.api.parsers import parse_account, parse_transaction

CREATED = datetime(2015, 11, 13, 12, 17, 42, tzinfo=timezone.utc)


def test_format_datetime():
    assert format_datetime(CREATED) == "2015-11-13T12:17:42Z"
    assert format_datetime(None) is None


class TestAccount:
    def test_to_dict_uses_wire_names(self):
        account = Account("acc_1", "Main", CREATED)

        assert account.to_dict() == {
            "id": "acc_1",
            "description": "Main",
            "created": "2015-11-13T12:17:42Z",
        }

    def test_reparse_keeps_account_id(self):
        account = Account("acc_00009237aqC8c5umZmrRdh", "Peter Pan's Account", CREATED)

        assert parse_account(account.to_dict()) == account

    def test_frozen(self):
        account = Account("acc_1", "Main", CREATED)

        with pytest.raises(dataclasses.FrozenInstanceError):
            account.account_id = "acc_2"


class TestTransaction:
    def test_merchant_id_from_string(self):
        transaction = Transaction("tx_1", -510, "GBP", "Deli", CREATED, merchant="merch_1")

        assert transaction.merchant_id == "merch_1"

    def test_merchant_id_from_expanded_merchant(self):
        merchant = Merchant("merch_1", "The Deli")
        transaction = Transaction("tx_1", -510, "GBP", "Deli", CREATED, merchant=merchant)

        assert transaction.merchant_id == "merch_1"
        assert transaction.to_dict()["merchant"]["name"] == "The Deli"

    def test_no_merchant(self):
        transaction = Transaction("tx_1", 10000, "GBP", "Top up", CREATED, is_load=True)

        assert transaction.merchant_id is None
        assert transaction.is_declined is False

    def test_to_dict_reparses(self):
        transaction = Transaction(
            "tx_1",
            -510,
            "GBP",
            "Deli",
            CREATED,
            settled=CREATED,
            category="eating_out",
            account_balance=13013,
            merchant="merch_1",
            metadata={"k": "v"},
        )

        assert parse_transaction(transaction.to_dict()) == transaction


def test_balance_to_dict():
    assert AccountBalance(5000, "GBP", -1200).to_dict() == {
        "balance": 5000,
        "currency": "GBP",
        "spend_today": -1200,
    }


def test_whoami_to_dict():
    assert WhoAmI(True, "oauthclient_1", "user_1").to_dict() == {
        "authenticated": True,
        "client_id": "oauthclient_1",
        "user_id": "user_1",
    }
