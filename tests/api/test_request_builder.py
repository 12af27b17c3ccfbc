"""Tests for request construction."""

from mondokit.api.pagination import Pagination
from mondokit.api.request_builder import build_request


def test_build_request_defaults():
    descriptor = build_request("accounts", "token_abc")

    assert descriptor.method == "GET"
    assert descriptor.url == "https://api.getmondo.co.uk/accounts"
    assert descriptor.params == {}
    assert descriptor.headers == {
        "Authorization": "Bearer token_abc",
        "Accept": "application/json",
    }


def test_build_request_with_params():
    descriptor = build_request("balance", "token_abc", params={"account_id": "acc_1"})

    assert descriptor.url == "https://api.getmondo.co.uk/balance"
    assert descriptor.params == {"account_id": "acc_1"}


def test_pagination_merged_into_params():
    descriptor = build_request(
        "transactions",
        "token_abc",
        params={"account_id": "acc_1"},
        pagination=Pagination(limit=5),
    )

    assert descriptor.params == {"account_id": "acc_1", "limit": "5"}


def test_pagination_wins_on_collision():
    descriptor = build_request(
        "transactions",
        "token_abc",
        params={"account_id": "acc_1", "limit": "100"},
        pagination=Pagination(limit=5),
    )

    assert descriptor.params["limit"] == "5"


def test_params_not_mutated():
    params = {"account_id": "acc_1"}

    build_request("transactions", "token_abc", params=params, pagination=Pagination(limit=5))

    assert params == {"account_id": "acc_1"}


def test_base_url_without_trailing_slash():
    descriptor = build_request(
        "ping/whoami", "token_abc", base_url="https://staging.example.com/api"
    )

    assert descriptor.url == "https://staging.example.com/api/ping/whoami"


def test_leading_slash_endpoint():
    descriptor = build_request("/accounts", "token_abc", base_url="https://staging.example.com/api/")

    assert descriptor.url == "https://staging.example.com/api/accounts"
