"""
Request construction for the Mondo API.

Building a request is kept free of I/O so it can be inspected and tested
without a transport.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import urljoin

from .endpoints import API_ROOT
from .pagination import Pagination


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything the transport needs to perform one call."""

    method: str
    url: str
    params: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)


def build_request(
    endpoint: str,
    access_token: str,
    params: Optional[Dict[str, str]] = None,
    pagination: Optional[Pagination] = None,
    method: str = "GET",
    base_url: str = API_ROOT,
) -> RequestDescriptor:
    """
    Build a request descriptor for an authenticated call.

    Pagination parameters are merged over ``params``; on a key collision
    the pagination value is kept.

    Args:
        endpoint: Path relative to the API root (e.g. "transactions")
        access_token: Bearer token for the Authorization header
        params: Call-specific query parameters
        pagination: Optional cursor constraint
        method: HTTP method
        base_url: API root URL

    Returns:
        RequestDescriptor for the call
    """
    merged: Dict[str, str] = dict(params or {})
    if pagination is not None:
        merged.update(pagination.parameters)

    if not base_url.endswith("/"):
        base_url = f"{base_url}/"

    return RequestDescriptor(
        method=method,
        url=urljoin(base_url, endpoint.lstrip("/")),
        params=merged,
        headers={
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        },
    )
