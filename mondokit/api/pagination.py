"""
Cursor-based pagination parameters for list endpoints.

The Mondo API pages with ``limit``, ``since`` and ``before`` query
parameters. ``since`` is either a timestamp or the id of the last
transaction seen; ``before`` is always a timestamp.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Union


def to_json_datetime(value: datetime) -> str:
    """
    Format a datetime as an RFC 3339 UTC timestamp (``2016-01-01T00:00:00Z``).

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class Pagination:
    """
    Pagination constraint for one list call.

    Attributes:
        limit: Maximum number of results
        since: Lower bound, a datetime or a transaction id
        before: Upper bound datetime
    """

    limit: Optional[int] = None
    since: Union[datetime, str, None] = None
    before: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit <= 0:
            raise ValueError(f"limit must be positive, got {self.limit}")

    @property
    def parameters(self) -> Dict[str, str]:
        """Query parameters for this constraint; unset fields are omitted."""
        parameters: Dict[str, str] = {}
        if self.limit is not None:
            parameters["limit"] = str(self.limit)
        if self.since is not None:
            if isinstance(self.since, datetime):
                parameters["since"] = to_json_datetime(self.since)
            else:
                parameters["since"] = self.since
        if self.before is not None:
            parameters["before"] = to_json_datetime(self.before)
        return parameters
