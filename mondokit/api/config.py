"""Configuration management for the Mondo API client."""

import os
from dataclasses import dataclass
from typing import Optional

from .endpoints import API_ROOT


@dataclass
class MondoClientConfig:
    """
    Configuration for the Mondo HTTP client.

    Attributes:
        base_url: API root URL
        timeout: Request timeout in seconds (None = transport default, no timeout)
        max_retries: Extra attempts on transport errors and 5xx (0 = single attempt)
        retry_delay: Initial delay between retries (seconds)
    """

    base_url: str = API_ROOT
    timeout: Optional[float] = None
    max_retries: int = 0
    retry_delay: float = 1.0

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.base_url:
            raise ValueError("Base URL cannot be empty")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("Timeout must be positive")

        if self.max_retries < 0:
            raise ValueError("Max retries cannot be negative")

        if self.retry_delay <= 0:
            raise ValueError("Retry delay must be positive")

    @classmethod
    def from_env(cls) -> "MondoClientConfig":
        """
        Load configuration from environment variables.

        Optional environment variables:
            MONDO_API_ROOT: API root URL
            MONDO_TIMEOUT: Request timeout in seconds
            MONDO_MAX_RETRIES: Retry attempts on transient errors
            MONDO_RETRY_DELAY: Initial retry delay in seconds

        Raises:
            ValueError: If a variable is set to an invalid value
        """
        timeout = os.getenv("MONDO_TIMEOUT")
        return cls(
            base_url=os.getenv("MONDO_API_ROOT", API_ROOT),
            timeout=float(timeout) if timeout else None,
            max_retries=int(os.getenv("MONDO_MAX_RETRIES", "0")),
            retry_delay=float(os.getenv("MONDO_RETRY_DELAY", "1.0")),
        )
