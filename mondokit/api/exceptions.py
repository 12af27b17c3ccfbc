"""Exceptions for Mondo API client."""

from typing import Optional


class MondoAPIError(Exception):
    """Base exception for Mondo API errors."""

    pass


class InitializationError(MondoAPIError):
    """API used before initialize(), or initialized twice."""

    pass


class NotAuthenticatedError(MondoAPIError):
    """
    No access token is held.

    Raised before any network call is made. Run the authorization flow
    first.
    """

    pass


class TransportError(MondoAPIError):
    """Network-level failure; the underlying exception is chained."""

    pass


class APIError(MondoAPIError):
    """
    Non-200 response from the Mondo API.

    Attributes:
        status_code: HTTP status of the response
        message: Server-provided message ("" when absent)
    """

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        self.message = message or ""
        super().__init__(f"Mondo API error ({status_code}): {self.message}")


class DecodeError(MondoAPIError):
    """Successful response whose body does not match the expected schema."""

    pass
