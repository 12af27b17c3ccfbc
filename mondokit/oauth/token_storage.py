"""
Token storage for Mondo OAuth integration.

This module provides the token data structure with expiry tracking and an
optional file-based persistence layer. Tokens are stored in plaintext JSON
with user-only permissions.
"""

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from .exceptions import TokenStorageError

logger = logging.getLogger(__name__)


@dataclass
class TokenData:
    """
    OAuth token set returned by the Mondo token endpoint.

    Attributes:
        access_token: Short-lived bearer token for API calls
        refresh_token: Token for obtaining new access tokens (confidential clients only)
        token_type: Token type (typically "Bearer")
        expires_in: Token lifetime in seconds from issue time
        user_id: Mondo user the token was issued for
        client_id: OAuth client the token was issued to
        issued_at: ISO timestamp of when tokens were issued/refreshed
    """

    access_token: str
    expires_in: int
    issued_at: str
    refresh_token: Optional[str] = None
    token_type: str = "Bearer"
    user_id: Optional[str] = None
    client_id: Optional[str] = None

    @property
    def expires_at(self) -> datetime:
        """Datetime when the access token expires (timezone-aware UTC)."""
        issued = datetime.fromisoformat(self.issued_at)
        if issued.tzinfo is None:
            issued = issued.replace(tzinfo=timezone.utc)
        return issued + timedelta(seconds=self.expires_in)

    def seconds_remaining(self, now: Optional[datetime] = None) -> float:
        """Seconds until expiry; negative once expired."""
        now = now or datetime.now(timezone.utc)
        return (self.expires_at - now).total_seconds()

    @property
    def is_expired(self) -> bool:
        return self.seconds_remaining() <= 0

    @property
    def can_refresh(self) -> bool:
        """Refresh tokens are only issued to confidential clients."""
        return bool(self.refresh_token)

    def expires_within(self, seconds: int) -> bool:
        """True if the access token expires in ``seconds`` or less."""
        return self.seconds_remaining() <= seconds

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "TokenData":
        """
        Rebuild a stored token set.

        Raises:
            TypeError: If fields are missing or unknown
        """
        return cls(**data)

    @classmethod
    def from_token_response(
        cls, data: dict, previous: Optional["TokenData"] = None
    ) -> "TokenData":
        """
        Build TokenData from a token endpoint JSON response.

        Fields the server omits on refresh (refresh_token, user_id) are
        carried over from ``previous``.

        Raises:
            KeyError: If access_token or expires_in is missing
            ValueError: If expires_in is not an integer
        """
        return cls(
            access_token=data["access_token"],
            expires_in=int(data["expires_in"]),
            issued_at=datetime.now(timezone.utc).isoformat(),
            refresh_token=data.get(
                "refresh_token", previous.refresh_token if previous else None
            ),
            token_type=data.get("token_type", "Bearer"),
            user_id=data.get("user_id", previous.user_id if previous else None),
            client_id=data.get("client_id", previous.client_id if previous else None),
        )


class TokenStorage:
    """
    File-based token storage (plaintext JSON).

    The file holds a versioned envelope, ``{"version": 1, "tokens": {...}}``.
    Writes go to a temporary file created with 0600 permissions in the same
    directory, which then replaces the token file, so a crash mid-write never
    leaves a truncated file behind. A missing, corrupted or foreign file loads
    as "no tokens" and the caller falls back to authorization.
    """

    FORMAT_VERSION = 1

    def __init__(self, token_file: str):
        """
        Args:
            token_file: Path to token storage file (e.g., ~/.mondokit/tokens.json)
        """
        self.token_file = Path(token_file).expanduser()
        self.token_file.parent.mkdir(parents=True, exist_ok=True)

    def save(self, token_data: TokenData) -> None:
        """
        Persist a token set, replacing any previous one.

        Raises:
            TokenStorageError: If the file cannot be written
        """
        payload = {"version": self.FORMAT_VERSION, "tokens": token_data.to_dict()}
        try:
            # mkstemp creates the file readable by the owner only
            fd, tmp_name = tempfile.mkstemp(
                dir=self.token_file.parent, prefix=f".{self.token_file.name}."
            )
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(payload, f, indent=2)
                os.replace(tmp_name, self.token_file)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Failed to save tokens to {self.token_file}: {e}")
            raise TokenStorageError(f"Failed to save tokens: {e}") from e

        logger.info(f"Tokens saved to {self.token_file}")

    def load(self) -> Optional[TokenData]:
        """
        Load the stored token set.

        Returns:
            TokenData, or None when nothing usable is stored
        """
        try:
            payload = json.loads(self.token_file.read_text())
        except FileNotFoundError:
            logger.debug(f"No token file found at {self.token_file}")
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read token file {self.token_file}: {e}")
            return None

        if not isinstance(payload, dict) or payload.get("version") != self.FORMAT_VERSION:
            logger.warning(
                f"Unrecognized token file format at {self.token_file}, "
                f"will need re-authorization"
            )
            return None

        try:
            token_data = TokenData.from_dict(payload["tokens"])
        except (KeyError, TypeError) as e:
            logger.warning(
                f"Invalid token file at {self.token_file}, "
                f"will need re-authorization: {e}"
            )
            return None

        logger.debug(f"Tokens loaded from {self.token_file}")
        return token_data

    def delete(self) -> bool:
        """
        Delete the token file.

        Returns:
            True if a file was deleted, False if there was none

        Raises:
            TokenStorageError: If the file exists but cannot be removed
        """
        try:
            self.token_file.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to delete token file: {e}")
            raise TokenStorageError(f"Failed to delete token file: {e}") from e

        logger.info(f"Token file deleted: {self.token_file}")
        return True

    def exists(self) -> bool:
        return self.token_file.exists()
