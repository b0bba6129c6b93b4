"""Contracts shared by the X (Twitter) client, credential guard and publisher."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


class TwitterIntegrationError(RuntimeError):
    """Base class for failures of the X integration."""


class NotConnectedError(TwitterIntegrationError):
    """Raised when the stored credential is incomplete; the user has to relink."""

    def __init__(self, message: str = "Twitter account is not connected.") -> None:
        super().__init__(message)


class ProviderAuthError(TwitterIntegrationError):
    """Raised when X rejects a token or refresh token."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderRequestError(TwitterIntegrationError):
    """Raised for rate limits, rejected payloads, transport failures and malformed replies."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class TwitterCredential:
    twitter_id: str
    access_token: str
    refresh_token: str
    expires_at: datetime


@dataclass(frozen=True)
class RefreshedToken:
    token: str
    refresh_token: str
    expires: int  # Unix timestamp (seconds)
