"""X (Twitter) integration: credential refresh and post publishing."""

from services.twitter.client import HttpTwitterApiClient, TwitterApiClient, get_twitter_api_client
from services.twitter.credentials import ensure_fresh_credential, is_connected
from services.twitter.publisher import extract_post_id, publish, publish_status
from services.twitter.types import (
    NotConnectedError,
    ProviderAuthError,
    ProviderRequestError,
    RefreshedToken,
    TwitterCredential,
    TwitterIntegrationError,
)

__all__ = [
    "HttpTwitterApiClient",
    "NotConnectedError",
    "ProviderAuthError",
    "ProviderRequestError",
    "RefreshedToken",
    "TwitterApiClient",
    "TwitterCredential",
    "TwitterIntegrationError",
    "ensure_fresh_credential",
    "extract_post_id",
    "get_twitter_api_client",
    "is_connected",
    "publish",
    "publish_status",
]
