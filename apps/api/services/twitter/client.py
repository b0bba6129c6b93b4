"""HTTP client for the X API v2 (token refresh and post creation)."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from config import settings
from services.twitter.types import ProviderAuthError, ProviderRequestError, RefreshedToken


TOKEN_PATH = "/2/oauth2/token"
TWEETS_PATH = "/2/tweets"


class TwitterApiClient(ABC):
    """The two X operations the check-in flow depends on."""

    @abstractmethod
    async def refresh_token(self, refresh_token: str) -> RefreshedToken:
        raise NotImplementedError

    @abstractmethod
    async def create_post(self, access_token: str, text: str) -> Dict[str, Any]:
        raise NotImplementedError


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        for key in ("error_description", "detail", "title", "error"):
            value = body.get(key)
            if value:
                return str(value)
    return str(body)[:200]


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError as exc:
        raise ProviderRequestError("X returned a non-JSON response.", response.status_code) from exc
    if not isinstance(body, dict):
        raise ProviderRequestError("X returned an unexpected response shape.", response.status_code)
    return body


def _expiry_timestamp(body: Dict[str, Any], status_code: int) -> int:
    """Absolute ``expires_at`` when given, else now + ``expires_in``."""
    try:
        if body.get("expires_at") is not None:
            return int(body["expires_at"])
        if body.get("expires_in") is not None:
            return int(time.time()) + int(body["expires_in"])
    except (TypeError, ValueError) as exc:
        raise ProviderRequestError("Token refresh response has an invalid expiry.", status_code) from exc
    raise ProviderRequestError("Token refresh response is missing the token expiry.", status_code)


class HttpTwitterApiClient(TwitterApiClient):
    """httpx implementation. A fresh ``AsyncClient`` is opened for every call."""

    def __init__(
        self,
        *,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.client_id = client_id if client_id is not None else settings.TWITTER_CLIENT_ID
        self.client_secret = client_secret if client_secret is not None else settings.TWITTER_CLIENT_SECRET
        self.base_url = (base_url or settings.TWITTER_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.TWITTER_HTTP_TIMEOUT_SECONDS
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    async def refresh_token(self, refresh_token: str) -> RefreshedToken:
        data = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self.client_id,
        }
        try:
            async with self._client() as client:
                response = await client.post(
                    TOKEN_PATH,
                    data=data,
                    auth=(self.client_id, self.client_secret),
                )
        except httpx.HTTPError as exc:
            raise ProviderRequestError(f"Token refresh request failed: {exc}") from exc

        if response.status_code in (400, 401, 403):
            raise ProviderAuthError(
                f"X rejected the refresh token: {_error_detail(response)}",
                response.status_code,
            )
        if response.status_code >= 400:
            raise ProviderRequestError(
                f"Token refresh failed with HTTP {response.status_code}: {_error_detail(response)}",
                response.status_code,
            )

        body = _json_body(response)
        access_token = body.get("access_token")
        new_refresh_token = body.get("refresh_token")
        if not access_token or not new_refresh_token:
            raise ProviderRequestError("Token refresh response is missing tokens.", response.status_code)

        expires = _expiry_timestamp(body, response.status_code)
        return RefreshedToken(token=str(access_token), refresh_token=str(new_refresh_token), expires=expires)

    async def create_post(self, access_token: str, text: str) -> Dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.post(
                    TWEETS_PATH,
                    json={"text": text},
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.HTTPError as exc:
            raise ProviderRequestError(f"Post request failed: {exc}") from exc

        if response.status_code in (401, 403):
            raise ProviderAuthError(f"X rejected the access token: {_error_detail(response)}", response.status_code)
        if response.status_code == 429:
            raise ProviderRequestError("X rate limit exceeded.", response.status_code)
        if response.status_code >= 400:
            raise ProviderRequestError(
                f"Post creation failed with HTTP {response.status_code}: {_error_detail(response)}",
                response.status_code,
            )
        return _json_body(response)


def get_twitter_api_client() -> TwitterApiClient:
    return HttpTwitterApiClient()
