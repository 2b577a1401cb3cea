"""Shared plumbing for Google API clients.

Token refresh and authenticated JSON requests over a shared
:class:`httpx.AsyncClient`. Every transport or provider failure is raised as
:class:`~acc_workflows.exceptions.NotificationClientError`.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from acc_workflows.exceptions import NotificationClientError, TokenRefreshError

if TYPE_CHECKING:
    from acc_workflows.core.models import Credentials
    from acc_workflows.settings import Settings

__all__ = ["GoogleApiClient", "GoogleTokenRefresher", "provider_error_message"]

logger = logging.getLogger(__name__)

ClientT = TypeVar("ClientT", bound="GoogleApiClient")

DEFAULT_TOKEN_URL = "https://oauth2.googleapis.com/token"
DEFAULT_REFRESH_BUFFER_SECONDS = 300


def provider_error_message(response: httpx.Response) -> str:
    """Extract a readable message from a Google error response.

    API endpoints answer ``{"error": {"message": ...}}``; the token endpoint
    answers ``{"error": "invalid_grant", "error_description": ...}``.
    """
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        return str(error.get("message") or f"HTTP {response.status_code}")
    if isinstance(error, str):
        return str(payload.get("error_description") or error)
    return f"HTTP {response.status_code}"


class GoogleTokenRefresher:
    """Exchange refresh tokens for new access tokens.

    Attributes:
        http: Shared HTTP client.
        client_id: OAuth client ID.
        client_secret: OAuth client secret.
        token_url: Token endpoint.
        buffer_seconds: Tokens expiring within this window are refreshed before use.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        token_url: str = DEFAULT_TOKEN_URL,
        buffer_seconds: int = DEFAULT_REFRESH_BUFFER_SECONDS,
    ) -> None:
        self.http = http
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.buffer_seconds = buffer_seconds

    async def refresh(self, credentials: Credentials) -> Credentials:
        """Obtain a new access token for ``credentials``.

        Args:
            credentials: Credentials carrying a refresh token.

        Returns:
            A copy carrying the new access token and expiry.

        Raises:
            TokenRefreshError: If the token endpoint rejects the request, is unreachable
                or answers without an access token.
        """
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": credentials.refresh_token,
            "grant_type": "refresh_token",
        }
        try:
            response = await self.http.post(self.token_url, data=data)
        except httpx.HTTPError as e:
            raise TokenRefreshError("google", f"Failed to refresh token: {e}") from e

        if response.is_error:
            message = provider_error_message(response)
            logger.warning("Token refresh for connector %s failed: %s", credentials.connector_id, message)
            raise TokenRefreshError("google", f"Failed to refresh token: {message}", response.status_code)

        try:
            payload = response.json()
            access_token = payload["access_token"]
            expires_in = int(payload.get("expires_in", 3600))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise TokenRefreshError("google", "Failed to refresh token: malformed token response") from e

        logger.info("Refreshed access token for connector %s", credentials.connector_id)
        return credentials.refreshed(
            access_token=access_token,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
            refresh_token=payload.get("refresh_token"),
        )

    async def ensure_valid(self, credentials: Credentials) -> tuple[Credentials, Credentials | None]:
        """Refresh ``credentials`` if the access token is about to expire.

        Returns:
            The credentials to use, and the refreshed credentials when a refresh
            happened (None otherwise).
        """
        if not credentials.expires_within(self.buffer_seconds):
            return credentials, None
        refreshed = await self.refresh(credentials)
        return refreshed, refreshed


class GoogleApiClient:
    """Base class for authenticated Google REST API clients.

    Subclasses set :attr:`provider` and :attr:`base_url` and call :meth:`_request`.

    Attributes:
        provider: Provider name used in errors and logs.
        base_url: API root URL.
    """

    provider: str = "google"

    def __init__(
        self,
        refresher: GoogleTokenRefresher,
        base_url: str,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.refresher = refresher
        self.base_url = base_url.rstrip("/")
        self.http = http or refresher.http

    @classmethod
    def from_settings(cls: type[ClientT], settings: Settings, http: httpx.AsyncClient) -> ClientT:
        """Build a client from application settings."""
        refresher = GoogleTokenRefresher(
            http,
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret.get_secret_value(),
            token_url=settings.google_token_url,
            buffer_seconds=settings.token_refresh_buffer_seconds,
        )
        return cls(refresher, cls._base_url_from(settings), http)

    @classmethod
    def _base_url_from(cls, settings: Settings) -> str:
        raise NotImplementedError

    async def _request(
        self,
        method: str,
        path: str,
        credentials: Credentials,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> tuple[dict[str, Any], Credentials | None]:
        """Send an authenticated request, refreshing the token first if needed.

        Returns:
            The decoded JSON body and the refreshed credentials, if any.

        Raises:
            NotificationClientError: On transport errors, non-2xx responses and bodies
                that are not a JSON object.
        """
        credentials, refreshed = await self.refresher.ensure_valid(credentials)
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = await self.http.request(
                method,
                url,
                headers={"Authorization": f"Bearer {credentials.access_token}"},
                json=json,
                params=params,
            )
        except httpx.HTTPError as e:
            raise NotificationClientError(self.provider, f"{self.provider} request failed: {e}") from e

        if response.is_error:
            raise NotificationClientError(self.provider, provider_error_message(response), response.status_code)

        if not response.content:
            return {}, refreshed
        try:
            payload = response.json()
        except ValueError as e:
            raise NotificationClientError(
                self.provider, f"{self.provider} returned an unreadable response", response.status_code
            ) from e
        if not isinstance(payload, dict):
            raise NotificationClientError(
                self.provider, f"{self.provider} returned an unexpected response", response.status_code
            )
        return payload, refreshed
