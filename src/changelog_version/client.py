# SPDX-License-Identifier: MIT
"""HTTP client for the changelog API endpoints the version selector reads."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from .models import TimezoneConfig, VersionListResponse

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:3000"


class ApiError(Exception):
    """Raised when the changelog API returns an unusable response."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ChangelogClient:
    """Async client for the project version list and time zone settings.

    The two high-level helpers never raise: a failed version fetch yields an
    empty list and a failed time zone fetch yields the UTC defaults, so an
    unreachable API only degrades the suggestions.

    Example:
        >>> async with ChangelogClient("https://changes.example.com") as client:
        ...     versions = await client.fetch_versions("proj_123")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "ChangelogClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_json(self, path: str) -> Any:
        """GET a path and decode its JSON body.

        Raises:
            ApiError: On transport failures, non-2xx responses or invalid JSON
        """
        try:
            response = await self._client.get(path)
        except httpx.TimeoutException as e:
            raise ApiError(f"Request to {path} timed out") from e
        except httpx.HTTPError as e:
            raise ApiError(f"Request to {path} failed: {e}") from e

        if response.status_code >= 400:
            try:
                detail = response.json().get("error", response.text)
            except (ValueError, AttributeError):
                detail = response.text
            raise ApiError(
                f"{path} returned {response.status_code}: {detail}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"{path} returned invalid JSON") from e

    async def fetch_versions(self, project_id: str) -> list[str]:
        """Fetch the versions used by a project's entries, newest first.

        Returns an empty list when the request or payload is unusable.
        """
        path = f"/api/projects/{project_id}/versions"
        try:
            payload = VersionListResponse.model_validate(await self.get_json(path))
        except ApiError as e:
            logger.warning("Could not fetch versions for project %s: %s", project_id, e)
            return []
        except ValidationError as e:
            logger.warning("Unexpected version list payload for project %s: %s", project_id, e)
            return []
        logger.debug("Fetched %d versions for project %s", len(payload.versions), project_id)
        return payload.versions

    async def fetch_timezone_config(self) -> TimezoneConfig:
        """Fetch the effective time zone and admin version templates.

        Returns the UTC defaults when the request or payload is unusable.
        """
        try:
            return TimezoneConfig.model_validate(await self.get_json("/api/config/timezone"))
        except ApiError as e:
            logger.warning("Could not fetch time zone settings: %s", e)
        except ValidationError as e:
            logger.warning("Unexpected time zone payload: %s", e)
        return TimezoneConfig()
