"""HTTP client for the onboarding project store API."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from shared.contracts.dto.project import (
    IMMUTABLE_KEYS,
    ErrorCode,
    ProjectDTO,
    ProjectSummaryDTO,
    ShareLinkDTO,
)
from shared.errors import (
    InvalidDocumentError,
    ProjectNotFoundError,
    ProjectStoreError,
    StoreUnreachableError,
)

logger = structlog.get_logger(__name__)

UNAVAILABLE_STATUSES = {
    httpx.codes.BAD_GATEWAY,
    httpx.codes.SERVICE_UNAVAILABLE,
    httpx.codes.GATEWAY_TIMEOUT,
}


def _error_code(resp: httpx.Response) -> str | None:
    try:
        detail = resp.json().get("detail")
    except (ValueError, AttributeError):
        return None
    if isinstance(detail, dict):
        return detail.get("code")
    return None


class RemoteProjectStore:
    """Project store backed by the onboarding API.

    Every call is bounded by ``timeout``; network failures, timeouts and
    gateway errors surface as StoreUnreachableError so callers can fall back.
    """

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        if self.base_url.endswith("/api"):
            raise RuntimeError("API base URL must not include /api")
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                follow_redirects=True,
                timeout=self.timeout,
            )
        return self._client

    def _api_path(self, path: str) -> str:
        cleaned = path.lstrip("/")
        if cleaned.startswith("api/"):
            raise ValueError("API path should not include /api prefix")
        return f"/api/{cleaned}"

    @staticmethod
    def _project_path(project_id: str, suffix: str = "") -> str:
        return f"projects/{quote(project_id, safe='')}{suffix}"

    async def _request(
        self, method: str, path: str, project_id: str | None = None, **kwargs
    ) -> httpx.Response:
        client = await self._get_client()
        try:
            resp = await client.request(method, self._api_path(path), **kwargs)
        except httpx.TimeoutException as e:
            raise StoreUnreachableError(f"{method} {path} timed out after {self.timeout}s") from e
        except httpx.TransportError as e:
            raise StoreUnreachableError(f"{method} {path} failed: {e}") from e

        if resp.is_success:
            return resp

        code = _error_code(resp)
        if resp.status_code == httpx.codes.NOT_FOUND and code == ErrorCode.NOT_FOUND.value:
            raise ProjectNotFoundError(project_id or "")
        if resp.status_code == httpx.codes.NOT_FOUND or resp.status_code in UNAVAILABLE_STATUSES:
            # A 404 without our error code means the endpoint itself is missing.
            raise StoreUnreachableError(f"{method} {path} returned {resp.status_code}")
        if code == ErrorCode.INVALID_DOCUMENT.value:
            raise InvalidDocumentError(project_id or "", "remote store reported corrupt data")
        raise ProjectStoreError(f"{method} {path} returned {resp.status_code}: {resp.text}")

    async def create(self) -> ProjectDTO:
        resp = await self._request("POST", "projects/")
        return ProjectDTO.from_document(resp.json())

    async def get(self, project_id: str) -> ProjectDTO:
        resp = await self._request("GET", self._project_path(project_id), project_id=project_id)
        return ProjectDTO.from_document(resp.json())

    async def list(self) -> list[ProjectSummaryDTO]:
        resp = await self._request("GET", "projects/")
        return [ProjectSummaryDTO.model_validate(item) for item in resp.json()]

    async def save(self, project: ProjectDTO, keys: Iterable[str] | None = None) -> ProjectDTO:
        """Send a partial update containing only ``keys`` (all keys when None)."""
        resp = await self._request(
            "PUT",
            self._project_path(project.id),
            project_id=project.id,
            json=update_payload(project, keys),
        )
        return ProjectDTO.from_document(resp.json())

    async def delete(self, project_id: str) -> None:
        await self._request("DELETE", self._project_path(project_id), project_id=project_id)

    async def share(self, project_id: str) -> str:
        resp = await self._request(
            "POST", self._project_path(project_id, "/share"), project_id=project_id
        )
        return ShareLinkDTO.model_validate(resp.json()).shareable_link

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def update_payload(project: ProjectDTO, keys: Iterable[str] | None = None) -> dict[str, Any]:
    """Body for a partial update: the selected top-level keys of the wire document."""
    document = project.to_document()
    if keys is None:
        selected = [key for key in document if key not in IMMUTABLE_KEYS]
    else:
        selected = [key for key in keys if key in document and key not in IMMUTABLE_KEYS]
    payload = {key: document[key] for key in selected}
    logger.debug("update_payload_built", project_id=project.id, keys=selected)
    return payload
