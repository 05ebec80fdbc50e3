from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from ..models.bulk_result import BulkResult
from ..models.employee_record import Branch, MappedRecord, Role
from .session import ApiSession

"""HTTP client for the HR backend endpoints used by bulk import.

Endpoints:
- GET  /employee/branches?campus=<campus>  -> {"branches": [...]}
- GET  /hr/roles?campus=<campus>           -> [...] or {"roles": [...]}
- POST /hr/employees/bulk {"employees": [...]} -> {"results": [...]}

Transport failures, malformed URLs and non-2xx answers raise ApiError; 401 raises
AuthenticationError and clears the session token.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ApiError",
    "AuthenticationError",
    "HRApiClient",
    "DEFAULT_TIMEOUT",
]

DEFAULT_TIMEOUT = 10.0

BRANCHES_PATH = "/employee/branches"
ROLES_PATH = "/hr/roles"
BULK_REGISTER_PATH = "/hr/employees/bulk"


class ApiError(Exception):
    """Raised when a backend request fails or returns an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class AuthenticationError(ApiError):
    """Raised on HTTP 401; the session token has been cleared."""


class HRApiClient:
    """Synchronous httpx client bound to one ApiSession."""

    def __init__(
        self,
        session: ApiSession,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.session = session
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HRApiClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self.session.url(path)
        headers = {"Content-Type": "application/json", **self.session.auth_headers()}
        logger.debug(f"api request method={method} url={url}")
        try:
            response = self._client.request(method, url, headers=headers, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning(f"api request failed method={method} url={url}: {exc}")
            raise ApiError(f"{method} {path} failed: {exc}") from exc

        if response.status_code == 401:
            self.session.clear()
            raise AuthenticationError("unauthorized: session token rejected", status_code=401)

        try:
            payload = response.json() if response.content else None
        except ValueError:
            payload = None

        if response.is_error:
            message = payload.get("msg") if isinstance(payload, dict) else None
            raise ApiError(
                message or f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if payload is None:
            raise ApiError(f"{method} {path} returned a non-JSON response", status_code=response.status_code)
        logger.debug(f"api response status={response.status_code} url={url}")
        return payload

    def fetch_branches(self, campus: str) -> list[Branch]:
        """Active branches of ``campus`` (inactive ones are dropped)."""
        payload = self._request("GET", BRANCHES_PATH, params={"campus": campus})
        raw = payload.get("branches") if isinstance(payload, dict) else payload
        branches = [Branch.from_api(b) for b in raw or [] if isinstance(b, dict)]
        return [b for b in branches if b.is_active]

    def fetch_roles(self, campus: str) -> list[Role]:
        payload = self._request("GET", ROLES_PATH, params={"campus": campus})
        raw = payload.get("roles") if isinstance(payload, dict) else payload
        return [Role.from_api(r) for r in raw or [] if isinstance(r, dict)]

    def bulk_register(self, records: Sequence[MappedRecord]) -> list[BulkResult]:
        """Submit records in one batch call; returns the per-row results."""
        body = {"employees": [r.to_payload() for r in records]}
        payload = self._request("POST", BULK_REGISTER_PATH, json=body)
        raw = payload.get("results") if isinstance(payload, dict) else None
        if raw is None:
            raise ApiError(f"POST {BULK_REGISTER_PATH} response has no 'results'")
        return [BulkResult.from_api(r) for r in raw if isinstance(r, dict)]
