"""HTTP transport for the Event Planner REST backend."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from .config import Settings, settings as default_settings

if TYPE_CHECKING:
    from .session import SessionState

# Use uvicorn's error logger so client messages share the server's log format.
logger = logging.getLogger("uvicorn.error")


class ApiError(Exception):
    """Raised when a backend call fails or answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        method: str | None = None,
        path: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.method = method
        self.path = path

    @property
    def is_network_error(self) -> bool:
        return self.status_code is None

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code}: {self.message}"


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("detail")
        if isinstance(message, str) and message:
            return message
    return response.reason_phrase or "request failed"


class ApiClient:
    """Thin JSON client that authenticates with the session's bearer token."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        session: "SessionState | None" = None,
        timeout: float | None = None,
        http: httpx.Client | None = None,
        settings: Settings | None = None,
    ) -> None:
        config = settings or default_settings
        self.session = session
        self._owns_http = http is None
        self._http = http or httpx.Client(
            base_url=base_url or config.api_base_url,
            timeout=timeout if timeout is not None else config.request_timeout_seconds,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.session.token if self.session else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = self._http.request(
                method, path, json=json, params=params, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(
                f"Unable to reach the event planner service: {exc}",
                method=method,
                path=path,
            ) from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning(
                "%s %s returned %s: %s", method, path, response.status_code, message
            )
            raise ApiError(
                message, status_code=response.status_code, method=method, path=path
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                "The event planner service returned invalid JSON",
                status_code=response.status_code,
                method=method,
                path=path,
            ) from exc

    def get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, *, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, *, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()
