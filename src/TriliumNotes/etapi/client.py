"""Trilium ETAPI client.

Calls the ETAPI REST endpoints over HTTP, with retry/backoff for idempotent
requests. Parsing into domain models is handled by `etapi.parser`.
"""

from __future__ import annotations

import random
import time
from typing import Any, Mapping

import requests

from TriliumNotes.core.errors import EtapiError, NoteNotFoundError
from TriliumNotes.utils.log import log

DEFAULT_TIMEOUT = 30.0
MAX_ATTEMPTS = 4
BASE_PAUSE = 0.8
MAX_SLEEP = 8.0

RETRYABLE_STATUS = {429, 500, 502, 503, 504}
IDEMPOTENT_METHODS = frozenset({"GET", "PUT", "PATCH", "DELETE"})

HEADERS = {
    "User-Agent": "trilium-notes/0.1",
    "Accept": "application/json",
}


class EtapiClient:
    """Low-level HTTP client for the Trilium ETAPI.

    Responsible only for making requests and returning decoded payloads.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = MAX_ATTEMPTS,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client with a reusable HTTP session.

        Args:
            base_url: ETAPI base URL, e.g. ``http://localhost:8080/etapi``.
            token: ETAPI token sent in the ``Authorization`` header.
            timeout: Request timeout in seconds.
            max_attempts: Attempts for idempotent requests.
            session: Optional pre-built session.
        """
        if not base_url:
            raise ValueError("base_url cannot be empty")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self._session = session or requests.Session()
        self._session.headers.update(HEADERS)
        self._session.headers["Authorization"] = token

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> EtapiClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # notes

    def search_notes(self, params: Mapping[str, str]) -> dict[str, Any]:
        """Run ``GET /notes`` with already-compiled search parameters."""
        return self._json(self._request("GET", "/notes", params=dict(params)))

    def get_note(self, note_id: str) -> dict[str, Any]:
        return self._json(self._request("GET", f"/notes/{note_id}"))

    def get_note_content(self, note_id: str) -> str:
        return self._request("GET", f"/notes/{note_id}/content").text

    def put_note_content(self, note_id: str, content: str) -> None:
        self._request(
            "PUT",
            f"/notes/{note_id}/content",
            data=content.encode("utf-8"),
            headers={"Content-Type": "text/plain; charset=utf-8"},
        )

    def patch_note(self, note_id: str, changes: Mapping[str, Any]) -> dict[str, Any]:
        return self._json(self._request("PATCH", f"/notes/{note_id}", json=dict(changes)))

    def create_note(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Run ``POST /create-note``; the response holds ``note`` and ``branch``."""
        return self._json(self._request("POST", "/create-note", json=dict(payload)))

    def delete_note(self, note_id: str) -> None:
        self._request("DELETE", f"/notes/{note_id}")

    def create_revision(self, note_id: str) -> None:
        self._request("POST", f"/notes/{note_id}/revision")

    # attributes

    def create_attribute(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        return self._json(self._request("POST", "/attributes", json=dict(payload)))

    def patch_attribute(self, attribute_id: str, changes: Mapping[str, Any]) -> dict[str, Any]:
        return self._json(self._request("PATCH", f"/attributes/{attribute_id}", json=dict(changes)))

    def delete_attribute(self, attribute_id: str) -> None:
        self._request("DELETE", f"/attributes/{attribute_id}")

    # misc

    def app_info(self) -> dict[str, Any]:
        return self._json(self._request("GET", "/app-info"))

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Issue one request, retrying transient failures for idempotent methods.

        Raises:
            NoteNotFoundError: On HTTP 404.
            EtapiError: On other error statuses or exhausted retries.
        """
        url = f"{self.base_url}{path}"
        attempts = self.max_attempts if method in IDEMPOTENT_METHODS else 1
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                log.debug("ETAPI %s %s attempt %d/%d", method, path, attempt, attempts)
                response = self._session.request(method, url, timeout=self.timeout, **kwargs)
                if response.status_code in RETRYABLE_STATUS:
                    raise requests.HTTPError(f"HTTP {response.status_code}", response=response)
                break
            except (requests.Timeout, requests.ConnectionError, requests.HTTPError) as error:
                last_error = error
                if attempt < attempts:
                    delay = min(BASE_PAUSE * (2 ** (attempt - 1)) + random.uniform(0, 0.3), MAX_SLEEP)
                    log.debug("ETAPI retry attempt=%d/%d delay=%.2fs error=%s", attempt, attempts, delay, error)
                    time.sleep(delay)
        else:
            assert last_error is not None
            response = getattr(last_error, "response", None)
            if response is None:
                raise EtapiError(f"TriliumNext API error: {last_error}") from last_error

        if response.status_code >= 400:
            message = _error_message(response)
            if response.status_code == 404:
                raise NoteNotFoundError(f"TriliumNext API error: {message}", status_code=404)
            raise EtapiError(f"TriliumNext API error: {message}", status_code=response.status_code)
        return response

    @staticmethod
    def _json(response: requests.Response) -> dict[str, Any]:
        if not response.content:
            return {}
        payload = response.json()
        return payload if isinstance(payload, dict) else {"results": payload}


def _error_message(response: requests.Response) -> str:
    """Prefer the server's ``message`` field over the bare status line."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return f"HTTP {response.status_code}"
