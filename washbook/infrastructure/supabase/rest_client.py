from __future__ import annotations

import logging
from typing import Any

import httpx

from washbook.application.exceptions import BackendError

NETWORK_ERROR_MESSAGE = "Network connection error. Please check your internet connection."

# PostgREST / Postgres codes that get a friendlier message
_FRIENDLY_MESSAGES = {
    "PGRST116": "No data found",
    "42501": "Access denied. Please check your permissions.",
    "PGRST301": "Database schema error. Please contact support.",
}


def translate_error(status_code: int, body: Any) -> BackendError:
    code = None
    message = None
    if isinstance(body, dict):
        code = body.get("code")
        message = body.get("message") or body.get("error_description") or body.get("error")
    if code in _FRIENDLY_MESSAGES:
        message = _FRIENDLY_MESSAGES[code]
    return BackendError(message or "An unexpected error occurred", code=code, status_code=status_code)


class SupabaseRestClient:
    """Minimal PostgREST client for the tables the booking flow writes and reads."""

    def __init__(
        self,
        url: str,
        api_key: str,
        access_token: str | None = None,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not url or not api_key:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY are required for the Supabase backend")
        self._rest_url = f"{url.rstrip('/')}/rest/v1"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {access_token or api_key}",
        }
        self._client = client or httpx.Client(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def insert_one(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a row and return it as stored (ids and defaults filled in by Postgres)."""
        response = self._request(
            "POST",
            table,
            json=row,
            headers={
                "Prefer": "return=representation",
                "Accept": "application/vnd.pgrst.object+json",
            },
        )
        return response.json()

    def select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        response = self._request("GET", table, params=params)
        data = response.json()
        return data if isinstance(data, list) else [data]

    def _request(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        url = f"{self._rest_url}/{table}"
        try:
            response = self._client.request(
                method,
                url,
                params=params,
                json=json,
                headers={**self._headers, **(headers or {})},
            )
        except httpx.HTTPError as e:
            self._logger.error("Supabase request failed", extra={"table": table, "error": str(e)})
            raise BackendError(NETWORK_ERROR_MESSAGE, code="NETWORK_ERROR") from e

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {"message": response.text}
            error = translate_error(response.status_code, body)
            self._logger.error(
                "Supabase request rejected",
                extra={
                    "table": table,
                    "status": response.status_code,
                    "error_code": error.code,
                    "error": error.message,
                },
            )
            raise error
        return response
