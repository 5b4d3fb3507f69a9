from __future__ import annotations

import logging
from typing import Any

import httpx

from washbook.application.ports.geocoder import GeocoderPort


def format_address(data: dict[str, Any]) -> str | None:
    """Street-level address from a Nominatim jsonv2 response."""
    a = data.get("address") or {}
    parts = [
        a.get("road"),
        a.get("house_number"),
        a.get("neighbourhood") or a.get("quarter") or a.get("suburb"),
        a.get("city") or a.get("town") or a.get("village"),
        a.get("state"),
        a.get("postcode"),
        a.get("country"),
    ]
    formatted = ", ".join(str(p) for p in parts if p)
    return formatted or data.get("display_name") or None


class NominatimGeocoder(GeocoderPort):
    def __init__(
        self,
        base_url: str,
        user_agent: str,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent
        self._client = client or httpx.Client(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def reverse(self, latitude: float, longitude: float) -> str | None:
        try:
            response = self._client.get(
                f"{self._base_url}/reverse",
                params={
                    "format": "jsonv2",
                    "lat": latitude,
                    "lon": longitude,
                    "addressdetails": 1,
                },
                headers={"Accept": "application/json", "User-Agent": self._user_agent},
            )
            if response.status_code >= 400:
                self._logger.warning("Reverse geocoding rejected", extra={"status": response.status_code})
                return None
            return format_address(response.json())
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error("Error reverse geocoding", extra={"error": str(e)})
            return None
