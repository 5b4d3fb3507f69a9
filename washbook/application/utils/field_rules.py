from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from washbook.domain.entities.booking_draft import Coordinates, VehicleType

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

MIN_VEHICLE_YEAR = 1900


def parse_iso_date(value: Any) -> str | None:
    """Normalized YYYY-MM-DD string, or None when the value is empty or not a calendar date."""
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError:
        return None


def parse_hhmm(value: Any) -> str | None:
    """Normalized zero-padded HH:MM, or None."""
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def parse_vehicle_type(value: Any) -> VehicleType | None:
    if isinstance(value, VehicleType):
        return value
    if not isinstance(value, str):
        return None
    try:
        return VehicleType(value.strip())
    except ValueError:
        return None


def is_valid_vehicle_year(year: Any, today: date | None = None) -> bool:
    if isinstance(year, bool) or not isinstance(year, int):
        return False
    current_year = (today or datetime.now().date()).year
    return MIN_VEHICLE_YEAR <= year <= current_year + 1


def parse_coordinates(value: Any) -> Coordinates | None:
    """Coordinates from a Coordinates, a mapping or a (lat, lon) pair; None when out of range or malformed."""
    if isinstance(value, Coordinates):
        latitude, longitude = value.latitude, value.longitude
    elif isinstance(value, dict):
        latitude, longitude = value.get("latitude"), value.get("longitude")
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        latitude, longitude = value
    else:
        return None
    try:
        latitude, longitude = float(latitude), float(longitude)
    except (TypeError, ValueError):
        return None
    if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
        return None
    return Coordinates(latitude=latitude, longitude=longitude)


def clean_optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
