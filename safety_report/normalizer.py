"""Observation normalization: canonical risk levels, field defaults, and date lookup."""

import re
from datetime import datetime, timezone
from typing import Any, Mapping

from dateutil import parser as date_parser

RISK_LEVELS = ("HIGH", "MEDIUM", "LOW")
DEFAULT_RISK = "MEDIUM"
UNKNOWN_CATEGORY = "Unknown"
UNKNOWN_LOCATION = "Unknown location"
UNKNOWN_STATUS = "Unknown"
SITE_PLACEHOLDER = "Not specified"

# Date may arrive under any of these keys depending on the export tool
DATE_KEYS = ("date", "observationDate", "created_at", "created", "timestamp")

# Fills date parts missing from partial dates such as "March 2025"
DATE_DEFAULT = datetime(1970, 1, 1)

# Unix epoch seconds (10 digits) or milliseconds (13 digits)
EPOCH_PATTERN = re.compile(r"\d{9,13}(\.\d+)?")
EPOCH_MILLIS_THRESHOLD = 1e11


def _clean(value: Any) -> str:
    """String form of a field value, stripped; empty for None."""
    if value is None:
        return ""
    return str(value).strip()


def _literal(value: Any, default: str) -> str:
    """Field value as given; the default only replaces None or an empty string."""
    if value is None or value == "":
        return default
    return str(value)


def normalize_risk(value: Any) -> str:
    """Upper-case risk level; missing or unrecognized values map to MEDIUM."""
    risk = _clean(value).upper()
    if risk not in RISK_LEVELS:
        return DEFAULT_RISK
    return risk


def get_date(obs: Mapping[str, Any]) -> str:
    """First non-empty date-like field of an observation, or empty string."""
    for key in DATE_KEYS:
        value = _clean(obs.get(key))
        if value:
            return value
    return ""


def parse_date(value: Any) -> datetime | None:
    """
    Parse a date-like value into a naive UTC datetime. None when unparseable.
    Numeric values of 9 to 13 digits are Unix epochs (seconds, or milliseconds
    above 1e11); missing parts of partial dates come from 1970-01-01.
    """
    text = _clean(value)
    if not text:
        return None
    if EPOCH_PATTERN.fullmatch(text):
        seconds = float(text)
        if seconds > EPOCH_MILLIS_THRESHOLD:
            seconds /= 1000
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)
        except (ValueError, OverflowError, OSError):
            return None
    try:
        parsed = date_parser.parse(text, default=DATE_DEFAULT)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def normalize_observation(raw: Any, index: int = 0) -> dict[str, Any]:
    """
    Return a new dict with canonical fields. Never raises: non-mapping entries
    are treated as an empty observation and every missing field is defaulted.
    """
    obs: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
    return {
        "index": index,
        "risk": normalize_risk(obs.get("risk")),
        "category": _literal(obs.get("category"), UNKNOWN_CATEGORY),
        "location": _literal(obs.get("location"), UNKNOWN_LOCATION),
        "status": _clean(obs.get("status")) or UNKNOWN_STATUS,
        "description": _clean(obs.get("description")),
        "date": get_date(obs),
    }


def normalize_observations(raw_observations: list[Any]) -> list[dict[str, Any]]:
    return [normalize_observation(obs, i) for i, obs in enumerate(raw_observations)]


def normalize_site_info(site_info: Mapping[str, Any] | None) -> dict[str, str]:
    """Site metadata with placeholders for anything missing."""
    info: Mapping[str, Any] = site_info if isinstance(site_info, Mapping) else {}
    return {
        "siteName": _clean(info.get("siteName")) or SITE_PLACEHOLDER,
        "inspectorName": _clean(info.get("inspectorName")) or SITE_PLACEHOLDER,
        "inspectionDate": _clean(info.get("inspectionDate")) or SITE_PLACEHOLDER,
    }
