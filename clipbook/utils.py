"""
Small utilities:
- PII masking for phone numbers before they reach the logs
- HubSpot timestamp helpers
"""

import re
from datetime import datetime, timezone

_NON_DIGIT_RE = re.compile(r"\D")


def mask_phone(phone: str | None, enabled: bool = True) -> str:
    """'+14155550100' -> '***0100' (unless redaction is switched off)."""
    if not phone:
        return ""
    if not enabled:
        return phone
    digits = _NON_DIGIT_RE.sub("", phone)
    return f"***{digits[-4:]}"


def utc_now_iso() -> str:
    # Same shape as JS Date.toISOString(): 2024-05-01T12:34:56.789Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_hubspot_timestamp(value: str | None) -> datetime:
    """Parse hs_timestamp; unknown/missing values sort as the oldest possible time."""
    if not value:
        return datetime.min.replace(tzinfo=timezone.utc)
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
