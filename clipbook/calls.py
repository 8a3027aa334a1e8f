# clipbook/calls.py
"""
CallRecordService: the three things the dialer asks of HubSpot.

- log_call(event)                 -> create a call (associated to a contact when we can find one)
- get_last_call_for_phone(phone)  -> newest call to that number, body returned RAW
- list_call_log()                 -> up to 100 calls created by the dialer, bodies decoded

Every call we create is titled "Clipbook Dialer — <name>", which is how
list_call_log finds ours again.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from clipbook.call_body import CallBodyCodec, CallBodyFields, get_codec
from clipbook.disposition import map_status
from clipbook.errors import ValidationError
from clipbook.hubspot.client import HubSpotClient, contact_association, prop_filter
from clipbook.hubspot.contacts import ContactResolver
from clipbook.logging_setup import get_logger
from clipbook.phone import normalize
from clipbook.utils import mask_phone, parse_hubspot_timestamp, utc_now_iso

TITLE_MARKER = "Clipbook Dialer"
TITLE_PREFIX = f"{TITLE_MARKER} — "
CALL_LOG_LIMIT = 100

HISTORY_PROPERTIES = [
    "hs_call_title",
    "hs_call_body",
    "hs_call_status",
    "hs_timestamp",
    "hs_call_duration",
    "hs_call_to_number",
]
LOG_PROPERTIES = HISTORY_PROPERTIES + ["hs_call_direction"]

log = get_logger("calls")


@dataclass
class CallEvent:
    """One finished call as reported by the dialer."""

    phone: Optional[str]
    name: Optional[str] = None
    company: Optional[str] = None
    title: Optional[str] = None
    disposition: Optional[str] = None
    notes: Optional[str] = None
    duration: Optional[int] = 0  # seconds
    linkedin: Optional[str] = None


@dataclass
class LoggedCall:
    remote_call_id: str
    contact_id: Optional[str] = None


@dataclass
class LastCall:
    found: bool
    call_id: Optional[str] = None
    status: Optional[str] = None
    title: Optional[str] = None
    body: Optional[str] = None
    date: Optional[str] = None
    duration: Optional[str] = None  # stored milliseconds, untouched


@dataclass
class CallLogEntry:
    id: Optional[str]
    name: str
    phone: str
    company: str
    title: str
    linkedin: str
    disp: str
    notes: str
    duration: int  # seconds
    date: Optional[str] = None


def display_duration(ms: Any) -> int:
    """Stored milliseconds -> whole seconds, rounding halves up. Missing/garbage -> 0."""
    if ms in (None, ""):
        return 0
    try:
        value = float(ms)
    except (TypeError, ValueError):
        return 0
    if math.isnan(value) or math.isinf(value):
        return 0
    return int(math.floor(value / 1000 + 0.5))


def _record_id(record: Dict[str, Any]) -> Optional[str]:
    # a record without an id stays None rather than becoming "None"
    rid = record.get("id")
    return None if rid is None else str(rid)


class CallRecordService:
    def __init__(
        self,
        hubspot: HubSpotClient,
        resolver: Optional[ContactResolver] = None,
        codec: Optional[CallBodyCodec] = None,
        clock: Callable[[], str] = utc_now_iso,
        redact_pii: bool = True,
    ):
        self._hubspot = hubspot
        self._resolver = resolver or ContactResolver(hubspot, redact_pii=redact_pii)
        self._redact_pii = redact_pii
        self._codec = codec or get_codec()
        self._clock = clock

    def build_call_properties(self, event: CallEvent) -> Dict[str, str]:
        """The hs_* properties for a new call object (no HubSpot I/O)."""
        phone = normalize(event.phone)
        body = self._codec.encode(
            CallBodyFields(
                notes=event.notes or "",
                disposition=event.disposition or "",
                company=event.company or "",
                title=event.title or "",
                linkedin=event.linkedin or "",
            )
        )
        return {
            "hs_timestamp": self._clock(),
            "hs_call_title": f"{TITLE_PREFIX}{event.name or 'Unknown'}",
            "hs_call_body": body,
            "hs_call_duration": str((event.duration or 0) * 1000),
            "hs_call_to_number": phone.canonical,
            "hs_call_direction": "OUTBOUND",
            "hs_call_status": map_status(event.disposition).value,
        }

    async def log_call(self, event: CallEvent) -> LoggedCall:
        if not event.phone:
            raise ValidationError("phone is required")
        if event.duration is not None and event.duration < 0:
            raise ValidationError("duration must be >= 0")

        properties = self.build_call_properties(event)
        contact = await self._resolver.resolve(event.phone)
        associations = [contact_association(contact.id)] if contact else None

        data = await self._hubspot.create_call(properties, associations)

        logged = LoggedCall(remote_call_id=str(data["id"]), contact_id=contact.id if contact else None)
        log.info(
            "call_logged",
            call_id=logged.remote_call_id,
            contact_id=logged.contact_id,
            status=properties["hs_call_status"],
            phone=mask_phone(properties["hs_call_to_number"], self._redact_pii),
        )
        return logged

    async def get_last_call_for_phone(self, phone: Optional[str]) -> LastCall:
        if not phone:
            raise ValidationError("phone query param is required")

        canonical = normalize(phone).canonical
        data = await self._hubspot.search_calls(
            [prop_filter("hs_call_to_number", "EQ", canonical)],
            properties=HISTORY_PROPERTIES,
            limit=1,
        )

        results = data.get("results") or []
        if not data.get("total") or not results:
            return LastCall(found=False)

        top = results[0]
        p = top.get("properties") or {}
        return LastCall(
            found=True,
            call_id=_record_id(top),
            status=p.get("hs_call_status"),
            title=p.get("hs_call_title"),
            body=p.get("hs_call_body"),
            date=p.get("hs_timestamp"),
            duration=p.get("hs_call_duration"),
        )

    async def list_call_log(self) -> List[CallLogEntry]:
        data = await self._hubspot.search_calls(
            [
                prop_filter("hs_call_direction", "EQ", "OUTBOUND"),
                prop_filter("hs_call_title", "CONTAINS_TOKEN", TITLE_MARKER),
            ],
            properties=LOG_PROPERTIES,
            limit=CALL_LOG_LIMIT,
        )

        entries = [self._to_log_entry(c) for c in (data.get("results") or [])]
        # HubSpot already sorts; keep the newest-first / max-100 guarantee even if it doesn't
        entries.sort(key=lambda e: parse_hubspot_timestamp(e.date), reverse=True)
        return entries[:CALL_LOG_LIMIT]

    def _to_log_entry(self, record: Dict[str, Any]) -> CallLogEntry:
        p = record.get("properties") or {}
        fields = self._codec.decode(p.get("hs_call_body"))
        return CallLogEntry(
            id=_record_id(record),
            name=(p.get("hs_call_title") or "").replace(TITLE_PREFIX, "", 1),
            phone=p.get("hs_call_to_number") or "",
            company=fields.company,
            title=fields.title,
            linkedin=fields.linkedin,
            disp=fields.disposition or p.get("hs_call_status") or "",
            notes=fields.notes,
            duration=display_duration(p.get("hs_call_duration")),
            date=p.get("hs_timestamp"),
        )
