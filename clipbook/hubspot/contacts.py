"""
Resolve a dialed phone number to (at most) one HubSpot contact.

Strategies run in order and the first hit wins:
1) exact_match: contact `phone` EQ the canonical '+1XXXXXXXXXX'
2) token_match: `hs_searchable_calculated_phone_number` CONTAINS_TOKEN the last 10 digits
   (catches numbers stored as '415-555-0100', '(415) 555-0100 x12', ...)

This is a best-guess heuristic, not a guaranteed match. Each query is limit=1 and
we trust HubSpot's default ranking. Append to DEFAULT_STRATEGIES to add more.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from clipbook.errors import RemoteApiError
from clipbook.logging_setup import get_logger
from clipbook.phone import NormalizedPhone, normalize
from clipbook.utils import mask_phone

from .client import HubSpotClient, prop_filter

log = get_logger("contacts")


@dataclass
class ContactRef:
    id: str
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PhoneSearchStrategy:
    name: str
    property_name: str
    operator: str
    value_of: Callable[[NormalizedPhone], str]

    def filters(self, phone: NormalizedPhone) -> List[Dict[str, str]]:
        return [prop_filter(self.property_name, self.operator, self.value_of(phone))]


exact_match = PhoneSearchStrategy(
    name="exact_match",
    property_name="phone",
    operator="EQ",
    value_of=lambda p: p.canonical,
)

token_match = PhoneSearchStrategy(
    name="token_match",
    property_name="hs_searchable_calculated_phone_number",
    operator="CONTAINS_TOKEN",
    value_of=lambda p: p.comparison_key,
)

DEFAULT_STRATEGIES: Sequence[PhoneSearchStrategy] = (exact_match, token_match)


class ContactResolver:
    def __init__(
        self,
        hubspot: HubSpotClient,
        strategies: Sequence[PhoneSearchStrategy] = DEFAULT_STRATEGIES,
        redact_pii: bool = True,
    ):
        self._hubspot = hubspot
        self._strategies = tuple(strategies)
        self._redact_pii = redact_pii

    async def resolve(self, phone: str) -> Optional[ContactRef]:
        normalized = normalize(phone)
        for strategy in self._strategies:
            try:
                data = await self._hubspot.search_contacts(strategy.filters(normalized), limit=1)
            except RemoteApiError as e:
                # A failed lookup only costs us the association, not the call log.
                log.warning(
                    "contact_search_failed",
                    strategy=strategy.name,
                    status=e.status_code,
                    phone=mask_phone(normalized.canonical, self._redact_pii),
                )
                continue

            results = data.get("results") or []
            if (data.get("total") or 0) > 0 and results:
                top = results[0]
                contact = ContactRef(id=str(top["id"]), properties=top.get("properties") or {})
                log.info("contact_resolved", strategy=strategy.name, contact_id=contact.id)
                return contact

        log.info("contact_unresolved", phone=mask_phone(normalized.canonical, self._redact_pii))
        return None
