# clipbook/hubspot/client.py
"""
HubSpot CRM v3 client (async, via HTTP).

Docs:
- Search:  https://developers.hubspot.com/docs/api/crm/search
- Calls:   https://developers.hubspot.com/docs/api/crm/calls

This module:
- Builds an httpx.AsyncClient with the Bearer token from Settings.
- Exposes the three operations the dialer needs: contact search, call create, call search.
- Raises RemoteApiError (status + body) on any non-2xx. No retries: failures go straight back to the caller.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

import httpx

from clipbook.config import Settings
from clipbook.errors import RemoteApiError
from clipbook.logging_setup import get_logger
from clipbook.observability import HUBSPOT_LATENCY, HUBSPOT_REQUESTS, tracer

CONTACTS_SEARCH_PATH = "/crm/v3/objects/contacts/search"
CALLS_PATH = "/crm/v3/objects/calls"
CALLS_SEARCH_PATH = "/crm/v3/objects/calls/search"

# HubSpot-defined association type: call -> contact
CALL_TO_CONTACT_ASSOCIATION_TYPE_ID = 194

log = get_logger("hubspot")


def prop_filter(property_name: str, operator: str, value: str) -> Dict[str, str]:
    return {"propertyName": property_name, "operator": operator, "value": value}


def contact_association(contact_id: str) -> Dict[str, Any]:
    return {
        "to": {"id": contact_id},
        "types": [
            {
                "associationCategory": "HUBSPOT_DEFINED",
                "associationTypeId": CALL_TO_CONTACT_ASSOCIATION_TYPE_ID,
            }
        ],
    }


class HubSpotClient:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._settings = settings
        # tests inject httpx.MockTransport here
        self._transport = transport

    def _http(self) -> httpx.AsyncClient:
        headers = {
            "Authorization": f"Bearer {self._settings.HUBSPOT_API_KEY or ''}",
            "Content-Type": "application/json",
        }
        return httpx.AsyncClient(
            base_url=self._settings.HUBSPOT_BASE_URL.rstrip("/"),
            headers=headers,
            timeout=self._settings.HUBSPOT_TIMEOUT_S,
            transport=self._transport,
        )

    async def _post(self, operation: str, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        t0 = time.perf_counter()
        with tracer.start_as_current_span(f"hubspot.{operation}"):
            async with self._http() as client:
                resp = await client.post(path, json=payload)
        elapsed = time.perf_counter() - t0

        HUBSPOT_REQUESTS.labels(operation=operation, status=str(resp.status_code)).inc()
        HUBSPOT_LATENCY.labels(operation=operation).observe(elapsed)
        log.info("hubspot_request", operation=operation, status=resp.status_code, elapsed_ms=int(elapsed * 1000))

        if resp.is_success:
            return resp.json()

        try:
            body: Any = resp.json()
        except ValueError:
            body = resp.text[:1000]
        log.error("hubspot_error", operation=operation, status=resp.status_code, details=body)
        raise RemoteApiError(resp.status_code, body, operation=operation)

    async def search_contacts(
        self,
        filters: List[Dict[str, str]],
        *,
        limit: int = 1,
    ) -> Dict[str, Any]:
        payload = {"filterGroups": [{"filters": filters}], "limit": limit}
        return await self._post("contacts.search", CONTACTS_SEARCH_PATH, payload)

    async def create_call(
        self,
        properties: Dict[str, str],
        associations: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"properties": properties}
        if associations:
            payload["associations"] = associations
        return await self._post("calls.create", CALLS_PATH, payload)

    async def search_calls(
        self,
        filters: List[Dict[str, str]],
        *,
        properties: List[str],
        limit: int,
        sort_by: str = "hs_timestamp",
        descending: bool = True,
    ) -> Dict[str, Any]:
        payload = {
            "filterGroups": [{"filters": filters}],
            "sorts": [{"propertyName": sort_by, "direction": "DESCENDING" if descending else "ASCENDING"}],
            "properties": properties,
            "limit": limit,
        }
        return await self._post("calls.search", CALLS_SEARCH_PATH, payload)
