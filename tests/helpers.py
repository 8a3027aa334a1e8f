"""In-memory HubSpot stand-in built on httpx.MockTransport."""

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx

FIXED_NOW = "2024-05-01T12:00:00.000Z"


def search_page(*records: Dict[str, Any]) -> Dict[str, Any]:
    return {"total": len(records), "results": list(records)}


def call_record(call_id: str, **properties: Any) -> Dict[str, Any]:
    return {"id": call_id, "properties": properties}


class FakeHubSpot:
    """
    Records every request and answers from canned responses.

    contact_responses: keyed by the filter propertyName used in the contact search
    """

    def __init__(self):
        self.requests: List[Tuple[str, str, Dict[str, Any]]] = []
        self.contact_responses: Dict[str, Tuple[int, Any]] = {}
        self.create_response: Tuple[int, Any] = (201, {"id": "9001"})
        self.calls_search_response: Tuple[int, Any] = (200, search_page())

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else {}
        path = request.url.path
        self.requests.append((request.method, path, body))

        if path == "/crm/v3/objects/contacts/search":
            prop = body["filterGroups"][0]["filters"][0]["propertyName"]
            status, payload = self.contact_responses.get(prop, (200, search_page()))
        elif path == "/crm/v3/objects/calls":
            status, payload = self.create_response
        elif path == "/crm/v3/objects/calls/search":
            status, payload = self.calls_search_response
        else:
            status, payload = 404, {"message": f"unexpected path {path}"}

        if isinstance(payload, str):
            return httpx.Response(status, text=payload)
        return httpx.Response(status, json=payload)

    def paths(self) -> List[str]:
        return [path for _, path, _ in self.requests]

    def bodies_for(self, path: str) -> List[Dict[str, Any]]:
        return [body for _, p, body in self.requests if p == path]

    def created_call(self) -> Optional[Dict[str, Any]]:
        created = self.bodies_for("/crm/v3/objects/calls")
        return created[-1] if created else None
