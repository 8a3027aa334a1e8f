"""
Error taxonomy shared by the core and the HTTP boundary.

- ValidationError: required input missing (400, never retried)
- RemoteApiError: HubSpot answered with a non-2xx status (502, never retried)
Anything else is "unexpected" and becomes an opaque 500 at the boundary.
"""

from typing import Any


class ValidationError(ValueError):
    """Raised when a required input (e.g. phone) is missing."""
    pass


class RemoteApiError(RuntimeError):
    """Raised when HubSpot returns a non-success status. Carries the status and body for diagnostics."""

    def __init__(self, status_code: int, payload: Any = None, operation: str = ""):
        self.status_code = status_code
        self.payload = payload
        self.operation = operation
        super().__init__(f"HubSpot {operation or 'request'} failed with HTTP {status_code}")
