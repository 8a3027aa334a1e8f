"""
HubSpot CRM integration: thin async client plus contact resolution.
"""

from .client import HubSpotClient, contact_association, prop_filter
from .contacts import ContactRef, ContactResolver, PhoneSearchStrategy, DEFAULT_STRATEGIES

__all__ = [
    "HubSpotClient",
    "ContactRef",
    "ContactResolver",
    "PhoneSearchStrategy",
    "DEFAULT_STRATEGIES",
    "contact_association",
    "prop_filter",
]
