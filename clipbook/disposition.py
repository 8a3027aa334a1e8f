"""
Map the dialer's free-text disposition label to a HubSpot hs_call_status value.

Matching is case-sensitive substring matching in a fixed order. Downstream
HubSpot views filter on these exact status values, so keep the order as-is.
"""

from enum import Enum
from typing import Optional, Tuple


class CallStatus(str, Enum):
    COMPLETED = "COMPLETED"
    NO_ANSWER = "NO_ANSWER"


# (substring, status) checked top to bottom, first hit wins
DISPOSITION_RULES: Tuple[Tuple[str, CallStatus], ...] = (
    ("Connected", CallStatus.COMPLETED),
    ("Voicemail", CallStatus.COMPLETED),
    ("Callback", CallStatus.COMPLETED),
    ("No Answer", CallStatus.NO_ANSWER),
)


def map_status(label: Optional[str]) -> CallStatus:
    if not label:
        return CallStatus.NO_ANSWER
    for needle, status in DISPOSITION_RULES:
        if needle in label:
            return status
    return CallStatus.NO_ANSWER
