"""
Phone normalization.

canonical       -> '+<digits>' used for exact HubSpot filters and stored as hs_call_to_number
comparison_key  -> last 10 digits, used for the fuzzy CONTAINS_TOKEN contact lookup

Examples:
    (415) 555-0100   -> +14155550100 / 4155550100
    1-415-555-0100   -> +14155550100 / 4155550100
    +44 20 7946 0958 -> +442079460958 / 2079460958
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_NON_DIGIT_RE = re.compile(r"\D")


@dataclass(frozen=True)
class NormalizedPhone:
    canonical: str
    comparison_key: str


def normalize(raw: str | None) -> NormalizedPhone:
    """
    Never raises. Garbage in gives a degenerate '+' (or '+<few digits>') out,
    and callers have to live with that.
    """
    digits = _NON_DIGIT_RE.sub("", raw or "")
    if len(digits) == 10:
        canonical = f"+1{digits}"  # assume US/NANP
    else:
        # 11 digits with a leading 1 is already complete; anything else is passed through unvalidated
        canonical = f"+{digits}"
    return NormalizedPhone(canonical=canonical, comparison_key=canonical[1:][-10:])
