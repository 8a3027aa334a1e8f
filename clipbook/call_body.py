"""
Call body codec.

HubSpot calls have a single free-text body (hs_call_body) and no custom fields
we can use, so the dialer packs its structured fields into that body:

    Discussed pricing            <- notes, unlabeled, always first
    Disposition: Connected - DM
    Company: Acme
    Title: VP Sales
    LinkedIn: https://linkedin.com/in/jane

Reading it back, any line that starts with a known label is metadata and
everything else is notes.

Known ambiguity (format v1): a notes line that happens to start with one of the
labels (e.g. "Title: see deck") is read back as metadata. Changing that needs a
new format version, not a tweak to LinePrefixCodec.

Add a new format by implementing CallBodyCodec and registering it in CODECS.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Protocol, Tuple


@dataclass
class CallBodyFields:
    """Structured content of a call body. Absent and empty are both ''."""

    notes: str = ""
    disposition: str = ""
    company: str = ""
    title: str = ""
    linkedin: str = ""


class CallBodyCodec(Protocol):
    version: int

    def encode(self, fields: CallBodyFields) -> str:
        ...

    def decode(self, body: str | None) -> CallBodyFields:
        ...


class LinePrefixCodec:
    """Format v1: '<Label>: <value>' lines after the free-text notes."""

    version = 1

    # (prefix, attribute) in emission order; decode tests them in the same order
    LABELS: Tuple[Tuple[str, str], ...] = (
        ("Disposition: ", "disposition"),
        ("Company: ", "company"),
        ("Title: ", "title"),
        ("LinkedIn: ", "linkedin"),
    )

    def encode(self, fields: CallBodyFields) -> str:
        lines: List[str] = []
        if fields.notes:
            lines.append(fields.notes)
        for prefix, attr in self.LABELS:
            value = getattr(fields, attr)
            if value:
                lines.append(f"{prefix}{value}")
        return "\n".join(lines)

    def decode(self, body: str | None) -> CallBodyFields:
        fields = CallBodyFields()
        notes: List[str] = []
        for line in (body or "").split("\n"):
            for prefix, attr in self.LABELS:
                if line.startswith(prefix):
                    # repeated labels: last one wins
                    setattr(fields, attr, line[len(prefix):])
                    break
            else:
                notes.append(line)
        fields.notes = "\n".join(_trim_blank_lines(notes))
        return fields


def _trim_blank_lines(lines: List[str]) -> List[str]:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


CODECS: Dict[int, CallBodyCodec] = {
    LinePrefixCodec.version: LinePrefixCodec(),
}

CURRENT_VERSION = LinePrefixCodec.version


def get_codec(version: int = CURRENT_VERSION) -> CallBodyCodec:
    if version not in CODECS:
        raise ValueError(f"Unknown call body format version {version}")
    return CODECS[version]
