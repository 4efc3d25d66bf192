"""Helpers for working with project contact addresses.

A contact is stored as a single string. Supported forms:
- ``@username``: a user or public chat handle
- ``+<digits>``: a phone number
- ``chat_id:<int>``: a raw chat id
- ``group:<name>``: a group resolved by name through the group resolver
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

GROUP_PREFIX = "group:"
CHAT_ID_PREFIX = "chat_id:"


@dataclass(frozen=True)
class ContactAddress:
    raw: str
    group_name: str = ""
    target: Union[int, str] = ""

    @property
    def is_group(self) -> bool:
        return bool(self.group_name)


def parse_contact(contact: str) -> ContactAddress:
    """Split a contact string into a group name or a direct adapter target."""

    raw = contact.strip()
    if raw.lower().startswith(GROUP_PREFIX):
        return ContactAddress(raw=raw, group_name=raw[len(GROUP_PREFIX):].strip())

    if raw.startswith(CHAT_ID_PREFIX):
        try:
            return ContactAddress(raw=raw, target=int(raw.split(CHAT_ID_PREFIX, 1)[1]))
        except ValueError:
            return ContactAddress(raw=raw, target=raw)

    if raw.startswith("@"):
        return ContactAddress(raw=raw, target=raw.lower())

    return ContactAddress(raw=raw, target=raw)


def is_valid_contact(contact: str) -> bool:
    """Return True when the contact has a usable target."""

    parsed = parse_contact(contact)
    if parsed.is_group:
        return True
    if isinstance(parsed.target, int):
        return True
    target = str(parsed.target)
    if target.startswith("@"):
        return len(target) > 1
    if target.startswith("+"):
        digits = target[1:].replace(" ", "").replace("-", "")
        return digits.isdigit()
    return bool(target)
