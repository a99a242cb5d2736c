"""Input validation helpers."""

import re
from collections.abc import Iterable
from typing import Any

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def is_valid_email(email: str) -> bool:
    """Check an address has the ``local@domain.tld`` shape.

    Only the shape is checked: no whitespace, exactly one ``@`` and a
    dot in the domain part.
    """
    return EMAIL_PATTERN.fullmatch(email) is not None


def has_fields(payload: Any, fields: Iterable[str]) -> bool:
    """Check a payload is a mapping with non-empty string values for ``fields``."""
    if not isinstance(payload, dict):
        return False
    return all(isinstance(payload.get(name), str) and payload[name] for name in fields)
