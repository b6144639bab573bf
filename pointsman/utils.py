"""Pointsman helpers."""

import re

_PHONE_SEPARATORS = re.compile(r"[\s\-.()+]")


def normalize_phone(value: str) -> str:
    """
    Normalize a phone number for storage and exact-match lookups.

    Strips surrounding whitespace, the usual separators (spaces, dashes,
    dots, parentheses) and the "+" international prefix, so stored numbers
    are plain digits and match the phone search.

    >>> normalize_phone(" (555) 123-4567 ")
    '5551234567'
    >>> normalize_phone("+1 555 222 3333")
    '15552223333'
    """
    if not value:
        return ""
    return _PHONE_SEPARATORS.sub("", value.strip())
