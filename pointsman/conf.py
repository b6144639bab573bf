"""
Pointsman configuration.

Usage in settings.py:
    POINTSMAN = {
        "REDEEM_INCREMENT": 10,
        "POINTS_PER_DOLLAR": 1,
    }
"""

from dataclasses import dataclass, fields
from typing import Any

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


@dataclass
class PointsmanSettings:
    """Pointsman configuration settings."""

    # Accrual: points earned per whole dollar spent
    POINTS_PER_DOLLAR: int = 1

    # Redemption: POINTS_PER_REWARD points buy REDEEM_INCREMENT dollars
    REDEEM_INCREMENT: int = 5
    POINTS_PER_REWARD: int = 100

    # Largest purchase or reward accepted, in dollars (INTEGER column limit)
    MAX_AMOUNT: int = 2**31 - 1

    # Listing defaults
    HISTORY_PAGE_SIZE: int = 10
    RECENT_CUSTOMERS_LIMIT: int = 50

    # Search terms matching this are looked up by phone, anything else by name
    PHONE_SEARCH_PATTERN: str = r"^\d{7,}$"

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.type is int and (isinstance(value, bool) or not isinstance(value, int) or value <= 0):
                raise ImproperlyConfigured(
                    f"POINTSMAN[{f.name!r}] must be a positive integer, got {value!r}"
                )


def get_pointsman_settings() -> PointsmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "POINTSMAN", {})
    return PointsmanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_pointsman_settings(), name)


pointsman_settings = _LazySettings()
