"""Pointsman services.

- customer: lookup, search classification, creation
- ledger: accrual, redemption, conversion rules, audit
- history: filtered, paginated transaction history
"""

from pointsman.services import customer
from pointsman.services import ledger
from pointsman.services import history

__all__ = ["customer", "ledger", "history"]
