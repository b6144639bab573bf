"""
Pointsman signals - public event API.

Emitted signals:
- customer_created: Emitted by services.customer.create()
- points_accrued: Emitted by services.ledger.accrue() on commit
- points_redeemed: Emitted by services.ledger.redeem() on commit
"""

from django.dispatch import Signal

customer_created = Signal()  # sender=Customer, customer=Customer
points_accrued = Signal()  # sender=Customer, customer=Customer, transaction=Transaction
points_redeemed = Signal()  # sender=Customer, customer=Customer, transaction=Transaction
