"""Pointsman models."""

from pointsman.models.customer import Customer
from pointsman.models.transaction import Transaction, TransactionType

__all__ = [
    "Customer",
    "Transaction",
    "TransactionType",
]
