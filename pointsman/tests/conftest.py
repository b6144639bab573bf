"""Pytest fixtures for Pointsman tests."""

from datetime import datetime

import pytest
from django.utils import timezone

from pointsman.models import Customer, Transaction, TransactionType


@pytest.fixture
def customer(db):
    """Customer with an empty balance."""
    return Customer.objects.create(phone_number="5551234567", name="Ada Lovelace")


@pytest.fixture
def customer_b(db):
    """Second customer, no name."""
    return Customer.objects.create(phone_number="5559876543")


@pytest.fixture
def rich_customer(db):
    """Customer holding 250 points, backed by one accrual."""
    cust = Customer.objects.create(phone_number="5550000250", name="Grace Hopper", total_points=250)
    Transaction.objects.create(
        customer=cust,
        type=TransactionType.ACCRUAL,
        amount=250,
        points_changed=250,
        balance_after=250,
    )
    return cust


@pytest.fixture
def make_transaction(db):
    """Create a ledger row at a given local time (bypasses the ledger service)."""

    def _make(customer, type_, amount, points, when):
        tx = Transaction.objects.create(
            customer=customer,
            type=type_,
            amount=amount,
            points_changed=points,
            balance_after=0,
        )
        if isinstance(when, datetime) and timezone.is_naive(when):
            when = timezone.make_aware(when)
        Transaction.objects.filter(pk=tx.pk).update(created_at=when)
        tx.refresh_from_db()
        return tx

    return _make
