"""Customer model.

The customer row caches the running points balance. The transactions table
is the ledger; ``total_points`` always equals the sum of its
``points_changed`` for the customer (see services.ledger.audit).
"""

import uuid as uuid_lib

from django.db import models
from django.utils.translation import gettext_lazy as _


class Customer(models.Model):
    """
    Loyalty customer, identified by a unique phone number.

    Customers are mutable (name, balance) but never deleted in normal
    operation. The balance is only changed through services.ledger.
    """

    id = models.UUIDField(primary_key=True, default=uuid_lib.uuid4, editable=False)
    phone_number = models.CharField(_("phone number"), max_length=32, unique=True)
    name = models.CharField(_("name"), max_length=200, null=True, blank=True)
    total_points = models.IntegerField(_("total points"), default=0)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        db_table = "customers"
        verbose_name = _("customer")
        verbose_name_plural = _("customers")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_points__gte=0),
                name="customers_total_points_non_negative",
            ),
        ]

    def __str__(self):
        if self.name:
            return f"{self.name} ({self.phone_number})"
        return self.phone_number

    def save(self, *args, **kwargs):
        if self.phone_number:
            from pointsman.utils import normalize_phone

            self.phone_number = normalize_phone(self.phone_number)
        if self.name is not None:
            self.name = self.name.strip() or None
        super().save(*args, **kwargs)
