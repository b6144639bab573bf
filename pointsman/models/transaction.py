"""Transaction model - the append-only points ledger."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class TransactionType(models.TextChoices):
    """Ledger entry kinds."""

    ACCRUAL = "add", _("Accrual")
    REDEMPTION = "redeem", _("Redemption")


class Transaction(models.Model):
    """
    Immutable record of a points mutation.

    One row per accrual or redemption. ``amount`` is the dollar face value
    (purchase or reward), always positive; ``points_changed`` is the signed
    delta applied to the customer balance.
    """

    customer = models.ForeignKey(
        "pointsman.Customer",
        on_delete=models.PROTECT,
        related_name="transactions",
        verbose_name=_("customer"),
    )
    type = models.CharField(_("type"), max_length=10, choices=TransactionType.choices)
    amount = models.PositiveIntegerField(_("amount"), help_text=_("Dollars"))
    points_changed = models.IntegerField(
        _("points changed"),
        help_text=_("Positive for accruals, negative for redemptions"),
    )
    balance_after = models.IntegerField(_("balance after"))
    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)

    class Meta:
        db_table = "transactions"
        verbose_name = _("transaction")
        verbose_name_plural = _("transactions")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["customer", "-created_at"], name="transactions_cust_created_idx"),
        ]

    def __str__(self):
        sign = "+" if self.points_changed > 0 else ""
        return f"{sign}{self.points_changed}pts ({self.get_type_display()} ${self.amount})"

    @property
    def is_accrual(self) -> bool:
        return self.type == TransactionType.ACCRUAL

    @property
    def is_redemption(self) -> bool:
        return self.type == TransactionType.REDEMPTION

    def save(self, *args, **kwargs):
        if not self._state.adding:
            from pointsman.exceptions import PointsmanError

            raise PointsmanError("TRANSACTION_IMMUTABLE", transaction_id=self.pk)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        from pointsman.exceptions import PointsmanError

        raise PointsmanError("TRANSACTION_IMMUTABLE", transaction_id=self.pk)
