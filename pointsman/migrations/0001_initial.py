# Generated migration for Customer and Transaction

import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "phone_number",
                    models.CharField(max_length=32, unique=True, verbose_name="phone number"),
                ),
                (
                    "name",
                    models.CharField(blank=True, max_length=200, null=True, verbose_name="name"),
                ),
                (
                    "total_points",
                    models.IntegerField(default=0, verbose_name="total points"),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at"),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, verbose_name="updated at"),
                ),
            ],
            options={
                "verbose_name": "customer",
                "verbose_name_plural": "customers",
                "db_table": "customers",
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(total_points__gte=0),
                        name="customers_total_points_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "type",
                    models.CharField(
                        choices=[("add", "Accrual"), ("redeem", "Redemption")],
                        max_length=10,
                        verbose_name="type",
                    ),
                ),
                (
                    "amount",
                    models.PositiveIntegerField(help_text="Dollars", verbose_name="amount"),
                ),
                (
                    "points_changed",
                    models.IntegerField(
                        help_text="Positive for accruals, negative for redemptions",
                        verbose_name="points changed",
                    ),
                ),
                (
                    "balance_after",
                    models.IntegerField(verbose_name="balance after"),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at"),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="pointsman.customer",
                        verbose_name="customer",
                    ),
                ),
            ],
            options={
                "verbose_name": "transaction",
                "verbose_name_plural": "transactions",
                "db_table": "transactions",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["customer", "-created_at"],
                        name="transactions_cust_created_idx",
                    ),
                ],
            },
        ),
    ]
