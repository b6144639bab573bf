"""Pointsman admin.

Customers are editable (name, phone); balances only move through the
ledger service. Transactions are read-only.
"""

from django.contrib import admin
from django.utils.html import format_html

from pointsman.models import Customer, Transaction
from pointsman.services import ledger


class TransactionInline(admin.TabularInline):
    model = Transaction
    extra = 0
    fields = ["created_at", "type", "amount", "points_changed", "balance_after"]
    readonly_fields = fields
    ordering = ["-created_at"]

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = [
        "phone_number",
        "name",
        "total_points",
        "redeemable",
        "created_at",
    ]
    search_fields = ["phone_number", "name"]
    readonly_fields = ["id", "total_points", "created_at", "updated_at"]
    fields = ["id", "phone_number", "name", "total_points", "created_at", "updated_at"]
    inlines = [TransactionInline]

    def redeemable(self, obj):
        return f"${ledger.dollars_redeemable(obj.total_points)}"

    redeemable.short_description = "Redeemable"

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = [
        "created_at",
        "customer",
        "type",
        "amount",
        "points_display",
        "balance_after",
    ]
    list_filter = ["type"]
    search_fields = ["customer__phone_number", "customer__name"]
    list_select_related = ["customer"]
    readonly_fields = [
        "customer",
        "type",
        "amount",
        "points_changed",
        "balance_after",
        "created_at",
    ]
    date_hierarchy = "created_at"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def points_display(self, obj):
        if obj.points_changed > 0:
            return format_html('<span style="color:green">+{}</span>', obj.points_changed)
        return format_html('<span style="color:red">{}</span>', obj.points_changed)

    points_display.short_description = "Points"
