"""Ledger service - points accrual, redemption and conversion rules.

Every mutation runs inside transaction.atomic() with the customer row
locked, so the balance write and the ledger insert commit together and
``Customer.total_points`` stays equal to the sum of its transaction deltas.
Signals are sent once the outermost transaction commits.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import Sum

from pointsman.conf import pointsman_settings
from pointsman.exceptions import PointsmanError
from pointsman.models import Customer, Transaction, TransactionType
from pointsman.services import customer as customer_service
from pointsman.signals import points_accrued, points_redeemed

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

# Upper bound of the INTEGER columns holding amounts and balances
MAX_POINTS = 2**31 - 1


@dataclass(frozen=True)
class LedgerDiscrepancy:
    """A customer whose cached balance disagrees with its ledger."""

    customer_id: str
    phone_number: str
    total_points: int
    ledger_points: int

    @property
    def drift(self) -> int:
        return self.total_points - self.ledger_points


# ======================================================================
# Conversion rules
# ======================================================================


def validate_dollars(value) -> int:
    """
    Coerce a dollar amount to a positive whole number.

    Accepts ints, integral Decimals/floats and digit strings.

    Raises:
        PointsmanError: INVALID_AMOUNT (also above POINTSMAN["MAX_AMOUNT"])
    """
    if isinstance(value, bool) or value is None:
        raise PointsmanError("INVALID_AMOUNT", amount=value)
    if isinstance(value, int):
        dollars = value
    else:
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise PointsmanError("INVALID_AMOUNT", amount=str(value))
        if not number.is_finite() or number != number.to_integral_value():
            raise PointsmanError("INVALID_AMOUNT", amount=str(value))
        dollars = int(number)
    if dollars <= 0 or dollars > pointsman_settings.MAX_AMOUNT:
        raise PointsmanError("INVALID_AMOUNT", amount=dollars)
    return dollars


def points_for_purchase(purchase_dollars) -> int:
    """Points earned for a purchase."""
    return validate_dollars(purchase_dollars) * pointsman_settings.POINTS_PER_DOLLAR


def points_for_redemption(redeem_dollars) -> int:
    """
    Points needed to redeem a dollar reward.

    POINTS_PER_REWARD points always buy REDEEM_INCREMENT dollars.

    Raises:
        PointsmanError: INVALID_AMOUNT or INVALID_INCREMENT
    """
    dollars = validate_dollars(redeem_dollars)
    increment = pointsman_settings.REDEEM_INCREMENT
    if dollars % increment:
        raise PointsmanError(
            "INVALID_INCREMENT",
            message=f"Redemption must be in ${increment} increments.",
            amount=dollars,
            increment=increment,
        )
    return dollars // increment * pointsman_settings.POINTS_PER_REWARD


def redemption_options(balance: int) -> list[int]:
    """Every affordable reward amount in dollars, ascending."""
    increment = pointsman_settings.REDEEM_INCREMENT
    units = max(balance, 0) // pointsman_settings.POINTS_PER_REWARD
    return [increment * n for n in range(1, units + 1)]


def points_to_dollars(points: int) -> Decimal:
    """Dollar value of a number of points, rounded to cents."""
    value = (
        Decimal(points)
        / pointsman_settings.POINTS_PER_REWARD
        * pointsman_settings.REDEEM_INCREMENT
    )
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def dollars_redeemable(balance: int) -> Decimal:
    """Dollar value of a points balance, rounded to cents."""
    return points_to_dollars(balance)


# ======================================================================
# Mutations
# ======================================================================


def accrue(customer, purchase_dollars) -> tuple[Customer, Transaction]:
    """
    Award points for a purchase.

    Args:
        customer: Customer instance or id
        purchase_dollars: Purchase amount in whole dollars

    Returns:
        Tuple of (updated Customer, accrual Transaction)

    Raises:
        PointsmanError: INVALID_AMOUNT, CUSTOMER_NOT_FOUND, STORE_UNAVAILABLE
    """
    dollars = validate_dollars(purchase_dollars)
    points = points_for_purchase(dollars)

    try:
        with transaction.atomic():
            cust = _get_customer_for_update(customer)
            if points > MAX_POINTS - cust.total_points:
                raise PointsmanError(
                    "INVALID_AMOUNT",
                    message="Purchase would exceed the maximum points balance",
                    amount=dollars,
                )
            cust.total_points += points
            cust.save(update_fields=["total_points", "updated_at"])

            tx = Transaction.objects.create(
                customer=cust,
                type=TransactionType.ACCRUAL,
                amount=dollars,
                points_changed=points,
                balance_after=cust.total_points,
            )
    except DatabaseError as exc:
        logger.exception("Accrual failed for customer %s", _customer_ref(customer))
        raise PointsmanError("STORE_UNAVAILABLE", detail=str(exc)) from exc

    logger.info(
        "Accrued %d pts for $%d to customer %s (balance %d)",
        points,
        dollars,
        cust.pk,
        cust.total_points,
    )
    transaction.on_commit(
        lambda: points_accrued.send(sender=Customer, customer=cust, transaction=tx)
    )
    return cust, tx


def redeem(customer, redeem_dollars) -> tuple[Customer, Transaction]:
    """
    Exchange points for a dollar reward.

    Args:
        customer: Customer instance or id
        redeem_dollars: Reward value, a multiple of REDEEM_INCREMENT

    Returns:
        Tuple of (updated Customer, redemption Transaction)

    Raises:
        PointsmanError: INVALID_AMOUNT, INVALID_INCREMENT, INSUFFICIENT_POINTS,
            CUSTOMER_NOT_FOUND, STORE_UNAVAILABLE
    """
    dollars = validate_dollars(redeem_dollars)
    points = points_for_redemption(dollars)

    try:
        with transaction.atomic():
            cust = _get_customer_for_update(customer)

            if cust.total_points < points:
                raise PointsmanError(
                    "INSUFFICIENT_POINTS",
                    available=cust.total_points,
                    requested=points,
                )

            cust.total_points -= points
            cust.save(update_fields=["total_points", "updated_at"])

            tx = Transaction.objects.create(
                customer=cust,
                type=TransactionType.REDEMPTION,
                amount=dollars,
                points_changed=-points,
                balance_after=cust.total_points,
            )
    except DatabaseError as exc:
        logger.exception("Redemption failed for customer %s", _customer_ref(customer))
        raise PointsmanError("STORE_UNAVAILABLE", detail=str(exc)) from exc

    logger.info(
        "Redeemed %d pts for $%d from customer %s (balance %d)",
        points,
        dollars,
        cust.pk,
        cust.total_points,
    )
    transaction.on_commit(
        lambda: points_redeemed.send(sender=Customer, customer=cust, transaction=tx)
    )
    return cust, tx


# ======================================================================
# Consistency
# ======================================================================


def ledger_balance(customer) -> int:
    """Sum of all transaction deltas for a customer."""
    cust = customer_service.require(customer)
    total = cust.transactions.aggregate(total=Sum("points_changed"))["total"]
    return total or 0


def audit() -> list[LedgerDiscrepancy]:
    """Customers whose total_points differs from their summed ledger."""
    discrepancies = []
    customers = Customer.objects.annotate(ledger=Sum("transactions__points_changed"))
    for cust in customers.order_by("created_at"):
        ledger = cust.ledger or 0
        if ledger != cust.total_points:
            logger.warning(
                "Ledger drift for customer %s: balance %d, ledger %d",
                cust.pk,
                cust.total_points,
                ledger,
            )
            discrepancies.append(
                LedgerDiscrepancy(
                    customer_id=str(cust.pk),
                    phone_number=cust.phone_number,
                    total_points=cust.total_points,
                    ledger_points=ledger,
                )
            )
    return discrepancies


def reconcile(customer) -> Customer:
    """Reset a customer's balance to its ledger sum."""
    with transaction.atomic():
        cust = _get_customer_for_update(customer)
        expected = ledger_balance(cust)
        if cust.total_points != expected:
            logger.warning(
                "Reconciling customer %s: %d -> %d", cust.pk, cust.total_points, expected
            )
            cust.total_points = expected
            cust.save(update_fields=["total_points", "updated_at"])
    return cust


def _get_customer_for_update(customer) -> Customer:
    """
    Re-read the customer with a row-level lock.

    MUST be called inside transaction.atomic().
    """
    pk = customer.pk if isinstance(customer, Customer) else customer
    try:
        return Customer.objects.select_for_update().get(pk=pk)
    except (Customer.DoesNotExist, ValidationError, ValueError):
        raise PointsmanError("CUSTOMER_NOT_FOUND", customer_id=str(pk))


def _customer_ref(customer) -> str:
    return str(customer.pk if isinstance(customer, Customer) else customer)
