"""Customer service - lookup, search classification and creation.

Store failures are surfaced as PointsmanError("STORE_UNAVAILABLE").
"""

import logging
import re
from dataclasses import dataclass, field

from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction

from pointsman.conf import pointsman_settings
from pointsman.exceptions import PointsmanError
from pointsman.models import Customer
from pointsman.signals import customer_created
from pointsman.utils import normalize_phone

logger = logging.getLogger(__name__)


SEARCH_BY_PHONE = "phone"
SEARCH_BY_NAME = "name"

LOOKUP_FOUND = "found"
LOOKUP_AMBIGUOUS = "ambiguous"
LOOKUP_NOT_FOUND = "not_found"


@dataclass
class CustomerLookup:
    """Result of a phone-or-name search."""

    status: str
    term: str
    search_by: str
    customer: Customer | None = None
    candidates: list[Customer] = field(default_factory=list)
    suggested_phone: str | None = None

    @property
    def found(self) -> bool:
        return self.status == LOOKUP_FOUND


def get(customer_id) -> Customer | None:
    """Get customer by id."""
    try:
        return Customer.objects.get(pk=customer_id)
    except (Customer.DoesNotExist, ValidationError, ValueError):
        return None
    except DatabaseError as exc:
        raise _store_unavailable(exc) from exc


def require(customer) -> Customer:
    """Resolve a Customer instance or id, raising CUSTOMER_NOT_FOUND."""
    if isinstance(customer, Customer):
        return customer
    cust = get(customer)
    if cust is None:
        raise PointsmanError("CUSTOMER_NOT_FOUND", customer_id=str(customer))
    return cust


def get_by_phone(phone: str) -> Customer | None:
    """Get customer by phone (exact match on the normalized number)."""
    phone_normalized = normalize_phone(phone)
    if not phone_normalized:
        return None
    try:
        return Customer.objects.get(phone_number=phone_normalized)
    except Customer.DoesNotExist:
        return None
    except DatabaseError as exc:
        raise _store_unavailable(exc) from exc


def find_by_name(name: str) -> list[Customer]:
    """Customers whose name matches case-insensitively."""
    name = (name or "").strip()
    if not name:
        return []
    try:
        return list(Customer.objects.filter(name__iexact=name).order_by("-created_at"))
    except DatabaseError as exc:
        raise _store_unavailable(exc) from exc


def classify_search_term(term: str) -> str:
    """
    Return SEARCH_BY_PHONE for all-digit terms, SEARCH_BY_NAME otherwise.

    A leading "+" (international prefix) is ignored.
    """
    term = (term or "").strip()
    if term.startswith("+"):
        term = term[1:]
    if re.match(pointsman_settings.PHONE_SEARCH_PATTERN, term):
        return SEARCH_BY_PHONE
    return SEARCH_BY_NAME


def lookup(term: str) -> CustomerLookup:
    """
    Search a customer by phone or name.

    A phone miss suggests creating the customer with that phone; a name
    miss does not. Several name matches are returned as candidates for the
    caller to pick from.
    """
    term = (term or "").strip()
    search_by = classify_search_term(term)

    if not term:
        return CustomerLookup(status=LOOKUP_NOT_FOUND, term=term, search_by=search_by)

    if search_by == SEARCH_BY_PHONE:
        cust = get_by_phone(term)
        if cust:
            return CustomerLookup(
                status=LOOKUP_FOUND, term=term, search_by=search_by, customer=cust
            )
        return CustomerLookup(
            status=LOOKUP_NOT_FOUND,
            term=term,
            search_by=search_by,
            suggested_phone=normalize_phone(term),
        )

    matches = find_by_name(term)
    if len(matches) == 1:
        return CustomerLookup(
            status=LOOKUP_FOUND, term=term, search_by=search_by, customer=matches[0]
        )
    if matches:
        return CustomerLookup(
            status=LOOKUP_AMBIGUOUS, term=term, search_by=search_by, candidates=matches
        )
    return CustomerLookup(status=LOOKUP_NOT_FOUND, term=term, search_by=search_by)


def list_recent(limit: int | None = None) -> list[Customer]:
    """Customers, newest first."""
    if limit is None:
        limit = pointsman_settings.RECENT_CUSTOMERS_LIMIT
    try:
        return list(Customer.objects.order_by("-created_at")[:limit])
    except DatabaseError as exc:
        raise _store_unavailable(exc) from exc


def create(phone_number: str, name: str | None = None) -> Customer:
    """
    Create a new customer with a zero balance.

    Raises:
        PointsmanError: INVALID_NAME, PHONE_REQUIRED, DUPLICATE_PHONE or
            STORE_UNAVAILABLE
    """
    if name is not None and not isinstance(name, str):
        raise PointsmanError("INVALID_NAME", name=repr(name))

    phone_normalized = normalize_phone(phone_number or "")
    if not phone_normalized:
        raise PointsmanError("PHONE_REQUIRED")

    if get_by_phone(phone_normalized) is not None:
        logger.warning("Rejected duplicate phone %s", phone_normalized)
        raise PointsmanError("DUPLICATE_PHONE", phone_number=phone_normalized)

    try:
        with transaction.atomic():
            cust = Customer.objects.create(
                phone_number=phone_normalized,
                name=(name or "").strip() or None,
                total_points=0,
            )
    except IntegrityError:
        # Lost a race against a concurrent insert of the same phone
        logger.warning("Rejected duplicate phone %s", phone_normalized)
        raise PointsmanError("DUPLICATE_PHONE", phone_number=phone_normalized)
    except DatabaseError as exc:
        raise _store_unavailable(exc) from exc

    logger.info("Created customer %s (%s)", cust.pk, cust.phone_number)
    customer_created.send(sender=Customer, customer=cust)
    return cust


UPDATABLE_FIELDS = {"name", "phone_number"}


def update(customer, **fields) -> Customer:
    """Update customer fields (only whitelisted fields are accepted)."""
    cust = require(customer)

    changed = []
    for key, value in fields.items():
        if key not in UPDATABLE_FIELDS:
            continue
        if key == "name" and value is not None and not isinstance(value, str):
            raise PointsmanError("INVALID_NAME", name=repr(value))
        if key == "phone_number":
            value = normalize_phone(value or "")
            if not value:
                raise PointsmanError("PHONE_REQUIRED")
            if Customer.objects.filter(phone_number=value).exclude(pk=cust.pk).exists():
                raise PointsmanError("DUPLICATE_PHONE", phone_number=value)
        setattr(cust, key, value)
        changed.append(key)

    if not changed:
        return cust

    try:
        with transaction.atomic():
            cust.save(update_fields=changed + ["updated_at"])
    except IntegrityError:
        raise PointsmanError("DUPLICATE_PHONE", phone_number=cust.phone_number)
    except DatabaseError as exc:
        raise _store_unavailable(exc) from exc
    return cust


def _store_unavailable(exc: Exception) -> PointsmanError:
    logger.exception("Customer store failure")
    return PointsmanError("STORE_UNAVAILABLE", detail=str(exc))
