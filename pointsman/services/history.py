"""History service - read-only, date-filtered, paginated transaction history."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from django.conf import settings
from django.core.paginator import EmptyPage, PageNotAnInteger, Paginator
from django.db import DatabaseError
from django.db.models import Q, QuerySet, Sum
from django.utils import timezone

from pointsman.conf import pointsman_settings
from pointsman.exceptions import PointsmanError
from pointsman.models import Transaction, TransactionType
from pointsman.services import customer as customer_service
from pointsman.services.ledger import points_to_dollars


@dataclass(frozen=True)
class HistorySummary:
    """Totals over a set of transactions."""

    total_spent: int  # dollars
    total_redeemed: Decimal  # dollars


@dataclass
class HistoryPage:
    """One page of a customer's history plus totals for the whole range."""

    transactions: list[Transaction]
    page: int
    page_size: int
    total_pages: int
    total_count: int
    summary: HistorySummary
    start_date: date | None = None
    end_date: date | None = None

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def list_transactions(
    customer,
    start_date: date | None = None,
    end_date: date | None = None,
) -> QuerySet[Transaction]:
    """
    Customer transactions, newest first.

    start_date is inclusive; end_date covers the whole day (the upper
    bound is midnight of the following day, exclusive). Dates are read in
    the active time zone.
    """
    cust = customer_service.require(customer)
    qs = Transaction.objects.filter(customer=cust)
    if start_date:
        qs = qs.filter(created_at__gte=_start_of_day(start_date))
    if end_date:
        qs = qs.filter(created_at__lt=_start_of_day(end_date + timedelta(days=1)))
    return qs.order_by("-created_at", "-pk")


def paginate(transactions, page: int, page_size: int) -> tuple[list, int]:
    """
    Slice one 1-indexed page.

    Returns:
        Tuple of (page items, total pages). Total pages is never below 1;
        pages outside the range give an empty list.
    """
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
        raise PointsmanError("INVALID_PAGE_SIZE", page_size=page_size)

    paginator = Paginator(transactions, page_size, allow_empty_first_page=True)
    total_pages = paginator.num_pages
    try:
        items = list(paginator.page(page).object_list)
    except (EmptyPage, PageNotAnInteger):
        items = []
    return items, total_pages


def summarize(transactions) -> HistorySummary:
    """
    Dollars spent (accruals) and dollars redeemed (from redemption deltas).

    A queryset is summed in the database; any other iterable is walked.
    """
    if isinstance(transactions, QuerySet):
        totals = transactions.order_by().aggregate(
            spent=Sum("amount", filter=Q(type=TransactionType.ACCRUAL)),
            redeemed=Sum("points_changed", filter=Q(type=TransactionType.REDEMPTION)),
        )
        return HistorySummary(
            total_spent=totals["spent"] or 0,
            total_redeemed=points_to_dollars(-(totals["redeemed"] or 0)),
        )

    total_spent = 0
    redeemed_points = 0
    for tx in transactions:
        if tx.type == TransactionType.ACCRUAL:
            total_spent += tx.amount
        elif tx.type == TransactionType.REDEMPTION:
            redeemed_points -= tx.points_changed
    return HistorySummary(
        total_spent=total_spent,
        total_redeemed=points_to_dollars(redeemed_points),
    )


def history(
    customer,
    start_date: date | None = None,
    end_date: date | None = None,
    page: int = 1,
    page_size: int | None = None,
) -> HistoryPage:
    """Filter, summarize and paginate a customer's history in one call."""
    if page_size is None:
        page_size = pointsman_settings.HISTORY_PAGE_SIZE

    transactions = list_transactions(customer, start_date, end_date)
    try:
        items, total_pages = paginate(transactions, page, page_size)
        total_count = transactions.count()
        summary = summarize(transactions)
    except DatabaseError as exc:
        raise PointsmanError("STORE_UNAVAILABLE", detail=str(exc)) from exc

    return HistoryPage(
        transactions=items,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        total_count=total_count,
        summary=summary,
        start_date=start_date,
        end_date=end_date,
    )


def _start_of_day(day: date) -> datetime:
    moment = datetime.combine(day, time.min)
    if settings.USE_TZ:
        return timezone.make_aware(moment)
    return moment
