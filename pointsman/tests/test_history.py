"""Tests for transaction history: date filters, pagination and totals."""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.db.models import QuerySet
from django.test import override_settings

from pointsman.exceptions import PointsmanError
from pointsman.services import history, ledger


pytestmark = pytest.mark.django_db


@pytest.fixture
def new_year_history(customer, make_transaction):
    """Transactions around 2024-01-01 (local time)."""
    return {
        "before": make_transaction(customer, "add", 10, 10, datetime(2023, 12, 31, 23, 59, 59)),
        "midnight": make_transaction(customer, "add", 20, 20, datetime(2024, 1, 1, 0, 0, 0)),
        "noon": make_transaction(customer, "redeem", 5, -100, datetime(2024, 1, 1, 12, 0, 0)),
        "late": make_transaction(customer, "add", 30, 30, datetime(2024, 1, 1, 23, 59, 59)),
        "after": make_transaction(customer, "add", 40, 40, datetime(2024, 1, 2, 0, 0, 0)),
    }


class TestListTransactions:
    def test_newest_first(self, customer, new_year_history):
        result = list(history.list_transactions(customer))
        assert [tx.pk for tx in result] == [
            new_year_history[key].pk for key in ("after", "late", "noon", "midnight", "before")
        ]

    def test_single_day_is_inclusive(self, customer, new_year_history):
        result = history.list_transactions(
            customer, start_date=date(2024, 1, 1), end_date=date(2024, 1, 1)
        )
        assert {tx.pk for tx in result} == {
            new_year_history[key].pk for key in ("midnight", "noon", "late")
        }

    def test_start_only(self, customer, new_year_history):
        result = history.list_transactions(customer, start_date=date(2024, 1, 2))
        assert [tx.pk for tx in result] == [new_year_history["after"].pk]

    def test_end_only(self, customer, new_year_history):
        result = history.list_transactions(customer, end_date=date(2023, 12, 31))
        assert [tx.pk for tx in result] == [new_year_history["before"].pk]

    def test_inverted_range_is_empty(self, customer, new_year_history):
        result = history.list_transactions(
            customer, start_date=date(2024, 1, 2), end_date=date(2024, 1, 1)
        )
        assert list(result) == []

    def test_other_customers_excluded(self, customer, customer_b, make_transaction):
        make_transaction(customer_b, "add", 10, 10, datetime(2024, 1, 1, 9, 0, 0))
        assert list(history.list_transactions(customer)) == []

    def test_unknown_customer(self, db):
        with pytest.raises(PointsmanError, match="CUSTOMER_NOT_FOUND"):
            history.list_transactions("00000000-0000-0000-0000-000000000000")


class TestPaginate:
    def test_empty(self):
        assert history.paginate([], 1, 10) == ([], 1)

    def test_pages(self):
        items = list(range(25))

        assert history.paginate(items, 1, 10) == (list(range(10)), 3)
        assert history.paginate(items, 3, 10) == ([20, 21, 22, 23, 24], 3)

    def test_exact_multiple(self):
        assert history.paginate(list(range(20)), 2, 10)[1] == 2

    @pytest.mark.parametrize("page", [0, -1, 4])
    def test_out_of_range_page_is_empty(self, page):
        assert history.paginate(list(range(25)), page, 10) == ([], 3)

    @pytest.mark.parametrize("page_size", [0, -10, True])
    def test_invalid_page_size(self, page_size):
        with pytest.raises(PointsmanError, match="INVALID_PAGE_SIZE"):
            history.paginate([1, 2], 1, page_size)


class TestSummarize:
    def test_totals(self, customer, new_year_history):
        summary = history.summarize(history.list_transactions(customer))

        assert summary.total_spent == 100
        assert summary.total_redeemed == Decimal("5.00")

    def test_empty(self):
        summary = history.summarize([])
        assert summary.total_spent == 0
        assert summary.total_redeemed == Decimal("0.00")

    @override_settings(POINTSMAN={"REDEEM_INCREMENT": 10})
    def test_redeemed_dollars_follow_increment(self, customer, new_year_history):
        summary = history.summarize(history.list_transactions(customer))
        assert summary.total_redeemed == Decimal("10.00")

    def test_queryset_matches_list(self, customer, new_year_history):
        qs = history.list_transactions(customer, start_date=date(2024, 1, 1))
        assert history.summarize(qs) == history.summarize(list(qs))

    def test_empty_queryset(self, customer):
        summary = history.summarize(history.list_transactions(customer))
        assert summary == history.HistorySummary(total_spent=0, total_redeemed=Decimal("0.00"))

    def test_queryset_is_one_query(self, customer, new_year_history, django_assert_num_queries):
        qs = history.list_transactions(customer)
        with django_assert_num_queries(1):
            history.summarize(qs)


class TestHistory:
    def test_page_with_range_totals(self, customer):
        for dollars in range(1, 13):
            ledger.accrue(customer, dollars * 10)
        ledger.redeem(customer, 15)

        first = history.history(customer, page=1, page_size=10)
        second = history.history(customer, page=2, page_size=10)

        assert first.total_count == 13
        assert first.total_pages == 2
        assert len(first.transactions) == 10
        assert len(second.transactions) == 3
        assert first.transactions[0].type == "redeem"
        assert first.has_next is True
        assert second.has_previous is True
        assert second.has_next is False
        # Totals cover the whole range, not just the page
        assert first.summary.total_spent == 780
        assert first.summary.total_redeemed == Decimal("15.00")

    def test_default_page_size(self, customer):
        for _ in range(11):
            ledger.accrue(customer, 1)

        result = history.history(customer)
        assert result.page_size == 10
        assert result.total_pages == 2

    @override_settings(POINTSMAN={"HISTORY_PAGE_SIZE": 5})
    def test_configured_page_size(self, customer):
        for _ in range(11):
            ledger.accrue(customer, 1)
        assert history.history(customer).total_pages == 3

    def test_loads_only_the_requested_page(self, customer, make_transaction):
        for day in range(1, 26):
            make_transaction(customer, "add", day, day, datetime(2024, 1, day, 12, 0, 0))

        with patch.object(history, "summarize", wraps=history.summarize) as summarize:
            result = history.history(customer, page=2, page_size=10)

        assert [tx.amount for tx in result.transactions] == list(range(15, 5, -1))
        assert result.total_count == 25
        assert result.summary.total_spent == sum(range(1, 26))
        (summarized,), _ = summarize.call_args
        assert isinstance(summarized, QuerySet)

    def test_store_unavailable(self, customer):
        with patch.object(history, "summarize", side_effect=DatabaseError("down")):
            with pytest.raises(PointsmanError) as exc_info:
                history.history(customer)
        assert exc_info.value.code == "STORE_UNAVAILABLE"

    def test_empty_history(self, customer):
        result = history.history(customer, start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))

        assert result.transactions == []
        assert result.total_pages == 1
        assert result.total_count == 0
