"""
Pointsman public API.

CUSTOMERS:
    PointsService.lookup(term)          - Phone-or-name search
    PointsService.create_customer(...)  - Add customer
    PointsService.recent_customers()    - Newest customers

LEDGER:
    PointsService.accrue(customer, dollars)
    PointsService.redeem(customer, dollars)
    PointsService.redemption_options(balance)
    PointsService.dollars_redeemable(balance)

HISTORY:
    PointsService.history(customer, start_date, end_date, page)
"""

from datetime import date
from decimal import Decimal

from pointsman.models import Customer, Transaction
from pointsman.services import customer as customer_service
from pointsman.services import history as history_service
from pointsman.services import ledger as ledger_service
from pointsman.services.customer import CustomerLookup
from pointsman.services.history import HistoryPage


class PointsService:
    """
    Pointsman public API.

    Uses @classmethod for extensibility; every method delegates to the
    module-level functions in pointsman.services.
    """

    # ======================================================================
    # CUSTOMER API
    # ======================================================================

    @classmethod
    def get(cls, customer_id) -> Customer | None:
        """Get customer by id."""
        return customer_service.get(customer_id)

    @classmethod
    def get_by_phone(cls, phone: str) -> Customer | None:
        """Get customer by phone."""
        return customer_service.get_by_phone(phone)

    @classmethod
    def find_by_name(cls, name: str) -> list[Customer]:
        """Customers matching a name, case-insensitively."""
        return customer_service.find_by_name(name)

    @classmethod
    def lookup(cls, term: str) -> CustomerLookup:
        """
        Search by phone (7+ digits) or by name.

        Args:
            term: Raw search input

        Returns:
            CustomerLookup with status found, ambiguous or not_found
        """
        return customer_service.lookup(term)

    @classmethod
    def create_customer(cls, phone_number: str, name: str | None = None) -> Customer:
        """
        Create a customer with a zero balance.

        Raises:
            PointsmanError: PHONE_REQUIRED or DUPLICATE_PHONE
        """
        return customer_service.create(phone_number, name)

    @classmethod
    def recent_customers(cls, limit: int | None = None) -> list[Customer]:
        """Customers, newest first."""
        return customer_service.list_recent(limit)

    # ======================================================================
    # LEDGER API
    # ======================================================================

    @classmethod
    def accrue(cls, customer, purchase_dollars) -> tuple[Customer, Transaction]:
        """Award points for a purchase."""
        return ledger_service.accrue(customer, purchase_dollars)

    @classmethod
    def redeem(cls, customer, redeem_dollars) -> tuple[Customer, Transaction]:
        """Exchange points for a dollar reward."""
        return ledger_service.redeem(customer, redeem_dollars)

    @classmethod
    def redemption_options(cls, balance: int) -> list[int]:
        return ledger_service.redemption_options(balance)

    @classmethod
    def dollars_redeemable(cls, balance: int) -> Decimal:
        return ledger_service.dollars_redeemable(balance)

    # ======================================================================
    # HISTORY API
    # ======================================================================

    @classmethod
    def history(
        cls,
        customer,
        start_date: date | None = None,
        end_date: date | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> HistoryPage:
        """
        One page of a customer's transactions, newest first.

        Args:
            customer: Customer instance or id
            start_date: First day included (optional)
            end_date: Last day included (optional)
            page: 1-indexed page number
            page_size: Defaults to POINTSMAN["HISTORY_PAGE_SIZE"]

        Returns:
            HistoryPage with items, page count and range totals
        """
        return history_service.history(customer, start_date, end_date, page, page_size)
