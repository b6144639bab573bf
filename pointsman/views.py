"""
Pointsman JSON endpoints.

Every request carries its own state (search term, customer id, dates,
page); nothing is kept between requests.

Flow for the counter screen:
    1. GET  search/?q=...                  -> found / ambiguous / not_found
    2. POST customers/                      -> add customer on a phone miss
    3. POST customers/<id>/accrue/          -> record a purchase
    4. POST customers/<id>/redeem/          -> redeem a reward
    5. GET  customers/<id>/history/?start=&end=&page=
"""

from __future__ import annotations

import json
import logging

from django.http import JsonResponse
from django.utils.dateparse import parse_date
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from pointsman.exceptions import PointsmanError
from pointsman.services import customer as customer_service
from pointsman.services import history as history_service
from pointsman.services import ledger as ledger_service

logger = logging.getLogger(__name__)

_ERROR_STATUS = {
    "CUSTOMER_NOT_FOUND": 404,
    "DUPLICATE_PHONE": 409,
    "STORE_UNAVAILABLE": 503,
}


def customer_payload(customer) -> dict:
    return {
        "id": str(customer.pk),
        "phone_number": customer.phone_number,
        "name": customer.name,
        "total_points": customer.total_points,
        "dollars_redeemable": str(ledger_service.dollars_redeemable(customer.total_points)),
        "redemption_options": ledger_service.redemption_options(customer.total_points),
        "created_at": customer.created_at.isoformat(),
    }


def transaction_payload(tx) -> dict:
    return {
        "id": tx.pk,
        "customer_id": str(tx.customer_id),
        "type": tx.type,
        "amount": tx.amount,
        "points_changed": tx.points_changed,
        "balance_after": tx.balance_after,
        "created_at": tx.created_at.isoformat(),
    }


def error_response(exc: PointsmanError) -> JsonResponse:
    return JsonResponse({"error": exc.as_dict()}, status=_ERROR_STATUS.get(exc.code, 400))


class PointsmanView(View):
    """Base view: turns PointsmanError into JSON error responses."""

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except PointsmanError as exc:
            return error_response(exc)
        except Exception:
            logger.exception("Pointsman view failed: %s %s", request.method, request.path)
            return JsonResponse({"error": {"code": "INTERNAL", "message": "Internal error"}}, status=500)

    def json_body(self, request) -> dict:
        try:
            data = json.loads(request.body or b"{}")
        except (json.JSONDecodeError, ValueError):
            raise PointsmanError("INVALID_JSON", message="Invalid JSON")
        if not isinstance(data, dict):
            raise PointsmanError("INVALID_JSON", message="Expected a JSON object")
        return data


class SearchView(PointsmanView):
    """GET: phone-or-name lookup."""

    def get(self, request):
        result = customer_service.lookup(request.GET.get("q", ""))
        return JsonResponse(
            {
                "status": result.status,
                "search_by": result.search_by,
                "customer": customer_payload(result.customer) if result.customer else None,
                "candidates": [customer_payload(c) for c in result.candidates],
                "suggested_phone": result.suggested_phone,
            }
        )


@method_decorator(csrf_exempt, name="dispatch")
class CustomerListView(PointsmanView):
    """GET: recent customers. POST: add a customer."""

    def get(self, request):
        customers = customer_service.list_recent()
        return JsonResponse({"customers": [customer_payload(c) for c in customers]})

    def post(self, request):
        data = self.json_body(request)
        cust = customer_service.create(
            phone_number=str(data.get("phone_number") or ""),
            name=data.get("name"),
        )
        return JsonResponse({"customer": customer_payload(cust)}, status=201)


class CustomerDetailView(PointsmanView):
    """GET: customer with balance and redemption choices."""

    def get(self, request, customer_id):
        cust = customer_service.require(customer_id)
        return JsonResponse({"customer": customer_payload(cust)})


@method_decorator(csrf_exempt, name="dispatch")
class AccrueView(PointsmanView):
    """POST {"amount": dollars}: record a purchase."""

    def post(self, request, customer_id):
        data = self.json_body(request)
        cust, tx = ledger_service.accrue(customer_id, data.get("amount"))
        return JsonResponse(
            {"customer": customer_payload(cust), "transaction": transaction_payload(tx)},
            status=201,
        )


@method_decorator(csrf_exempt, name="dispatch")
class RedeemView(PointsmanView):
    """POST {"amount": dollars}: redeem a reward."""

    def post(self, request, customer_id):
        data = self.json_body(request)
        cust, tx = ledger_service.redeem(customer_id, data.get("amount"))
        return JsonResponse(
            {"customer": customer_payload(cust), "transaction": transaction_payload(tx)},
            status=201,
        )


class HistoryView(PointsmanView):
    """GET ?start=YYYY-MM-DD&end=YYYY-MM-DD&page=n: transaction history."""

    def get(self, request, customer_id):
        start_date = self._date_param(request, "start")
        end_date = self._date_param(request, "end")
        try:
            page = int(request.GET.get("page", 1))
        except ValueError:
            raise PointsmanError("INVALID_PAGE", message="Page must be an integer")

        result = history_service.history(customer_id, start_date, end_date, page)
        return JsonResponse(
            {
                "transactions": [transaction_payload(tx) for tx in result.transactions],
                "page": result.page,
                "total_pages": result.total_pages,
                "total_count": result.total_count,
                "total_spent": result.summary.total_spent,
                "total_redeemed": str(result.summary.total_redeemed),
            }
        )

    @staticmethod
    def _date_param(request, name):
        raw = request.GET.get(name, "").strip()
        if not raw:
            return None
        try:
            value = parse_date(raw)
        except ValueError:
            value = None
        if value is None:
            raise PointsmanError("INVALID_DATE", message=f"Invalid date for '{name}'", value=raw)
        return value
