from django.urls import path

from .views import (
    AccrueView,
    CustomerDetailView,
    CustomerListView,
    HistoryView,
    RedeemView,
    SearchView,
)

app_name = "pointsman"

urlpatterns = [
    path("search/", SearchView.as_view(), name="search"),
    path("customers/", CustomerListView.as_view(), name="customer-list"),
    path("customers/<uuid:customer_id>/", CustomerDetailView.as_view(), name="customer-detail"),
    path("customers/<uuid:customer_id>/accrue/", AccrueView.as_view(), name="customer-accrue"),
    path("customers/<uuid:customer_id>/redeem/", RedeemView.as_view(), name="customer-redeem"),
    path("customers/<uuid:customer_id>/history/", HistoryView.as_view(), name="customer-history"),
]
