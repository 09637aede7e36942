from django.urls import path

from .views import (
    PaymentRequestDetailView,
    PaymentRequestListCreateView,
    PendingPaymentRequestListView,
    TablePaymentRequestListView,
)

urlpatterns = [

    path(
        "payment-requests",
        PaymentRequestListCreateView.as_view(),
        name="payment-request-list-create"
    ),
    path(
        "payment-requests/pending",
        PendingPaymentRequestListView.as_view(),
        name="payment-request-pending"
    ),
    path(
        "payment-requests/table/<str:table_number>",
        TablePaymentRequestListView.as_view(),
        name="payment-request-table-list"
    ),
    path(
        "payment-requests/<int:pk>",
        PaymentRequestDetailView.as_view(),
        name="payment-request-detail"
    ),
]
