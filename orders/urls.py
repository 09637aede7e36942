from django.urls import path

from .views import OrderDetailView, OrderListCreateView, TableOrderListView

urlpatterns = [

    path("orders", OrderListCreateView.as_view(), name="order-list-create"),
    path(
        "orders/table/<str:table_number>",
        TableOrderListView.as_view(),
        name="order-table-list"
    ),
    path("orders/<int:pk>", OrderDetailView.as_view(), name="order-detail"),
]
