import logging

from django.utils.dateparse import parse_date
from rest_framework import generics, status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrStaff
from emenu.responses import EnvelopeMixin
from tables.services import get_table_by_number

from .models import Order
from .serializers import OrderCreateSerializer, OrderSerializer, OrderUpdateSerializer
from .services import (
    active_orders_for_table,
    create_order,
    orders_for_day,
    update_order,
    with_details,
)

logger = logging.getLogger(__name__)


def apply_order_filters(request, queryset):
    """
    Supported query params:
    - status=PENDING|CONFIRMED|COMPLETED|CANCELLED
    - tableId=<int>
    - date=YYYY-MM-DD
    """
    status_param = (request.query_params.get("status") or "").strip().upper()
    table_param = (request.query_params.get("tableId") or "").strip()
    date_param = (request.query_params.get("date") or "").strip()

    if status_param:
        queryset = queryset.filter(status=status_param)

    if table_param:
        try:
            queryset = queryset.filter(table_id=int(table_param))
        except ValueError:
            raise ValidationError({"tableId": ["tableId must be an integer"]})

    if date_param:
        try:
            day = parse_date(date_param)
        except ValueError:
            day = None
        if day is None:
            raise ValidationError({"date": ["date must be formatted as YYYY-MM-DD"]})
        queryset = orders_for_day(queryset, day)

    return queryset


# =====================================
# LIST / CREATE
# =====================================

class OrderListCreateView(EnvelopeMixin, generics.ListCreateAPIView):

    serializer_class = OrderSerializer
    success_messages = {"POST": "Order placed successfully"}

    def get_permissions(self):
        if self.request.method == "POST":
            return [AllowAny()]
        return [IsAdminOrStaff()]

    def get_queryset(self):
        qs = with_details(Order.objects.all()).order_by("-created_at", "-id")
        return apply_order_filters(self.request, qs)

    def create(self, request, *args, **kwargs):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = create_order(**serializer.validated_data)

        order = with_details(Order.objects.all()).get(pk=order.pk)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


# =====================================
# ACTIVE ORDERS FOR A TABLE (customer)
# =====================================

class TableOrderListView(EnvelopeMixin, APIView):
    permission_classes = [AllowAny]

    def get(self, request, table_number):
        table = get_table_by_number(table_number)
        orders = active_orders_for_table(table)
        return Response(OrderSerializer(orders, many=True).data)


# =====================================
# DETAIL / UPDATE / DELETE
# =====================================

class OrderDetailView(EnvelopeMixin, generics.RetrieveUpdateDestroyAPIView):

    queryset = with_details(Order.objects.all())
    not_found_message = "Order not found"
    serializer_class = OrderSerializer
    success_messages = {
        "PUT": "Order updated successfully",
        "PATCH": "Order updated successfully",
        "DELETE": "Order deleted successfully",
    }

    def get_permissions(self):
        if self.request.method in ["PUT", "PATCH", "DELETE"]:
            return [IsAdminOrStaff()]
        return [AllowAny()]

    def update(self, request, *args, **kwargs):
        order = self.get_object()

        serializer = OrderUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = update_order(order, **serializer.validated_data)

        order = self.get_queryset().get(pk=order.pk)
        return Response(OrderSerializer(order).data)

    def perform_destroy(self, instance):
        logger.info("Deleting order %s", instance.order_number)
        instance.delete()
