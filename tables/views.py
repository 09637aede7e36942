from rest_framework import generics
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrStaff, IsAdminRole
from emenu.responses import EnvelopeMixin
from orders.serializers import OrderSerializer
from orders.services import active_orders_for_table
from payments.models import PaymentRequest
from payments.serializers import PaymentRequestSerializer
from staff_calls.models import StaffCall
from staff_calls.serializers import StaffCallSerializer

from .models import Table
from .serializers import TableSerializer
from .services import get_table_by_number


class TableListCreateView(EnvelopeMixin, generics.ListCreateAPIView):

    serializer_class = TableSerializer
    success_messages = {"POST": "Table created successfully"}

    def get_queryset(self):
        queryset = Table.objects.all().order_by("table_number")

        status = (self.request.query_params.get("status") or "").strip().upper()
        if status:
            queryset = queryset.filter(status=status)

        return queryset

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAdminRole()]
        return [AllowAny()]


class TableByNumberView(EnvelopeMixin, APIView):
    permission_classes = [AllowAny]

    def get(self, request, table_number):
        table = get_table_by_number(table_number)
        return Response(TableSerializer(table).data)


class TableDetailView(EnvelopeMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    GET joins everything the table still needs attention for:
    active orders, pending staff calls and pending payment requests.
    """

    queryset = Table.objects.all()
    not_found_message = "Table not found"
    serializer_class = TableSerializer
    success_messages = {
        "PUT": "Table updated successfully",
        "PATCH": "Table updated successfully",
        "DELETE": "Table deleted successfully",
    }

    def get_permissions(self):
        if self.request.method in ["PUT", "PATCH"]:
            return [IsAdminOrStaff()]
        if self.request.method == "DELETE":
            return [IsAdminRole()]
        return [AllowAny()]

    def retrieve(self, request, *args, **kwargs):
        table = self.get_object()

        staff_calls = (
            StaffCall.objects
            .filter(table=table, status=StaffCall.PENDING)
            .select_related("table")
            .order_by("created_at", "id")
        )
        payment_requests = (
            PaymentRequest.objects
            .filter(table=table, status=PaymentRequest.PENDING)
            .select_related("table")
            .order_by("created_at", "id")
        )

        data = TableSerializer(table).data
        data["orders"] = OrderSerializer(active_orders_for_table(table), many=True).data
        data["staffCalls"] = StaffCallSerializer(staff_calls, many=True).data
        data["paymentRequests"] = PaymentRequestSerializer(payment_requests, many=True).data

        return Response(data)

    def put(self, request, *args, **kwargs):
        return self.partial_update(request, *args, **kwargs)
