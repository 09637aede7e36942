from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrStaff
from emenu.responses import EnvelopeMixin
from emenu.serializers import StatusUpdateSerializer
from tables.services import get_table_by_number

from .models import PaymentRequest
from .serializers import PaymentRequestCreateSerializer, PaymentRequestSerializer
from .services import create_payment_request, update_payment_request_status


class PaymentRequestListCreateView(EnvelopeMixin, generics.ListCreateAPIView):

    serializer_class = PaymentRequestSerializer
    success_messages = {"POST": "Payment request submitted successfully"}

    def get_permissions(self):
        if self.request.method == "POST":
            return [AllowAny()]
        return [IsAdminOrStaff()]

    def get_queryset(self):
        queryset = PaymentRequest.objects.select_related("table").order_by("-created_at", "-id")

        status_param = (self.request.query_params.get("status") or "").strip().upper()
        if status_param:
            queryset = queryset.filter(status=status_param)

        table_id = (self.request.query_params.get("tableId") or "").strip()
        if table_id.isdigit():
            queryset = queryset.filter(table_id=int(table_id))

        return queryset

    def create(self, request, *args, **kwargs):
        serializer = PaymentRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment_request = create_payment_request(**serializer.validated_data)
        return Response(
            PaymentRequestSerializer(payment_request).data,
            status=status.HTTP_201_CREATED
        )


class PendingPaymentRequestListView(EnvelopeMixin, generics.ListAPIView):
    permission_classes = [IsAdminOrStaff]
    serializer_class = PaymentRequestSerializer

    def get_queryset(self):
        return (
            PaymentRequest.objects
            .filter(status=PaymentRequest.PENDING)
            .select_related("table")
            .order_by("created_at", "id")
        )


class TablePaymentRequestListView(EnvelopeMixin, APIView):
    permission_classes = [AllowAny]

    def get(self, request, table_number):
        table = get_table_by_number(table_number)
        payment_requests = (
            PaymentRequest.objects
            .filter(table=table)
            .select_related("table")
            .order_by("-created_at", "-id")
        )
        return Response(PaymentRequestSerializer(payment_requests, many=True).data)


class PaymentRequestDetailView(EnvelopeMixin, generics.RetrieveUpdateDestroyAPIView):

    permission_classes = [IsAdminOrStaff]
    queryset = PaymentRequest.objects.select_related("table")
    serializer_class = PaymentRequestSerializer
    not_found_message = "Payment request not found"
    success_messages = {
        "PUT": "Payment request updated successfully",
        "PATCH": "Payment request updated successfully",
        "DELETE": "Payment request deleted successfully",
    }

    def update(self, request, *args, **kwargs):
        payment_request = self.get_object()

        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment_request = update_payment_request_status(
            payment_request,
            serializer.validated_data["status"]
        )
        return Response(PaymentRequestSerializer(payment_request).data)
