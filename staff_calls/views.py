from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrStaff
from emenu.responses import EnvelopeMixin
from emenu.serializers import StatusUpdateSerializer
from tables.services import get_table_by_number

from .models import StaffCall
from .serializers import StaffCallCreateSerializer, StaffCallSerializer
from .services import create_staff_call, update_staff_call_status


class StaffCallListCreateView(EnvelopeMixin, generics.ListCreateAPIView):
    """
    GET (staff) supports ?status= and ?tableId=, newest first.
    POST (public) is used by the customer at the table.
    """

    serializer_class = StaffCallSerializer
    success_messages = {"POST": "Staff call submitted successfully"}

    def get_permissions(self):
        if self.request.method == "POST":
            return [AllowAny()]
        return [IsAdminOrStaff()]

    def get_queryset(self):
        queryset = StaffCall.objects.select_related("table").order_by("-created_at", "-id")

        status_param = (self.request.query_params.get("status") or "").strip().upper()
        if status_param:
            queryset = queryset.filter(status=status_param)

        table_id = (self.request.query_params.get("tableId") or "").strip()
        if table_id.isdigit():
            queryset = queryset.filter(table_id=int(table_id))

        return queryset

    def create(self, request, *args, **kwargs):
        serializer = StaffCallCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        staff_call = create_staff_call(**serializer.validated_data)
        return Response(StaffCallSerializer(staff_call).data, status=status.HTTP_201_CREATED)


class PendingStaffCallListView(EnvelopeMixin, generics.ListAPIView):
    permission_classes = [IsAdminOrStaff]
    serializer_class = StaffCallSerializer

    def get_queryset(self):
        return (
            StaffCall.objects
            .filter(status=StaffCall.PENDING)
            .select_related("table")
            .order_by("created_at", "id")
        )


class TableStaffCallListView(EnvelopeMixin, APIView):
    permission_classes = [AllowAny]

    def get(self, request, table_number):
        table = get_table_by_number(table_number)
        staff_calls = (
            StaffCall.objects
            .filter(table=table)
            .select_related("table")
            .order_by("-created_at", "-id")
        )
        return Response(StaffCallSerializer(staff_calls, many=True).data)


class StaffCallDetailView(EnvelopeMixin, generics.RetrieveUpdateDestroyAPIView):

    permission_classes = [IsAdminOrStaff]
    queryset = StaffCall.objects.select_related("table")
    serializer_class = StaffCallSerializer
    not_found_message = "Staff call not found"
    success_messages = {
        "PUT": "Staff call updated successfully",
        "PATCH": "Staff call updated successfully",
        "DELETE": "Staff call deleted successfully",
    }

    def update(self, request, *args, **kwargs):
        staff_call = self.get_object()

        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        staff_call = update_staff_call_status(staff_call, serializer.validated_data["status"])
        return Response(StaffCallSerializer(staff_call).data)
