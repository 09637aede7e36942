from rest_framework import serializers

from tables.serializers import TableBriefSerializer

from .models import PaymentRequest


class PaymentRequestSerializer(serializers.ModelSerializer):
    tableId = serializers.IntegerField(source="table_id", read_only=True)
    table = TableBriefSerializer(read_only=True)
    customerName = serializers.CharField(source="customer_name", read_only=True)
    paymentMethod = serializers.CharField(source="payment_method", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = PaymentRequest
        fields = [
            "id",
            "tableId",
            "table",
            "customerName",
            "paymentMethod",
            "status",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


class PaymentRequestCreateSerializer(serializers.Serializer):
    tableNumber = serializers.CharField(source="table_number")
    customerName = serializers.CharField(source="customer_name", max_length=150)
    paymentMethod = serializers.CharField(source="payment_method", max_length=50)
