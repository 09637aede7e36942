from rest_framework import serializers

from menu.models import MenuItem
from tables.serializers import TableBriefSerializer

from .models import Order, OrderItem


# -------------------------------
# OUTPUT
# -------------------------------

class MenuItemBriefSerializer(serializers.ModelSerializer):

    class Meta:
        model = MenuItem
        fields = ["id", "name", "price", "image"]


class OrderItemSerializer(serializers.ModelSerializer):
    menuItemId = serializers.IntegerField(source="menu_item_id", read_only=True)
    menuItem = MenuItemBriefSerializer(source="menu_item", read_only=True)
    unitPrice = serializers.IntegerField(source="unit_price", read_only=True)
    itemName = serializers.CharField(source="item_name", read_only=True)
    subtotal = serializers.IntegerField(read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "menuItemId",
            "menuItem",
            "itemName",
            "quantity",
            "unitPrice",
            "subtotal",
            "notes",
        ]


class OrderSerializer(serializers.ModelSerializer):
    orderNumber = serializers.CharField(source="order_number", read_only=True)
    tableId = serializers.IntegerField(source="table_id", read_only=True)
    table = TableBriefSerializer(read_only=True)
    customerName = serializers.CharField(source="customer_name", read_only=True)
    totalAmount = serializers.IntegerField(source="total_amount", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    orderItems = OrderItemSerializer(source="items", many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "orderNumber",
            "tableId",
            "table",
            "customerName",
            "totalAmount",
            "notes",
            "status",
            "createdAt",
            "updatedAt",
            "orderItems",
        ]
        read_only_fields = fields


# -------------------------------
# INPUT
# -------------------------------

class OrderLineInputSerializer(serializers.Serializer):
    menuItemId = serializers.IntegerField(source="menu_item_id")
    quantity = serializers.IntegerField(
        min_value=1,
        error_messages={"min_value": "Quantity must be greater than 0"}
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class OrderCreateSerializer(serializers.Serializer):
    tableNumber = serializers.CharField(source="table_number")
    customerName = serializers.CharField(source="customer_name", max_length=150)
    items = OrderLineInputSerializer(
        many=True,
        allow_empty=False,
        error_messages={"empty": "Order must contain at least one item"}
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class OrderUpdateSerializer(serializers.Serializer):
    status = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
