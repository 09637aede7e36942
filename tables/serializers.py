from rest_framework import serializers
from rest_framework.validators import UniqueValidator

from .models import Table, normalize_table_number
from .services import set_table_status


class TableNumberField(serializers.CharField):

    def to_internal_value(self, data):
        return normalize_table_number(super().to_internal_value(data))


class TableSerializer(serializers.ModelSerializer):
    tableNumber = TableNumberField(
        source="table_number",
        max_length=10,
        validators=[
            UniqueValidator(
                queryset=Table.objects.all(),
                message="Table number already exists"
            )
        ]
    )
    tableName = serializers.CharField(source="table_name", max_length=100)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Table
        fields = ["id", "tableNumber", "tableName", "status", "createdAt"]
        extra_kwargs = {
            "status": {"required": False},
        }

    def create(self, validated_data):
        status = validated_data.pop("status", None)
        instance = super().create(validated_data)

        if status is not None and status != instance.status:
            set_table_status(instance, status, reason="created")

        return instance

    def update(self, instance, validated_data):
        status = validated_data.pop("status", None)
        instance = super().update(instance, validated_data)

        if status is not None:
            set_table_status(instance, status, reason="staff update")

        return instance


class TableBriefSerializer(serializers.ModelSerializer):
    tableNumber = serializers.CharField(source="table_number", read_only=True)
    tableName = serializers.CharField(source="table_name", read_only=True)

    class Meta:
        model = Table
        fields = ["id", "tableNumber", "tableName"]
