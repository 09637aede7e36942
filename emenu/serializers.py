from rest_framework import serializers


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField(
        error_messages={
            "required": "Status is required",
            "blank": "Status is required",
        }
    )
