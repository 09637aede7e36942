from django.contrib import admin

from .models import PaymentRequest


@admin.register(PaymentRequest)
class PaymentRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "table", "customer_name", "payment_method", "status", "created_at")
    list_filter = ("status", "payment_method")
    search_fields = ("customer_name", "table__table_number")
