from django.contrib import admin

from .models import StaffCall


@admin.register(StaffCall)
class StaffCallAdmin(admin.ModelAdmin):
    list_display = ("id", "table", "customer_name", "reason", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("customer_name", "table__table_number")
