from django.contrib import admin

from .models import Table


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ("table_number", "table_name", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("table_number", "table_name")
