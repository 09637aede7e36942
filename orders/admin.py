from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("unit_price", "item_name")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "table", "customer_name", "total_amount", "status", "created_at")
    list_filter = ("status", "created_at")
    search_fields = ("order_number", "customer_name", "table__table_number")
    readonly_fields = ("order_number", "total_amount", "created_at", "updated_at")
    inlines = [OrderItemInline]
