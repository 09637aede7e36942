from django.db import models


class Order(models.Model):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    STATUS_CHOICES = (
        (PENDING, "Pending"),
        (CONFIRMED, "Confirmed"),
        (COMPLETED, "Completed"),
        (CANCELLED, "Cancelled"),
    )

    CLOSED_STATUSES = (COMPLETED, CANCELLED)

    ALLOWED_TRANSITIONS = {
        PENDING: {CONFIRMED, COMPLETED, CANCELLED},
        CONFIRMED: {COMPLETED, CANCELLED},
    }

    # ORD-20240115-0042
    order_number = models.CharField(max_length=30, unique=True)

    table = models.ForeignKey(
        "tables.Table",
        on_delete=models.CASCADE,
        related_name="orders"
    )

    customer_name = models.CharField(max_length=150)

    total_amount = models.PositiveIntegerField(default=0)

    notes = models.TextField(blank=True, null=True)

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=PENDING,
        db_index=True
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.order_number


class OrderItem(models.Model):

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items"
    )

    # Kept nullable so order history survives menu item deletion.
    menu_item = models.ForeignKey(
        "menu.MenuItem",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items"
    )

    quantity = models.PositiveIntegerField()

    # Snapshots taken when the order is placed, never recomputed.
    unit_price = models.PositiveIntegerField()
    item_name = models.CharField(max_length=200)

    notes = models.TextField(blank=True, null=True)

    @property
    def subtotal(self):
        return self.unit_price * self.quantity

    def __str__(self):
        return f"{self.quantity} x {self.item_name} ({self.order_id})"
