from django.db import models


class PaymentRequest(models.Model):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"

    STATUS_CHOICES = (
        (PENDING, "Pending"),
        (PROCESSING, "Processing"),
        (COMPLETED, "Completed"),
    )

    ALLOWED_TRANSITIONS = {
        PENDING: {PROCESSING, COMPLETED},
        PROCESSING: {COMPLETED},
    }

    table = models.ForeignKey(
        "tables.Table",
        on_delete=models.CASCADE,
        related_name="payment_requests"
    )

    customer_name = models.CharField(max_length=150)

    # Free text chosen by the customer, e.g. "Cash" or "Bank transfer".
    payment_method = models.CharField(max_length=50)

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=PENDING,
        db_index=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "payment request"

    def __str__(self):
        return f"Payment request #{self.pk} ({self.payment_method}, {self.status})"
