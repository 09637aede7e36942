from django.db import models


class StaffCall(models.Model):
    PENDING = "PENDING"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    COMPLETED = "COMPLETED"

    STATUS_CHOICES = (
        (PENDING, "Pending"),
        (ACKNOWLEDGED, "Acknowledged"),
        (COMPLETED, "Completed"),
    )

    ALLOWED_TRANSITIONS = {
        PENDING: {ACKNOWLEDGED, COMPLETED},
        ACKNOWLEDGED: {COMPLETED},
    }

    table = models.ForeignKey(
        "tables.Table",
        on_delete=models.CASCADE,
        related_name="staff_calls"
    )

    customer_name = models.CharField(max_length=150)
    reason = models.TextField()

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
        verbose_name = "staff call"

    def __str__(self):
        return f"Staff call #{self.pk} ({self.status})"
