from django.db import models


def normalize_table_number(value):
    """Purely numeric table numbers are zero-padded to two digits ("5" -> "05")."""
    value = str(value or "").strip()
    if value.isdigit():
        return value.zfill(2)
    return value


class Table(models.Model):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"

    STATUS_CHOICES = (
        (AVAILABLE, "Available"),
        (OCCUPIED, "Occupied"),
    )

    table_number = models.CharField(max_length=10, unique=True)  # 01, 02, VIP1
    table_name = models.CharField(max_length=100)
    status = models.CharField(max_length=15, choices=STATUS_CHOICES, default=AVAILABLE, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["table_number"]

    def save(self, *args, **kwargs):
        self.table_number = normalize_table_number(self.table_number)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.table_number
