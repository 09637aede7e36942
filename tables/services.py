import logging

from rest_framework.exceptions import NotFound, ValidationError

from .models import Table, normalize_table_number

logger = logging.getLogger(__name__)


def get_table_by_number(table_number):
    try:
        return Table.objects.get(table_number=normalize_table_number(table_number))
    except Table.DoesNotExist:
        raise NotFound("Table not found")


def set_table_status(table, status, reason="manual"):
    """
    The only place that writes Table.status.

    Called on order placement (OCCUPIED), payment completion (AVAILABLE)
    and manual staff updates. Writing the current value again is a no-op
    apart from the save.
    """
    valid_statuses = {choice[0] for choice in Table.STATUS_CHOICES}
    if status not in valid_statuses:
        raise ValidationError({
            "status": [f"Invalid status value. Allowed: {', '.join(sorted(valid_statuses))}"]
        })

    previous = table.status
    table.status = status
    table.save(update_fields=["status"])

    logger.info(
        "Table %s status %s -> %s (%s)",
        table.table_number, previous, status, reason
    )
    return table
