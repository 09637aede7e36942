import logging

from rest_framework.exceptions import ValidationError

from emenu.transitions import validate_transition
from tables.services import get_table_by_number

from .models import StaffCall

logger = logging.getLogger(__name__)


def create_staff_call(table_number, customer_name, reason):
    if not table_number or not customer_name or not reason:
        raise ValidationError("Table number, customer name, and reason are required")

    table = get_table_by_number(table_number)

    staff_call = StaffCall.objects.create(
        table=table,
        customer_name=customer_name,
        reason=reason,
    )

    logger.info("Staff call %s created for table %s", staff_call.pk, table.table_number)
    return staff_call


def update_staff_call_status(staff_call, status):
    """Persist the new status. Staff calls never touch the table."""
    if not status:
        raise ValidationError("Status is required")

    previous = staff_call.status
    staff_call.status = validate_transition(staff_call, status.strip().upper())
    staff_call.save(update_fields=["status", "updated_at"])

    logger.info("Staff call %s status %s -> %s", staff_call.pk, previous, staff_call.status)
    return staff_call
