import logging

from django.db import transaction
from rest_framework.exceptions import ValidationError

from emenu.transitions import validate_transition
from tables.models import Table
from tables.services import get_table_by_number, set_table_status

from .models import PaymentRequest

logger = logging.getLogger(__name__)


def create_payment_request(table_number, customer_name, payment_method):
    if not table_number or not customer_name or not payment_method:
        raise ValidationError("Table number, customer name, and payment method are required")

    table = get_table_by_number(table_number)

    payment_request = PaymentRequest.objects.create(
        table=table,
        customer_name=customer_name,
        payment_method=payment_method,
    )

    logger.info(
        "Payment request %s (%s) created for table %s",
        payment_request.pk, payment_method, table.table_number
    )
    return payment_request


def update_payment_request_status(payment_request, status):
    """
    Persist the new status. Reaching COMPLETED frees the table, even
    when the request was already completed or the table already free.
    """
    if not status:
        raise ValidationError("Status is required")

    previous = payment_request.status
    payment_request.status = validate_transition(payment_request, status.strip().upper())

    with transaction.atomic():
        payment_request.save(update_fields=["status", "updated_at"])

        if payment_request.status == PaymentRequest.COMPLETED:
            set_table_status(
                payment_request.table,
                Table.AVAILABLE,
                reason=f"payment request {payment_request.pk} completed"
            )

    logger.info(
        "Payment request %s status %s -> %s",
        payment_request.pk, previous, payment_request.status
    )
    return payment_request
