import logging
import random
from datetime import datetime, time, timedelta

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from emenu.exceptions import ConflictError
from emenu.transitions import validate_transition
from menu.models import MenuItem
from tables.models import Table
from tables.services import get_table_by_number, set_table_status

from .models import Order, OrderItem

logger = logging.getLogger(__name__)

_UNSET = object()


def generate_order_number(day=None):
    day = day or timezone.localdate()
    return f"ORD-{day:%Y%m%d}-{random.randint(0, 9999):04d}"


def _insert_order(**fields):
    """
    Insert an order under a fresh random number, retrying on a
    collision with an existing order number.
    """
    attempts = max(1, settings.EMENU_ORDER_NUMBER_ATTEMPTS)

    for attempt in range(1, attempts + 1):
        order_number = generate_order_number()
        try:
            with transaction.atomic():
                return Order.objects.create(order_number=order_number, **fields)
        except IntegrityError:
            if not Order.objects.filter(order_number=order_number).exists():
                raise
            logger.warning(
                "Order number %s already taken (attempt %d/%d)",
                order_number, attempt, attempts
            )

    raise ConflictError("Could not allocate a unique order number, please try again")


# =====================================
# CREATE ORDER
# =====================================

def create_order(table_number, customer_name, items, notes=None):
    """
    Place an order for a table.

    ``items`` is a list of ``{"menu_item_id", "quantity", "notes"}`` dicts.
    Prices and names are copied from the menu at this instant; any unknown
    or disabled menu item rejects the whole order before anything is written.
    """
    if not table_number or not customer_name or not items:
        raise ValidationError("Table number, customer name, and items are required")

    table = get_table_by_number(table_number)

    # -------------------------
    # Resolve menu items (one query)
    # -------------------------
    menu_items = MenuItem.objects.in_bulk({item["menu_item_id"] for item in items})

    for item in items:
        menu_item = menu_items.get(item["menu_item_id"])
        if menu_item is None:
            raise ValidationError(f"Menu item {item['menu_item_id']} not found")
        if not menu_item.is_active or not menu_item.is_available:
            raise ValidationError(f"Menu item {item['menu_item_id']} is not available")

    # -------------------------
    # Snapshot lines + total
    # -------------------------
    total_amount = 0
    lines = []

    for item in items:
        menu_item = menu_items[item["menu_item_id"]]
        quantity = item["quantity"]

        total_amount += menu_item.price * quantity

        lines.append(
            OrderItem(
                menu_item=menu_item,
                quantity=quantity,
                unit_price=menu_item.price,
                item_name=menu_item.name,
                notes=item.get("notes") or None,
            )
        )

    with transaction.atomic():
        order = _insert_order(
            table=table,
            customer_name=customer_name,
            total_amount=total_amount,
            notes=notes or None,
        )

        for line in lines:
            line.order = order
        OrderItem.objects.bulk_create(lines)

        set_table_status(table, Table.OCCUPIED, reason=f"order {order.order_number}")

    logger.info(
        "Order %s placed for table %s: %d line(s), total %d",
        order.order_number, table.table_number, len(lines), total_amount
    )
    return order


# =====================================
# UPDATE ORDER
# =====================================

def update_order(order, status=None, notes=_UNSET):
    """Partial update; only the supplied fields change."""
    update_fields = ["updated_at"]

    if status:
        previous = order.status
        order.status = validate_transition(order, status.strip().upper())
        update_fields.append("status")
        logger.info("Order %s status %s -> %s", order.order_number, previous, order.status)

    if notes is not _UNSET:
        order.notes = notes
        update_fields.append("notes")

    order.save(update_fields=update_fields)
    return order


# =====================================
# QUERIES
# =====================================

def with_details(queryset):
    return queryset.select_related("table").prefetch_related("items__menu_item")


def orders_for_day(queryset, day):
    """Orders created in [day 00:00, day+1 00:00) server local time."""
    start = timezone.make_aware(datetime.combine(day, time.min))
    end = timezone.make_aware(datetime.combine(day + timedelta(days=1), time.min))
    return queryset.filter(created_at__gte=start, created_at__lt=end)


def active_orders_for_table(table):
    return with_details(
        Order.objects
        .filter(table=table)
        .exclude(status__in=Order.CLOSED_STATUSES)
        .order_by("-created_at", "-id")
    )
