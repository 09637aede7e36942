import logging

from . import bus as events

logger = logging.getLogger(__name__)


class TableOrdering:
    """
    Customer actions at one table. Each successful request is published
    on the bus so the notification poller can log and track it.
    """

    def __init__(self, table_number, customer_name, client, bus):
        self.table_number = table_number
        self.customer_name = customer_name
        self.client = client
        self.bus = bus

    def place_order(self, items, notes=None):
        """
        ``items`` is a list of dicts with ``menu_item_id``, ``quantity``
        and optionally ``notes``.
        """
        lines = []
        for item in items:
            line = {"menuItemId": item["menu_item_id"], "quantity": item["quantity"]}
            if item.get("notes"):
                line["notes"] = item["notes"]
            lines.append(line)

        order = self.client.create_order(
            self.table_number, self.customer_name, lines, notes=notes
        )
        logger.info("Placed order %s at table %s", order.get("orderNumber"), self.table_number)

        self.bus.publish(events.ORDER_PLACED, table_number=self.table_number, order=order)
        return order

    def call_staff(self, reason):
        staff_call = self.client.create_staff_call(
            self.table_number, self.customer_name, reason
        )
        self.bus.publish(
            events.STAFF_CALL_CREATED, table_number=self.table_number, staff_call=staff_call
        )
        return staff_call

    def request_payment(self, payment_method):
        payment_request = self.client.create_payment_request(
            self.table_number, self.customer_name, payment_method
        )
        self.bus.publish(
            events.PAYMENT_REQUEST_CREATED,
            table_number=self.table_number,
            payment_request=payment_request,
        )
        return payment_request
