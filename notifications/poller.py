import logging
import threading

from tables.models import normalize_table_number

from . import bus as events
from . import messages
from .cache import NotificationCache
from .client import ApiError
from .messages import Notification

logger = logging.getLogger(__name__)

AVAILABLE = "AVAILABLE"
CLOSED_ORDER_STATUSES = ("COMPLETED", "CANCELLED")


# ===================================================
# TRANSITION RULES
# ===================================================
# Each rule receives (previous, current) for a record that was already
# tracked and returns (kind, text) or None.

def order_transition(previous, current):
    if previous == current:
        return None
    if previous == "PENDING" and current == "CONFIRMED":
        return messages.ORDER_CONFIRMED, messages.CONFIRMED_TEXT
    if current == "CANCELLED":
        return messages.ORDER_CANCELLED, messages.CANCELLED_TEXT
    return None


def staff_call_transition(previous, current):
    if previous != current and current == "ACKNOWLEDGED":
        return messages.STAFF_CALL_ACKNOWLEDGED, messages.CONFIRMED_TEXT
    return None


def payment_request_transition(previous, current):
    if previous != current and current == "PROCESSING":
        return messages.PAYMENT_REQUEST_PROCESSING, messages.CONFIRMED_TEXT
    return None


class NotificationPoller:
    """
    Periodically compares the server state of one table with what was
    last observed and turns interesting status changes into customer
    notifications.

    State (log + tracked statuses) is kept in a NotificationCache so it
    survives restarts. A table going back to AVAILABLE wipes it.
    """

    def __init__(
        self,
        table_number,
        client,
        cache=None,
        bus=None,
        interval=5.0,
        ack_delay=0.5,
    ):
        self.table_number = table_number
        self.client = client
        self.cache = cache if cache is not None else NotificationCache()
        self.bus = bus
        self.interval = interval
        self.ack_delay = ack_delay

        self.state = self.cache.load(table_number)

        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread = None
        self._timers = []
        self._unsubscribers = []

        if bus is not None:
            self._unsubscribers = [
                bus.subscribe(events.ORDER_PLACED, self.on_order_placed),
                bus.subscribe(events.STAFF_CALL_CREATED, self.on_staff_call_created),
                bus.subscribe(events.PAYMENT_REQUEST_CREATED, self.on_payment_request_created),
            ]

    @property
    def notifications(self):
        with self._lock:
            return list(self.state.notifications)

    # ===================================================
    # POLLING
    # ===================================================

    def poll_once(self):
        """
        Run one comparison against the server and return the
        notifications it produced. ApiError propagates.
        """
        table = self.client.get_table(self.table_number)
        orders = self.client.get_table_orders(self.table_number)
        staff_calls = self.client.get_table_staff_calls(self.table_number)
        payment_requests = self.client.get_table_payment_requests(self.table_number)

        with self._lock:
            added = []

            self._check_table(table["status"])

            seen_orders = set()
            for order in orders:
                seen_orders.add(order["id"])
                added += self._observe("orders", messages.ORDER, order, order_transition)

            added += self._refresh_missing_orders(seen_orders)

            for staff_call in staff_calls:
                added += self._observe(
                    "staff_calls", messages.STAFF_CALL, staff_call, staff_call_transition
                )

            for payment_request in payment_requests:
                added += self._observe(
                    "payment_requests",
                    messages.PAYMENT_REQUEST,
                    payment_request,
                    payment_request_transition,
                )

            self._save()

        for notification in added:
            self._announce(notification)

        return added

    def tick(self):
        """poll_once for the background loop; failures are logged, not raised."""
        try:
            return self.poll_once()
        except ApiError as exc:
            logger.warning("Polling table %s failed: %s", self.table_number, exc.message)
        except Exception:
            logger.exception("Polling table %s failed", self.table_number)
        return []

    def _check_table(self, current):
        previous = self.state.table_status

        if previous and previous != current and current == AVAILABLE:
            logger.info(
                "Table %s is %s again, clearing %d notification(s)",
                self.table_number, current, len(self.state.notifications)
            )
            self.state.reset()

        self.state.table_status = current

    def _observe(self, group, category, record, rule):
        tracked = self.state.statuses[group]
        record_id = record["id"]
        current = record["status"]
        previous = tracked.get(record_id)

        tracked[record_id] = current

        if previous is None:
            return []

        outcome = rule(previous, current)
        if outcome is None:
            return []

        kind, text = outcome
        return [self._append(messages.RESTAURANT, text, category, kind, record_id, current)]

    def _refresh_missing_orders(self, seen_ids):
        """
        The table order list hides closed orders, so tracked orders that
        disappeared are fetched one by one to learn their final status.
        """
        added = []
        tracked = self.state.statuses["orders"]

        for order_id, status in list(tracked.items()):
            if order_id in seen_ids or status in CLOSED_ORDER_STATUSES:
                continue

            try:
                order = self.client.get_order(order_id)
            except ApiError as exc:
                if exc.status_code == 404:
                    logger.info("Order %s no longer exists, untracking", order_id)
                    del tracked[order_id]
                    continue
                raise

            added += self._observe("orders", messages.ORDER, order, order_transition)

        return added

    # ===================================================
    # LOCAL EVENTS
    # ===================================================

    def _is_own_table(self, table_number):
        return normalize_table_number(table_number) == normalize_table_number(self.table_number)

    def on_order_placed(self, order, table_number=None, **kwargs):
        if not self._is_own_table(table_number):
            return
        self._track_local(
            "orders", messages.ORDER, messages.ORDER_PLACED,
            order["id"], messages.describe_order(order)
        )

    def on_staff_call_created(self, staff_call, table_number=None, **kwargs):
        if not self._is_own_table(table_number):
            return
        self._track_local(
            "staff_calls", messages.STAFF_CALL, messages.STAFF_CALL_CREATED,
            staff_call["id"], messages.describe_staff_call(staff_call)
        )

    def on_payment_request_created(self, payment_request, table_number=None, **kwargs):
        if not self._is_own_table(table_number):
            return
        self._track_local(
            "payment_requests", messages.PAYMENT_REQUEST, messages.PAYMENT_REQUEST_CREATED,
            payment_request["id"], messages.describe_payment_request(payment_request)
        )

    def _track_local(self, group, category, kind, record_id, text):
        with self._lock:
            notification = self._append(
                messages.CUSTOMER, text, category, kind, record_id, "PENDING"
            )
            self.state.statuses[group][record_id] = "PENDING"
            self._save()

        self._announce(notification)

        if self.ack_delay and self.ack_delay > 0:
            timer = threading.Timer(
                self.ack_delay, self._acknowledge, args=(category, record_id)
            )
            timer.daemon = True
            with self._lock:
                self._timers = [t for t in self._timers if t.is_alive()]
                self._timers.append(timer)
            timer.start()
        else:
            self._acknowledge(category, record_id)

    def _acknowledge(self, category, record_id):
        with self._lock:
            notification = self._append(
                messages.RESTAURANT, messages.RECEIVED_TEXT,
                category, messages.REQUEST_RECEIVED, record_id
            )
            self._save()

        self._announce(notification)

    # ===================================================
    # HELPERS
    # ===================================================

    def _append(self, sender, text, category, kind, related_id=None, status=None):
        notification = Notification(
            sender=sender,
            content=text,
            category=category,
            kind=kind,
            related_id=related_id,
            status=status,
        )
        self.state.notifications.append(notification)
        logger.info("Table %s: %s (%s #%s)", self.table_number, kind, category, related_id)
        return notification

    def _announce(self, notification):
        if self.bus is not None:
            self.bus.publish(
                events.NOTIFICATION_ADDED,
                table_number=self.table_number,
                notification=notification,
            )

    def _save(self):
        self.cache.save(self.table_number, self.state)

    # ===================================================
    # LOOP
    # ===================================================

    def run(self):
        """Poll until stop() is called. Blocks the calling thread."""
        while not self._stop_event.is_set():
            self.tick()
            self._stop_event.wait(self.interval)

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run,
            name=f"emenu-poller-{self.table_number}",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout=None):
        self._stop_event.set()

        with self._lock:
            timers, self._timers = self._timers, []
        for timer in timers:
            timer.cancel()

        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        self._thread = None

    def close(self):
        self.stop()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
