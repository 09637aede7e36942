import tempfile
from io import StringIO
from unittest import mock

import requests
from django.core.management import CommandError, call_command
from django.test import SimpleTestCase

from . import bus as events
from . import messages
from .bus import EventBus
from .cache import FileBackend, MemoryBackend, NotificationCache
from .client import ApiError, EmenuClient
from .messages import Notification, TableState
from .ordering import TableOrdering
from .poller import NotificationPoller


class FakeClient:
    """In-memory stand-in for EmenuClient holding the server side state of one table."""

    def __init__(self, table_status="OCCUPIED"):
        self.table_status = table_status
        self.orders = {}
        self.staff_calls = {}
        self.payment_requests = {}
        self.fail_with = None
        self.order_lookups = []
        self._next_id = 100

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def get_table(self, table_number):
        self._check()
        return {"id": 1, "tableNumber": table_number, "status": self.table_status}

    def get_table_orders(self, table_number):
        self._check()
        return [
            order for order in self.orders.values()
            if order["status"] not in ("COMPLETED", "CANCELLED")
        ]

    def get_table_staff_calls(self, table_number):
        self._check()
        return list(self.staff_calls.values())

    def get_table_payment_requests(self, table_number):
        self._check()
        return list(self.payment_requests.values())

    def get_order(self, order_id):
        self._check()
        self.order_lookups.append(order_id)
        if order_id not in self.orders:
            raise ApiError("Order not found", status_code=404)
        return self.orders[order_id]

    def create_order(self, table_number, customer_name, items, notes=None):
        self._next_id += 1
        order = {
            "id": self._next_id,
            "orderNumber": f"ORD-20240115-{self._next_id:04d}",
            "status": "PENDING",
            "orderItems": [
                {"itemName": f"Item {line['menuItemId']}", "quantity": line["quantity"]}
                for line in items
            ],
        }
        self.orders[order["id"]] = order
        return order

    def create_staff_call(self, table_number, customer_name, reason):
        self._next_id += 1
        staff_call = {"id": self._next_id, "reason": reason, "status": "PENDING"}
        self.staff_calls[staff_call["id"]] = staff_call
        return staff_call

    def create_payment_request(self, table_number, customer_name, payment_method):
        self._next_id += 1
        payment_request = {"id": self._next_id, "paymentMethod": payment_method, "status": "PENDING"}
        self.payment_requests[payment_request["id"]] = payment_request
        return payment_request


class PollerTestMixin:

    def setUp(self):
        self.api = FakeClient()
        self.bus = EventBus()
        self.cache = NotificationCache(MemoryBackend())
        self.poller = self._poller()
        self.ordering = TableOrdering("01", "An", self.api, self.bus)

    def tearDown(self):
        self.poller.close()

    def _poller(self):
        return NotificationPoller(
            "01", self.api, cache=self.cache, bus=self.bus, ack_delay=0
        )

    def _kinds(self, notifications):
        return [n.kind for n in notifications]


# ===================================================
# POLLER
# ===================================================

class NotificationPollerTests(PollerTestMixin, SimpleTestCase):

    def test_confirmation_notifies_exactly_once(self):
        order = self.ordering.place_order([{"menu_item_id": 1, "quantity": 2}])
        self.api.orders[order["id"]]["status"] = "CONFIRMED"

        first = self.poller.poll_once()
        second = self.poller.poll_once()

        self.assertEqual(self._kinds(first), [messages.ORDER_CONFIRMED])
        self.assertEqual(first[0].related_id, order["id"])
        self.assertEqual(first[0].sender, messages.RESTAURANT)
        self.assertEqual(second, [])

    def test_first_sighting_is_only_stored(self):
        self.api.orders[7] = {"id": 7, "status": "CONFIRMED"}
        self.api.staff_calls[8] = {"id": 8, "status": "ACKNOWLEDGED"}

        self.assertEqual(self.poller.poll_once(), [])
        self.assertEqual(self.poller.state.statuses["orders"][7], "CONFIRMED")
        self.assertEqual(self.poller.state.statuses["staff_calls"][8], "ACKNOWLEDGED")

    def test_completion_is_silent(self):
        order = self.ordering.place_order([{"menu_item_id": 1, "quantity": 1}])
        self.api.orders[order["id"]]["status"] = "CONFIRMED"
        self.poller.poll_once()
        self.api.orders[order["id"]]["status"] = "COMPLETED"

        self.assertEqual(self.poller.poll_once(), [])
        self.assertEqual(self.poller.state.statuses["orders"][order["id"]], "COMPLETED")

    def test_cancellation_seen_after_leaving_active_list(self):
        """Cancelled orders vanish from the table list and are looked up by id"""
        order = self.ordering.place_order([{"menu_item_id": 1, "quantity": 1}])
        self.api.orders[order["id"]]["status"] = "CANCELLED"

        added = self.poller.poll_once()

        self.assertEqual(self._kinds(added), [messages.ORDER_CANCELLED])
        self.assertEqual(self.api.order_lookups, [order["id"]])

        self.poller.poll_once()
        self.assertEqual(self.api.order_lookups, [order["id"]])

    def test_deleted_order_is_untracked(self):
        order = self.ordering.place_order([{"menu_item_id": 1, "quantity": 1}])
        del self.api.orders[order["id"]]

        self.assertEqual(self.poller.poll_once(), [])
        self.assertNotIn(order["id"], self.poller.state.statuses["orders"])

    def test_staff_call_acknowledged(self):
        staff_call = self.ordering.call_staff("More water")
        self.api.staff_calls[staff_call["id"]]["status"] = "ACKNOWLEDGED"

        added = self.poller.poll_once()

        self.assertEqual(self._kinds(added), [messages.STAFF_CALL_ACKNOWLEDGED])

    def test_payment_request_processing(self):
        payment_request = self.ordering.request_payment("Cash")
        self.api.payment_requests[payment_request["id"]]["status"] = "PROCESSING"

        added = self.poller.poll_once()

        self.assertEqual(self._kinds(added), [messages.PAYMENT_REQUEST_PROCESSING])

    def test_table_freed_clears_history(self):
        self.poller.poll_once()
        order = self.ordering.place_order([{"menu_item_id": 1, "quantity": 1}])
        self.assertEqual(len(self.poller.notifications), 2)

        self.api.orders[order["id"]]["status"] = "COMPLETED"
        self.api.table_status = "AVAILABLE"
        self.poller.poll_once()

        self.assertEqual(self.poller.notifications, [])
        self.assertEqual(self.poller.state.statuses["orders"], {})
        self.assertEqual(self.cache.load("01").notifications, [])

    def test_available_on_first_poll_keeps_history(self):
        """Nothing was observed before, so there is no transition to react to"""
        self.api.table_status = "AVAILABLE"
        self.ordering.place_order([{"menu_item_id": 1, "quantity": 1}])

        self.poller.poll_once()

        self.assertEqual(len(self.poller.notifications), 2)

    def test_failed_tick_is_logged_and_survived(self):
        self.api.fail_with = ApiError("Cannot reach server")

        with self.assertLogs("notifications.poller", level="WARNING"):
            self.assertEqual(self.poller.tick(), [])

        self.api.fail_with = None
        self.assertEqual(self.poller.tick(), [])

    def test_poll_once_propagates_errors(self):
        self.api.fail_with = ApiError("Cannot reach server")

        with self.assertRaises(ApiError):
            self.poller.poll_once()

    def test_state_survives_restart(self):
        order = self.ordering.place_order([{"menu_item_id": 1, "quantity": 1}])
        self.poller.close()

        self.api.orders[order["id"]]["status"] = "CONFIRMED"
        self.poller = NotificationPoller("01", self.api, cache=self.cache, ack_delay=0)

        added = self.poller.poll_once()

        self.assertEqual(self._kinds(added), [messages.ORDER_CONFIRMED])
        self.assertEqual(len(self.poller.notifications), 3)

    def test_new_notifications_are_published(self):
        seen = []
        self.bus.subscribe(
            events.NOTIFICATION_ADDED,
            lambda table_number, notification: seen.append((table_number, notification.kind)),
        )

        self.ordering.call_staff("Napkins")

        self.assertEqual(
            seen,
            [("01", messages.STAFF_CALL_CREATED), ("01", messages.REQUEST_RECEIVED)],
        )


class LocalEventTests(PollerTestMixin, SimpleTestCase):

    def test_order_placed_logs_customer_message_and_ack(self):
        order = self.ordering.place_order([
            {"menu_item_id": 1, "quantity": 2},
            {"menu_item_id": 3, "quantity": 1},
        ])

        customer, ack = self.poller.notifications
        self.assertEqual(customer.sender, messages.CUSTOMER)
        self.assertEqual(customer.content, "Ordered: Item 1 x2, Item 3 x1")
        self.assertEqual(customer.status, "PENDING")
        self.assertEqual(ack.kind, messages.REQUEST_RECEIVED)
        self.assertEqual(ack.content, messages.RECEIVED_TEXT)
        self.assertEqual(self.poller.state.statuses["orders"][order["id"]], "PENDING")

    def test_ack_is_delayed(self):
        self.poller.close()
        self.poller = NotificationPoller(
            "01", self.api, cache=self.cache, bus=self.bus, ack_delay=30
        )

        with mock.patch("notifications.poller.threading.Timer") as timer_cls:
            self.ordering.request_payment("Cash")

        self.assertEqual(self._kinds(self.poller.notifications), [messages.PAYMENT_REQUEST_CREATED])
        timer_cls.assert_called_once()
        self.assertEqual(timer_cls.call_args[0][0], 30)
        timer_cls.return_value.start.assert_called_once()

    def test_shared_bus_tracks_own_table_only(self):
        """Two tables on one bus: table 02's order never shows up at table 01"""
        other_api = FakeClient()
        other_poller = NotificationPoller(
            "02", other_api, cache=self.cache, bus=self.bus, ack_delay=0
        )
        self.addCleanup(other_poller.close)

        order = TableOrdering("02", "Binh", other_api, self.bus).place_order([
            {"menu_item_id": 1, "quantity": 1},
        ])
        other_api.orders[order["id"]]["status"] = "CONFIRMED"

        self.assertEqual(self.poller.poll_once(), [])
        self.assertEqual(self.poller.notifications, [])
        self.assertEqual(self.poller.state.statuses["orders"], {})
        self.assertEqual(self.api.order_lookups, [])

        self.assertEqual(
            self._kinds(other_poller.poll_once()), [messages.ORDER_CONFIRMED]
        )
        self.assertEqual(
            self._kinds(other_poller.notifications),
            [messages.ORDER_PLACED, messages.REQUEST_RECEIVED, messages.ORDER_CONFIRMED],
        )

    def test_table_number_is_normalized(self):
        TableOrdering("1", "An", self.api, self.bus).call_staff("Water")

        self.assertEqual(
            self._kinds(self.poller.notifications),
            [messages.STAFF_CALL_CREATED, messages.REQUEST_RECEIVED],
        )

    def test_unsubscribed_after_close(self):
        self.poller.close()

        self.ordering.call_staff("Water")

        self.assertEqual(self.poller.notifications, [])


# ===================================================
# BUS / CACHE
# ===================================================

class EventBusTests(SimpleTestCase):

    def test_handlers_receive_payload_in_order(self):
        bus = EventBus()
        calls = []
        bus.subscribe("ping", lambda value: calls.append(("a", value)))
        bus.subscribe("ping", lambda value: calls.append(("b", value)))

        delivered = bus.publish("ping", value=1)

        self.assertEqual(delivered, 2)
        self.assertEqual(calls, [("a", 1), ("b", 1)])

    def test_failing_handler_does_not_block_others(self):
        bus = EventBus()
        calls = []

        def broken(**kwargs):
            raise RuntimeError("boom")

        bus.subscribe("ping", broken)
        bus.subscribe("ping", lambda **kwargs: calls.append(kwargs))

        with self.assertLogs("notifications.bus", level="ERROR"):
            bus.publish("ping", value=2)

        self.assertEqual(calls, [{"value": 2}])

    def test_unsubscribe(self):
        bus = EventBus()
        calls = []
        unsubscribe = bus.subscribe("ping", lambda **kwargs: calls.append(kwargs))

        unsubscribe()

        self.assertEqual(bus.publish("ping"), 0)
        self.assertEqual(calls, [])


class NotificationCacheTests(SimpleTestCase):

    def _state(self):
        state = TableState(table_status="OCCUPIED")
        state.notifications.append(
            Notification(
                sender=messages.CUSTOMER,
                content="Ordered: Pho x1",
                category=messages.ORDER,
                kind=messages.ORDER_PLACED,
                related_id=12,
                status="PENDING",
            )
        )
        state.statuses["orders"][12] = "PENDING"
        return state

    def test_file_backend_persists_per_table(self):
        with tempfile.TemporaryDirectory() as directory:
            NotificationCache(FileBackend(directory)).save("01", self._state())

            cache = NotificationCache(FileBackend(directory))
            loaded = cache.load("01")

            self.assertEqual(loaded.table_status, "OCCUPIED")
            self.assertEqual(loaded.statuses["orders"], {12: "PENDING"})
            self.assertEqual(loaded.notifications[0].content, "Ordered: Pho x1")
            self.assertEqual(cache.load("02").notifications, [])

            cache.clear("01")
            self.assertIsNone(cache.load("01").table_status)

    def test_unreadable_cache_starts_fresh(self):
        backend = MemoryBackend()
        cache = NotificationCache(backend)
        backend.set(cache.key_for("01"), "{not json")

        with self.assertLogs("notifications.cache", level="WARNING"):
            state = cache.load("01")

        self.assertEqual(state.notifications, [])


# ===================================================
# HTTP CLIENT
# ===================================================

class EmenuClientTests(SimpleTestCase):

    def _client(self, status_code=200, payload=None, error=None):
        session = mock.Mock()
        session.headers = {}
        if error is not None:
            session.request.side_effect = error
        else:
            response = mock.Mock(status_code=status_code, ok=200 <= status_code < 400)
            response.json.return_value = payload
            session.request.return_value = response
        return EmenuClient("http://emenu.test/api/", session=session), session

    def test_returns_envelope_data(self):
        client, session = self._client(payload={"success": True, "data": {"status": "OCCUPIED"}})

        self.assertEqual(client.get_table("01"), {"status": "OCCUPIED"})
        session.request.assert_called_once_with(
            "GET", "http://emenu.test/api/tables/number/01", timeout=10
        )

    def test_server_message_is_raised(self):
        client, _ = self._client(
            status_code=404, payload={"success": False, "message": "Table not found"}
        )

        with self.assertRaises(ApiError) as ctx:
            client.get_table("99")

        self.assertEqual(ctx.exception.message, "Table not found")
        self.assertEqual(ctx.exception.status_code, 404)

    def test_network_failure(self):
        client, _ = self._client(error=requests.exceptions.ConnectionError("refused"))

        with self.assertLogs("notifications.client", level="WARNING"):
            with self.assertRaises(ApiError) as ctx:
                client.get_table_orders("01")

        self.assertEqual(ctx.exception.message, "Cannot reach server")
        self.assertIsNone(ctx.exception.status_code)

    def test_create_order_body(self):
        client, session = self._client(
            status_code=201, payload={"success": True, "data": {"id": 5}}
        )

        client.create_order("01", "An", [{"menuItemId": 1, "quantity": 2}])

        session.request.assert_called_once_with(
            "POST",
            "http://emenu.test/api/orders",
            json={
                "tableNumber": "01",
                "customerName": "An",
                "items": [{"menuItemId": 1, "quantity": 2}],
            },
            timeout=10,
        )


class WatchTableCommandTests(SimpleTestCase):

    def test_once_prints_stored_log(self):
        fake = FakeClient()
        with tempfile.TemporaryDirectory() as directory:
            state = TableState()
            state.notifications.append(
                Notification(
                    sender=messages.CUSTOMER,
                    content="Called staff: Water",
                    category=messages.STAFF_CALL,
                    kind=messages.STAFF_CALL_CREATED,
                    related_id=3,
                )
            )
            NotificationCache(FileBackend(directory)).save("01", state)

            out = StringIO()
            with mock.patch(
                "notifications.management.commands.watch_table.EmenuClient",
                return_value=fake,
            ):
                call_command("watch_table", "01", "--once", "--cache-dir", directory, stdout=out)

        self.assertIn("customer: Called staff: Water", out.getvalue())

    def test_once_reports_unreachable_server(self):
        fake = FakeClient()
        fake.fail_with = ApiError("Cannot reach server")

        with tempfile.TemporaryDirectory() as directory:
            with mock.patch(
                "notifications.management.commands.watch_table.EmenuClient",
                return_value=fake,
            ):
                with self.assertRaises(CommandError) as ctx:
                    call_command("watch_table", "01", "--once", "--cache-dir", directory)

        self.assertEqual(str(ctx.exception), "Cannot reach server")
