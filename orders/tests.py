from datetime import date, datetime
from unittest import mock

from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.test import APITestCase

from accounts.models import User
from emenu.exceptions import ConflictError
from menu.models import Category, MenuItem
from tables.models import Table

from .models import Order, OrderItem
from .services import (
    active_orders_for_table,
    create_order,
    generate_order_number,
    orders_for_day,
    update_order,
)


class OrderFixtureMixin:

    def setUp(self):
        self.table = Table.objects.create(table_number="01", table_name="Table 1")
        self.category = Category.objects.create(slug="main", name="Main dishes")
        self.goi_cuon = MenuItem.objects.create(name="Goi cuon", price=45000, category=self.category)
        self.pho = MenuItem.objects.create(name="Pho", price=75000, category=self.category)
        self.sold_out = MenuItem.objects.create(
            name="Bun bo", price=70000, category=self.category, is_available=False
        )


# =====================================
# SERVICE
# =====================================

class CreateOrderTests(OrderFixtureMixin, TestCase):
    """Order placement snapshots prices and occupies the table"""

    def test_total_is_sum_of_lines(self):
        order = create_order(
            "01",
            "An",
            [
                {"menu_item_id": self.goi_cuon.id, "quantity": 2},
                {"menu_item_id": self.pho.id, "quantity": 1, "notes": "no onion"},
            ],
        )

        self.assertEqual(order.total_amount, 45000 * 2 + 75000)
        self.assertEqual(order.status, Order.PENDING)
        self.assertEqual(order.items.count(), 2)

        line = order.items.get(menu_item=self.pho)
        self.assertEqual(line.unit_price, 75000)
        self.assertEqual(line.item_name, "Pho")
        self.assertEqual(line.notes, "no onion")

    def test_table_becomes_occupied(self):
        create_order("1", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.OCCUPIED)

    def test_order_number_format(self):
        order = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])

        today = timezone.localdate().strftime("%Y%m%d")
        self.assertRegex(order.order_number, rf"^ORD-{today}-\d{{4}}$")

    def test_generate_order_number_for_given_day(self):
        number = generate_order_number(date(2024, 1, 15))

        self.assertRegex(number, r"^ORD-20240115-\d{4}$")

    def test_snapshot_survives_price_change_and_deletion(self):
        order = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 2}])

        self.pho.price = 99000
        self.pho.save()
        line = order.items.get()
        line.refresh_from_db()
        self.assertEqual(line.unit_price, 75000)

        self.pho.delete()
        line.refresh_from_db()
        self.assertIsNone(line.menu_item_id)
        self.assertEqual(line.item_name, "Pho")
        self.assertEqual(line.subtotal, 150000)

    def test_unknown_menu_item_persists_nothing(self):
        with self.assertRaises(ValidationError) as ctx:
            create_order(
                "01",
                "An",
                [
                    {"menu_item_id": self.pho.id, "quantity": 1},
                    {"menu_item_id": 9999, "quantity": 1},
                ],
            )

        self.assertIn("Menu item 9999 not found", str(ctx.exception.detail))
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderItem.objects.count(), 0)
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.AVAILABLE)

    def test_unavailable_menu_item_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            create_order("01", "An", [{"menu_item_id": self.sold_out.id, "quantity": 1}])

        self.assertIn("is not available", str(ctx.exception.detail))
        self.assertEqual(Order.objects.count(), 0)

    def test_unknown_table(self):
        with self.assertRaises(NotFound):
            create_order("77", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])

    def test_missing_fields(self):
        with self.assertRaises(ValidationError):
            create_order("01", "", [{"menu_item_id": self.pho.id, "quantity": 1}])
        with self.assertRaises(ValidationError):
            create_order("01", "An", [])


class OrderNumberCollisionTests(OrderFixtureMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.existing = create_order("01", "Binh", [{"menu_item_id": self.pho.id, "quantity": 1}])

    def test_collision_is_retried(self):
        with mock.patch(
            "orders.services.generate_order_number",
            side_effect=[self.existing.order_number, "ORD-20240115-0002"],
        ):
            order = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])

        self.assertEqual(order.order_number, "ORD-20240115-0002")
        self.assertEqual(Order.objects.count(), 2)

    @override_settings(EMENU_ORDER_NUMBER_ATTEMPTS=3)
    def test_exhausted_retries_persist_nothing(self):
        with mock.patch(
            "orders.services.generate_order_number",
            return_value=self.existing.order_number,
        ) as generator:
            with self.assertRaises(ConflictError):
                create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])

        self.assertEqual(generator.call_count, 3)
        self.assertEqual(Order.objects.count(), 1)
        self.assertEqual(OrderItem.objects.count(), 1)


class OrderStatusTests(OrderFixtureMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.order = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])

    def test_confirm_then_complete(self):
        update_order(self.order, status="confirmed")
        update_order(self.order, status="COMPLETED")

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.COMPLETED)

    def test_same_status_is_accepted(self):
        update_order(self.order, status=Order.PENDING)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.PENDING)

    @override_settings(EMENU_ENFORCE_STATUS_TRANSITIONS=True)
    def test_illegal_transition_rejected(self):
        update_order(self.order, status=Order.CANCELLED)

        with self.assertRaises(ValidationError):
            update_order(self.order, status=Order.PENDING)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.CANCELLED)

    def test_any_transition_allowed_by_default(self):
        update_order(self.order, status=Order.COMPLETED)
        update_order(self.order, status=Order.PENDING)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.PENDING)

    @override_settings(EMENU_ENFORCE_STATUS_TRANSITIONS=False)
    def test_unknown_status_always_rejected(self):
        with self.assertRaises(ValidationError):
            update_order(self.order, status="SERVED")

    def test_notes_only_update_keeps_status(self):
        update_order(self.order, notes="Extra chili")

        self.order.refresh_from_db()
        self.assertEqual(self.order.notes, "Extra chili")
        self.assertEqual(self.order.status, Order.PENDING)

    def test_status_change_does_not_touch_table(self):
        update_order(self.order, status=Order.COMPLETED)

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.OCCUPIED)


class OrderQueryTests(OrderFixtureMixin, TestCase):

    def _order_at(self, value):
        order = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])
        Order.objects.filter(pk=order.pk).update(created_at=timezone.make_aware(value))
        return order

    def test_day_filter_is_half_open(self):
        """23:59:59 belongs to its own day, not the next one"""
        late = self._order_at(datetime(2024, 1, 15, 23, 59, 59))
        midnight = self._order_at(datetime(2024, 1, 16, 0, 0, 0))

        on_15 = orders_for_day(Order.objects.all(), date(2024, 1, 15))
        on_16 = orders_for_day(Order.objects.all(), date(2024, 1, 16))

        self.assertEqual(list(on_15), [late])
        self.assertEqual(list(on_16), [midnight])

    def test_active_orders_exclude_closed(self):
        pending = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])
        confirmed = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])
        update_order(confirmed, status=Order.CONFIRMED)
        done = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])
        update_order(done, status=Order.COMPLETED)
        cancelled = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])
        update_order(cancelled, status=Order.CANCELLED)

        active = set(active_orders_for_table(self.table))

        self.assertEqual(active, {pending, confirmed})


# =====================================
# API
# =====================================

class OrderAPITests(OrderFixtureMixin, APITestCase):

    def setUp(self):
        super().setUp()
        self.staff = User.objects.create_user(username="staff", password="secret123", role=User.STAFF)

    def _place(self, items, table_number="01"):
        return self.client.post(
            reverse("order-list-create"),
            {"tableNumber": table_number, "customerName": "An", "items": items},
            format="json"
        )

    def test_place_order(self):
        response = self._place([{"menuItemId": self.goi_cuon.id, "quantity": 2}])

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["message"], "Order placed successfully")

        data = response.data["data"]
        self.assertEqual(data["totalAmount"], 90000)
        self.assertEqual(data["status"], Order.PENDING)
        self.assertEqual(data["table"]["tableNumber"], "01")
        self.assertEqual(data["orderItems"][0]["itemName"], "Goi cuon")
        self.assertEqual(data["orderItems"][0]["subtotal"], 90000)

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.OCCUPIED)

    def test_place_order_unknown_item(self):
        response = self._place([{"menuItemId": 9999, "quantity": 1}])

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["message"], "Menu item 9999 not found")
        self.assertEqual(Order.objects.count(), 0)

    def test_place_order_without_items(self):
        response = self._place([])

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Order.objects.count(), 0)

    def test_place_order_zero_quantity(self):
        response = self._place([{"menuItemId": self.pho.id, "quantity": 0}])

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Order.objects.count(), 0)

    def test_place_order_unknown_table(self):
        response = self._place([{"menuItemId": self.pho.id, "quantity": 1}], table_number="55")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "Table not found")

    def test_list_requires_staff(self):
        response = self.client.get(reverse("order-list-create"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data["success"])

    def test_list_filters(self):
        create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])
        other_table = Table.objects.create(table_number="02", table_name="Table 2")
        other = create_order("02", "Binh", [{"menu_item_id": self.pho.id, "quantity": 1}])
        update_order(other, status=Order.CONFIRMED)
        self.client.force_authenticate(self.staff)

        response = self.client.get(reverse("order-list-create"), {"status": "CONFIRMED"})
        self.assertEqual([o["id"] for o in response.data["data"]], [other.id])

        response = self.client.get(reverse("order-list-create"), {"tableId": other_table.id})
        self.assertEqual([o["id"] for o in response.data["data"]], [other.id])

    def test_list_date_filter(self):
        order = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])
        Order.objects.filter(pk=order.pk).update(
            created_at=timezone.make_aware(datetime(2024, 1, 15, 23, 59, 59))
        )
        self.client.force_authenticate(self.staff)

        response = self.client.get(reverse("order-list-create"), {"date": "2024-01-15"})
        self.assertEqual(len(response.data["data"]), 1)

        response = self.client.get(reverse("order-list-create"), {"date": "2024-01-16"})
        self.assertEqual(len(response.data["data"]), 0)

    def test_list_bad_date(self):
        self.client.force_authenticate(self.staff)

        response = self.client.get(reverse("order-list-create"), {"date": "15/01/2024"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_table_orders_hide_closed(self):
        open_order = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])
        done = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])
        update_order(done, status=Order.COMPLETED)

        response = self.client.get(reverse("order-table-list", args=["1"]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([o["id"] for o in response.data["data"]], [open_order.id])

    def test_order_detail_is_public(self):
        order = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])
        update_order(order, status=Order.CANCELLED)

        response = self.client.get(reverse("order-detail", args=[order.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["status"], Order.CANCELLED)

    def test_order_detail_not_found(self):
        response = self.client.get(reverse("order-detail", args=[424242]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "Order not found")

    def test_staff_confirms_order(self):
        order = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])
        self.client.force_authenticate(self.staff)

        response = self.client.put(
            reverse("order-detail", args=[order.id]),
            {"status": "CONFIRMED"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Order updated successfully")
        self.assertEqual(response.data["data"]["status"], Order.CONFIRMED)

    @override_settings(EMENU_ENFORCE_STATUS_TRANSITIONS=True)
    def test_illegal_transition_is_bad_request(self):
        order = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])
        update_order(order, status=Order.COMPLETED)
        self.client.force_authenticate(self.staff)

        response = self.client.put(
            reverse("order-detail", args=[order.id]),
            {"status": "PENDING"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.data["message"],
            "status: Cannot change order status from COMPLETED to PENDING"
        )

    def test_completed_order_can_be_reopened(self):
        """Staff may move a completed order back to PENDING"""
        order = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])
        update_order(order, status=Order.COMPLETED)
        self.client.force_authenticate(self.staff)

        response = self.client.put(
            reverse("order-detail", args=[order.id]),
            {"status": "PENDING"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["status"], Order.PENDING)

    def test_anonymous_cannot_update(self):
        order = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])

        response = self.client.put(
            reverse("order-detail", args=[order.id]),
            {"status": "CONFIRMED"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_delete_cascades_to_items(self):
        order = create_order(
            "01",
            "An",
            [
                {"menu_item_id": self.pho.id, "quantity": 1},
                {"menu_item_id": self.goi_cuon.id, "quantity": 3},
            ],
        )
        self.client.force_authenticate(self.staff)

        response = self.client.delete(reverse("order-detail", args=[order.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Order deleted successfully")
        self.assertFalse(Order.objects.filter(pk=order.pk).exists())
        self.assertEqual(OrderItem.objects.filter(order_id=order.pk).count(), 0)
