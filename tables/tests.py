from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.test import APITestCase

from accounts.models import User
from menu.models import Category, MenuItem
from orders.models import Order
from orders.services import create_order
from payments.models import PaymentRequest
from staff_calls.models import StaffCall

from .models import Table, normalize_table_number
from .services import get_table_by_number, set_table_status


class TableNumberTests(TestCase):

    def test_numeric_numbers_are_zero_padded(self):
        self.assertEqual(normalize_table_number("5"), "05")
        self.assertEqual(normalize_table_number(7), "07")
        self.assertEqual(normalize_table_number("12"), "12")

    def test_named_tables_are_kept(self):
        self.assertEqual(normalize_table_number(" VIP1 "), "VIP1")

    def test_lookup_accepts_unpadded_number(self):
        table = Table.objects.create(table_number="3", table_name="Table 3")

        self.assertEqual(table.table_number, "03")
        self.assertEqual(get_table_by_number("3"), table)

    def test_lookup_unknown_table(self):
        with self.assertRaises(NotFound):
            get_table_by_number("42")


class TableStatusServiceTests(TestCase):

    def setUp(self):
        self.table = Table.objects.create(table_number="01", table_name="Table 1")

    def test_set_status(self):
        set_table_status(self.table, Table.OCCUPIED)

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.OCCUPIED)

    def test_set_same_status_is_accepted(self):
        set_table_status(self.table, Table.AVAILABLE)

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.AVAILABLE)

    def test_invalid_status_rejected(self):
        with self.assertRaises(ValidationError):
            set_table_status(self.table, "BROKEN")

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.AVAILABLE)


class TableAPITests(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username="admin", password="secret123", role=User.ADMIN)
        self.staff = User.objects.create_user(username="staff", password="secret123", role=User.STAFF)

        self.table_1 = Table.objects.create(table_number="01", table_name="Table 1")
        self.table_2 = Table.objects.create(
            table_number="02", table_name="Table 2", status=Table.OCCUPIED
        )

        category = Category.objects.create(slug="main", name="Main dishes")
        self.pho = MenuItem.objects.create(name="Pho", price=75000, category=category)

    def test_list_tables_with_status_filter(self):
        response = self.client.get(reverse("table-list-create"), {"status": "occupied"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([t["tableNumber"] for t in response.data["data"]], ["02"])

    def test_lookup_by_number_is_public(self):
        response = self.client.get(reverse("table-by-number", args=["1"]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["tableNumber"], "01")

    def test_lookup_unknown_number(self):
        response = self.client.get(reverse("table-by-number", args=["99"]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "Table not found")

    def test_admin_creates_padded_table(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("table-list-create"),
            {"tableNumber": "5", "tableName": "Table 5"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["tableNumber"], "05")
        self.assertEqual(response.data["data"]["status"], Table.AVAILABLE)

    def test_initial_status_goes_through_status_service(self):
        self.client.force_authenticate(self.admin)

        with self.assertLogs("tables.services", level="INFO") as logs:
            response = self.client.post(
                reverse("table-list-create"),
                {"tableNumber": "7", "tableName": "Table 7", "status": Table.OCCUPIED},
                format="json"
            )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Table.objects.get(table_number="07").status, Table.OCCUPIED)
        self.assertIn("Table 07 status AVAILABLE -> OCCUPIED (created)", logs.output[0])

    def test_duplicate_table_number_rejected(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("table-list-create"),
            {"tableNumber": "1", "tableName": "Again"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "tableNumber: Table number already exists")

    def test_staff_cannot_create_table(self):
        self.client.force_authenticate(self.staff)

        response = self.client.post(
            reverse("table-list-create"),
            {"tableNumber": "9", "tableName": "Table 9"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_updates_status(self):
        self.client.force_authenticate(self.staff)

        response = self.client.put(
            reverse("table-detail", args=[self.table_2.id]),
            {"status": Table.AVAILABLE},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.table_2.refresh_from_db()
        self.assertEqual(self.table_2.status, Table.AVAILABLE)
        self.assertEqual(self.table_2.table_name, "Table 2")

    def test_anonymous_cannot_update_status(self):
        response = self.client.put(
            reverse("table-detail", args=[self.table_2.id]),
            {"status": Table.AVAILABLE},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_detail_joins_open_work(self):
        """Active orders, pending staff calls and pending payment requests are embedded"""
        open_order = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])
        closed_order = create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 1}])
        Order.objects.filter(pk=closed_order.pk).update(status=Order.COMPLETED)

        pending_call = StaffCall.objects.create(table=self.table_1, customer_name="An", reason="Water")
        StaffCall.objects.create(
            table=self.table_1, customer_name="An", reason="Napkins", status=StaffCall.COMPLETED
        )
        pending_payment = PaymentRequest.objects.create(
            table=self.table_1, customer_name="An", payment_method="Cash"
        )

        response = self.client.get(reverse("table-detail", args=[self.table_1.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data["data"]
        self.assertEqual([o["id"] for o in data["orders"]], [open_order.id])
        self.assertEqual([c["id"] for c in data["staffCalls"]], [pending_call.id])
        self.assertEqual([p["id"] for p in data["paymentRequests"]], [pending_payment.id])

    def test_delete_table_cascades(self):
        create_order("01", "An", [{"menu_item_id": self.pho.id, "quantity": 2}])
        StaffCall.objects.create(table=self.table_1, customer_name="An", reason="Water")
        PaymentRequest.objects.create(table=self.table_1, customer_name="An", payment_method="Cash")
        self.client.force_authenticate(self.admin)

        response = self.client.delete(reverse("table-detail", args=[self.table_1.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Table deleted successfully")
        self.assertFalse(Table.objects.filter(pk=self.table_1.pk).exists())
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(StaffCall.objects.count(), 0)
        self.assertEqual(PaymentRequest.objects.count(), 0)
