from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.test import APITestCase

from accounts.models import User
from tables.models import Table

from .models import PaymentRequest
from .services import create_payment_request, update_payment_request_status


class PaymentRequestServiceTests(TestCase):

    def setUp(self):
        self.table = Table.objects.create(
            table_number="05", table_name="Table 5", status=Table.OCCUPIED
        )

    def test_create(self):
        payment_request = create_payment_request("5", "An", "Cash")

        self.assertEqual(payment_request.table, self.table)
        self.assertEqual(payment_request.status, PaymentRequest.PENDING)

    def test_payment_method_required(self):
        with self.assertRaises(ValidationError):
            create_payment_request("05", "An", "")

    def test_processing_keeps_table_occupied(self):
        payment_request = create_payment_request("05", "An", "Cash")

        update_payment_request_status(payment_request, "PROCESSING")

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.OCCUPIED)

    def test_completion_frees_table(self):
        payment_request = create_payment_request("05", "An", "Bank transfer")

        update_payment_request_status(payment_request, "PROCESSING")
        update_payment_request_status(payment_request, "COMPLETED")

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.AVAILABLE)

    def test_completion_is_idempotent(self):
        """Completing twice, with the table already free, is not an error"""
        payment_request = create_payment_request("05", "An", "Cash")
        update_payment_request_status(payment_request, "COMPLETED")

        update_payment_request_status(payment_request, "COMPLETED")

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.AVAILABLE)

    @override_settings(EMENU_ENFORCE_STATUS_TRANSITIONS=True)
    def test_cannot_go_back_to_processing(self):
        payment_request = create_payment_request("05", "An", "Cash")
        update_payment_request_status(payment_request, "COMPLETED")

        with self.assertRaises(ValidationError):
            update_payment_request_status(payment_request, "PROCESSING")


class PaymentRequestAPITests(APITestCase):

    def setUp(self):
        self.staff = User.objects.create_user(username="staff", password="secret123", role=User.STAFF)
        self.table = Table.objects.create(
            table_number="05", table_name="Table 5", status=Table.OCCUPIED
        )

    def test_customer_requests_payment(self):
        response = self.client.post(
            reverse("payment-request-list-create"),
            {"tableNumber": "05", "customerName": "An", "paymentMethod": "Cash"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["message"], "Payment request submitted successfully")
        self.assertEqual(response.data["data"]["paymentMethod"], "Cash")
        self.assertEqual(response.data["data"]["status"], PaymentRequest.PENDING)

    def test_missing_payment_method(self):
        response = self.client.post(
            reverse("payment-request-list-create"),
            {"tableNumber": "05", "customerName": "An"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("paymentMethod", response.data["errors"])

    def test_pending_requires_staff(self):
        response = self.client.get(reverse("payment-request-pending"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_pending_lists_only_pending(self):
        waiting = PaymentRequest.objects.create(table=self.table, customer_name="An", payment_method="Cash")
        PaymentRequest.objects.create(
            table=self.table, customer_name="An", payment_method="Cash",
            status=PaymentRequest.COMPLETED
        )
        self.client.force_authenticate(self.staff)

        response = self.client.get(reverse("payment-request-pending"))

        self.assertEqual([p["id"] for p in response.data["data"]], [waiting.id])

    def test_table_list_is_public(self):
        done = PaymentRequest.objects.create(
            table=self.table, customer_name="An", payment_method="Cash",
            status=PaymentRequest.PROCESSING
        )

        response = self.client.get(reverse("payment-request-table-list", args=["5"]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"][0]["id"], done.id)
        self.assertEqual(response.data["data"][0]["status"], PaymentRequest.PROCESSING)

    def test_put_completed_frees_table(self):
        payment_request = PaymentRequest.objects.create(
            table=self.table, customer_name="An", payment_method="Cash"
        )
        self.client.force_authenticate(self.staff)

        response = self.client.put(
            reverse("payment-request-detail", args=[payment_request.id]),
            {"status": "COMPLETED"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Payment request updated successfully")
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.AVAILABLE)

    def test_put_completed_on_available_table(self):
        Table.objects.filter(pk=self.table.pk).update(status=Table.AVAILABLE)
        payment_request = PaymentRequest.objects.create(
            table=self.table, customer_name="An", payment_method="Cash"
        )
        self.client.force_authenticate(self.staff)

        response = self.client.put(
            reverse("payment-request-detail", args=[payment_request.id]),
            {"status": "COMPLETED"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.AVAILABLE)

    def test_invalid_status_value(self):
        payment_request = PaymentRequest.objects.create(
            table=self.table, customer_name="An", payment_method="Cash"
        )
        self.client.force_authenticate(self.staff)

        response = self.client.put(
            reverse("payment-request-detail", args=[payment_request.id]),
            {"status": "REFUNDED"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.OCCUPIED)

    def test_delete(self):
        payment_request = PaymentRequest.objects.create(
            table=self.table, customer_name="An", payment_method="Cash"
        )
        self.client.force_authenticate(self.staff)

        response = self.client.delete(reverse("payment-request-detail", args=[payment_request.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(PaymentRequest.objects.exists())
