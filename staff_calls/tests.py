from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import User
from tables.models import Table

from .models import StaffCall


class StaffCallAPITests(APITestCase):

    def setUp(self):
        self.staff = User.objects.create_user(username="staff", password="secret123", role=User.STAFF)
        self.table = Table.objects.create(
            table_number="03", table_name="Table 3", status=Table.OCCUPIED
        )
        self.other_table = Table.objects.create(table_number="04", table_name="Table 4")

    def _call(self, **overrides):
        fields = {"table": self.table, "customer_name": "An", "reason": "More water"}
        fields.update(overrides)
        return StaffCall.objects.create(**fields)

    def test_customer_calls_staff(self):
        response = self.client.post(
            reverse("staff-call-list-create"),
            {"tableNumber": "3", "customerName": "An", "reason": "More water"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["message"], "Staff call submitted successfully")
        self.assertEqual(response.data["data"]["status"], StaffCall.PENDING)
        self.assertEqual(response.data["data"]["table"]["tableNumber"], "03")

    def test_reason_required(self):
        response = self.client.post(
            reverse("staff-call-list-create"),
            {"tableNumber": "03", "customerName": "An"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(StaffCall.objects.count(), 0)

    def test_unknown_table(self):
        response = self.client.post(
            reverse("staff-call-list-create"),
            {"tableNumber": "99", "customerName": "An", "reason": "Help"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "Table not found")

    def test_list_requires_staff(self):
        response = self.client.get(reverse("staff-call-list-create"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_filters_newest_first(self):
        first = self._call()
        second = self._call(reason="Bill")
        elsewhere = self._call(table=self.other_table, status=StaffCall.ACKNOWLEDGED)
        self.client.force_authenticate(self.staff)

        response = self.client.get(reverse("staff-call-list-create"), {"tableId": self.table.id})
        self.assertEqual([c["id"] for c in response.data["data"]], [second.id, first.id])

        response = self.client.get(reverse("staff-call-list-create"), {"status": "acknowledged"})
        self.assertEqual([c["id"] for c in response.data["data"]], [elsewhere.id])

    def test_pending_oldest_first(self):
        first = self._call()
        second = self._call(reason="Bill")
        self._call(status=StaffCall.COMPLETED)
        self.client.force_authenticate(self.staff)

        response = self.client.get(reverse("staff-call-pending"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c["id"] for c in response.data["data"]], [first.id, second.id])

    def test_table_list_is_public(self):
        mine = self._call(status=StaffCall.COMPLETED)
        self._call(table=self.other_table)

        response = self.client.get(reverse("staff-call-table-list", args=["03"]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c["id"] for c in response.data["data"]], [mine.id])

    def test_acknowledge_leaves_table_alone(self):
        call = self._call()
        self.client.force_authenticate(self.staff)

        for new_status in ("ACKNOWLEDGED", "COMPLETED"):
            response = self.client.put(
                reverse("staff-call-detail", args=[call.id]),
                {"status": new_status},
                format="json"
            )
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            self.assertEqual(response.data["data"]["status"], new_status)

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.OCCUPIED)

    def test_status_required(self):
        call = self._call()
        self.client.force_authenticate(self.staff)

        response = self.client.put(reverse("staff-call-detail", args=[call.id]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "status: Status is required")

    @override_settings(EMENU_ENFORCE_STATUS_TRANSITIONS=True)
    def test_illegal_transition(self):
        call = self._call(status=StaffCall.COMPLETED)
        self.client.force_authenticate(self.staff)

        response = self.client.put(
            reverse("staff-call-detail", args=[call.id]),
            {"status": "ACKNOWLEDGED"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        call.refresh_from_db()
        self.assertEqual(call.status, StaffCall.COMPLETED)

    def test_any_transition_by_default(self):
        call = self._call(status=StaffCall.COMPLETED)
        self.client.force_authenticate(self.staff)

        response = self.client.put(
            reverse("staff-call-detail", args=[call.id]),
            {"status": "PENDING"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_delete(self):
        call = self._call()
        self.client.force_authenticate(self.staff)

        response = self.client.delete(reverse("staff-call-detail", args=[call.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Staff call deleted successfully")
        self.assertFalse(StaffCall.objects.exists())

    def test_missing_call(self):
        self.client.force_authenticate(self.staff)

        response = self.client.delete(reverse("staff-call-detail", args=[12345]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "Staff call not found")
