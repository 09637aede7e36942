from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from .models import User


class AuthTests(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_user(
            username="admin", password="admin123", role=User.ADMIN, full_name="Administrator"
        )

    def test_login_returns_token_and_user(self):
        response = self.client.post(
            reverse("auth-login"),
            {"username": "admin", "password": "admin123"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Login successful")
        data = response.data["data"]
        self.assertIn("token", data)
        self.assertIn("refresh", data)
        self.assertEqual(data["user"]["role"], User.ADMIN)
        self.assertEqual(data["user"]["fullName"], "Administrator")

    def test_token_authenticates_requests(self):
        login = self.client.post(
            reverse("auth-login"),
            {"username": "admin", "password": "admin123"},
            format="json"
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['data']['token']}")

        response = self.client.get(reverse("auth-me"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["username"], "admin")

    def test_refresh_returns_new_token(self):
        login = self.client.post(
            reverse("auth-login"),
            {"username": "admin", "password": "admin123"},
            format="json"
        )

        response = self.client.post(
            reverse("auth-token-refresh"),
            {"refresh": login.data["data"]["refresh"]},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("token", response.data["data"])
        self.assertNotIn("access", response.data["data"])

    def test_wrong_password(self):
        response = self.client.post(
            reverse("auth-login"),
            {"username": "admin", "password": "nope"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data["success"])

    def test_me_requires_authentication(self):
        response = self.client.get(reverse("auth-me"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data["success"])


class StaffManagementTests(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username="admin", password="admin123", role=User.ADMIN)
        self.staff = User.objects.create_user(username="waiter", password="secret123", role=User.STAFF)

    def test_admin_creates_staff(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("staff-list-create"),
            {"username": "cashier", "password": "secret123", "fullName": "Cashier"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        cashier = User.objects.get(username="cashier")
        self.assertEqual(cashier.role, User.STAFF)
        self.assertTrue(cashier.check_password("secret123"))

    def test_role_cannot_be_escalated(self):
        self.client.force_authenticate(self.admin)

        self.client.post(
            reverse("staff-list-create"),
            {"username": "sneaky", "password": "secret123", "role": User.ADMIN},
            format="json"
        )

        self.assertEqual(User.objects.get(username="sneaky").role, User.STAFF)

    def test_staff_cannot_manage_staff(self):
        self.client.force_authenticate(self.staff)

        response = self.client.get(reverse("staff-list-create"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["message"], "Access denied. Admin only.")

    def test_admin_deactivates_staff(self):
        self.client.force_authenticate(self.admin)

        response = self.client.put(
            reverse("staff-detail", args=[self.staff.id]),
            {"isActive": False},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.staff.refresh_from_db()
        self.assertFalse(self.staff.is_active)

    def test_staff_updates_own_profile(self):
        self.client.force_authenticate(self.staff)

        response = self.client.patch(
            reverse("auth-me"),
            {"fullName": "Head Waiter", "phone": "0900000000"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.staff.refresh_from_db()
        self.assertEqual(self.staff.full_name, "Head Waiter")
        self.assertEqual(self.staff.role, User.STAFF)
