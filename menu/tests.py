from io import StringIO

from django.core.management import call_command
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import User
from tables.models import Table

from .models import Category, MenuItem


class MenuQueryTests(APITestCase):
    """Public menu listing filters"""

    def setUp(self):
        self.main = Category.objects.create(slug="main", name="Main dishes", sort_order=2)
        self.drink = Category.objects.create(slug="drink", name="Drinks", sort_order=3)
        self.hidden = Category.objects.create(
            slug="hidden", name="Hidden", sort_order=1, is_active=False
        )

        self.pho = MenuItem.objects.create(
            name="Pho bo", description="Beef noodle soup", price=75000, category=self.main
        )
        self.com = MenuItem.objects.create(
            name="Com tam", description="Broken rice", price=65000, category=self.main
        )
        self.tea = MenuItem.objects.create(
            name="Iced tea", description="Green tea", price=10000, category=self.drink
        )
        self.sold_out = MenuItem.objects.create(
            name="Coconut coffee", price=45000, category=self.drink, is_available=False
        )
        self.retired = MenuItem.objects.create(
            name="Old dish", price=20000, category=self.main, is_active=False
        )

    def _names(self, response):
        return [item["name"] for item in response.data["data"]]

    def test_categories_active_only_with_counts(self):
        """Inactive categories are hidden and each category reports its item count"""
        response = self.client.get(reverse("category-list-create"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        slugs = [c["slug"] for c in response.data["data"]]
        self.assertEqual(slugs, ["main", "drink"])
        self.assertEqual(response.data["data"][0]["menuItemCount"], 3)

    def test_category_detail_lists_enabled_items(self):
        """Category detail only embeds active and available items"""
        response = self.client.get(reverse("category-detail", args=[self.drink.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = [item["name"] for item in response.data["data"]["menuItems"]]
        self.assertEqual(names, ["Iced tea"])

    def test_menu_items_default_to_active_and_available(self):
        """Sold out and retired items are not listed; order is category then name"""
        response = self.client.get(reverse("menu-item-list-create"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self._names(response), ["Com tam", "Pho bo", "Iced tea"])

    def test_available_false_includes_sold_out(self):
        response = self.client.get(reverse("menu-item-list-create"), {"available": "false"})

        self.assertIn("Coconut coffee", self._names(response))
        self.assertNotIn("Old dish", self._names(response))

    def test_category_filter_uses_slug(self):
        response = self.client.get(reverse("menu-item-list-create"), {"category": "drink"})

        self.assertEqual(self._names(response), ["Iced tea"])

    def test_search_matches_name_or_description(self):
        """Search is a case insensitive substring match"""
        response = self.client.get(reverse("menu-item-list-create"), {"search": "NOODLE"})
        self.assertEqual(self._names(response), ["Pho bo"])

        response = self.client.get(reverse("menu-item-list-create"), {"search": "com"})
        self.assertEqual(self._names(response), ["Com tam"])

    def test_all_flag_ignored_for_anonymous(self):
        response = self.client.get(reverse("menu-item-list-create"), {"all": "true"})

        self.assertNotIn("Old dish", self._names(response))

    def test_all_flag_for_staff_includes_inactive(self):
        staff = User.objects.create_user(username="staff", password="secret123", role=User.STAFF)
        self.client.force_authenticate(staff)

        response = self.client.get(reverse("menu-item-list-create"), {"all": "true"})

        self.assertIn("Old dish", self._names(response))
        self.assertIn("Coconut coffee", self._names(response))

    def test_unknown_item_returns_not_found(self):
        response = self.client.get(reverse("menu-item-detail", args=[9999]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {"success": False, "message": "Menu item not found"})


class MenuAdminTests(APITestCase):
    """Menu writes are reserved to admins"""

    def setUp(self):
        self.admin = User.objects.create_user(username="admin", password="secret123", role=User.ADMIN)
        self.staff = User.objects.create_user(username="staff", password="secret123", role=User.STAFF)
        self.category = Category.objects.create(slug="main", name="Main dishes")

    def test_admin_creates_menu_item(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("menu-item-list-create"),
            {"name": "Bun cha", "price": 70000, "categoryId": self.category.id},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["message"], "Menu item created successfully")
        self.assertEqual(response.data["data"]["category"]["slug"], "main")
        self.assertTrue(MenuItem.objects.filter(name="Bun cha").exists())

    def test_staff_cannot_create_menu_item(self):
        self.client.force_authenticate(self.staff)

        response = self.client.post(
            reverse("menu-item-list-create"),
            {"name": "Bun cha", "price": 70000, "categoryId": self.category.id},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data["success"])

    def test_price_must_be_positive(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("menu-item-list-create"),
            {"name": "Free", "price": 0, "categoryId": self.category.id},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("price", response.data["errors"])

    def test_duplicate_category_slug_rejected(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("category-list-create"),
            {"slug": "main", "name": "Another"},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "slug: Category slug already exists")

    def test_put_is_partial(self):
        """PUT only changes the fields that are sent"""
        item = MenuItem.objects.create(name="Pho", price=75000, category=self.category)
        self.client.force_authenticate(self.admin)

        response = self.client.put(
            reverse("menu-item-detail", args=[item.id]),
            {"isAvailable": False},
            format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        item.refresh_from_db()
        self.assertFalse(item.is_available)
        self.assertEqual(item.price, 75000)


class SeedMenuCommandTests(APITestCase):

    def test_seed_is_idempotent(self):
        call_command("seed_menu", stdout=StringIO())
        call_command("seed_menu", stdout=StringIO())

        self.assertEqual(Category.objects.count(), 4)
        self.assertEqual(MenuItem.objects.count(), 8)
        self.assertEqual(Table.objects.count(), 10)
        self.assertTrue(Table.objects.filter(table_number="01").exists())
        self.assertTrue(Table.objects.filter(table_number="10").exists())
        self.assertEqual(User.objects.get(username="admin").role, User.ADMIN)
