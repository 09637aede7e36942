from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from menu.models import Category, MenuItem
from tables.models import Table

User = get_user_model()

PLACEHOLDER_IMAGE = "/placeholder-food.jpg"

CATEGORIES = [
    {"slug": "appetizer", "name": "Appetizers", "sort_order": 1},
    {"slug": "main", "name": "Main dishes", "sort_order": 2},
    {"slug": "drink", "name": "Drinks", "sort_order": 3},
    {"slug": "dessert", "name": "Desserts", "sort_order": 4},
]

MENU_ITEMS = [
    {
        "name": "Gỏi cuốn tôm thịt",
        "description": "Rice paper rolls with shrimp, pork, herbs and vermicelli",
        "price": 45000,
        "category": "appetizer",
    },
    {
        "name": "Chả giò",
        "description": "Crispy fried spring rolls with pork and vegetables",
        "price": 55000,
        "category": "appetizer",
    },
    {
        "name": "Phở bò tái nạm",
        "description": "Beef noodle soup with rare beef and flank in bone broth",
        "price": 75000,
        "category": "main",
    },
    {
        "name": "Cơm tấm sườn bì chả",
        "description": "Broken rice with grilled pork chop, shredded pork skin and egg meatloaf",
        "price": 65000,
        "category": "main",
    },
    {
        "name": "Bún chả Hà Nội",
        "description": "Vermicelli with grilled pork patties and fish sauce dip",
        "price": 70000,
        "category": "main",
    },
    {
        "name": "Trà đá",
        "description": "Iced green tea",
        "price": 10000,
        "category": "drink",
    },
    {
        "name": "Cà phê sữa đá",
        "description": "Phin filter coffee with condensed milk over ice",
        "price": 35000,
        "category": "drink",
    },
    {
        "name": "Chè ba màu",
        "description": "Three colour dessert with mung bean, red bean, jelly and coconut milk",
        "price": 30000,
        "category": "dessert",
    },
]

TABLE_COUNT = 10


class Command(BaseCommand):
    help = "Seed the database with an admin account, the menu and tables"

    def add_arguments(self, parser):
        parser.add_argument(
            "--clear",
            action="store_true",
            help="Clear existing menu items, categories and tables before seeding",
        )
        parser.add_argument("--admin-username", default="admin")
        parser.add_argument("--admin-email", default="admin@emenu.com")
        parser.add_argument("--admin-password", default="admin123")

    @transaction.atomic
    def handle(self, *args, **options):
        if options["clear"]:
            self.stdout.write("Clearing existing menu and tables...")
            MenuItem.objects.all().delete()
            Category.objects.all().delete()
            Table.objects.all().delete()
            self.stdout.write(self.style.SUCCESS("Successfully cleared menu and tables"))

        self.seed_admin(options)
        categories = self.seed_categories()
        self.seed_menu_items(categories)
        self.seed_tables()

        self.stdout.write(self.style.SUCCESS("\nSeed completed successfully"))

    # ----------------------------
    # ADMIN
    # ----------------------------

    def seed_admin(self, options):
        admin, created = User.objects.get_or_create(
            username=options["admin_username"],
            defaults={
                "email": options["admin_email"],
                "full_name": "Administrator",
                "role": User.ADMIN,
                "is_staff": True,
                "is_superuser": True,
            }
        )
        if created:
            admin.set_password(options["admin_password"])
            admin.save()
            self.stdout.write(f"Created admin: {admin.username}")
        else:
            self.stdout.write(f"Admin already exists: {admin.username}")

    # ----------------------------
    # MENU
    # ----------------------------

    def seed_categories(self):
        categories = {}
        for data in CATEGORIES:
            category, _ = Category.objects.update_or_create(
                slug=data["slug"],
                defaults={"name": data["name"], "sort_order": data["sort_order"]}
            )
            categories[category.slug] = category

        self.stdout.write(f"Categories seeded: {len(categories)}")
        return categories

    def seed_menu_items(self, categories):
        created_items = []
        for data in MENU_ITEMS:
            item, created = MenuItem.objects.get_or_create(
                name=data["name"],
                defaults={
                    "description": data["description"],
                    "price": data["price"],
                    "category": categories[data["category"]],
                    "image": PLACEHOLDER_IMAGE,
                }
            )
            if created:
                created_items.append(item)
                self.stdout.write(f"Created: {item.name} - {item.price:,} VND")
            else:
                self.stdout.write(f"Already exists: {item.name}")

        self.stdout.write(
            self.style.SUCCESS(f"Total new menu items created: {len(created_items)}")
        )

    # ----------------------------
    # TABLES
    # ----------------------------

    def seed_tables(self):
        for i in range(1, TABLE_COUNT + 1):
            Table.objects.get_or_create(
                table_number=f"{i:02d}",
                defaults={"table_name": f"Table {i}"}
            )

        self.stdout.write(f"Tables seeded: 01-{TABLE_COUNT:02d}")
