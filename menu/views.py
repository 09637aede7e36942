from django.db.models import Count, Q
from rest_framework import generics
from rest_framework.permissions import AllowAny

from accounts.permissions import IsAdminOrStaff, IsAdminRole
from emenu.responses import EnvelopeMixin

from .models import Category, MenuItem
from .serializers import CategoryDetailSerializer, CategorySerializer, MenuItemSerializer


# ----------------------------
# CATEGORY
# ----------------------------

class CategoryListCreateView(EnvelopeMixin, generics.ListCreateAPIView):

    serializer_class = CategorySerializer
    success_messages = {"POST": "Category created successfully"}

    def get_queryset(self):
        return (
            Category.objects
            .filter(is_active=True)
            .annotate(menu_item_count=Count("menu_items"))
            .order_by("sort_order", "name")
        )

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAdminRole()]
        return [AllowAny()]


class CategoryRetrieveUpdateDeleteView(EnvelopeMixin, generics.RetrieveUpdateDestroyAPIView):

    queryset = Category.objects.annotate(menu_item_count=Count("menu_items"))
    not_found_message = "Category not found"
    success_messages = {
        "PUT": "Category updated successfully",
        "PATCH": "Category updated successfully",
        "DELETE": "Category deleted successfully",
    }

    def get_serializer_class(self):
        if self.request.method == "GET":
            return CategoryDetailSerializer
        return CategorySerializer

    def get_permissions(self):
        if self.request.method in ["PUT", "PATCH", "DELETE"]:
            return [IsAdminRole()]
        return [AllowAny()]

    def put(self, request, *args, **kwargs):
        return self.partial_update(request, *args, **kwargs)


# ----------------------------
# MENU ITEM
# ----------------------------

def _flag(value):
    return (value or "").strip().lower() in ("1", "true", "yes")


class MenuItemListCreateView(EnvelopeMixin, generics.ListCreateAPIView):

    serializer_class = MenuItemSerializer
    success_messages = {"POST": "Menu item created successfully"}

    def get_queryset(self):
        params = self.request.query_params
        queryset = MenuItem.objects.select_related("category")

        show_all = _flag(params.get("all")) and IsAdminOrStaff().has_permission(self.request, self)
        if not show_all:
            queryset = queryset.filter(is_active=True)
            if params.get("available") != "false":
                queryset = queryset.filter(is_available=True)

        category = params.get("category")
        if category and category != "all":
            queryset = queryset.filter(category__slug=category)

        search = (params.get("search") or "").strip()
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(description__icontains=search)
            )

        return queryset.order_by("category__sort_order", "name")

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAdminRole()]
        return [AllowAny()]


class MenuItemRetrieveUpdateDeleteView(EnvelopeMixin, generics.RetrieveUpdateDestroyAPIView):

    queryset = MenuItem.objects.select_related("category")
    serializer_class = MenuItemSerializer
    not_found_message = "Menu item not found"
    success_messages = {
        "PUT": "Menu item updated successfully",
        "PATCH": "Menu item updated successfully",
        "DELETE": "Menu item deleted successfully",
    }

    def get_permissions(self):
        if self.request.method in ["PUT", "PATCH", "DELETE"]:
            return [IsAdminRole()]
        return [AllowAny()]

    def put(self, request, *args, **kwargs):
        return self.partial_update(request, *args, **kwargs)
