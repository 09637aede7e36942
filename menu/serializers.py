from rest_framework import serializers
from rest_framework.validators import UniqueValidator

from .models import Category, MenuItem


# ----------------------------
# CATEGORY
# ----------------------------

class CategorySerializer(serializers.ModelSerializer):
    slug = serializers.SlugField(
        max_length=100,
        validators=[
            UniqueValidator(
                queryset=Category.objects.all(),
                message="Category slug already exists"
            )
        ]
    )
    sortOrder = serializers.IntegerField(source="sort_order", required=False, min_value=0)
    isActive = serializers.BooleanField(source="is_active", required=False)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    menuItemCount = serializers.IntegerField(source="menu_item_count", read_only=True)

    class Meta:
        model = Category
        fields = ["id", "slug", "name", "sortOrder", "isActive", "createdAt", "menuItemCount"]


class CategoryBriefSerializer(serializers.ModelSerializer):

    class Meta:
        model = Category
        fields = ["id", "slug", "name"]


# ----------------------------
# MENU ITEM
# ----------------------------

class MenuItemSerializer(serializers.ModelSerializer):
    price = serializers.IntegerField(min_value=1)
    categoryId = serializers.PrimaryKeyRelatedField(
        source="category",
        queryset=Category.objects.all()
    )
    category = CategoryBriefSerializer(read_only=True)
    isActive = serializers.BooleanField(source="is_active", required=False)
    isAvailable = serializers.BooleanField(source="is_available", required=False)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = MenuItem
        fields = [
            "id",
            "name",
            "description",
            "price",
            "image",
            "categoryId",
            "category",
            "isActive",
            "isAvailable",
            "createdAt",
            "updatedAt",
        ]
        extra_kwargs = {
            "description": {"required": False, "allow_blank": True},
            "image": {"required": False, "allow_null": True, "allow_blank": True},
        }


class CategoryDetailSerializer(CategorySerializer):
    menuItems = serializers.SerializerMethodField()

    class Meta(CategorySerializer.Meta):
        fields = CategorySerializer.Meta.fields + ["menuItems"]

    def get_menuItems(self, obj):
        items = obj.menu_items.filter(is_active=True, is_available=True)
        return MenuItemSerializer(items, many=True, context=self.context).data
