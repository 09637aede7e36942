from django.urls import path

from .views import (
    CategoryListCreateView,
    CategoryRetrieveUpdateDeleteView,
    MenuItemListCreateView,
    MenuItemRetrieveUpdateDeleteView,
)

urlpatterns = [

    path(
        "categories",
        CategoryListCreateView.as_view(),
        name="category-list-create"
    ),
    path(
        "categories/<int:pk>",
        CategoryRetrieveUpdateDeleteView.as_view(),
        name="category-detail"
    ),
    path("menu-items", MenuItemListCreateView.as_view(), name="menu-item-list-create"),
    path("menu-items/<int:pk>", MenuItemRetrieveUpdateDeleteView.as_view(), name="menu-item-detail"),

]
