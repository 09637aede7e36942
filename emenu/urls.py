from django.contrib import admin
from django.urls import include, path

from .views import health

urlpatterns = [
    path("admin/", admin.site.urls),

    path("api/health", health, name="health"),
    path("api/", include("accounts.urls")),
    path("api/", include("menu.urls")),
    path("api/", include("tables.urls")),
    path("api/", include("orders.urls")),
    path("api/", include("staff_calls.urls")),
    path("api/", include("payments.urls")),
]
