from django.urls import path

from .views import (
    LoginView,
    MeProfileView,
    RefreshView,
    StaffUserDetailView,
    StaffUserListCreateView,
)


urlpatterns = [
    path("auth/login", LoginView.as_view(), name="auth-login"),
    path("auth/token/refresh", RefreshView.as_view(), name="auth-token-refresh"),
    path("auth/me", MeProfileView.as_view(), name="auth-me"),
    path("auth/staff", StaffUserListCreateView.as_view(), name="staff-list-create"),
    path("auth/staff/<uuid:pk>", StaffUserDetailView.as_view(), name="staff-detail"),
]
