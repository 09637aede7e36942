from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    message = "Access denied. Admin only."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == "ADMIN")


class IsAdminOrStaff(BasePermission):
    message = "Access denied. Staff or Admin only."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role in ("ADMIN", "STAFF"))
