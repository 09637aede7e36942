from rest_framework import generics
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from emenu.responses import EnvelopeMixin

from .models import User
from .permissions import IsAdminRole
from .serializers import (
    CustomTokenObtainPairSerializer,
    MeProfileSerializer,
    RefreshSerializer,
    StaffUserSerializer,
)


class LoginView(EnvelopeMixin, TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer
    success_messages = {"POST": "Login successful"}

    def get_authenticate_header(self, request):
        # bad credentials answer 401, not 403
        return 'Bearer realm="api"'


class RefreshView(EnvelopeMixin, TokenRefreshView):
    serializer_class = RefreshSerializer


class MeProfileView(EnvelopeMixin, generics.RetrieveUpdateAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = MeProfileSerializer
    success_messages = {
        "PUT": "Profile updated successfully",
        "PATCH": "Profile updated successfully",
    }

    def get_object(self):
        return self.request.user

    def put(self, request, *args, **kwargs):
        return self.partial_update(request, *args, **kwargs)


class StaffUserListCreateView(EnvelopeMixin, generics.ListCreateAPIView):
    permission_classes = [IsAdminRole]
    serializer_class = StaffUserSerializer
    success_messages = {"POST": "Staff account created successfully"}

    def get_queryset(self):
        return User.objects.filter(role=User.STAFF).order_by("username")

    def perform_create(self, serializer):
        serializer.save(role=User.STAFF)


class StaffUserDetailView(EnvelopeMixin, generics.RetrieveUpdateDestroyAPIView):
    permission_classes = [IsAdminRole]
    serializer_class = StaffUserSerializer
    queryset = User.objects.filter(role=User.STAFF)
    not_found_message = "Staff account not found"
    success_messages = {
        "PUT": "Staff account updated successfully",
        "PATCH": "Staff account updated successfully",
        "DELETE": "Staff account deleted successfully",
    }

    def put(self, request, *args, **kwargs):
        return self.partial_update(request, *args, **kwargs)

    def perform_destroy(self, instance):
        if instance.id == self.request.user.id:
            raise ValidationError("You cannot delete your own account.")
        instance.delete()
