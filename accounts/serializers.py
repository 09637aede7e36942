from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer

from .models import User


class UserSerializer(serializers.ModelSerializer):
    fullName = serializers.CharField(source="full_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "username", "fullName", "email", "phone", "role"]


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):

    def validate(self, attrs):
        data = super().validate(attrs)

        return {
            "token": data["access"],
            "refresh": data["refresh"],
            "user": UserSerializer(self.user).data,
        }


class RefreshSerializer(TokenRefreshSerializer):

    def validate(self, attrs):
        data = super().validate(attrs)
        data["token"] = data.pop("access")
        return data


class StaffUserSerializer(serializers.ModelSerializer):
    fullName = serializers.CharField(source="full_name", required=False, allow_blank=True)
    isActive = serializers.BooleanField(source="is_active", required=False)
    password = serializers.CharField(write_only=True, required=False, min_length=6)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "fullName",
            "email",
            "phone",
            "role",
            "isActive",
            "password",
        ]
        read_only_fields = ["id", "role"]

    def create(self, validated_data):
        password = validated_data.pop("password", None)
        user = User(**validated_data)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save()
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        for key, value in validated_data.items():
            setattr(instance, key, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class MeProfileSerializer(serializers.ModelSerializer):
    fullName = serializers.CharField(source="full_name", required=False, allow_blank=True)
    password = serializers.CharField(write_only=True, required=False, min_length=6)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "fullName",
            "email",
            "phone",
            "role",
            "password",
        ]
        read_only_fields = ["id", "username", "role"]

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)

        for key, value in validated_data.items():
            setattr(instance, key, value)

        if password:
            instance.set_password(password)

        instance.save()
        return instance
