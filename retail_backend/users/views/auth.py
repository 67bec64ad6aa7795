from django.contrib.auth import authenticate
from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from permissions.roles import (
    PERM_USERS_MANAGE,
    ROLE_CHOICES,
    ROLE_SELLER,
    HasPermission,
    effective_permissions_for,
)
from users.models import User

# ---------------------------
# SERIALIZERS (LOCAL, SIMPLE)
# ---------------------------


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False)
    username = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(write_only=True)
    name = serializers.CharField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=[c[0] for c in ROLE_CHOICES], required=False)
    permissions = serializers.ListField(child=serializers.CharField(), required=False)

    def validate(self, attrs):
        if not attrs.get("email") and not (attrs.get("username") or "").strip():
            raise serializers.ValidationError("Provide email or username.")
        return attrs


class LoginSerializer(serializers.Serializer):
    identifier = serializers.CharField(help_text="Email or username")
    password = serializers.CharField(write_only=True)


class LoginResponseSerializer(serializers.Serializer):
    access = serializers.CharField()
    refresh = serializers.CharField()
    user_id = serializers.UUIDField()
    name = serializers.CharField()
    role = serializers.CharField()
    permissions = serializers.ListField(child=serializers.CharField())


# ---------------------------
# VIEWS
# ---------------------------


class RegisterView(APIView):
    """
    Staff accounts are created by an operator holding users:manage.
    """

    permission_classes = [IsAuthenticated, HasPermission]
    required_permission = PERM_USERS_MANAGE
    serializer_class = RegisterSerializer

    @extend_schema(
        request=RegisterSerializer,
        responses={201: dict},
        description="Create a staff account (requires users:manage)",
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data

        user = User.objects.create_user(
            email=data.get("email"),
            password=data["password"],
            username=(data.get("username") or "").strip(),
            name=data.get("name", ""),
            phone=data.get("phone", ""),
            role=data.get("role", ROLE_SELLER),
            permissions=data.get("permissions", []),
        )

        return Response(
            {"message": "User registered successfully", "user_id": user.id},
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    serializer_class = LoginSerializer

    @extend_schema(
        request=LoginSerializer,
        responses={200: LoginResponseSerializer},
        description="Authenticate with email or username and receive JWT tokens",
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = authenticate(
            request=request,
            username=serializer.validated_data["identifier"],
            password=serializer.validated_data["password"],
        )

        if not user:
            return Response(
                {"detail": "Invalid credentials"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        refresh = RefreshToken.for_user(user)

        return Response(
            {
                "access": str(refresh.access_token),
                "refresh": str(refresh),
                "user_id": user.id,
                "name": user.display_name,
                "role": user.role,
                "permissions": sorted(effective_permissions_for(user)),
            }
        )
