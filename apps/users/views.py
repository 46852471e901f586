"""Account endpoints: sign-up, own profile and marketplace side."""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .permissions import IsSelfOrAdmin
from .serializers import RegisterSerializer, UserSerializer, UserTypeSerializer

User = get_user_model()
logger = logging.getLogger(__name__)


class UserViewSet(viewsets.ModelViewSet):
    """
    ``register`` is public; ``me`` and ``role`` act on the caller. Listing
    and reading arbitrary accounts is staff only, editing is limited to
    the account itself or an admin. Accounts are never deleted here.
    """

    serializer_class = UserSerializer
    queryset = User.objects.all()
    http_method_names = ["get", "post", "patch", "put", "head", "options"]

    def get_permissions(self):  # type: ignore
        if self.action == "register":
            return [permissions.AllowAny()]
        if self.action in {"update", "partial_update"}:
            return [permissions.IsAuthenticated(), IsSelfOrAdmin()]
        if self.action in {"me", "role"}:
            return [permissions.IsAuthenticated()]
        return [permissions.IsAdminUser()]

    @action(detail=False, methods=["post"])
    def register(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        account = serializer.save()
        logger.info("Registered user %s as %s", account.pk, account.user_type)
        return Response(UserSerializer(account).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def me(self, request):
        return Response(UserSerializer(request.user).data)

    @action(detail=False, methods=["post"])
    def role(self, request):
        """Switch between skill provider and project creator."""
        serializer = UserTypeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        account = request.user
        account.user_type = serializer.validated_data["user_type"]
        account.save(update_fields=["user_type", "updated_at"])
        logger.info("User %s switched to %s", account.pk, account.user_type)
        return Response(UserSerializer(account).data)
