"""Listing API views."""

from __future__ import annotations

import logging

from django.db.models import Q  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.filters import OrderingFilter, SearchFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsOwnerOrAdmin, can_create_listing, is_admin

from .filters import ListingFilterSet
from .models import Listing
from .serializers import ListingSerializer, ListingWriteSerializer

logger = logging.getLogger(__name__)


class ListingViewSet(viewsets.ModelViewSet):
    """Viewset for listings.

    Anonymous users and non-owners only see active listings; owners also see
    their deactivated ones, admins see everything. DELETE deactivates.
    """

    queryset = Listing.objects.select_related("owner")
    permission_classes = [permissions.IsAuthenticatedOrReadOnly, IsOwnerOrAdmin]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = ListingFilterSet
    search_fields = ["title", "description"]
    ordering_fields = ["price_cents", "created_at", "duration_mins"]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if is_admin(user):
            return qs
        if user.is_authenticated:
            return qs.filter(Q(is_active=True) | Q(owner=user))
        return qs.active()

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return ListingWriteSerializer
        return ListingSerializer

    def perform_create(self, serializer):  # type: ignore
        if not can_create_listing(self.request.user):
            raise PermissionDenied("Only skill providers can create listings.")
        listing = serializer.save(owner=self.request.user)
        logger.info("Listing %s created by user %s", listing.pk, self.request.user.pk)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        listing = self.get_object()
        listing.deactivate()
        logger.info("Listing %s deactivated by user %s", listing.pk, request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
