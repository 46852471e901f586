"""API views for the booking domain."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.listings.models import Listing
from apps.users.permissions import IsPlatformAdmin

from . import reminders
from .application.command_handlers import create_booking, transition_booking
from .domain.state_machine import BookingStatus
from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    BookingCreateSerializer,
    BookingSerializer,
    BookingTransitionSerializer,
    ReminderJobSerializer,
)


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """Viewset to request bookings and move them through their lifecycle.

    Lists show the user's own bookings; ``?as_provider=true`` switches to
    bookings of the user's listings. Status changes go through
    ``transition/`` or the ``confirm/``, ``decline/``, ``cancel/`` and
    ``complete/`` shortcuts.
    """

    queryset = Booking.objects.select_related("listing", "listing__owner", "booker")
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = BookingFilterSet
    ordering_fields = ["start_at", "created_at"]
    lookup_value_regex = r"\d+"

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if self.action in {"retrieve", "reminder_jobs"}:
            return qs.filter(Q(booker=user) | Q(listing__owner=user))
        if str(self.request.query_params.get("as_provider", "")).lower() in {"1", "true", "yes"}:
            return qs.filter(listing__owner=user)
        return qs.filter(booker=user)

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        return BookingSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        credits_used = None
        if data["payment_method"] == BookingCreateSerializer.PAYMENT_CREDITS:
            listing = Listing.objects.filter(pk=data["listing_id"]).first()
            credits_used = listing.credit_cost if listing else None

        booking = create_booking(
            listing_id=data["listing_id"],
            booker_id=request.user.pk,
            start_at=data["start_at"],
            end_at=data["end_at"],
            credits_used=credits_used,
        )
        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def _transition(self, request, pk, requested_status):  # type: ignore
        booking = transition_booking(int(pk), requested_status, actor_id=request.user.pk)
        booking = self.queryset.get(pk=booking.pk)
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["post"])
    def transition(self, request, pk=None):  # type: ignore
        serializer = BookingTransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._transition(request, pk, serializer.validated_data["status"])

    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):  # type: ignore
        return self._transition(request, pk, BookingStatus.CONFIRMED)

    @action(detail=True, methods=["post"])
    def decline(self, request, pk=None):  # type: ignore
        return self._transition(request, pk, BookingStatus.DECLINED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        return self._transition(request, pk, BookingStatus.CANCELLED)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):  # type: ignore
        return self._transition(request, pk, BookingStatus.COMPLETED)

    @action(detail=True, methods=["get"], url_path="reminders", url_name="reminders")
    def reminder_jobs(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        jobs = booking.reminder_jobs.all()
        return Response(ReminderJobSerializer(jobs, many=True).data)

    @action(
        detail=False,
        methods=["get"],
        url_path="reminder-queue-stats",
        permission_classes=[IsPlatformAdmin],
    )
    def reminder_queue_stats(self, request):  # type: ignore
        return Response(reminders.queue_stats())
