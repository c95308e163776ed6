"""API views for the booking domain."""

from __future__ import annotations

from uuid import UUID

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.api.permissions import IsCustomer, principal_from_request
from shared.application.message_bus import message_bus

from .application.command_handlers import (
    AcceptBookingCommand,
    CancelBookingCommand,
    CompleteBookingCommand,
    CreateBookingCommand,
    RejectBookingCommand,
    RescheduleBookingCommand,
)
from .models import Booking
from .serializers import (
    BookingCreateSerializer,
    BookingReasonSerializer,
    BookingRescheduleSerializer,
    BookingSerializer,
)

TRUE_VALUES = {"1", "true", "yes", "on"}


class BookingViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Bookings of the caller

    Customers see their own bookings, owners the bookings of their spas and
    administrators everything. Customers do not see cancelled bookings
    unless they pass ``?include_cancelled=true``.
    """

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status", "spa"]
    lookup_value_regex = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"

    def get_permissions(self):  # type: ignore
        if self.action == "create":
            return [IsCustomer()]
        return super().get_permissions()

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = Booking.objects.select_related("spa", "service", "staff", "customer").visible_to(user)
        include_cancelled = str(self.request.query_params.get("include_cancelled", "")).lower() in TRUE_VALUES
        if user.is_customer() and not include_cancelled:
            qs = qs.active()
        return qs

    def create(self, request, *args, **kwargs):  # type: ignore
        payload = BookingCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        booking = message_bus.handle_command(
            CreateBookingCommand(
                principal=principal_from_request(request),
                spa_id=data["spa"],
                service_id=data["service"],
                staff_id=data.get("staff"),
                scheduled_at=data["scheduled_at"],
                coupon_code=data.get("coupon_code") or None,
            )
        )
        return Response(self._render(booking.id), status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def accept(self, request, pk=None):  # type: ignore
        booking = message_bus.handle_command(
            AcceptBookingCommand(principal=principal_from_request(request), booking_id=UUID(str(pk)))
        )
        return Response(self._render(booking.id))

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):  # type: ignore
        payload = BookingReasonSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        booking = message_bus.handle_command(
            RejectBookingCommand(
                principal=principal_from_request(request),
                booking_id=UUID(str(pk)),
                reason=payload.validated_data["reason"],
            )
        )
        return Response(self._render(booking.id))

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):  # type: ignore
        booking = message_bus.handle_command(
            CompleteBookingCommand(principal=principal_from_request(request), booking_id=UUID(str(pk)))
        )
        return Response(self._render(booking.id))

    @action(detail=True, methods=["post"])
    def reschedule(self, request, pk=None):  # type: ignore
        payload = BookingRescheduleSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        booking = message_bus.handle_command(
            RescheduleBookingCommand(
                principal=principal_from_request(request),
                booking_id=UUID(str(pk)),
                scheduled_at=payload.validated_data["scheduled_at"],
            )
        )
        return Response(self._render(booking.id))

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        payload = BookingReasonSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        booking = message_bus.handle_command(
            CancelBookingCommand(
                principal=principal_from_request(request),
                booking_id=UUID(str(pk)),
                reason=payload.validated_data["reason"],
            )
        )
        return Response(self._render(booking.id))

    def _render(self, booking_id: UUID) -> dict:
        booking = Booking.objects.select_related("spa", "service", "staff", "customer").get(pk=booking_id)
        return BookingSerializer(booking, context=self.get_serializer_context()).data
