"""Credits API: balance, stats, history, transfers and admin top-ups."""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsPlatformAdmin, is_admin

from . import ledger
from .models import CreditTransaction
from .serializers import CreditTransactionSerializer, TopUpSerializer, TransferSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


def _int_param(request, name: str, default: int) -> int:
    try:
        return max(int(request.query_params.get(name, default)), 0)
    except (TypeError, ValueError):
        return default


class CreditViewSet(viewsets.ViewSet):
    """
    GET returns the balance, ledger stats and one page of history.

    Admins may inspect another user with ``?user=<id>``.
    """

    permission_classes = [permissions.IsAuthenticated]

    def list(self, request):  # type: ignore
        user = request.user
        requested = request.query_params.get("user")
        if requested and str(requested) != str(user.pk):
            if not is_admin(user):
                return Response(
                    {"detail": "Only admins can view other users' credits", "code": "forbidden"},
                    status=status.HTTP_403_FORBIDDEN,
                )
            if not str(requested).isdigit():
                return Response(
                    {"detail": "user must be a numeric id", "code": "invalid"},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            user = User.objects.filter(pk=int(requested)).first()
            if user is None:
                return Response({"detail": "User not found", "code": "not_found"}, status=status.HTTP_404_NOT_FOUND)

        limit = min(_int_param(request, "limit", settings.CREDIT_HISTORY_PAGE_SIZE), 100) or 1
        offset = _int_param(request, "offset", 0)

        history = CreditTransaction.objects.filter(user=user)
        total = history.count()
        page = history[offset:offset + limit]

        return Response(
            {
                "balance": user.credits,
                "stats": ledger.ledger_stats(user.pk).to_dict(),
                "transactions": CreditTransactionSerializer(page, many=True).data,
                "pagination": {
                    "total": total,
                    "limit": limit,
                    "offset": offset,
                    "has_more": offset + limit < total,
                },
            }
        )

    @action(detail=False, methods=["post"])
    def transfer(self, request):  # type: ignore
        serializer = TransferSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        ledger.transfer_between_users(
            request.user.pk,
            data["recipient_id"],
            data["amount"],
            data.get("reason"),
        )
        request.user.refresh_from_db(fields=["credits"])
        return Response(
            {
                "message": f"Successfully transferred {data['amount']} credits",
                "balance": request.user.credits,
            }
        )

    @action(detail=False, methods=["post"], url_path="top-up", permission_classes=[IsPlatformAdmin])
    def top_up(self, request):  # type: ignore
        serializer = TopUpSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if not User.objects.filter(pk=data["user_id"]).exists():
            return Response({"detail": "User not found", "code": "not_found"}, status=status.HTTP_404_NOT_FOUND)

        row = ledger.top_up(data["user_id"], data["amount"], data.get("reason") or "Admin credit adjustment")
        logger.info("Admin %s adjusted credits of user %s", request.user.pk, data["user_id"])
        return Response(CreditTransactionSerializer(row).data, status=status.HTTP_201_CREATED)
