"""Integration tests for the credits API."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.credits import ledger
from apps.users.models import User


class CreditsAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(
            email="member@example.com",
            password="MemberPass123",
            user_type=User.UserTypeChoices.PROJECT_CREATOR,
        )
        self.friend = User.objects.create_user(
            email="friend@example.com",
            password="FriendPass123",
            user_type=User.UserTypeChoices.SKILL_PROVIDER,
        )
        self.admin = User.objects.create_user(
            email="admin@example.com",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        ledger.top_up(self.user.pk, 60, "Welcome credits")
        self.client.force_authenticate(self.user)

    def test_balance_stats_and_history(self) -> None:
        ledger.transfer_between_users(self.user.pk, self.friend.pk, 15, "Lunch")

        response = self.client.get(reverse("credits-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["balance"], 45)
        self.assertEqual(response.data["stats"], {"total_earned": 60, "total_spent": 15, "net_balance": 45})
        self.assertEqual([row["amount"] for row in response.data["transactions"]], [-15, 60])
        self.assertEqual(response.data["pagination"]["total"], 2)
        self.assertFalse(response.data["pagination"]["has_more"])

    def test_history_pagination(self) -> None:
        for _ in range(3):
            ledger.top_up(self.user.pk, 1, "Bonus")

        response = self.client.get(reverse("credits-list"), {"limit": 2, "offset": 1})

        self.assertEqual(len(response.data["transactions"]), 2)
        self.assertEqual(response.data["pagination"], {"total": 4, "limit": 2, "offset": 1, "has_more": True})

    def test_only_admin_inspects_other_users(self) -> None:
        response = self.client.get(reverse("credits-list"), {"user": self.friend.pk})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.get(reverse("credits-list"), {"user": self.user.pk})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["balance"], 60)

    def test_admin_inspecting_malformed_user_id(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("credits-list"), {"user": "abc"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid")

        response = self.client.get(reverse("credits-list"), {"user": 999999})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_transfer(self) -> None:
        response = self.client.post(
            reverse("credits-transfer"),
            {"recipient_id": self.friend.pk, "amount": 20, "reason": "Thanks"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["balance"], 40)
        self.friend.refresh_from_db()
        self.assertEqual(self.friend.credits, 20)

    def test_transfer_to_self_is_rejected(self) -> None:
        response = self.client.post(
            reverse("credits-transfer"), {"recipient_id": self.user.pk, "amount": 5}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_credit_operation")

    def test_transfer_more_than_balance(self) -> None:
        response = self.client.post(
            reverse("credits-transfer"), {"recipient_id": self.friend.pk, "amount": 61}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "insufficient_credits")
        self.user.refresh_from_db()
        self.assertEqual(self.user.credits, 60)

    def test_transfer_requires_positive_amount(self) -> None:
        response = self.client.post(
            reverse("credits-transfer"), {"recipient_id": self.friend.pk, "amount": 0}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("amount", response.data)

    def test_top_up_is_admin_only(self) -> None:
        payload = {"user_id": self.friend.pk, "amount": 25}
        response = self.client.post(reverse("credits-top-up"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.post(reverse("credits-top-up"), payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["amount"], 25)
        self.friend.refresh_from_db()
        self.assertEqual(self.friend.credits, 25)

    def test_top_up_unknown_user(self) -> None:
        self.client.force_authenticate(self.admin)
        response = self.client.post(reverse("credits-top-up"), {"user_id": 999999, "amount": 5}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_anonymous_is_rejected(self) -> None:
        self.client.force_authenticate(None)
        self.assertEqual(self.client.get(reverse("credits-list")).status_code, status.HTTP_401_UNAUTHORIZED)
