"""Integration tests for the reviews API."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.listings.models import Listing
from apps.reviews.models import Review
from apps.users.models import User


class ReviewAPITests(APITestCase):
    def setUp(self) -> None:
        self.provider = User.objects.create_user(
            email="provider@example.com",
            password="ProviderPass123",
            user_type=User.UserTypeChoices.SKILL_PROVIDER,
        )
        self.other_provider = User.objects.create_user(
            email="other-provider@example.com",
            password="ProviderPass123",
            user_type=User.UserTypeChoices.SKILL_PROVIDER,
        )
        self.reviewer = User.objects.create_user(
            email="reviewer@example.com",
            password="ReviewerPass123",
            user_type=User.UserTypeChoices.PROJECT_CREATOR,
        )
        self.listing = Listing.objects.create(
            owner=self.provider,
            title="Guitar lessons",
            description="Chords and strumming.",
            skill_tags=["music"],
            lat=0,
            lng=0,
        )
        self.list_url = reverse("review-list")
        self.client.force_authenticate(self.reviewer)

    def test_create_review(self) -> None:
        response = self.client.post(
            self.list_url,
            {"subject_id": self.provider.pk, "listing_id": self.listing.pk, "rating": 5, "comment": "Great"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["reviewer"]["id"], self.reviewer.pk)
        self.assertEqual(response.data["listing_title"], "Guitar lessons")
        self.assertTrue(Review.objects.filter(reviewer=self.reviewer, subject=self.provider).exists())

    def test_review_without_listing(self) -> None:
        response = self.client.post(self.list_url, {"subject_id": self.provider.pk, "rating": 4}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIsNone(response.data["listing_id"])
        self.assertIsNone(response.data["listing_title"])

    def test_cannot_review_yourself(self) -> None:
        response = self.client.post(self.list_url, {"subject_id": self.reviewer.pk, "rating": 5}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("subject_id", response.data)

    def test_listing_must_belong_to_subject(self) -> None:
        response = self.client.post(
            self.list_url,
            {"subject_id": self.other_provider.pk, "listing_id": self.listing.pk, "rating": 3},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("listing_id", response.data)

    def test_one_review_per_listing(self) -> None:
        payload = {"subject_id": self.provider.pk, "listing_id": self.listing.pk, "rating": 5}
        self.assertEqual(self.client.post(self.list_url, payload, format="json").status_code, status.HTTP_201_CREATED)

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("listing_id", response.data)

    def test_rating_and_comment_limits(self) -> None:
        response = self.client.post(
            self.list_url,
            {"subject_id": self.provider.pk, "rating": 6, "comment": "x" * 1001},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("rating", response.data)
        self.assertIn("comment", response.data)

    def test_list_by_subject_includes_average(self) -> None:
        Review.objects.create(reviewer=self.reviewer, subject=self.provider, listing=self.listing, rating=5)
        Review.objects.create(reviewer=self.other_provider, subject=self.provider, rating=2)
        Review.objects.create(reviewer=self.reviewer, subject=self.other_provider, rating=1)

        self.client.force_authenticate(None)
        response = self.client.get(self.list_url, {"subject": self.provider.pk})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["results"]), 2)
        self.assertEqual(response.data["average_rating"], 3.5)
        self.assertEqual(response.data["review_count"], 2)

    def test_list_filters_by_reviewer_and_listing(self) -> None:
        mine = Review.objects.create(reviewer=self.reviewer, subject=self.provider, listing=self.listing, rating=5)
        Review.objects.create(reviewer=self.other_provider, subject=self.provider, rating=2)

        by_reviewer = self.client.get(self.list_url, {"reviewer": self.reviewer.pk})
        by_listing = self.client.get(self.list_url, {"listing": self.listing.pk})

        self.assertEqual([item["id"] for item in by_reviewer.data], [mine.pk])
        self.assertEqual([item["id"] for item in by_listing.data], [mine.pk])

    def test_anonymous_cannot_create(self) -> None:
        self.client.force_authenticate(None)
        response = self.client.post(self.list_url, {"subject_id": self.provider.pk, "rating": 5}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
