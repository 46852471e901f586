"""Integration tests for listing API endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.listings.models import Listing
from apps.users.models import User


class ListingAPITests(APITestCase):
    def setUp(self) -> None:
        self.provider = User.objects.create_user(
            email="provider@example.com",
            password="ProviderPass123",
            user_type=User.UserTypeChoices.SKILL_PROVIDER,
        )
        self.creator = User.objects.create_user(
            email="creator@example.com",
            password="CreatorPass123",
            user_type=User.UserTypeChoices.PROJECT_CREATOR,
        )
        self.listing = Listing.objects.create(
            owner=self.provider,
            title="Bike repair clinic",
            description="Fix flats and tune gears.",
            skill_tags=["bikes", "repair"],
            price_cents=3000,
            lat=52.52,
            lng=13.405,
        )
        self.hidden = Listing.objects.create(
            owner=self.provider,
            title="Old workshop",
            description="No longer offered.",
            skill_tags=["bikes"],
            lat=52.5,
            lng=13.4,
            is_active=False,
        )
        self.list_url = reverse("listing-list")

    def _payload(self, **overrides) -> dict[str, object]:
        payload = {
            "title": "Sourdough baking",
            "description": "Starter care and shaping.",
            "skill_tags": ["baking", " bread ", "baking"],
            "price_cents": 4000,
            "duration_mins": 120,
            "lat": 48.8566,
            "lng": 2.3522,
        }
        payload.update(overrides)
        return payload

    def test_anonymous_sees_active_listings_only(self) -> None:
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item["id"] for item in response.data], [self.listing.id])
        self.assertEqual(response.data[0]["credit_cost"], 30)
        self.assertEqual(response.data[0]["owner"]["id"], self.provider.id)

    def test_owner_also_sees_inactive_listings(self) -> None:
        self.client.force_authenticate(self.provider)
        response = self.client.get(self.list_url)

        self.assertEqual({item["id"] for item in response.data}, {self.listing.id, self.hidden.id})

    def test_inactive_listing_is_hidden_from_others(self) -> None:
        self.client.force_authenticate(self.creator)
        response = self.client.get(reverse("listing-detail", kwargs={"pk": self.hidden.pk}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_skill_provider_creates_listing(self) -> None:
        self.client.force_authenticate(self.provider)
        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["skill_tags"], ["baking", "bread"])
        self.assertEqual(response.data["owner"]["id"], self.provider.id)
        self.assertTrue(response.data["is_active"])

    def test_project_creator_cannot_create_listing(self) -> None:
        self.client.force_authenticate(self.creator)
        response = self.client.post(self.list_url, self._payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_validates_fields(self) -> None:
        self.client.force_authenticate(self.provider)
        response = self.client.post(
            self.list_url,
            self._payload(title="ab", skill_tags=[], lat=91),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("title", response.data)
        self.assertIn("skill_tags", response.data)
        self.assertIn("lat", response.data)

    def test_only_owner_updates(self) -> None:
        url = reverse("listing-detail", kwargs={"pk": self.listing.pk})

        self.client.force_authenticate(self.creator)
        response = self.client.patch(url, {"title": "Hijacked"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.provider)
        response = self.client.patch(url, {"title": "Bike repair 101"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["title"], "Bike repair 101")

    def test_delete_deactivates(self) -> None:
        self.client.force_authenticate(self.provider)
        response = self.client.delete(reverse("listing-detail", kwargs={"pk": self.listing.pk}))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.listing.refresh_from_db()
        self.assertFalse(self.listing.is_active)

    def test_filter_by_tags(self) -> None:
        other = Listing.objects.create(
            owner=self.provider,
            title="Knitting circle",
            description="Scarves and socks.",
            skill_tags=["Knitting"],
            lat=52.5,
            lng=13.4,
        )

        response = self.client.get(self.list_url, {"tags": "knitting,pottery"})

        self.assertEqual([item["id"] for item in response.data], [other.id])

    def test_filter_near(self) -> None:
        Listing.objects.create(
            owner=self.provider,
            title="Paris listing",
            description="Far from Berlin.",
            skill_tags=["art"],
            lat=48.8566,
            lng=2.3522,
        )

        response = self.client.get(self.list_url, {"near": "52.51,13.40,5"})
        self.assertEqual([item["id"] for item in response.data], [self.listing.id])

        response = self.client.get(self.list_url, {"near": "not-a-point"})
        self.assertEqual(response.data, [])

    def test_filter_near_orders_by_distance(self) -> None:
        closer = Listing.objects.create(
            owner=self.provider,
            title="Around the corner",
            description="Right next to the search point.",
            skill_tags=["bikes"],
            lat=52.5101,
            lng=13.4001,
        )

        response = self.client.get(self.list_url, {"near": "52.51,13.40,5"})

        self.assertEqual([item["id"] for item in response.data], [closer.id, self.listing.id])
        distances = [item["distance_km"] for item in response.data]
        self.assertLess(distances[0], distances[1])
        self.assertLess(distances[1], 5)

        response = self.client.get(self.list_url)
        self.assertTrue(all(item["distance_km"] is None for item in response.data))

    def test_search(self) -> None:
        response = self.client.get(self.list_url, {"search": "flats"})
        self.assertEqual([item["id"] for item in response.data], [self.listing.id])
