"""Shared pytest fixtures: a provider with a listing and a funded booker."""

from __future__ import annotations

from datetime import timedelta

import pytest


@pytest.fixture
def provider(db, django_user_model):
    return django_user_model.objects.create_user(
        email="provider@example.com",
        password="ProviderPass123",
        name="Pat Provider",
        user_type=django_user_model.UserTypeChoices.SKILL_PROVIDER,
    )


@pytest.fixture
def booker(db, django_user_model):
    from apps.credits import ledger

    user = django_user_model.objects.create_user(
        email="booker@example.com",
        password="BookerPass123",
        name="Bea Booker",
        user_type=django_user_model.UserTypeChoices.PROJECT_CREATOR,
    )
    ledger.top_up(user.pk, 100, "Welcome credits")
    user.refresh_from_db()
    return user


@pytest.fixture
def outsider(db, django_user_model):
    return django_user_model.objects.create_user(
        email="outsider@example.com",
        password="OutsiderPass123",
        user_type=django_user_model.UserTypeChoices.PROJECT_CREATOR,
    )


@pytest.fixture
def listing(provider):
    from apps.listings.models import Listing

    return Listing.objects.create(
        owner=provider,
        title="Woodworking basics",
        description="Hands-on intro to hand tools.",
        skill_tags=["woodworking", "tools"],
        price_cents=2500,
        lat=52.52,
        lng=13.405,
    )


@pytest.fixture
def slot():
    """A one-hour slot starting two days from now, on the hour."""
    from django.utils import timezone

    start = (timezone.now() + timedelta(days=2)).replace(minute=0, second=0, microsecond=0)
    return start, start + timedelta(hours=1)
