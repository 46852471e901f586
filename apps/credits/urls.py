"""URL routing for the credits API."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import CreditViewSet

router = DefaultRouter()
router.register(r"", CreditViewSet, basename="credits")

urlpatterns = [
    path("", include(router.urls)),
]
