"""URL routing for the facility registry."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import FacilityTypeViewSet, FacilityViewSet

router = DefaultRouter()
# Before the facility routes, whose detail pattern would swallow "types/"
router.register(r"types", FacilityTypeViewSet, basename="facility-type")
router.register(r"", FacilityViewSet, basename="facility")

urlpatterns = [
    path("", include(router.urls)),
]
