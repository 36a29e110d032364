"""Serializers for the facility registry."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Facility, FacilityType


class FacilityTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = FacilityType
        fields = ["id", "name", "description"]


class FacilitySerializer(serializers.ModelSerializer):
    """Facility card; maintenance is managed through its own endpoint."""

    facility_type = serializers.SlugRelatedField(
        slug_field="name",
        queryset=FacilityType.objects.all(),
        allow_null=True,
        required=False,
    )
    is_under_maintenance = serializers.SerializerMethodField()

    class Meta:
        model = Facility
        fields = [
            "id",
            "name",
            "facility_type",
            "location",
            "capacity",
            "description",
            "is_active",
            "maintenance_until",
            "maintenance_reason",
            "is_under_maintenance",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "maintenance_until",
            "maintenance_reason",
            "is_under_maintenance",
            "created_at",
            "updated_at",
        ]

    def get_is_under_maintenance(self, obj: Facility) -> bool:
        return obj.is_under_maintenance()


class MaintenanceSerializer(serializers.Serializer):
    """Open a maintenance window, or clear it with ``maintenance_until: null``."""

    maintenance_until = serializers.DateTimeField(allow_null=True)
    maintenance_reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)
