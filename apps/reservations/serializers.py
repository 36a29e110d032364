"""Serializers for the reservation API.

Input serializers accept both the canonical field names and the legacy
camelCase aliases, and hand the engine one canonical shape.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

LEGACY_ALIASES = {
    "facilityId": "facility_id",
    "facility": "facility_id",
    "startTime": "start_time",
    "endTime": "end_time",
    "participants": "attendees",
    "attendee_count": "attendees",
    "proposalUrl": "proposal_url",
}


def normalize_legacy_fields(data) -> dict:
    """Translate legacy field names; canonical names win when both are sent."""
    normalized = dict(data.items()) if hasattr(data, "items") else {}
    for legacy, canonical in LEGACY_ALIASES.items():
        if legacy in normalized:
            value = normalized.pop(legacy)
            normalized.setdefault(canonical, value)
    return normalized


class LegacyAliasMixin:
    def to_internal_value(self, data):  # type: ignore
        return super().to_internal_value(normalize_legacy_fields(data))


class ReservationCreateSerializer(LegacyAliasMixin, serializers.Serializer):
    """Payload of a new reservation request."""

    facility_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    date = serializers.DateField(input_formats=["%Y-%m-%d"])
    start_time = serializers.TimeField(input_formats=["%H:%M"], format="%H:%M")
    end_time = serializers.TimeField(input_formats=["%H:%M"], format="%H:%M")
    purpose = serializers.CharField()
    attendees = serializers.IntegerField()
    proposal_url = serializers.CharField(required=False, allow_blank=True, max_length=500, default="")

    def validate(self, attrs):  # type: ignore
        if attrs["start_time"] >= attrs["end_time"]:
            raise serializers.ValidationError({"end_time": "End time must be after start time."})
        return attrs


class ReservationUpdateSerializer(LegacyAliasMixin, serializers.Serializer):
    """Partial edit; omitted fields keep their current value."""

    date = serializers.DateField(required=False, input_formats=["%Y-%m-%d"])
    start_time = serializers.TimeField(required=False, input_formats=["%H:%M"])
    end_time = serializers.TimeField(required=False, input_formats=["%H:%M"])
    purpose = serializers.CharField(required=False)
    attendees = serializers.IntegerField(required=False)

    def validate(self, attrs):  # type: ignore
        if not attrs:
            raise serializers.ValidationError("Nothing to update.")
        return attrs


class ReservationStatusSerializer(serializers.Serializer):
    status = serializers.CharField()
    comment = serializers.CharField(required=False, allow_blank=True, default="")


class AvailabilityQuerySerializer(LegacyAliasMixin, serializers.Serializer):
    facility_id = serializers.IntegerField(min_value=1)
    date = serializers.DateField(input_formats=["%Y-%m-%d"])
    start_time = serializers.TimeField(input_formats=["%H:%M"])
    end_time = serializers.TimeField(input_formats=["%H:%M"])


class ReservationSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    status = serializers.CharField()
    requester_id = serializers.IntegerField()
    requester_name = serializers.CharField()
    facility_id = serializers.IntegerField(allow_null=True)
    facility_name = serializers.CharField(allow_null=True)
    date = serializers.CharField()
    start_time = serializers.CharField()
    end_time = serializers.CharField()
    purpose = serializers.CharField()
    attendees = serializers.IntegerField()
    created_at = serializers.DateTimeField()


class AuditEntrySerializer(serializers.Serializer):
    action = serializers.CharField()
    from_status = serializers.CharField()
    to_status = serializers.CharField()
    acted_by_id = serializers.IntegerField(allow_null=True)
    comment = serializers.CharField()
    acted_at = serializers.DateTimeField()


class ReservationDetailSerializer(ReservationSummarySerializer):
    requester_email = serializers.CharField()
    facility_type = serializers.CharField(allow_null=True)
    facility_location = serializers.CharField(allow_null=True)
    facility_capacity = serializers.IntegerField(allow_null=True)
    proposal_url = serializers.CharField()
    updated_at = serializers.DateTimeField()
    history = AuditEntrySerializer(many=True)


class TimeSlotSerializer(serializers.Serializer):
    """Renders a TimeRange as date + HH:MM pair."""

    date = serializers.DateField(source="day")
    start_time = serializers.CharField()
    end_time = serializers.CharField()
