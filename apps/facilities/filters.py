import django_filters
from django.db.models import Q

from .models import Facility


class FacilityFilter(django_filters.FilterSet):
    facility_type = django_filters.CharFilter(field_name="facility_type__name", lookup_expr="iexact")
    type_id = django_filters.NumberFilter(field_name="facility_type_id")
    location = django_filters.CharFilter(field_name="location", lookup_expr="icontains")
    # Facilities with unknown capacity are treated as unbounded.
    min_capacity = django_filters.NumberFilter(method="filter_min_capacity")
    q = django_filters.CharFilter(method="filter_text")

    class Meta:
        model = Facility
        fields = ["facility_type", "type_id", "location", "is_active"]

    def filter_min_capacity(self, queryset, name, value):
        return queryset.filter(Q(capacity__gte=value) | Q(capacity__isnull=True))

    def filter_text(self, queryset, name, value):
        return queryset.filter(
            Q(name__icontains=value)
            | Q(description__icontains=value)
            | Q(location__icontains=value)
            | Q(facility_type__name__icontains=value)
        )
