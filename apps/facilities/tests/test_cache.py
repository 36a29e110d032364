from __future__ import annotations

import pytest
from django.core.cache import cache

from apps.facilities.cache import GENERATION_KEY, get_cached_facility_ids, invalidate_availability_cache

FILTERS = {"date": "2025-03-01", "start_time": "10:00", "end_time": "11:00", "scope": "member"}


@pytest.fixture
def builds(settings):
    settings.AVAILABILITY_CACHE_ENABLED = True
    cache.clear()
    calls: list[int] = []

    def builder() -> list[int]:
        calls.append(1)
        return [3, 5]

    yield calls, builder
    cache.clear()


def test_repeated_search_is_served_from_cache(builds):
    calls, builder = builds

    assert get_cached_facility_ids(FILTERS, builder) == [3, 5]
    assert get_cached_facility_ids(dict(reversed(list(FILTERS.items()))), builder) == [3, 5]
    assert len(calls) == 1


def test_invalidation_starts_a_new_generation(builds):
    calls, builder = builds
    get_cached_facility_ids(FILTERS, builder)
    before = cache.get(GENERATION_KEY)

    invalidate_availability_cache()
    get_cached_facility_ids(FILTERS, builder)

    assert cache.get(GENERATION_KEY) == before + 1
    assert len(calls) == 2


def test_lost_generation_does_not_revive_old_entries(builds):
    calls, builder = builds
    get_cached_facility_ids(FILTERS, builder)

    cache.delete(GENERATION_KEY)
    get_cached_facility_ids(FILTERS, builder)

    assert len(calls) == 2


def test_invalidation_without_generation_is_harmless(builds):
    calls, builder = builds

    invalidate_availability_cache()

    assert cache.get(GENERATION_KEY) is None
    assert get_cached_facility_ids(FILTERS, builder) == [3, 5]


def test_disabled_cache_always_builds(builds, settings):
    calls, builder = builds
    settings.AVAILABILITY_CACHE_ENABLED = False

    get_cached_facility_ids(FILTERS, builder)
    get_cached_facility_ids(FILTERS, builder)

    assert len(calls) == 2
    assert cache.get(GENERATION_KEY) is None
