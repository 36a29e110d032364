"""Read-through cache for facility availability search results.

Entries are stored under the current cache generation, passed as the
Django cache ``version``. Invalidation bumps the generation with one
atomic ``incr``, so every older entry stops being read and simply
expires on its timeout.
"""

from __future__ import annotations

import hashlib
import json
import time
from typing import Callable, Dict, List

from django.conf import settings
from django.core.cache import cache

GENERATION_KEY = "availability:generation"


def _enabled() -> bool:
    return getattr(settings, "AVAILABILITY_CACHE_ENABLED", False)


def _generation() -> int:
    generation = cache.get(GENERATION_KEY)
    if generation is None:
        # Seeded from the clock so a lost counter never reuses an old generation
        cache.add(GENERATION_KEY, time.time_ns(), None)
        generation = cache.get(GENERATION_KEY)
    return generation


def search_key(filters: Dict[str, object]) -> str:
    prefix = getattr(settings, "AVAILABILITY_CACHE_PREFIX", "availability:facilities")
    fingerprint = json.dumps(filters, sort_keys=True, default=str)
    return f"{prefix}:{hashlib.sha256(fingerprint.encode()).hexdigest()}"


def get_cached_facility_ids(filters: Dict[str, object], builder: Callable[[], List[int]]) -> List[int]:
    """Ids of the facilities free for ``filters``; ``builder`` runs on a miss."""
    if not _enabled():
        return builder()

    key = search_key(filters)
    generation = _generation()
    facility_ids = cache.get(key, version=generation)
    if facility_ids is None:
        facility_ids = builder()
        cache.set(
            key,
            facility_ids,
            getattr(settings, "AVAILABILITY_CACHE_TIMEOUT", 60),
            version=generation,
        )
    return facility_ids


def invalidate_availability_cache() -> None:
    """Start a new generation; entries cached so far are never read again."""
    try:
        cache.incr(GENERATION_KEY)
    except ValueError:
        # No generation yet: the next read seeds a fresh one
        pass
