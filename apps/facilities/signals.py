"""Model signal handlers for availability cache invalidation."""

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .cache import invalidate_availability_cache
from .models import Facility


@receiver([post_save, post_delete], sender=Facility)
@receiver([post_save, post_delete], sender="reservations.Reservation")
@receiver([post_save, post_delete], sender="reservations.ReservationItem")
def availability_cache_invalidator(**_: object) -> None:
    """Invalidate cached availability once the current transaction commits."""
    transaction.on_commit(invalidate_availability_cache)
