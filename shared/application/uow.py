"""
Unit of Work

Every mutating reservation operation runs inside one unit of work:
the conflict check and the writes share a single database transaction,
and domain events are published only after that transaction commits.
"""

import logging
from typing import List

from django.db import transaction

from shared.domain.base import Aggregate, DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Transaction scope for one booking command

    Usage:
        with DjangoUnitOfWork() as uow:
            facility = get_facility(facility_id, lock=True)
            conflict_index.find_conflicts(...)
            reservation_repo.add(reservation)
            uow.collect_events(reservation)

    Leaving the block with an exception rolls the transaction back and
    drops the collected events. On success the events are handed to the
    message bus through transaction.on_commit(), so a rollback of an
    enclosing transaction discards them too.
    """

    def __init__(self, using: str | None = None):
        self.using = using
        self._atomic = transaction.atomic(using=using)
        self._pending: List[DomainEvent] = []

    def __enter__(self) -> 'DjangoUnitOfWork':
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self._schedule_publication()
        elif self._pending:
            logger.warning("Transaction failed, dropping %d events", len(self._pending))
            self._pending = []
        return self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def collect_events(self, aggregate: Aggregate):
        """
        Take over the events recorded by an aggregate

        Call it after the aggregate is saved: events recorded before the
        first insert get the new primary key stamped here.
        """
        events = aggregate.events
        aggregate.clear_events()
        for event in events:
            if event.aggregate_id is None:
                event.aggregate_id = aggregate.id
        self._pending.extend(events)

    def _schedule_publication(self):
        if not self._pending:
            return
        events, self._pending = self._pending, []
        logger.debug("Scheduling %d events for publication on commit", len(events))
        transaction.on_commit(lambda: publish_after_commit(events), using=self.using)


def publish_after_commit(events: List[DomainEvent]):
    """Hand committed events to the bus; the data is durable, so nothing is raised."""
    from shared.application.message_bus import message_bus

    try:
        message_bus.publish_events(events)
    except Exception:
        logger.exception("Publishing %d committed events failed", len(events))
