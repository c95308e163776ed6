"""
Transactional unit of work for the marketplace write paths.

Every state change (booking transition, coupon redemption, ledger entry,
loyalty award) runs inside one ``DjangoUnitOfWork``. Domain events that the
touched aggregates raised are held back until the database transaction has
committed, then handed to the message bus.
"""

from typing import Callable, List, TypeVar
import logging
import time

from django.db import OperationalError, connection, transaction

from shared.domain.base import Aggregate, DomainEvent
from shared.domain.exceptions import StorageError

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DjangoUnitOfWork:
    """
    ``transaction.atomic`` plus an outbox of pending domain events

    When this is the outermost atomic block on PostgreSQL and
    ``serializable`` is set, the transaction is switched to SERIALIZABLE
    isolation. Nested use joins the caller's transaction as a savepoint.

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = booking_repo.get(booking_id, lock=True)
            booking.accept()
            uow.collect_events(booking)
            booking_repo.save(booking)
    """

    def __init__(self, serializable: bool = False):
        self.serializable = serializable
        self._pending: List[DomainEvent] = []
        self._atomic = None

    def __enter__(self) -> 'DjangoUnitOfWork':
        outermost = not connection.in_atomic_block
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        if self.serializable and outermost and connection.vendor == 'postgresql':
            with connection.cursor() as cursor:
                cursor.execute('SET TRANSACTION ISOLATION LEVEL SERIALIZABLE')
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def collect_events(self, aggregate: Aggregate) -> None:
        """Move the aggregate's raised events into this unit's outbox."""
        raised = aggregate.events
        if not raised:
            return
        self._pending.extend(raised)
        aggregate.clear_events()
        logger.debug(f"{aggregate.__class__.__name__} {aggregate.id} raised {len(raised)} events")

    def commit(self) -> None:
        """Publish the outbox once the surrounding transaction commits."""
        outbox, self._pending = self._pending, []
        if outbox:
            transaction.on_commit(lambda: self._deliver(outbox))

    def rollback(self) -> None:
        if self._pending:
            logger.warning(f"Transaction rolled back, dropping {len(self._pending)} pending events")
        self._pending = []

    @staticmethod
    def _deliver(outbox: List[DomainEvent]) -> None:
        from shared.application.message_bus import message_bus

        logger.info(f"Transaction committed, publishing {len(outbox)} events")
        try:
            message_bus.publish_events(outbox)
        except Exception as e:
            # Data is already committed; subscribers cannot undo it.
            logger.error(f"Event delivery failed after commit: {e}", exc_info=True)


def run_in_unit_of_work(
    operation: Callable[[DjangoUnitOfWork], T],
    *,
    attempts: int = 3,
    serializable: bool = True,
    backoff_seconds: float = 0.05,
) -> T:
    """
    Run ``operation`` inside a fresh unit of work, retrying transient failures

    Deadlocks, serialization failures and lock timeouts surface from Django as
    ``OperationalError``. They are retried up to ``attempts`` times and then
    reported as ``StorageError``. Domain errors propagate untouched. Inside an
    enclosing atomic block a retry cannot help, so the first failure is
    reported immediately.
    """
    for attempt in range(1, attempts + 1):
        try:
            with DjangoUnitOfWork(serializable=serializable) as uow:
                return operation(uow)
        except OperationalError as exc:
            if connection.in_atomic_block or attempt >= attempts:
                logger.error(f"Transaction failed after {attempt} attempt(s): {exc}")
                raise StorageError(
                    "Storage is temporarily unavailable, please retry",
                    attempts=attempt,
                ) from exc
            logger.warning(f"Transient storage error on attempt {attempt}/{attempts}: {exc}")
            time.sleep(backoff_seconds * attempt)
    raise StorageError("No transaction attempts were made", attempts=0)
