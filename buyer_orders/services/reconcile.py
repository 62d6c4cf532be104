"""Batch/order drift detection and the auto-sync heal.

A batch marked ``completed`` by the pickup workflow can still hold orders the
payment workflow left at ``paid``. Those orders are advanced to ``picked_up``,
one independent write per order. Batches are never written.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from buyer_orders.errors import HealWriteError
from buyer_orders.models import BatchStatus, OrderStatus, Snapshot

logger = logging.getLogger(__name__)


@dataclass
class HealResult:
    """Outcome of one reconciliation pass."""
    attempted: list = field(default_factory=list)
    healed: list = field(default_factory=list)
    # Candidates another writer already moved off "paid"
    skipped: list = field(default_factory=list)
    failures: list = field(default_factory=list)
    cancelled: bool = False

    @property
    def healed_count(self) -> int:
        return len(self.healed)

    @property
    def failed_ids(self) -> list:
        return [err.order_id for err in self.failures]


def find_drift(batches, orders) -> list:
    """Return (batch, order) pairs where the batch is completed and the order is still paid."""
    completed = {b.id: b for b in batches if b.status == BatchStatus.COMPLETED}
    if not completed:
        return []
    return [
        (completed[o.batch_id], o)
        for o in orders
        if o.batch_id in completed and o.status == OrderStatus.PAID
    ]


class ReconcileService:
    """Applies the paid -> picked_up heal for one buyer snapshot."""

    def __init__(self, store, actor: str = "auto-sync", clock: Callable[[], datetime] = datetime.utcnow) -> None:
        self._store = store
        self._actor = actor
        self._clock = clock

    def reconcile(self, snapshot: Snapshot, should_continue: Optional[Callable[[], bool]] = None) -> HealResult:
        """Heal every drifted order in *snapshot*.

        *should_continue* is checked before each write; once it returns False
        the pass stops without issuing further writes.

        Each write is conditional on the order still being paid, so replaying
        a stale snapshot changes no rows. The writes are still issued and come
        back as skipped; callers fetch a fresh snapshot before every pass.
        """
        result = HealResult()
        candidates = find_drift(snapshot.batches, snapshot.orders)
        if not candidates:
            return result

        for batch, order in candidates:
            if should_continue is not None and not should_continue():
                result.cancelled = True
                break

            result.attempted.append(order.id)
            try:
                applied = self._store.set_order_status(
                    order.id,
                    OrderStatus.PICKED_UP,
                    expected_status=OrderStatus.PAID,
                    picked_up_at=batch.picked_up_at or self._clock(),
                    picked_up_by=self._actor,
                )
            except HealWriteError as err:
                result.failures.append(err)
                continue

            if applied:
                result.healed.append(order.id)
            else:
                result.skipped.append(order.id)

        if result.healed:
            logger.info("Healed %d orders for buyer %s", result.healed_count, snapshot.buyer_id)
        if result.failures:
            logger.warning(
                "Heal failed for %d orders of buyer %s: %s",
                len(result.failures), snapshot.buyer_id, result.failed_ids,
            )
        return result
