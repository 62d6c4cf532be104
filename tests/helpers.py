"""Record factories and an in-memory store for engine and worker tests."""

import dataclasses
from datetime import datetime
from decimal import Decimal

from buyer_orders.errors import HealWriteError
from buyer_orders.models import BatchRecord, OrderRecord, Snapshot

BUYER_ID = 7


def make_batch(id, status="pending", buyer_id=BUYER_ID, **kwargs):
    kwargs.setdefault("created_at", datetime(2026, 1, 1, 12, 0))
    return BatchRecord(id=id, buyer_id=buyer_id, status=status, **kwargs)


def make_order(id, batch_id, status="paid", price="10", buyer_id=BUYER_ID, **kwargs):
    return OrderRecord(
        id=id,
        batch_id=batch_id,
        buyer_id=buyer_id,
        status=status,
        price=Decimal(price),
        **kwargs,
    )


class FakeStore:
    """Dict-backed stand-in for OrderStore with the same write semantics."""

    def __init__(self, batches=(), orders=(), fail_ids=()):
        self.batches = list(batches)
        self.orders = {o.id: o for o in orders}
        self.fail_ids = set(fail_ids)
        self.fetch_error = None
        self.fetches = 0
        self.writes = []
        self.on_fetch = None
        self.on_write = None

    def fetch_snapshot(self, buyer_id):
        self.fetches += 1
        if self.on_fetch is not None:
            self.on_fetch()
        if self.fetch_error is not None:
            raise self.fetch_error
        return Snapshot(
            buyer_id=buyer_id,
            batches=tuple(b for b in self.batches if b.buyer_id == buyer_id),
            orders=tuple(o for o in self.orders.values() if o.buyer_id == buyer_id),
        )

    def set_order_status(self, order_id, status, expected_status=None, picked_up_at=None, picked_up_by=None):
        self.writes.append(order_id)
        if self.on_write is not None:
            self.on_write(order_id)
        if order_id in self.fail_ids:
            raise HealWriteError(order_id)
        current = self.orders[order_id]
        if expected_status is not None and current.status != expected_status:
            return False
        self.orders[order_id] = dataclasses.replace(
            current, status=status, picked_up_at=picked_up_at, picked_up_by=picked_up_by
        )
        return True

    def status_of(self, order_id):
        return self.orders[order_id].status


def login(client, email, password="correct-horse"):
    return client.post("/auth/login", json={"email": email, "password": password})
