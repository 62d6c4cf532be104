from datetime import datetime

from buyer_orders.services.reconcile import ReconcileService, find_drift
from tests.helpers import FakeStore, make_batch, make_order

FIXED_NOW = datetime(2026, 4, 1, 9, 0)


def _service(store):
    return ReconcileService(store, actor="auto-sync", clock=lambda: FIXED_NOW)


def test_find_drift_only_completed_batches_with_paid_orders():
    batches = [make_batch(1, "completed"), make_batch(2, "pending"), make_batch(3, "picked_up")]
    orders = [
        make_order(10, 1, "paid"),
        make_order(11, 1, "picked_up"),
        make_order(12, 2, "paid"),
        make_order(13, 3, "paid"),
    ]
    assert [o.id for _, o in find_drift(batches, orders)] == [10]


def test_heals_every_paid_order_in_completed_batch():
    orders = [make_order(i, 1, "paid") for i in range(1, 6)]
    store = FakeStore([make_batch(1, "completed")], orders)

    result = _service(store).reconcile(store.fetch_snapshot(7))

    assert result.healed_count == 5
    assert all(store.status_of(i) == "picked_up" for i in range(1, 6))
    assert store.orders[1].picked_up_by == "auto-sync"


def test_second_pass_over_refetched_store_writes_nothing():
    store = FakeStore([make_batch(1, "completed")], [make_order(1, 1), make_order(2, 1)])
    service = _service(store)

    first = service.reconcile(store.fetch_snapshot(7))
    second = service.reconcile(store.fetch_snapshot(7))

    assert first.healed_count == 2
    assert second.healed_count == 0
    assert second.attempted == []
    assert store.writes == [1, 2]


def test_replaying_stale_snapshot_counts_nothing_healed():
    store = FakeStore([make_batch(1, "completed")], [make_order(1, 1)])
    service = _service(store)
    snapshot = store.fetch_snapshot(7)

    service.reconcile(snapshot)
    replay = service.reconcile(snapshot)

    assert replay.healed_count == 0
    assert replay.skipped == [1]
    assert store.status_of(1) == "picked_up"
    # The conditional write is still issued, it just changes nothing
    assert store.writes == [1, 1]


def test_partial_failure_counts_only_successful_writes():
    store = FakeStore([make_batch(1, "completed")], [make_order(1, 1), make_order(2, 1)], fail_ids={2})
    service = _service(store)

    result = service.reconcile(store.fetch_snapshot(7))

    assert result.healed_count == 1
    assert result.healed == [1]
    assert result.failed_ids == [2]
    assert store.status_of(2) == "paid"

    # B recovers; only B is retried
    store.fail_ids.clear()
    store.writes.clear()
    retry = service.reconcile(store.fetch_snapshot(7))

    assert store.writes == [2]
    assert retry.healed == [2]


def test_nothing_to_heal_issues_no_writes():
    store = FakeStore(
        [make_batch(1, "pending"), make_batch(2, "partial"), make_batch(3, "cancelled")],
        [make_order(1, 1), make_order(2, 2), make_order(3, 3)],
    )

    result = _service(store).reconcile(store.fetch_snapshot(7))

    assert result.healed_count == 0
    assert result.failures == []
    assert store.writes == []


def test_cancelled_and_refunded_orders_are_never_touched():
    store = FakeStore(
        [make_batch(1, "completed")],
        [make_order(1, 1, "cancelled"), make_order(2, 1, "refunded"), make_order(3, 1, "ready")],
    )

    result = _service(store).reconcile(store.fetch_snapshot(7))

    assert store.writes == []
    assert result.healed_count == 0
    assert [store.status_of(i) for i in (1, 2, 3)] == ["cancelled", "refunded", "ready"]


def test_heal_stamps_batch_pickup_time_or_now():
    picked = datetime(2026, 3, 2, 18, 30)
    store = FakeStore(
        [make_batch(1, "completed", picked_up_at=picked), make_batch(2, "completed")],
        [make_order(1, 1), make_order(2, 2)],
    )

    _service(store).reconcile(store.fetch_snapshot(7))

    assert store.orders[1].picked_up_at == picked
    assert store.orders[2].picked_up_at == FIXED_NOW


def test_batches_are_left_as_they_were():
    batch = make_batch(1, "completed")
    store = FakeStore([batch], [make_order(1, 1)])

    _service(store).reconcile(store.fetch_snapshot(7))

    assert store.batches == [batch]


def test_should_continue_stops_further_writes():
    store = FakeStore([make_batch(1, "completed")], [make_order(i, 1) for i in (1, 2, 3)])
    allowed = iter([True, False])

    result = _service(store).reconcile(store.fetch_snapshot(7), should_continue=lambda: next(allowed))

    assert result.cancelled
    assert store.writes == [1]
    assert result.healed == [1]
