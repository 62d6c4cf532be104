#!/usr/bin/env python3
"""
Run the auto-sync heal once, outside any buyer session.

Usage:
    python scripts/heal_orders.py            # every buyer with a completed batch
    python scripts/heal_orders.py 42 57      # only these buyer ids
"""

import sys

# Add parent directory to path for imports
sys.path.insert(0, ".")

from buyer_orders import create_app, db
from buyer_orders.errors import FetchError
from buyer_orders.models import Batch, BatchStatus
from buyer_orders.services import OrderStore, ReconcileService


def heal_orders(buyer_ids: list[int]) -> int:
    app = create_app()

    with app.app_context():
        if not buyer_ids:
            rows = (
                db.session.query(Batch.buyer_id)
                .filter(Batch.status == BatchStatus.COMPLETED)
                .distinct()
                .all()
            )
            buyer_ids = [row.buyer_id for row in rows]

        store = OrderStore()
        reconciler = ReconcileService(store, actor=app.config["HEAL_ACTOR"])

        print(f"Checking {len(buyer_ids)} buyers...")
        total_healed = 0
        total_failed = 0
        for buyer_id in buyer_ids:
            try:
                snapshot = store.fetch_snapshot(buyer_id)
            except FetchError as e:
                print(f"  buyer {buyer_id}: skipped ({e})")
                continue
            result = reconciler.reconcile(snapshot)
            if result.attempted:
                print(f"  buyer {buyer_id}: healed {result.healed_count}, failed {len(result.failures)}")
            total_healed += result.healed_count
            total_failed += len(result.failures)

        print(f"Done! Healed {total_healed} orders ({total_failed} failed).")

    return 1 if total_failed else 0


if __name__ == "__main__":
    sys.exit(heal_orders([int(arg) for arg in sys.argv[1:]]))
