#!/usr/bin/env python3
"""
Create database indexes for the order sync polling queries.
Run this after the initial migration.
"""

import sys
sys.path.insert(0, ".")

from buyer_orders import create_app, db


def create_indexes():
    app = create_app()

    with app.app_context():
        print("Creating order sync indexes...")

        try:
            # Drift lookup: completed batches per buyer
            db.session.execute(db.text("""
                CREATE INDEX IF NOT EXISTS idx_batches_buyer_status
                ON batches (buyer_id, status)
            """))
            print("  Created index on batches (buyer_id, status)")

            # Heal candidates: paid orders per batch
            db.session.execute(db.text("""
                CREATE INDEX IF NOT EXISTS idx_orders_batch_status
                ON orders (batch_id, status)
            """))
            print("  Created index on orders (batch_id, status)")

            # Buyer order list, newest first
            db.session.execute(db.text("""
                CREATE INDEX IF NOT EXISTS idx_orders_buyer_created
                ON orders (buyer_id, created_at DESC)
            """))
            print("  Created index on orders (buyer_id, created_at)")

            db.session.execute(db.text("ANALYZE batches"))
            db.session.execute(db.text("ANALYZE orders"))
            print("  Analyzed batches and orders tables")

            db.session.commit()
            print("Done! Indexes created successfully.")

        except Exception as e:
            print(f"Error: {e}")
            db.session.rollback()
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(create_indexes())
