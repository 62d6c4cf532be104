"""Store access for buyer order tracking: snapshot reads and order status writes."""

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from buyer_orders import db
from buyer_orders.errors import FetchError, HealWriteError
from buyer_orders.models import Batch, Order, Seller, Show, Snapshot

logger = logging.getLogger(__name__)


class OrderStore:
    """Reads and writes against the orders/batches tables.

    Must be called inside an application context. Every read returns
    immutable records, never live ORM rows.
    """

    def fetch_orders_by_buyer(self, buyer_id: int) -> list:
        rows = (
            Order.query.filter_by(buyer_id=buyer_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )
        return [row.to_record() for row in rows]

    def fetch_batches_by_buyer(self, buyer_id: int) -> list:
        rows = (
            Batch.query.filter_by(buyer_id=buyer_id)
            .order_by(Batch.created_at.desc(), Batch.id.desc())
            .all()
        )
        return [row.to_record() for row in rows]

    def fetch_reference_data(self, seller_ids, show_ids) -> tuple[dict, dict]:
        """Load sellers and shows for display. Failures yield empty maps."""
        try:
            sellers = {}
            if seller_ids:
                for row in Seller.query.filter(Seller.id.in_(seller_ids)).all():
                    sellers[row.id] = row.to_record()
            shows = {}
            if show_ids:
                for row in Show.query.filter(Show.id.in_(show_ids)).all():
                    shows[row.id] = row.to_record()
            return sellers, shows
        except SQLAlchemyError:
            db.session.rollback()
            logger.warning("Reference data unavailable; batch cards will be unlabeled", exc_info=True)
            return {}, {}

    def fetch_snapshot(self, buyer_id: int) -> Snapshot:
        """Read batches and orders for *buyer_id* in one session.

        Raises FetchError if either read fails; a partial snapshot is never
        returned.
        """
        try:
            batches = self.fetch_batches_by_buyer(buyer_id)
            orders = self.fetch_orders_by_buyer(buyer_id)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise FetchError(f"snapshot read failed: {exc.__class__.__name__}", buyer_id=buyer_id) from exc

        seller_ids = {b.seller_id for b in batches if b.seller_id is not None}
        show_ids = {b.show_id for b in batches if b.show_id is not None}
        sellers, shows = self.fetch_reference_data(seller_ids, show_ids)

        return Snapshot(
            buyer_id=buyer_id,
            batches=tuple(batches),
            orders=tuple(orders),
            sellers=sellers,
            shows=shows,
            fetched_at=datetime.utcnow(),
        )

    def set_order_status(
        self,
        order_id: int,
        status: str,
        expected_status: str = None,
        picked_up_at: datetime = None,
        picked_up_by: str = None,
    ) -> bool:
        """Write one order's status in its own transaction.

        With *expected_status* the write only applies while the row still
        holds that status. Returns True when a row was updated, False when
        nothing matched. Raises HealWriteError if the write itself fails.
        """
        values = {"status": status}
        if picked_up_at is not None:
            values["picked_up_at"] = picked_up_at
        if picked_up_by is not None:
            values["picked_up_by"] = picked_up_by

        query = Order.query.filter_by(id=order_id)
        if expected_status is not None:
            query = query.filter_by(status=expected_status)

        try:
            updated = query.update(values, synchronize_session=False)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise HealWriteError(order_id, f"status write failed for order {order_id}: {exc.__class__.__name__}") from exc

        return updated > 0
