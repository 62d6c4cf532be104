from datetime import datetime
from decimal import Decimal

from buyer_orders import db
from buyer_orders.models.records import OrderRecord


class OrderStatus:
    """Order status constants."""
    PENDING = "pending"
    PAID = "paid"
    READY = "ready"
    PICKED_UP = "picked_up"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    COMPLETED = "completed"
    FULFILLED = "fulfilled"

    LABELS = {
        PAID: "Paid",
        READY: "Ready",
        PICKED_UP: "Completed",
        COMPLETED: "Completed",
        FULFILLED: "Completed",
        CANCELLED: "Cancelled",
        REFUNDED: "Refunded",
        PENDING: "Pending",
    }

    @classmethod
    def label(cls, status: str) -> str:
        return cls.LABELS.get(status, cls.LABELS[cls.PENDING])


class Order(db.Model):
    """One purchased line item. Authoritative for price and status."""

    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    batch_id = db.Column(db.Integer, db.ForeignKey("batches.id"), nullable=False, index=True)
    buyer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("sellers.id"))
    product_title = db.Column(db.String(255))
    price = db.Column(db.Numeric(10, 2), default=0, nullable=False)
    status = db.Column(db.String(20), default=OrderStatus.PENDING, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Set by pickup workflows or by the auto-sync heal
    picked_up_at = db.Column(db.DateTime)
    picked_up_by = db.Column(db.String(50))

    # Relationships
    batch = db.relationship("Batch", back_populates="orders")

    def to_record(self) -> OrderRecord:
        return OrderRecord(
            id=self.id,
            batch_id=self.batch_id,
            buyer_id=self.buyer_id,
            seller_id=self.seller_id,
            product_title=self.product_title,
            price=Decimal(self.price or 0),
            status=self.status,
            created_at=self.created_at,
            picked_up_at=self.picked_up_at,
            picked_up_by=self.picked_up_by,
        )

    def __repr__(self):
        return f"<Order {self.id} - {self.status}>"
