from datetime import datetime

from buyer_orders import db
from buyer_orders.models.records import BatchRecord


class BatchStatus:
    """Batch status constants."""
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    PICKED_UP = "picked_up"
    # Not a stored batch status, but some pickup flows write it
    FULFILLED = "fulfilled"

    TERMINAL = frozenset({COMPLETED, PICKED_UP, FULFILLED})

    LABELS = {
        PENDING: "Ready",
        PARTIAL: "Partial",
        COMPLETED: "Completed",
        PICKED_UP: "Completed",
        FULFILLED: "Completed",
        CANCELLED: "Cancelled",
    }

    @classmethod
    def label(cls, status: str) -> str:
        return cls.LABELS.get(status, cls.LABELS[cls.PENDING])


class Batch(db.Model):
    """Pickup grouping of one seller's items for one show, per buyer."""

    __tablename__ = "batches"

    id = db.Column(db.Integer, primary_key=True)
    buyer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("sellers.id"))
    show_id = db.Column(db.Integer, db.ForeignKey("shows.id"))
    status = db.Column(db.String(20), default=BatchStatus.PENDING, nullable=False)
    completion_code = db.Column(db.String(20))
    pickup_location = db.Column(db.String(255))
    pickup_notes = db.Column(db.Text)
    completed_at = db.Column(db.DateTime)
    picked_up_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    orders = db.relationship("Order", back_populates="batch")
    seller = db.relationship("Seller")
    show = db.relationship("Show")

    def to_record(self) -> BatchRecord:
        return BatchRecord(
            id=self.id,
            buyer_id=self.buyer_id,
            seller_id=self.seller_id,
            show_id=self.show_id,
            status=self.status,
            completion_code=self.completion_code,
            pickup_location=self.pickup_location,
            pickup_notes=self.pickup_notes,
            completed_at=self.completed_at,
            picked_up_at=self.picked_up_at,
            created_at=self.created_at,
        )

    def __repr__(self):
        return f"<Batch {self.id} - {self.status}>"
