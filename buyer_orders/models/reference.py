from buyer_orders import db
from buyer_orders.models.records import SellerRecord, ShowRecord


class Seller(db.Model):
    """Seller profile, used to label batch cards."""

    __tablename__ = "sellers"

    id = db.Column(db.Integer, primary_key=True)
    business_name = db.Column(db.String(255), nullable=False)
    profile_image_url = db.Column(db.String(500))
    pickup_address = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    # Relationships
    shows = db.relationship("Show", back_populates="seller")

    def to_record(self) -> SellerRecord:
        return SellerRecord(
            id=self.id,
            business_name=self.business_name,
            profile_image_url=self.profile_image_url,
            pickup_address=self.pickup_address,
        )

    def __repr__(self):
        return f"<Seller {self.business_name}>"


class Show(db.Model):
    """Live show event a batch was purchased in."""

    __tablename__ = "shows"

    id = db.Column(db.Integer, primary_key=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("sellers.id"))
    title = db.Column(db.String(255), nullable=False)
    scheduled_start_time = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    # Relationships
    seller = db.relationship("Seller", back_populates="shows")

    def to_record(self) -> ShowRecord:
        return ShowRecord(
            id=self.id,
            title=self.title,
            seller_id=self.seller_id,
            scheduled_start_time=self.scheduled_start_time,
        )

    def __repr__(self):
        return f"<Show {self.title}>"
