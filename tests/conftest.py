from datetime import datetime
from decimal import Decimal

import pytest

from buyer_orders import create_app, db
from buyer_orders.config import Config
from buyer_orders.models import Batch, Order, Seller, Show, User, UserRole


class TestingConfig(Config):
    __test__ = False

    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    ORDER_SYNC_SCHEDULER_ENABLED = False


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        app.extensions["order_tracking"].stop_all()
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _user(email, role=UserRole.BUYER, password="correct-horse"):
    user = User(email=email, display_name=email.split("@")[0], role=role)
    user.set_password(password)
    db.session.add(user)
    return user


@pytest.fixture
def users(app):
    buyer = _user("buyer@example.com")
    other = _user("other@example.com")
    admin = _user("admin@example.com", role=UserRole.ADMIN)
    db.session.commit()
    return {"buyer": buyer.id, "other": other.id, "admin": admin.id}


@pytest.fixture
def drifted_orders(app, users):
    """Batch 1 completed with a paid order (drift); batch 2 pending with a paid order."""
    seller = Seller(business_name="Corner Cards")
    db.session.add(seller)
    db.session.flush()
    show = Show(title="Friday Breaks", seller_id=seller.id)
    db.session.add(show)
    db.session.flush()

    buyer_id = users["buyer"]
    picked_up = datetime(2026, 3, 2, 18, 30)
    done = Batch(
        buyer_id=buyer_id, seller_id=seller.id, show_id=show.id,
        status="completed", completion_code="K7Q2", completed_at=picked_up,
        picked_up_at=picked_up, created_at=datetime(2026, 3, 1),
    )
    open_ = Batch(
        buyer_id=buyer_id, seller_id=seller.id, show_id=show.id,
        status="pending", completion_code="M3X9", created_at=datetime(2026, 3, 3),
    )
    empty = Batch(buyer_id=buyer_id, seller_id=seller.id, status="completed", created_at=datetime(2026, 3, 4))
    db.session.add_all([done, open_, empty])
    db.session.flush()

    healed = Order(
        batch_id=done.id, buyer_id=buyer_id, seller_id=seller.id,
        product_title="Rookie card", price=Decimal("25.00"), status="paid",
        created_at=datetime(2026, 3, 1, 10),
    )
    untouched = Order(
        batch_id=open_.id, buyer_id=buyer_id, seller_id=seller.id,
        product_title="Sealed pack", price=Decimal("10.00"), status="paid",
        created_at=datetime(2026, 3, 3, 10),
    )
    db.session.add_all([healed, untouched])
    db.session.commit()
    return {
        "completed_batch": done.id,
        "pending_batch": open_.id,
        "empty_batch": empty.id,
        "healed_order": healed.id,
        "untouched_order": untouched.id,
        "picked_up_at": picked_up,
    }
