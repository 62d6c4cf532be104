"""Buyer-facing order view derived from a snapshot.

Orders are the source of truth for every count and amount shown to the buyer.
Batches only decide grouping (active vs past) and carry pickup details. The
view is rebuilt from scratch on every refresh.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from buyer_orders.models import BatchStatus, OrderStatus


@dataclass(frozen=True)
class BatchCard:
    batch: object
    orders: tuple
    item_count: int
    total_amount: Decimal
    giveaway_count: int
    status_label: str
    seller_name: Optional[str] = None
    show_title: Optional[str] = None
    collapsed: bool = False

    @property
    def has_giveaway_items(self) -> bool:
        return self.giveaway_count > 0

    def to_dict(self) -> dict:
        b = self.batch
        return {
            "id": b.id,
            "status": b.status,
            "status_label": self.status_label,
            "seller_id": b.seller_id,
            "seller_name": self.seller_name,
            "show_id": b.show_id,
            "show_title": self.show_title,
            "completion_code": b.completion_code,
            "pickup_location": b.pickup_location,
            "pickup_notes": b.pickup_notes,
            "completed_at": _iso(b.completed_at or b.picked_up_at),
            "created_at": _iso(b.created_at),
            "item_count": self.item_count,
            "total_amount": float(self.total_amount),
            "giveaway_count": self.giveaway_count,
            "has_giveaway_items": self.has_giveaway_items,
            "collapsed": self.collapsed,
            "orders": [
                {
                    "id": o.id,
                    "product_title": o.product_title,
                    "price": float(o.price),
                    "status": o.status,
                    "status_label": OrderStatus.label(o.status),
                    "is_giveaway": _is_giveaway(o),
                }
                for o in self.orders
            ],
        }


@dataclass(frozen=True)
class DerivedView:
    active_batches: tuple = ()
    past_batches: tuple = ()
    total_orders: int = 0
    total_items: int = 0
    total_spent: Decimal = Decimal("0")
    giveaway_wins: int = 0
    valid_batches: int = 0
    derived_at: Optional[datetime] = None

    @classmethod
    def empty(cls) -> "DerivedView":
        return cls()

    def to_dict(self) -> dict:
        return {
            "active_batches": [card.to_dict() for card in self.active_batches],
            "past_batches": [card.to_dict() for card in self.past_batches],
            "total_orders": self.total_orders,
            "total_items": self.total_items,
            "total_spent": float(self.total_spent),
            "giveaway_wins": self.giveaway_wins,
            "valid_batches": self.valid_batches,
            "derived_at": _iso(self.derived_at),
        }


def _iso(value):
    return value.isoformat() if value else None


def _is_giveaway(order) -> bool:
    return Decimal(order.price or 0) == 0


def _price_total(orders) -> Decimal:
    return sum((Decimal(o.price or 0) for o in orders), Decimal("0"))


def _recency(batch):
    ts = batch.completed_at or batch.picked_up_at or batch.created_at
    # Undated batches sort after dated ones
    return (ts is not None, ts or datetime.min, batch.id)


def _card(batch, batch_orders, sellers, shows, collapsed=False) -> BatchCard:
    seller = sellers.get(batch.seller_id)
    show = shows.get(batch.show_id)
    return BatchCard(
        batch=batch,
        orders=tuple(batch_orders),
        item_count=len(batch_orders),
        total_amount=_price_total(batch_orders),
        giveaway_count=sum(1 for o in batch_orders if _is_giveaway(o)),
        status_label=BatchStatus.label(batch.status),
        seller_name=seller.business_name if seller else None,
        show_title=show.title if show else None,
        collapsed=collapsed,
    )


def derive_view(batches, orders, sellers: dict = None, shows: dict = None) -> DerivedView:
    """Build the buyer's order view from batches and orders.

    Totals count every order that is not cancelled, one item per order.
    A batch without orders is hidden whatever its status says.
    """
    sellers = sellers or {}
    shows = shows or {}

    orders_by_batch = {}
    for o in orders:
        orders_by_batch.setdefault(o.batch_id, []).append(o)

    visible = [b for b in batches if orders_by_batch.get(b.id)]

    active = [
        _card(b, orders_by_batch[b.id], sellers, shows)
        for b in visible
        if b.status not in BatchStatus.TERMINAL and b.status != BatchStatus.CANCELLED
    ]
    past = [
        _card(b, orders_by_batch[b.id], sellers, shows, collapsed=True)
        for b in sorted(
            (b for b in visible if b.status in BatchStatus.TERMINAL),
            key=_recency,
            reverse=True,
        )
    ]

    valid_orders = [o for o in orders if o.status != OrderStatus.CANCELLED]

    return DerivedView(
        active_batches=tuple(active),
        past_batches=tuple(past),
        total_orders=len(valid_orders),
        total_items=len(valid_orders),
        total_spent=_price_total(valid_orders),
        giveaway_wins=sum(1 for o in valid_orders if _is_giveaway(o)),
        valid_batches=sum(1 for b in visible if b.status != BatchStatus.CANCELLED),
        derived_at=datetime.utcnow(),
    )


def derive_snapshot_view(snapshot) -> DerivedView:
    return derive_view(snapshot.batches, snapshot.orders, snapshot.sellers, snapshot.shows)
