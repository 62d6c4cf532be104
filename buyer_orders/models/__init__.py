from buyer_orders.models.user import User, UserRole, admin_required
from buyer_orders.models.reference import Seller, Show
from buyer_orders.models.batch import Batch, BatchStatus
from buyer_orders.models.order import Order, OrderStatus
from buyer_orders.models.settings import Settings
from buyer_orders.models.records import (
    BatchRecord,
    OrderRecord,
    SellerRecord,
    ShowRecord,
    Snapshot,
)

__all__ = [
    "User",
    "UserRole",
    "admin_required",
    "Seller",
    "Show",
    "Batch",
    "BatchStatus",
    "Order",
    "OrderStatus",
    "Settings",
    "BatchRecord",
    "OrderRecord",
    "SellerRecord",
    "ShowRecord",
    "Snapshot",
]
