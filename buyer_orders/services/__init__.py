from buyer_orders.services.identity import BuyerContext
from buyer_orders.services.order_tracking import OrderTrackingService
from buyer_orders.services.reconcile import HealResult, ReconcileService, find_drift
from buyer_orders.services.store import OrderStore
from buyer_orders.services.visibility import BatchCard, DerivedView, derive_view

__all__ = [
    "BuyerContext",
    "OrderTrackingService",
    "HealResult",
    "ReconcileService",
    "find_drift",
    "OrderStore",
    "BatchCard",
    "DerivedView",
    "derive_view",
]
