class OrderSyncError(Exception):
    """Base error for order sync and reconciliation."""

    def __init__(self, msg: str = ""):
        super().__init__(msg)
        self.msg = msg

    def __str__(self):
        return self.msg or self.__class__.__name__


class FetchError(OrderSyncError):
    """The store could not produce a snapshot for a buyer."""

    def __init__(self, msg: str = "", buyer_id=None):
        super().__init__(msg)
        self.buyer_id = buyer_id

    def __str__(self):
        base = super().__str__()
        if self.buyer_id is not None:
            return f"{base} [buyer_id={self.buyer_id}]"
        return base


class HealWriteError(OrderSyncError):
    """A single order's corrective status write failed."""

    def __init__(self, order_id, msg: str = ""):
        super().__init__(msg or f"heal write failed for order {order_id}")
        self.order_id = order_id


class IdentityLost(OrderSyncError):
    """The effective buyer for a sync session is no longer resolvable."""
