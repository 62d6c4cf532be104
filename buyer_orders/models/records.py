"""Immutable snapshot records handed to the reconciliation and visibility layers."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class BatchRecord:
    id: int
    buyer_id: int
    status: str
    seller_id: Optional[int] = None
    show_id: Optional[int] = None
    completion_code: Optional[str] = None
    pickup_location: Optional[str] = None
    pickup_notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    picked_up_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class OrderRecord:
    id: int
    batch_id: int
    buyer_id: int
    status: str
    price: Decimal = Decimal("0")
    seller_id: Optional[int] = None
    product_title: Optional[str] = None
    created_at: Optional[datetime] = None
    picked_up_at: Optional[datetime] = None
    picked_up_by: Optional[str] = None


@dataclass(frozen=True)
class SellerRecord:
    id: int
    business_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    pickup_address: Optional[str] = None


@dataclass(frozen=True)
class ShowRecord:
    id: int
    title: Optional[str] = None
    seller_id: Optional[int] = None
    scheduled_start_time: Optional[datetime] = None


@dataclass(frozen=True)
class Snapshot:
    """Batches and orders for one buyer, read together in one store session."""

    buyer_id: int
    batches: tuple = ()
    orders: tuple = ()
    sellers: dict = field(default_factory=dict)
    shows: dict = field(default_factory=dict)
    fetched_at: Optional[datetime] = None
