"""Order repository interface.

Extends ``IRepository[Order]`` with the methods required by the Order
aggregate: atomic creation with its line snapshots, status history
tracking, row-locked reads for transitions and the stale gateway sweep.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes OrderLine snapshots and OrderStatusHistory
    records.  Mutations must be atomic.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its lines atomically.

        ``data`` carries the order fields plus ``lines``: a list of dicts
        with ``variant``, ``product_title``, ``size``, ``color``, ``sku``,
        ``unit_price`` and ``quantity``.
        """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with prefetched lines and status history."""

    @abstractmethod
    def get_by_number(self, order_number: str) -> Optional[Order]:
        """Retrieve an order by its human-readable number."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def get_by_number_for_update(self, order_number: str) -> Optional[Order]:
        """Lock an order found by its human-readable number."""

    @abstractmethod
    def queryset(self) -> "models.QuerySet[Order]":
        """Base queryset with relations eager-loaded, for filtered listings."""

    @abstractmethod
    def add_history(
        self,
        order_id: Any,
        new_status: str,
        old_status: Optional[str] = None,
        dimension: str = "status",
        notes: str = "",
        user: Any = None,
    ) -> OrderStatusHistory:
        """Record a status or payment status change in the audit trail."""

    @abstractmethod
    def list_stale_gateway_orders(self, cutoff: datetime) -> List[Order]:
        """Gateway orders still pending / unpaid that were placed before *cutoff*."""
