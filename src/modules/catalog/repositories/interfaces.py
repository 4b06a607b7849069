"""Catalog repository interface.

Extends ``IRepository[Product]`` with the variant look-ups needed by the
cart (live stock re-fetch) and by the order placement transaction (row
locks and the conditional stock decrement).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.catalog.models import Product, ProductVariant


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate (product + variants)."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """List products with optional filters."""

    @abstractmethod
    def get_variant(self, variant_id: str) -> Optional[ProductVariant]:
        """Fetch a variant (with its product) straight from storage."""

    @abstractmethod
    def get_variants(self, variant_ids: Iterable[str]) -> Dict[str, ProductVariant]:
        """Fetch several variants keyed by their string id."""

    @abstractmethod
    def lock_variants(self, variant_ids: Iterable[str]) -> List[ProductVariant]:
        """Lock variant rows (SELECT FOR UPDATE), ordered by id.

        Must be called inside a transaction.  Ordering by primary key gives
        every concurrent checkout the same lock acquisition order.
        """

    @abstractmethod
    def decrement_stock(self, variant_id: str, quantity: int) -> bool:
        """Decrement stock only if at least *quantity* units remain.

        Returns ``False`` when the guard ``stock >= quantity`` did not hold.
        """

    @abstractmethod
    def set_stock(self, variant_id: str, stock: int) -> None:
        """Overwrite the stock of a (locked) variant."""
