"""Base repository contract shared by the catalog and order modules.

Services receive repositories through their constructors and only call the
methods declared here and on the module-specific subclasses, so the ORM
stays behind ``*DjangoRepository`` implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, TypeVar

EntityT = TypeVar("EntityT")


class IRepository(ABC, Generic[EntityT]):
    """CRUD surface every aggregate repository provides."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[EntityT]:
        """Return the aggregate, or ``None`` for unknown or malformed ids."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[EntityT]:
        ...

    @abstractmethod
    def save(self, entity: EntityT) -> EntityT:
        ...

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Hard-delete; ``False`` when nothing matched."""
