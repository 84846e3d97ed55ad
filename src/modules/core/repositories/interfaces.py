"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that all
domain-specific repository interfaces extend.  Service-layer code
depends on this abstraction, never on Django ORM directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the domain entity managed by the
    repository (e.g. ``Client``).  Implementations only ever expose
    *active* entities through these methods.
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an active entity by its external identifier."""

    @abstractmethod
    def list(self) -> List[T]:
        """List active entities, newest first."""

    @abstractmethod
    def insert(self, entity: T) -> T:
        """Persist a new entity."""

    @abstractmethod
    def save(self, entity: T, update_fields: Optional[Sequence[str]] = None) -> Optional[T]:
        """Persist changes to an existing, still active entity.

        Returns ``None`` if the entity is no longer active.
        """

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Soft-delete an active entity by ID; ``False`` if none was active."""
