"""Generic repository interface.

``IRepository[T]`` is the base contract every module-level repository
interface extends.  Services depend on these abstractions and never on
the Django ORM directly, which keeps them testable with stub repositories.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Iterable, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    ``T`` is the aggregate root managed by the repository (e.g. ``Order``).
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an aggregate by its primary key, ``None`` if absent."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> Iterable[T]:
        """List aggregates with optional filters."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist an aggregate."""
