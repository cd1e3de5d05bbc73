"""Base class for entity storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from lisdatastore.models import Entity


class EntityStorage(ABC):
    """Persists finished entities, one homogeneous batch per entity kind."""

    @abstractmethod
    def persist(self, entity_type: str, entities: Sequence[Entity]) -> None:
        """Persist one batch in backend-specific format."""
