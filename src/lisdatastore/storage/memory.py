"""In-process storage backend that keeps emitted batches."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from lisdatastore.models import Entity
from lisdatastore.storage.base import EntityStorage


class InMemoryStorage(EntityStorage):
    def __init__(self) -> None:
        self.batches: list[tuple[str, list[Entity]]] = []

    def persist(self, entity_type: str, entities: Sequence[Entity]) -> None:
        self.batches.append((entity_type, list(entities)))

    @property
    def order(self) -> list[str]:
        """Entity kinds in the order their batches arrived."""

        return [entity_type for entity_type, _ in self.batches]

    def entities(self, entity_type: str) -> list[Entity]:
        found: list[Entity] = []
        for batch_type, batch in self.batches:
            if batch_type == entity_type:
                found.extend(batch)
        return found

    def rows(self, entity_type: str) -> list[dict[str, Any]]:
        return [entity.to_row() for entity in self.entities(entity_type)]

    def clear(self) -> None:
        self.batches.clear()
