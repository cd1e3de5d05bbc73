"""Per-run identity maps for entities."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, Generic, TypeVar

from lisdatastore.models import (
    Chromosome,
    DataSet,
    DataSource,
    Entity,
    Gene,
    GeneFamily,
    GeneticMarker,
    Genotype,
    GenotypingRecord,
    GenotypingSample,
    GenotypingStudy,
    Location,
    MRNA,
    OntologyAnnotation,
    OntologyTerm,
    Organism,
    PanGeneSet,
    Pathway,
    Phenotype,
    Protein,
    ProteinDomain,
    ProteinHmmMatch,
    ProteinMatch,
    Publication,
    Strain,
)

E = TypeVar("E", bound=Entity)

# Context first, then leaf kinds, then kinds that reference freshly created ones.
EMISSION_ORDER: tuple[type[Entity], ...] = (
    DataSource,
    DataSet,
    Organism,
    Strain,
    Publication,
    OntologyTerm,
    Chromosome,
    GeneFamily,
    PanGeneSet,
    ProteinDomain,
    Pathway,
    Phenotype,
    GenotypingStudy,
    GenotypingSample,
    GeneticMarker,
    Gene,
    Protein,
    MRNA,
    ProteinMatch,
    ProteinHmmMatch,
    GenotypingRecord,
    Genotype,
    Location,
    OntologyAnnotation,
)


class EntityRegistry(Generic[E]):
    """Identity map from natural key to the single live entity of one kind."""

    def __init__(self, entity_type: type[E], factory: Callable[[Any], E] | None = None) -> None:
        self.entity_type = entity_type
        self._factory = factory or entity_type.create
        self._entities: dict[Any, E] = {}

    def get_or_create(self, key: Any, factory: Callable[[Any], E] | None = None) -> E:
        """Return the entity registered under ``key``, creating it on first sight.

        ``factory`` overrides the registry's default constructor for this call
        only. Equal keys always return the same instance.
        """

        entity = self._entities.get(key)
        if entity is None:
            entity = (factory or self._factory)(key)
            self._entities[key] = entity
        return entity

    def get(self, key: Any) -> E | None:
        return self._entities.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._entities

    def __iter__(self) -> Iterator[E]:
        return iter(list(self._entities.values()))

    def __len__(self) -> int:
        return len(self._entities)


class EntityGraph:
    """All entity registries of a single conversion run."""

    def __init__(self) -> None:
        self._registries: dict[type[Entity], EntityRegistry[Any]] = {
            entity_type: EntityRegistry(entity_type) for entity_type in EMISSION_ORDER
        }

    def registry(self, entity_type: type[E]) -> EntityRegistry[E]:
        try:
            return self._registries[entity_type]
        except KeyError as exc:
            raise KeyError(f"No registry for entity type {entity_type.__name__}") from exc

    def entities(self) -> Iterator[Entity]:
        """Every entity in the graph, in emission order."""

        for entity_type in EMISSION_ORDER:
            yield from self._registries[entity_type]

    def emission_batches(self) -> Iterator[tuple[str, list[Entity]]]:
        """Yield ``(entity_type, entities)`` per non-empty kind in dependency order."""

        for entity_type in EMISSION_ORDER:
            batch = list(self._registries[entity_type])
            if batch:
                yield entity_type.entity_type, batch

    def counts(self) -> dict[str, int]:
        return {
            entity_type.entity_type: len(self._registries[entity_type])
            for entity_type in EMISSION_ORDER
            if len(self._registries[entity_type])
        }
