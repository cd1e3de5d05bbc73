"""Back-fill shared context references onto every entity of a run."""

from __future__ import annotations

from lisdatastore.context import RunContext, register_organism, register_strain
from lisdatastore.graph import EntityGraph
from lisdatastore.identifiers import extract_gensp, extract_strain_identifier
from lisdatastore.models import BioEntity, Entity, GenotypingStudy, Organism


class ContextWiring:
    """Resolve organism, strain, dataSet and publication onto entities lacking them.

    README context wins. Organism-scoped entities not covered by it fall back to
    the ``gensp.strain`` prefix of their own primary identifier, looked up in the
    organism catalog. References already set are never overwritten.
    """

    def __init__(self, context: RunContext) -> None:
        self.context = context

    def wire(self, graph: EntityGraph) -> None:
        for entity in graph.entities():
            self._wire_data_set(entity)
            self._wire_publication(entity)
            if isinstance(entity, BioEntity):
                self._wire_organism(graph, entity)
                self._wire_strain(graph, entity)

    def _wire_data_set(self, entity: Entity) -> None:
        data_set = self.context.data_set
        if data_set is not None and hasattr(entity, "data_sets"):
            entity.data_sets.add(data_set)

    def _wire_publication(self, entity: Entity) -> None:
        publication = self.context.publication
        if publication is None:
            return
        if hasattr(entity, "publications"):
            entity.publications.add(publication)
        elif isinstance(entity, GenotypingStudy) and entity.publication is None:
            entity.publication = publication

    def _wire_organism(self, graph: EntityGraph, entity: BioEntity) -> None:
        if entity.organism is not None:
            return
        if self.context.organism is not None:
            entity.organism = self.context.organism
            return
        entity.organism = self._organism_from_identifier(graph, entity.primary_identifier)

    def _wire_strain(self, graph: EntityGraph, entity: BioEntity) -> None:
        if entity.strain is None:
            if self.context.strain is not None:
                entity.strain = self.context.strain
            else:
                strain_id = extract_strain_identifier(entity.primary_identifier)
                if strain_id is not None:
                    entity.strain = register_strain(graph, strain_id, entity.organism)
        if entity.strain is not None and entity.strain.organism is None:
            entity.strain.organism = entity.organism

    def _organism_from_identifier(self, graph: EntityGraph, identifier: str) -> Organism | None:
        info = self.context.catalog.by_gensp(extract_gensp(identifier))
        if info is None:
            return None
        return register_organism(graph, info)

