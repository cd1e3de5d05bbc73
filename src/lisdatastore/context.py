"""Run state and the shared context a converter run resolves once."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from lisdatastore.catalog import OrganismCatalog, OrganismInfo
from lisdatastore.errors import RunStateError
from lisdatastore.graph import EntityGraph
from lisdatastore.models import DataSet, DataSource, Organism, Publication, Strain

if TYPE_CHECKING:
    from lisdatastore.readme import Readme


class RunState(str, Enum):
    INIT = "init"
    METADATA_LOADED = "metadata_loaded"
    DATA_SCANNED = "data_scanned"
    FINALIZED = "finalized"
    EMITTED = "emitted"


_TRANSITIONS: dict[RunState, frozenset[RunState]] = {
    RunState.INIT: frozenset({RunState.METADATA_LOADED, RunState.DATA_SCANNED, RunState.FINALIZED}),
    RunState.METADATA_LOADED: frozenset({RunState.DATA_SCANNED, RunState.FINALIZED}),
    RunState.DATA_SCANNED: frozenset({RunState.DATA_SCANNED, RunState.FINALIZED}),
    RunState.FINALIZED: frozenset({RunState.EMITTED}),
    RunState.EMITTED: frozenset(),
}


def advance(current: RunState, target: RunState) -> RunState:
    """Return ``target`` if the run may move there from ``current``."""

    if target not in _TRANSITIONS[current]:
        raise RunStateError(f"cannot move from {current.value} to {target.value}")
    return target


@dataclass(frozen=True)
class RunContext:
    """Shared context objects resolved from the README and configuration.

    ``data_set``, ``organism``, ``strain`` and ``publication`` are None when the
    run has no README or the README does not name them; entities then resolve
    organism and strain from their own identifier prefix.
    """

    data_source: DataSource
    catalog: OrganismCatalog
    readme: "Readme | None" = None
    data_set: DataSet | None = None
    organism: Organism | None = None
    strain: Strain | None = None
    publication: Publication | None = None


def register_organism(graph: EntityGraph, info: OrganismInfo) -> Organism:
    """Get or create the Organism for ``info`` in ``graph``."""

    organism = graph.registry(Organism).get_or_create(info.taxon_id)
    organism.abbreviation = organism.abbreviation or info.gensp
    organism.genus = organism.genus or info.genus
    organism.species = organism.species or info.species
    organism.name = organism.name or info.scientific_name
    return organism


def register_strain(graph: EntityGraph, identifier: str, organism: Organism | None) -> Strain:
    strain = graph.registry(Strain).get_or_create(identifier)
    if strain.organism is None:
        strain.organism = organism
    return strain
