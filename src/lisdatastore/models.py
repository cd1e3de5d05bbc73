"""Typed entity records produced by datastore converters.

Entities are identity-compared: the entity graph guarantees a single live
instance per natural key, so two entities are equal only if they are the same
object. Slotted dataclasses reject attribute names a kind does not declare.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

from lisdatastore.identifiers import extract_secondary_identifier

_entity = dataclass(eq=False, repr=False, slots=True, kw_only=True)


class EntityCollection:
    """Insertion-ordered set of entities, deduplicated by identity."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable["Entity"] = ()) -> None:
        self._items: dict[int, Entity] = {}
        for item in items:
            self.add(item)

    def add(self, item: "Entity") -> bool:
        """Append ``item`` unless this exact instance is already present."""

        if id(item) in self._items:
            return False
        self._items[id(item)] = item
        return True

    def keys(self) -> list[str]:
        return [item.key_text() for item in self._items.values()]

    def __contains__(self, item: object) -> bool:
        return id(item) in self._items

    def __iter__(self) -> Iterator["Entity"]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"EntityCollection({self.keys()!r})"


def _collection() -> EntityCollection:
    return field(default_factory=EntityCollection)


@_entity
class Entity:
    """Base for every entity kind.

    ``key_fields`` name the attributes that form the natural key. Kinds with a
    ``feature_level`` stamp ``secondary_identifier`` from the primary one on
    creation (``"annotation"`` strips four prefix segments, ``"assembly"`` three).
    """

    entity_type: ClassVar[str] = "Entity"
    key_fields: ClassVar[tuple[str, ...]] = ("identifier",)
    feature_level: ClassVar[str | None] = None
    requires_context: ClassVar[bool] = False

    @classmethod
    def create(cls, key: Any) -> "Entity":
        """Instantiate from a natural key (a scalar, or a tuple for composite keys)."""

        values = key if isinstance(key, tuple) else (key,)
        if len(values) != len(cls.key_fields):
            raise ValueError(
                f"{cls.entity_type} key needs {len(cls.key_fields)} parts, got {len(values)}"
            )
        entity = cls(**dict(zip(cls.key_fields, values)))
        if cls.feature_level is not None:
            entity.secondary_identifier = extract_secondary_identifier(
                entity.primary_identifier,
                is_annotation_feature=cls.feature_level == "annotation",
            )
        return entity

    def key(self) -> Any:
        values = tuple(
            value.key() if isinstance(value, Entity) else value
            for value in (getattr(self, name) for name in self.key_fields)
        )
        return values[0] if len(values) == 1 else values

    def key_text(self) -> str:
        """Natural key rendered as a single string, composite parts joined by ``|``."""

        parts = []
        for name in self.key_fields:
            value = getattr(self, name)
            parts.append(value.key_text() if isinstance(value, Entity) else str(value))
        return "|".join(parts)

    def to_row(self) -> dict[str, Any]:
        """Serialize into a flat dict for storage backends.

        References are rendered as the referenced entity's natural key and
        collections as a list of natural keys.
        """

        row: dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, Entity):
                value = value.key_text()
            elif isinstance(value, EntityCollection):
                value = value.keys()
            row[item.name] = value
        return row

    def __repr__(self) -> str:
        return f"{self.entity_type}({self.key_text()!r})"


# Shared context


@_entity
class DataSource(Entity):
    entity_type: ClassVar[str] = "DataSource"
    key_fields: ClassVar[tuple[str, ...]] = ("name",)

    name: str
    url: str | None = None
    description: str | None = None


@_entity
class Publication(Entity):
    entity_type: ClassVar[str] = "Publication"
    key_fields: ClassVar[tuple[str, ...]] = ("doi",)

    doi: str
    title: str | None = None


@_entity
class DataSet(Entity):
    entity_type: ClassVar[str] = "DataSet"
    key_fields: ClassVar[tuple[str, ...]] = ("name",)

    name: str
    description: str | None = None
    url: str | None = None
    licence: str | None = None
    version: str | None = None
    data_source: DataSource | None = None
    publication: Publication | None = None


@_entity
class Organism(Entity):
    entity_type: ClassVar[str] = "Organism"
    key_fields: ClassVar[tuple[str, ...]] = ("taxon_id",)

    taxon_id: str
    abbreviation: str | None = None
    genus: str | None = None
    species: str | None = None
    name: str | None = None


@_entity
class Strain(Entity):
    entity_type: ClassVar[str] = "Strain"

    identifier: str
    organism: Organism | None = None


# Organism-independent kinds


@_entity
class OntologyTerm(Entity):
    entity_type: ClassVar[str] = "OntologyTerm"

    identifier: str
    name: str | None = None
    ontology: str | None = None


@_entity
class OntologyAnnotation(Entity):
    """Join between an annotated subject and an ontology term."""

    entity_type: ClassVar[str] = "OntologyAnnotation"
    key_fields: ClassVar[tuple[str, ...]] = ("subject", "ontology_term")

    subject: Entity
    ontology_term: OntologyTerm
    data_sets: EntityCollection = _collection()


@_entity
class GeneFamily(Entity):
    entity_type: ClassVar[str] = "GeneFamily"

    identifier: str
    version: str | None = None
    description: str | None = None
    size: int | None = None
    genes: EntityCollection = _collection()
    proteins: EntityCollection = _collection()
    protein_domains: EntityCollection = _collection()
    publications: EntityCollection = _collection()
    data_sets: EntityCollection = _collection()


@_entity
class PanGeneSet(Entity):
    entity_type: ClassVar[str] = "PanGeneSet"

    identifier: str
    version: str | None = None
    description: str | None = None
    genes: EntityCollection = _collection()
    proteins: EntityCollection = _collection()
    publications: EntityCollection = _collection()
    data_sets: EntityCollection = _collection()


@_entity
class ProteinDomain(Entity):
    entity_type: ClassVar[str] = "ProteinDomain"

    identifier: str
    description: str | None = None
    gene_families: EntityCollection = _collection()
    data_sets: EntityCollection = _collection()


@_entity
class Pathway(Entity):
    entity_type: ClassVar[str] = "Pathway"

    identifier: str
    name: str | None = None
    data_sets: EntityCollection = _collection()


@_entity
class Phenotype(Entity):
    entity_type: ClassVar[str] = "Phenotype"
    key_fields: ClassVar[tuple[str, ...]] = ("primary_identifier",)

    primary_identifier: str
    data_sets: EntityCollection = _collection()


# Organism-scoped kinds


@_entity
class BioEntity(Entity):
    """An entity that must reference an Organism and Strain before emission."""

    key_fields: ClassVar[tuple[str, ...]] = ("primary_identifier",)
    requires_context: ClassVar[bool] = True

    organism: Organism | None = None
    strain: Strain | None = None
    data_sets: EntityCollection = _collection()


@_entity
class Chromosome(BioEntity):
    entity_type: ClassVar[str] = "Chromosome"
    feature_level: ClassVar[str | None] = "assembly"

    primary_identifier: str
    secondary_identifier: str | None = None


@_entity
class Gene(BioEntity):
    entity_type: ClassVar[str] = "Gene"
    feature_level: ClassVar[str | None] = "annotation"

    primary_identifier: str
    secondary_identifier: str | None = None
    description: str | None = None
    gene_family: GeneFamily | None = None
    score: float | None = None
    score_meaning: str | None = None
    proteins: EntityCollection = _collection()
    pathways: EntityCollection = _collection()
    pan_gene_sets: EntityCollection = _collection()
    publications: EntityCollection = _collection()


@_entity
class Protein(BioEntity):
    entity_type: ClassVar[str] = "Protein"
    feature_level: ClassVar[str | None] = "annotation"

    primary_identifier: str
    secondary_identifier: str | None = None
    gene: Gene | None = None
    gene_family: GeneFamily | None = None
    score: float | None = None
    score_meaning: str | None = None
    pan_gene_sets: EntityCollection = _collection()
    protein_matches: EntityCollection = _collection()
    protein_hmm_matches: EntityCollection = _collection()
    publications: EntityCollection = _collection()


@_entity
class MRNA(BioEntity):
    entity_type: ClassVar[str] = "MRNA"
    feature_level: ClassVar[str | None] = "annotation"

    primary_identifier: str
    secondary_identifier: str | None = None
    gene: Gene | None = None
    protein: Protein | None = None


@_entity
class ProteinMatch(BioEntity):
    entity_type: ClassVar[str] = "ProteinMatch"

    primary_identifier: str
    protein: Protein | None = None
    source: str | None = None
    accession: str | None = None
    status: str | None = None
    date: str | None = None
    target: str | None = None
    signature_desc: str | None = None
    location: "Location | None" = None


@_entity
class ProteinHmmMatch(ProteinMatch):
    entity_type: ClassVar[str] = "ProteinHmmMatch"


@_entity
class GenotypingStudy(BioEntity):
    entity_type: ClassVar[str] = "GenotypingStudy"

    primary_identifier: str
    subject: str | None = None
    description: str | None = None
    genbank: str | None = None
    contributors: str | None = None
    publication: Publication | None = None
    samples: EntityCollection = _collection()


@_entity
class GenotypingSample(BioEntity):
    entity_type: ClassVar[str] = "GenotypingSample"

    primary_identifier: str
    study: GenotypingStudy | None = None


@_entity
class GeneticMarker(BioEntity):
    entity_type: ClassVar[str] = "GeneticMarker"

    primary_identifier: str
    chromosome: Chromosome | None = None
    position: int | None = None
    genotyping_studies: EntityCollection = _collection()


@_entity
class GenotypingRecord(BioEntity):
    """One VCF data line: a marker's alleles as called in one study."""

    entity_type: ClassVar[str] = "GenotypingRecord"

    primary_identifier: str
    marker: GeneticMarker | None = None
    study: GenotypingStudy | None = None
    chromosome: Chromosome | None = None
    ref: str | None = None
    alt: str | None = None
    qual: float | None = None
    filter: str | None = None
    info: str | None = None
    location: "Location | None" = None


@_entity
class Genotype(Entity):
    entity_type: ClassVar[str] = "Genotype"
    key_fields: ClassVar[tuple[str, ...]] = ("sample", "record")

    sample: GenotypingSample
    record: GenotypingRecord
    value: str | None = None
    likelihoods: str | None = None


@_entity
class Location(Entity):
    """Span of ``feature`` on ``located_on`` (a Chromosome or a Protein)."""

    entity_type: ClassVar[str] = "Location"
    key_fields: ClassVar[tuple[str, ...]] = ("feature", "located_on", "start", "end")

    feature: Entity
    located_on: Entity
    start: int
    end: int
    data_sets: EntityCollection = _collection()
