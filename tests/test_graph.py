import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from lisdatastore.graph import EMISSION_ORDER, EntityGraph, EntityRegistry  # noqa: E402
from lisdatastore.models import (  # noqa: E402
    Chromosome,
    EntityCollection,
    Gene,
    GeneFamily,
    Location,
    OntologyAnnotation,
    OntologyTerm,
    Organism,
    Protein,
)


def test_registry_returns_one_instance_per_key() -> None:
    registry = EntityRegistry(Gene)

    first = registry.get_or_create("phavu.G19833.gnm2.ann1.Phvul.001G000100")
    second = registry.get_or_create("phavu.G19833.gnm2.ann1.Phvul.001G000100")

    assert first is second
    assert len(registry) == 1
    assert "phavu.G19833.gnm2.ann1.Phvul.001G000100" in registry
    assert registry.get("missing") is None


def test_feature_kinds_stamp_secondary_identifiers() -> None:
    gene = Gene.create("glyma.Wm82.gnm2.ann1.Glyma.01G000100")
    chromosome = Chromosome.create("glyma.Wm82.gnm2.Gm01")
    short = Gene.create("Glyma.01G000100")

    assert gene.secondary_identifier == "Glyma.01G000100"
    assert chromosome.secondary_identifier == "Gm01"
    assert short.secondary_identifier is None


def test_entities_reject_undeclared_attributes() -> None:
    family = GeneFamily.create("legfed_v1_0.L_ABCDEF")

    with pytest.raises(AttributeError):
        family.primary_identifier = "oops"


def test_composite_keys_reuse_the_same_join_entity() -> None:
    graph = EntityGraph()
    gene = graph.registry(Gene).get_or_create("phavu.G19833.gnm2.ann1.Phvul.001G000100")
    term = graph.registry(OntologyTerm).get_or_create("GO:0005524")

    first = graph.registry(OntologyAnnotation).get_or_create((gene, term))
    second = graph.registry(OntologyAnnotation).get_or_create((gene, term))

    assert first is second
    assert first.key_text() == "phavu.G19833.gnm2.ann1.Phvul.001G000100|GO:0005524"


def test_entity_collection_deduplicates_by_identity() -> None:
    proteins = EntityCollection()
    protein = Protein.create("phavu.G19833.gnm2.ann1.Phvul.001G000100.1")

    assert proteins.add(protein)
    assert not proteins.add(protein)
    assert len(proteins) == 1
    assert protein in proteins


def test_to_row_renders_references_as_keys() -> None:
    family = GeneFamily.create("legfed_v1_0.L_ABCDEF")
    gene = Gene.create("phavu.G19833.gnm2.ann1.Phvul.001G000100")
    protein = Protein.create("phavu.G19833.gnm2.ann1.Phvul.001G000100.1")
    gene.gene_family = family
    gene.proteins.add(protein)
    gene.score = 1e-20

    row = gene.to_row()

    assert row["primary_identifier"] == "phavu.G19833.gnm2.ann1.Phvul.001G000100"
    assert row["gene_family"] == "legfed_v1_0.L_ABCDEF"
    assert row["proteins"] == ["phavu.G19833.gnm2.ann1.Phvul.001G000100.1"]
    assert row["organism"] is None
    assert row["score"] == 1e-20


def test_emission_batches_follow_dependency_order() -> None:
    graph = EntityGraph()
    gene = graph.registry(Gene).get_or_create("phavu.G19833.gnm2.ann1.Phvul.001G000100")
    chromosome = graph.registry(Chromosome).get_or_create("phavu.G19833.gnm2.Chr01")
    graph.registry(Location).get_or_create((gene, chromosome, 1, 100))
    graph.registry(Organism).get_or_create("3885")

    kinds = [entity_type for entity_type, _ in graph.emission_batches()]

    assert kinds == ["Organism", "Chromosome", "Gene", "Location"]
    assert graph.counts() == {"Organism": 1, "Chromosome": 1, "Gene": 1, "Location": 1}
    assert EMISSION_ORDER.index(Gene) > EMISSION_ORDER.index(GeneFamily)


def test_unknown_kind_has_no_registry() -> None:
    class Unregistered(Gene):
        pass

    with pytest.raises(KeyError):
        EntityGraph().registry(Unregistered)
