import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from lisdatastore.catalog import OrganismCatalog, OrganismInfo  # noqa: E402
from lisdatastore.errors import ReferenceResolutionError  # noqa: E402
from lisdatastore.graph import EntityGraph  # noqa: E402
from lisdatastore.models import Gene, GeneFamily, Protein, Strain  # noqa: E402
from lisdatastore.quality import ReferenceValidator  # noqa: E402
from lisdatastore.readme import Readme, build_run_context  # noqa: E402
from lisdatastore.wiring import ContextWiring  # noqa: E402

CATALOG = OrganismCatalog([OrganismInfo(gensp="phavu", taxon_id="3885", genus="Phaseolus", species="vulgaris")])


def test_inspect_lists_every_missing_reference() -> None:
    graph = EntityGraph()
    graph.registry(Gene).get_or_create("Phvul.001G000100")
    graph.registry(GeneFamily).get_or_create("legfed_v1_0.L_ABCDEF")

    report = ReferenceValidator().inspect(graph)

    assert report.checked == 1
    assert not report.ok
    assert [(i.entity_type, i.field_name) for i in report.issues] == [("Gene", "organism"), ("Gene", "strain")]
    with pytest.raises(ReferenceResolutionError) as excinfo:
        ReferenceValidator().validate(graph, file_name="x.gfa.tsv")
    assert str(excinfo.value).startswith("2 unresolved reference(s); Gene 'Phvul.001G000100' has no organism")


def test_wiring_prefers_readme_context_and_keeps_existing_references() -> None:
    graph = EntityGraph()
    readme = Readme.from_mapping({"identifier": "G19833.gnm2.ann1.PB8d", "taxid": "3885", "genotype": "G19833"})
    context = build_run_context(graph, readme, catalog=CATALOG)
    other_strain = graph.registry(Strain).get_or_create("BAT93")
    gene = graph.registry(Gene).get_or_create("phavu.G19833.gnm2.ann1.Phvul.001G000100")
    protein = graph.registry(Protein).get_or_create("phavu.G19833.gnm2.ann1.Phvul.001G000100.1")
    protein.strain = other_strain

    ContextWiring(context).wire(graph)

    assert gene.organism is context.organism
    assert gene.strain is context.strain
    assert protein.strain is other_strain
    assert other_strain.organism is context.organism
    assert context.data_set in protein.data_sets
    assert ReferenceValidator().validate(graph).ok


def test_wiring_without_readme_uses_identifier_prefix() -> None:
    graph = EntityGraph()
    context = build_run_context(graph, None, catalog=CATALOG)
    gene = graph.registry(Gene).get_or_create("phavu.G19833.gnm2.ann1.Phvul.001G000100")

    ContextWiring(context).wire(graph)

    assert gene.organism.taxon_id == "3885"
    assert gene.strain.identifier == "G19833"
    assert gene.strain.organism is gene.organism
    assert len(gene.data_sets) == 0
