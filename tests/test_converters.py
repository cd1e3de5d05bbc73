import gzip
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from lisdatastore.catalog import OrganismCatalogLoader  # noqa: E402
from lisdatastore.converters import (  # noqa: E402
    GeneFamilyDescriptionConverter,
    GeneInfoAnnotationConverter,
    InfoDescriptorsConverter,
    InterProScanGFFConverter,
    PanGeneClusterConverter,
    PanGeneHashConverter,
    PathwayConverter,
    PhenotypeConverter,
)
from lisdatastore.converters.common import DescriptorValue, expand_input_paths  # noqa: E402
from lisdatastore.errors import (  # noqa: E402
    MissingMetadataError,
    ParseError,
    UnsupportedRecordType,
    ValidationError,
)
from lisdatastore.models import (  # noqa: E402
    DataSet,
    Gene,
    GeneFamily,
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
)

PHAVU_GENE = "phavu.G19833.gnm2.ann1.Phvul.001G000100"


def _catalog():
    return OrganismCatalogLoader(ROOT / "config").load()


def _write_readme(directory: Path, name: str, body: str) -> Path:
    path = directory / f"README.{name}.yml"
    path.write_text(body)
    return path


def test_descriptor_value_splits_description_domains_and_terms() -> None:
    value = DescriptorValue.parse(
        "RING finger protein 5-like [Glycine max]; IPR013083 (Zinc finger, RING/FYVE/PHD-type); "
        "GO:0005515 (protein binding), GO:0008270 (zinc ion binding)"
    )

    assert value.description == "RING finger protein 5-like [Glycine max]"
    assert value.interpro == {"IPR013083": "Zinc finger, RING/FYVE/PHD-type"}
    assert value.go == {"GO:0005515": "protein binding", "GO:0008270": "zinc ion binding"}


def test_expand_input_paths_filters_directory_members(tmp_path: Path) -> None:
    (tmp_path / "a.phenotype.tsv").write_text("")
    (tmp_path / "b.gfa.tsv").write_text("")

    paths = expand_input_paths(tmp_path, PhenotypeConverter.accepts)

    assert [path.name for path in paths] == ["a.phenotype.tsv"]


def test_pan_gene_hash_links_sets_proteins_and_genes(tmp_path: Path) -> None:
    path = tmp_path / "Glycine.max.pan1.X2QN.hsh.tsv"
    path.write_text(
        "glyma.pan1.00001\tglyma.Wm82.gnm2.ann1.Glyma.01G000100.1\n"
        "glyma.pan1.00001\tglyma.Wm82.gnm2.ann1.Glyma.01G000100.2\n"
        "glyma.pan1.00002\tglyma.Wm82.gnm2.ann1.Glyma.01G000200.1\n"
    )
    converter = PanGeneHashConverter(catalog=_catalog())
    converter.scan(path)

    graph = converter.finalize()

    pan_gene_set = graph.registry(PanGeneSet).get("glyma.pan1.00001")
    gene = graph.registry(Gene).get("glyma.Wm82.gnm2.ann1.Glyma.01G000100")
    assert pan_gene_set.version == "pan1"
    assert len(pan_gene_set.proteins) == 2
    assert len(pan_gene_set.genes) == 1
    assert pan_gene_set in gene.pan_gene_sets
    assert gene.organism.taxon_id == "3847"
    assert graph.registry(Protein).get("glyma.Wm82.gnm2.ann1.Glyma.01G000100.2").gene is gene


def test_pan_gene_hash_requires_six_part_file_names(tmp_path: Path) -> None:
    path = tmp_path / "Glycine.max.X2QN.hsh.tsv"
    path.write_text("glyma.pan1.00001\tglyma.Wm82.gnm2.ann1.Glyma.01G000100.1\n")

    with pytest.raises(ParseError) as excinfo:
        PanGeneHashConverter(catalog=_catalog()).scan(path)

    assert "required 6 dot-separated parts (found 5)" in str(excinfo.value)


def test_pan_gene_hash_protein_without_isoform_segment(tmp_path: Path) -> None:
    path = tmp_path / "Glycine.max.pan1.X2QN.hsh.tsv"
    path.write_text("glyma.pan1.00001\tGlyma01G000100\n")

    with pytest.raises(ValidationError) as excinfo:
        PanGeneHashConverter(catalog=_catalog()).scan(path)

    assert excinfo.value.line_number == 1


def test_pathway_run_uses_readme_context(tmp_path: Path) -> None:
    readme = _write_readme(
        tmp_path,
        "G19833.gnm2.ann1.pathway.PB8d",
        "identifier: G19833.gnm2.ann1.pathway.PB8d\n"
        "taxid: 3885\n"
        "genotype: G19833\n"
        "publication_doi: 10.1038/ng.3008\n",
    )
    path = tmp_path / "phavu.G19833.gnm2.ann1.PB8d.pathway.tsv"
    path.write_text(
        "PWY-5686\tUMP biosynthesis\n"
        f"PWY-5686\tUMP biosynthesis\t{PHAVU_GENE}\n"
        f"PWY-7790\tUMP biosynthesis II\t{PHAVU_GENE}\n"
    )
    converter = PathwayConverter(catalog=_catalog())
    converter.load(readme)
    converter.scan(path)

    graph = converter.finalize()

    gene = graph.registry(Gene).get(PHAVU_GENE)
    data_set = graph.registry(DataSet).get("G19833.gnm2.ann1.pathway.PB8d")
    publication = graph.registry(Publication).get("10.1038/ng.3008")
    assert converter.records_parsed == 2
    assert [p.identifier for p in gene.pathways] == ["PWY-5686", "PWY-7790"]
    assert graph.registry(Pathway).get("PWY-5686").name == "UMP biosynthesis"
    assert gene.organism is graph.registry(Organism).get("3885")
    assert gene.strain.identifier == "G19833"
    assert data_set in gene.data_sets
    assert publication in gene.publications
    assert len(graph.registry(DataSet)) == 1


def test_pathway_run_without_readme_aborts(tmp_path: Path) -> None:
    path = tmp_path / "phavu.G19833.gnm2.ann1.PB8d.pathway.tsv"
    path.write_text(f"PWY-5686\tUMP biosynthesis\t{PHAVU_GENE}\n")
    converter = PathwayConverter(catalog=_catalog())
    converter.scan(path)

    with pytest.raises(MissingMetadataError) as excinfo:
        converter.finalize()

    assert str(excinfo.value) == (
        "README file missing for pathway run. Aborting. (phavu.G19833.gnm2.ann1.PB8d.pathway.tsv)"
    )
    assert excinfo.value.file_name == path.name


def test_phenotypes_are_deduplicated_and_annotated(tmp_path: Path) -> None:
    path = tmp_path / "mixed.map.Cowpea.phenotype.tsv"
    path.write_text(
        "Seed weight\tTO:0000181\n"
        "Seed weight\tTO:0000181\n"
        "Seed weight\tCO_337:0000044\n"
        "Flowering time\tTO:0002616\n"
    )
    converter = PhenotypeConverter()
    converter.scan(path)

    graph = converter.finalize()

    assert len(graph.registry(Phenotype)) == 2
    assert len(graph.registry(OntologyTerm)) == 3
    assert len(graph.registry(OntologyAnnotation)) == 3
    seed_weight = graph.registry(Phenotype).get("Seed weight")
    term = graph.registry(OntologyTerm).get("TO:0000181")
    assert graph.registry(OntologyAnnotation).get((seed_weight, term)).subject is seed_weight


IPR_README = (
    "identifier: G19833.gnm2.ann1.iprscan.PB8d\n"
    "taxid: 3885\n"
    "genotype:\n"
    "  - G19833\n"
)


def test_interproscan_matches_and_locations(tmp_path: Path) -> None:
    readme = _write_readme(tmp_path, "G19833.gnm2.ann1.PB8d", IPR_README)
    path = tmp_path / "phavu.G19833.gnm2.ann1.PB8d.iprscan.gff3"
    path.write_text(
        "##gff-version 3\n"
        f"{PHAVU_GENE}.1\tPfam\tprotein_hmm_match\t10\t120\t1.2e-30\t+\t.\t"
        "ID=match$1_10_120;Name=PF00069;status=T;date=20-03-2021;Target=m1 1 110;"
        "signature_desc=Protein kinase domain\n"
        f"{PHAVU_GENE}.1\tPANTHER\tprotein_match\t1\t300\t0.0\t+\t.\tID=match$2_1_300;Name=PTHR27001\n"
        "##FASTA\n"
        f">{PHAVU_GENE}.1\n"
        "MKVLAAGIVGLLLA\n"
    )
    converter = InterProScanGFFConverter(catalog=_catalog())
    converter.load(readme)
    converter.scan(path)

    graph = converter.finalize()

    protein = graph.registry(Protein).get(f"{PHAVU_GENE}.1")
    hmm_match = graph.registry(ProteinHmmMatch).get("match$1_10_120")
    match = graph.registry(ProteinMatch).get("match$2_1_300")
    assert converter.records_parsed == 2
    assert hmm_match.accession == "PF00069"
    assert hmm_match.signature_desc == "Protein kinase domain"
    assert hmm_match.date == "20-03-2021"
    assert hmm_match.protein is protein
    assert hmm_match.organism.taxon_id == "3885"
    assert match.source == "PANTHER"
    assert list(protein.protein_hmm_matches) == [hmm_match]
    assert list(protein.protein_matches) == [match]

    location = graph.registry(Location).get((hmm_match, protein, 10, 120))
    assert location is hmm_match.location
    assert location.located_on is protein
    assert location.to_row()["feature"] == "match$1_10_120"


def test_interproscan_unknown_record_type_aborts(tmp_path: Path) -> None:
    readme = _write_readme(tmp_path, "G19833.gnm2.ann1.PB8d", IPR_README)
    path = tmp_path / "phavu.G19833.gnm2.ann1.PB8d.iprscan.gff3"
    path.write_text(f"{PHAVU_GENE}.1\tPfam\tpolypeptide\t1\t300\t.\t+\t.\tID=p1\n")
    converter = InterProScanGFFConverter(catalog=_catalog())
    converter.load(readme)

    with pytest.raises(UnsupportedRecordType) as excinfo:
        converter.scan(path)

    assert excinfo.value.line_number == 1


def test_info_descriptors_describe_genes_and_annotate_go(tmp_path: Path) -> None:
    gene_id = "arahy.Tifrunner.gnm1.ann1.GU6A2U"
    path = tmp_path / "arahy.Tifrunner.gnm1.ann1.CCJH.info_descriptors.txt"
    path.write_text(
        f"{gene_id}\tRING finger protein 5-like [Glycine max]; IPR013083 (Zinc finger, RING/FYVE/PHD-type); "
        "GO:0005515 (protein binding), GO:0008270 (zinc ion binding)\n"
    )
    converter = InfoDescriptorsConverter(catalog=_catalog())
    converter.scan(path)

    graph = converter.finalize()

    gene = graph.registry(Gene).get(gene_id)
    assert gene.description == "RING finger protein 5-like [Glycine max]"
    assert gene.organism.taxon_id == "3818"
    assert graph.registry(OntologyTerm).get("GO:0008270").name == "zinc ion binding"
    assert len(graph.registry(OntologyAnnotation)) == 2
    assert len(graph.registry(ProteinDomain)) == 0


def test_info_descriptors_accept_any_file_name(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "arahy.Tifrunner.CCJH.info_descriptors.txt"
    path.write_text("arahy.Tifrunner.gnm1.ann1.GU6A2U\tRING finger protein\n")
    converter = InfoDescriptorsConverter(catalog=_catalog())

    with caplog.at_level("WARNING"):
        assert converter.scan(path) == 1

    assert "default version" not in caplog.text


def test_info_annot_links_gene_mrna_protein_and_terms(tmp_path: Path) -> None:
    path = tmp_path / "phavu.G19833.gnm2.ann1.PB8d.info_annot.txt"
    path.write_text(
        "#pacId\tlocusName\ttranscriptName\tpeptideName\tPfam\tPanther\tKOG\tec\tKO\tGO\n"
        "37170591\tPhvul.001G000100\tPhvul.001G000100.1\tPhvul.001G000100.1.p\tPF00504,PF00505\tPTHR21649"
        "\t\t\tK08912\tGO:0009765,GO:0016020\tAT1G29920.1\tCAB2\tchlorophyll A/B-binding protein 2\n"
    )
    converter = GeneInfoAnnotationConverter(catalog=_catalog())

    assert converter.scan(path) == 1
    graph = converter.finalize()

    gene = graph.registry(Gene).get(PHAVU_GENE)
    protein = graph.registry(Protein).get(f"{PHAVU_GENE}.1")
    mrna = graph.registry(MRNA).get(f"{PHAVU_GENE}.1")
    assert protein.gene is gene
    assert protein in gene.proteins
    assert mrna.gene is gene
    assert mrna.protein is protein
    assert mrna.organism.taxon_id == "3885"
    assert mrna.strain.identifier == "G19833"

    terms = graph.registry(OntologyTerm)
    annotations = graph.registry(OntologyAnnotation)
    assert len(annotations) == 6
    assert terms.get("GO:0016020").ontology == "GO"
    assert terms.get("K08912").ontology == "KEGG Orthology"
    assert terms.get("PTHR21649").ontology == "PANTHER"
    assert annotations.get((gene, terms.get("GO:0009765"))) is not None
    assert annotations.get((gene, terms.get("K08912"))) is not None
    assert annotations.get((protein, terms.get("PF00505"))) is not None
    assert annotations.get((gene, terms.get("PF00504"))) is None


def test_info_annot_rejects_file_name_without_versions(tmp_path: Path) -> None:
    path = tmp_path / "phavu.G19833.PB8d.info_annot.txt"
    path.write_text("1\tPhvul.001G000100\tPhvul.001G000100.1\tPhvul.001G000100.1.p\n")

    with pytest.raises(ParseError):
        GeneInfoAnnotationConverter(catalog=_catalog()).scan(path)


def test_gene_family_descriptions_add_domains_and_terms(tmp_path: Path) -> None:
    path = tmp_path / "legume.fam1.M65K.info_annot_ahrd.tsv"
    path.write_text(
        "legfed_v1_0.L_QQS5LC-consensus\tProtein kinase superfamily protein; "
        "IPR000719 (Protein kinase domain), IPR011009 (Protein kinase-like domain superfamily); "
        "GO:0004672 (protein kinase activity)\n"
    )
    converter = GeneFamilyDescriptionConverter()
    converter.scan(path)

    graph = converter.finalize()

    family = graph.registry(GeneFamily).get("legfed_v1_0.L_QQS5LC")
    assert family.version == "legfed_v1_0"
    assert family.description == "Protein kinase superfamily protein"
    assert [d.identifier for d in family.protein_domains] == ["IPR000719", "IPR011009"]
    domain = graph.registry(ProteinDomain).get("IPR000719")
    assert domain.description == "Protein kinase domain"
    assert family in domain.gene_families
    annotation = graph.registry(OntologyAnnotation).get((family, graph.registry(OntologyTerm).get("GO:0004672")))
    assert annotation is not None


def test_pan_gene_clusters_from_gzip_with_readme(tmp_path: Path) -> None:
    readme = _write_readme(
        tmp_path,
        "Cicer.pan1.SV8C",
        "identifier: Cicer.pan1.SV8C\n"
        "description: Pan-gene set for Cicer arietinum.\n"
        "genotype:\n"
        "  - CDCFrontier\n"
        "  - ICC4958\n",
    )
    path = tmp_path / "Cicer.pan1.SV8C.clust.tsv.gz"
    with gzip.open(path, "wt", encoding="utf-8") as stream:
        stream.write(
            "Cicer.pan1.pan00001\tcicar.CDCFrontier.gnm3.ann1.Ca2g036100.1\tcicar.ICC4958.gnm2.ann1.Ca_06696.1\n"
            "Cicer.pan1.pan00002\tcicar.CDCFrontier.gnm3.ann1.Ca2g036200.1\n"
        )
    converter = PanGeneClusterConverter(catalog=_catalog())
    converter.load(readme)
    converter.scan(path)

    graph = converter.finalize()

    pan_gene_set = graph.registry(PanGeneSet).get("Cicer.pan1.pan00001")
    assert pan_gene_set.version == "Cicer.pan1.SV8C"
    assert pan_gene_set.description == "Pan-gene set for Cicer arietinum."
    assert [g.primary_identifier for g in pan_gene_set.genes] == [
        "cicar.CDCFrontier.gnm3.ann1.Ca2g036100",
        "cicar.ICC4958.gnm2.ann1.Ca_06696",
    ]
    strains = {gene.strain.identifier for gene in graph.registry(Gene)}
    assert strains == {"CDCFrontier", "ICC4958"}
    assert {gene.organism.taxon_id for gene in graph.registry(Gene)} == {"3827"}
