import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from lisdatastore.catalog import OrganismCatalogLoader  # noqa: E402
from lisdatastore.converters import GenotypingVCFConverter  # noqa: E402
from lisdatastore.errors import MissingMetadataError, ParseError  # noqa: E402
from lisdatastore.models import (  # noqa: E402
    Chromosome,
    GeneticMarker,
    Genotype,
    GenotypingRecord,
    GenotypingSample,
    GenotypingStudy,
    Location,
    Strain,
)

VCF_NAME = "glyma.Wm82.gnm2.div.ZQ8R.SNP.vcf"
README_TEXT = """\
identifier: Wm82.gnm2.div.ZQ8R
subject: SoySNP50K genotypes
description: Genotypes of soybean accessions on the Wm82 assembly.
taxid: 3847
genbank_accession: PRJNA000000
contributors: Song, Hyten
publication_doi: 10.1371/journal.pone.0054985
"""

VCF_TEXT = (
    "##fileformat=VCFv4.2\n"
    "##contig=<ID=Gm01>\n"
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tPI88788\tWilliams82\n"
    "Gm01\t1500\tss715578788\tA\tG\t50\tPASS\tDP=10\tGT:GL\t0/1:-1,0,-1\t1/1:.\n"
    "Gm01\t2500\t.\tCT\tC\t.\t.\t.\tGT\t0/0\t./.\n"
)


def _write_collection(directory: Path, vcf_text: str = VCF_TEXT) -> tuple[Path, Path]:
    readme = directory / "README.Wm82.gnm2.div.ZQ8R.yml"
    readme.write_text(README_TEXT)
    vcf = directory / VCF_NAME
    vcf.write_text(vcf_text)
    return readme, vcf


def _converter() -> GenotypingVCFConverter:
    return GenotypingVCFConverter(catalog=OrganismCatalogLoader(ROOT / "config").load())


def test_vcf_builds_study_markers_records_and_genotypes(tmp_path: Path) -> None:
    readme, vcf = _write_collection(tmp_path)
    converter = _converter()
    converter.load(readme)

    assert converter.scan(vcf) == 2
    graph = converter.finalize()

    study = graph.registry(GenotypingStudy).get("Wm82.gnm2.div.ZQ8R")
    assert study.subject == "SoySNP50K genotypes"
    assert study.genbank == "PRJNA000000"
    assert study.publication.doi == "10.1371/journal.pone.0054985"
    assert [s.primary_identifier for s in study.samples] == ["PI88788", "Williams82"]
    assert graph.registry(GenotypingSample).get("PI88788").study is study

    chromosome = graph.registry(Chromosome).get("glyma.Wm82.gnm2.Gm01")
    assert chromosome.secondary_identifier == "Gm01"

    named = graph.registry(GeneticMarker).get("ss715578788")
    unnamed = graph.registry(GeneticMarker).get("Gm01_2500")
    assert named.chromosome is chromosome
    assert named.position == 1500
    assert unnamed is not None
    assert study in named.genotyping_studies

    record = graph.registry(GenotypingRecord).get("Gm01:1500:A:G")
    assert record.marker is named
    assert record.qual == 50.0
    assert record.filter == "PASS"
    assert record.info == "DP=10"
    deletion = graph.registry(GenotypingRecord).get("Gm01:2500:CT:C")
    assert deletion.qual is None
    assert deletion.location is graph.registry(Location).get((deletion, chromosome, 2500, 2501))


def test_one_genotype_per_sample_and_record(tmp_path: Path) -> None:
    readme, vcf = _write_collection(tmp_path)
    converter = _converter()
    converter.load(readme)
    converter.scan(vcf)

    graph = converter.finalize()

    genotypes = {
        (g.sample.primary_identifier, g.record.primary_identifier): g for g in graph.registry(Genotype)
    }
    assert len(genotypes) == 4
    assert genotypes[("PI88788", "Gm01:1500:A:G")].value == "A/G"
    assert genotypes[("PI88788", "Gm01:1500:A:G")].likelihoods == "-1,0,-1"
    assert genotypes[("Williams82", "Gm01:1500:A:G")].likelihoods is None
    assert genotypes[("PI88788", "Gm01:2500:CT:C")].value == "CT/CT"
    assert genotypes[("Williams82", "Gm01:2500:CT:C")].value is None


def test_organism_from_readme_strain_from_file_name(tmp_path: Path) -> None:
    readme, vcf = _write_collection(tmp_path)
    converter = _converter()
    converter.load(readme)
    converter.scan(vcf)

    graph = converter.finalize()

    strain = graph.registry(Strain).get("Wm82")
    for kind in (GenotypingStudy, GenotypingSample, Chromosome, GeneticMarker, GenotypingRecord):
        for entity in graph.registry(kind):
            assert entity.organism.taxon_id == "3847"
            assert entity.strain is strain


def test_vcf_without_readme_aborts(tmp_path: Path) -> None:
    _, vcf = _write_collection(tmp_path)

    with pytest.raises(MissingMetadataError):
        _converter().scan(vcf)


def test_record_before_header_is_a_parse_error(tmp_path: Path) -> None:
    readme, vcf = _write_collection(tmp_path, "##fileformat=VCFv4.2\nGm01\t1\t.\tA\tG\t.\t.\t.\n")
    converter = _converter()
    converter.load(readme)

    with pytest.raises(ParseError) as excinfo:
        converter.scan(vcf)

    assert excinfo.value.line_number == 2
