"""Converter for genotyping study VCF files (``*.vcf`` / ``*.vcf.gz``).

The README describes the GenotypingStudy; the ``#CHROM`` header declares its
samples. Every data line becomes a GeneticMarker position, a GenotypingRecord
of the study's alleles at that marker, and one Genotype per sample.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from lisdatastore.config import GT_VCF_POLICY
from lisdatastore.context import register_organism, register_strain
from lisdatastore.converters.base import FileSetConverter
from lisdatastore.errors import MissingMetadataError, ParseError, ValidationError
from lisdatastore.filenames import FileNameParts, decompose_filename
from lisdatastore.models import (
    BioEntity,
    Chromosome,
    GeneticMarker,
    Genotype,
    GenotypingRecord,
    GenotypingSample,
    GenotypingStudy,
    Location,
    Organism,
    Strain,
)
from lisdatastore.tokenizer import VariantCall, VCFHeader

logger = logging.getLogger(__name__)


class GenotypingVCFConverter(FileSetConverter):
    name = "gt_vcf"
    policy = GT_VCF_POLICY

    def _scan_lines(self, lines: Iterable[str], path: Path) -> None:
        parts = decompose_filename(path.name, self.policy)
        organism, strain = self._resolve_organism_strain(parts)
        study = self._study()
        self._stamp(study, organism, strain)

        header: VCFHeader | None = None
        samples: list[GenotypingSample] = []

        for line_number, raw in enumerate(lines, start=1):
            line = raw.rstrip("\r\n")
            if line.startswith("##") or not line.strip():
                continue
            if line.startswith("#CHROM"):
                header = VCFHeader.from_line(line)
                samples = [self._sample(name, study, organism, strain) for name in header.samples]
                logger.info("%s: %d samples declared in VCF header", path.name, len(samples))
                continue
            if line.startswith("#"):
                continue
            if header is None:
                raise ParseError("VCF record before #CHROM header line", file_name=path.name, line_number=line_number)

            call = VariantCall.from_line(line, header, file_name=path.name, line_number=line_number)
            if not call.contig.strip():
                raise ValidationError("empty contig identifier", file_name=path.name, line_number=line_number)
            chromosome = self._chromosome(call.contig, parts, organism, strain)
            marker = self._marker(call, chromosome, study, organism, strain)
            record = self._record(call, marker, chromosome, study, organism, strain)

            for sample, sample_call in zip(samples, call.calls):
                genotype = self.graph.registry(Genotype).get_or_create((sample, record))
                genotype.value = sample_call.genotype
                genotype.likelihoods = sample_call.likelihoods

            self.records_parsed += 1

    def _resolve_organism_strain(self, parts: FileNameParts) -> tuple[Organism | None, Strain | None]:
        organism = self.context.organism
        if organism is None:
            info = self.catalog.by_gensp(parts.gensp)
            organism = register_organism(self.graph, info) if info is not None else None

        strain = self.context.strain
        if strain is None and parts.strain:
            strain = register_strain(self.graph, parts.strain, organism)
        return organism, strain

    def _stamp(self, entity: BioEntity, organism: Organism | None, strain: Strain | None) -> None:
        if entity.organism is None:
            entity.organism = organism
        if entity.strain is None:
            entity.strain = strain
        entity.data_sets.add(self._current_data_set)

    def _study(self) -> GenotypingStudy:
        readme = self.context.readme
        if readme is None or not readme.identifier:
            raise MissingMetadataError("README file missing. Aborting.", file_name=self._current_file)

        study = self.graph.registry(GenotypingStudy).get_or_create(readme.identifier)
        study.subject = readme.subject
        study.description = readme.description
        study.genbank = readme.genbank_accession
        study.contributors = readme.contributors
        study.publication = self.context.publication
        return study

    def _sample(
        self,
        name: str,
        study: GenotypingStudy,
        organism: Organism | None,
        strain: Strain | None,
    ) -> GenotypingSample:
        sample = self.graph.registry(GenotypingSample).get_or_create(name)
        sample.study = study
        study.samples.add(sample)
        self._stamp(sample, organism, strain)
        return sample

    def _chromosome(
        self,
        contig: str,
        parts: FileNameParts,
        organism: Organism | None,
        strain: Strain | None,
    ) -> Chromosome:
        prefix = [token for token in (parts.gensp, parts.strain, parts.assembly_version) if token]
        primary_id = ".".join([*prefix, contig]) if len(prefix) == 3 else contig

        chromosome = self.graph.registry(Chromosome).get_or_create(primary_id)
        chromosome.secondary_identifier = contig
        self._stamp(chromosome, organism, strain)
        return chromosome

    def _marker(
        self,
        call: VariantCall,
        chromosome: Chromosome,
        study: GenotypingStudy,
        organism: Organism | None,
        strain: Strain | None,
    ) -> GeneticMarker:
        marker_id = call.identifier or f"{call.contig}_{call.start}"
        marker = self.graph.registry(GeneticMarker).get_or_create(marker_id)
        marker.chromosome = chromosome
        marker.position = call.start
        marker.genotyping_studies.add(study)
        self._stamp(marker, organism, strain)
        return marker

    def _record(
        self,
        call: VariantCall,
        marker: GeneticMarker,
        chromosome: Chromosome,
        study: GenotypingStudy,
        organism: Organism | None,
        strain: Strain | None,
    ) -> GenotypingRecord:
        record_id = f"{call.contig}:{call.start}:{call.ref}:{call.alt or '.'}"
        record = self.graph.registry(GenotypingRecord).get_or_create(record_id)
        record.marker = marker
        record.study = study
        record.chromosome = chromosome
        record.ref = call.ref
        record.alt = call.alt
        record.qual = call.qual
        record.filter = call.filter_text
        record.info = call.info_text
        self._stamp(record, organism, strain)

        location = self.graph.registry(Location).get_or_create((record, chromosome, call.start, call.end))
        location.data_sets.add(self._current_data_set)
        record.location = location
        return record
