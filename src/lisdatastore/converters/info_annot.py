"""Converter for gene annotation info files (``*.info_annot.txt``).

Each data line describes one transcript::

    37170591  Phvul.001G000400  Phvul.001G000400.1  Phvul.001G000400.1.p  PF00504  PTHR21649  KOG0001  1.1.1.1  K08912  GO:0009765,GO:0016020

Columns after the peptide hold comma-separated Pfam, PANTHER, KOG, EC, KO and
GO identifiers, any of which may be empty. Gene, mRNA and protein names are
prefixed with the ``gensp.strain.gnm.ann`` tokens of the file name. GO and KO
terms annotate the gene; the rest annotate the protein.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from lisdatastore.config import INFO_ANNOT_POLICY
from lisdatastore.converters.base import FileSetConverter
from lisdatastore.errors import ParseError
from lisdatastore.filenames import decompose_filename
from lisdatastore.models import BioEntity, MRNA, OntologyAnnotation, OntologyTerm
from lisdatastore.tokenizer import iter_tabular_lines

PEPTIDE_SUFFIX = ".p"

# (column, ontology) pairs
GENE_ONTOLOGY_COLUMNS = ((8, "KEGG Orthology"), (9, "GO"))
PROTEIN_ONTOLOGY_COLUMNS = ((4, "Pfam"), (5, "PANTHER"), (6, "KOG"), (7, "ENZYME"))


class GeneInfoAnnotationConverter(FileSetConverter):
    name = "info_annot"
    policy = INFO_ANNOT_POLICY

    def _scan_lines(self, lines: Iterable[str], path: Path) -> None:
        parts = decompose_filename(path.name, self.policy)
        if parts.assembly_version is None or parts.annotation_version is None:
            raise ParseError(
                "file name lacks assembly (gnm) or annotation (ann) version", file_name=path.name
            )
        prefix = ".".join(parts.tokens[:4])
        mrnas = self.graph.registry(MRNA)

        for line in iter_tabular_lines(lines, file_name=path.name, policy=self.policy):
            self._require(line, 0, "PAC")
            locus = self._require(line, 1, "locus")
            transcript = self._require(line, 2, "transcript")
            peptide = self._require(line, 3, "peptide")
            if peptide.endswith(PEPTIDE_SUFFIX):
                peptide = peptide[: -len(PEPTIDE_SUFFIX)]

            gene = self._gene(f"{prefix}.{locus}")
            protein = self._protein(f"{prefix}.{peptide}")
            protein.gene = gene
            gene.proteins.add(protein)

            mrna = mrnas.get_or_create(f"{prefix}.{transcript}")
            mrna.gene = gene
            mrna.protein = protein
            mrna.data_sets.add(self._current_data_set)

            for index, ontology in GENE_ONTOLOGY_COLUMNS:
                self._annotate(gene, line.get(index), ontology)
            for index, ontology in PROTEIN_ONTOLOGY_COLUMNS:
                self._annotate(protein, line.get(index), ontology)

            self.records_parsed += 1

    def _annotate(self, subject: BioEntity, column: str | None, ontology: str) -> None:
        if column is None:
            return
        terms = self.graph.registry(OntologyTerm)
        annotations = self.graph.registry(OntologyAnnotation)
        for identifier in column.split(","):
            identifier = identifier.strip()
            if not identifier:
                continue
            term = terms.get_or_create(identifier)
            term.ontology = ontology
            annotation = annotations.get_or_create((subject, term))
            annotation.data_sets.add(self._current_data_set)
