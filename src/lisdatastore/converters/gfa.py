"""Converter for gene family assignment files (``*.gfa.tsv``).

Each data line assigns a gene and one of its proteins to a gene family, with
an optional score whose meaning is declared by a ``ScoreMeaning`` header::

    ScoreMeaning	e-value
    phalu.G27455.gnm1.ann1.tig000546640010	legfed_v1_0.L_0QQMMJ	phalu.G27455.gnm1.ann1.tig000546640010.1	3.1e-199
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from lisdatastore.config import GFA_POLICY
from lisdatastore.converters.base import FileSetConverter
from lisdatastore.converters.common import to_float
from lisdatastore.filenames import decompose_filename
from lisdatastore.models import GeneFamily
from lisdatastore.tokenizer import iter_tabular_lines

logger = logging.getLogger(__name__)


class GeneFamilyAssignmentConverter(FileSetConverter):
    name = "gfa"
    policy = GFA_POLICY

    def _scan_lines(self, lines: Iterable[str], path: Path) -> None:
        parts = decompose_filename(path.name, self.policy)
        families = self.graph.registry(GeneFamily)
        score_meaning: str | None = None

        for line in iter_tabular_lines(lines, file_name=path.name, policy=self.policy):
            if line.is_header:
                score_meaning = line.get(1)
                continue

            gene_id = self._require(line, 0, "gene")
            family_id = self._require(line, 1, "gene family")
            protein_id = self._require(line, 2, "protein")

            score = None
            raw_score = line.get(3)
            if raw_score is not None:
                score = to_float(raw_score)
                if score is None:
                    logger.debug(
                        "%s:%d: ignoring unparseable score '%s'", path.name, line.line_number, raw_score
                    )

            family = families.get_or_create(family_id)
            family.version = parts.version
            family.data_sets.add(self._current_data_set)

            gene = self._gene(gene_id)
            gene.gene_family = family
            family.genes.add(gene)

            protein = self._protein(protein_id)
            protein.gene_family = family
            protein.gene = gene
            family.proteins.add(protein)
            gene.proteins.add(protein)

            if score is not None:
                for member in (gene, protein):
                    member.score = score
                    if score_meaning is not None:
                        member.score_meaning = score_meaning

            self.records_parsed += 1

    def _before_wiring(self) -> None:
        for family in self.graph.registry(GeneFamily):
            family.size = len(family.genes)
