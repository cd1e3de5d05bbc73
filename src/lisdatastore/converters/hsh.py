"""Converter for pan-gene hash association files (``*.hsh.tsv``).

Two columns: pan-gene set identifier and protein identifier. The gene is the
protein identifier without its trailing isoform segment.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from lisdatastore.config import HSH_POLICY
from lisdatastore.converters.base import FileSetConverter
from lisdatastore.filenames import decompose_filename
from lisdatastore.models import PanGeneSet
from lisdatastore.tokenizer import iter_tabular_lines


class PanGeneHashConverter(FileSetConverter):
    name = "hsh"
    policy = HSH_POLICY

    def _scan_lines(self, lines: Iterable[str], path: Path) -> None:
        parts = decompose_filename(path.name, self.policy)
        pan_gene_sets = self.graph.registry(PanGeneSet)

        for line in iter_tabular_lines(lines, file_name=path.name, policy=self.policy):
            set_id = self._require(line, 0, "pan-gene set")
            protein_id = self._require(line, 1, "protein")
            gene_id = self._parent_identifier(protein_id, line.line_number)

            pan_gene_set = pan_gene_sets.get_or_create(set_id)
            pan_gene_set.version = parts.version
            pan_gene_set.data_sets.add(self._current_data_set)

            protein = self._protein(protein_id)
            gene = self._gene(gene_id)
            protein.gene = gene
            gene.proteins.add(protein)

            protein.pan_gene_sets.add(pan_gene_set)
            gene.pan_gene_sets.add(pan_gene_set)
            pan_gene_set.proteins.add(protein)
            pan_gene_set.genes.add(gene)

            self.records_parsed += 1
