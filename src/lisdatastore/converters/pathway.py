"""Converter for gene-pathway association files (``*pathway.tsv``).

Three columns: pathway identifier, pathway name, gene identifier. Two-column
lines are summary rows and are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from lisdatastore.config import PATHWAY_POLICY
from lisdatastore.converters.base import FileSetConverter
from lisdatastore.models import Pathway
from lisdatastore.tokenizer import iter_tabular_lines


class PathwayConverter(FileSetConverter):
    name = "pathway"
    policy = PATHWAY_POLICY

    def _scan_lines(self, lines: Iterable[str], path: Path) -> None:
        pathways = self.graph.registry(Pathway)

        for line in iter_tabular_lines(lines, file_name=path.name, policy=self.policy):
            pathway_id = self._require(line, 0, "pathway")
            gene_id = self._require(line, 2, "gene")

            pathway = pathways.get_or_create(pathway_id)
            name = line.get(1)
            if name is not None:
                pathway.name = name
            pathway.data_sets.add(self._current_data_set)

            gene = self._gene(gene_id)
            gene.pathways.add(pathway)

            self.records_parsed += 1
