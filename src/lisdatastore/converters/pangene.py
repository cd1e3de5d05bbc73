"""Converter for pan-gene cluster files (``*.clust.tsv`` / ``*.clust.tsv.gz``).

Each row is a pan-gene set identifier followed by any number of member
protein identifiers, possibly from several organisms::

    Cicer.pan1.pan00001	cicar.CDCFrontier.gnm3.ann1.Ca2g036100.1	cicar.ICC4958.gnm2.ann1.Ca_06696.1
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from lisdatastore.config import PANGENE_POLICY
from lisdatastore.converters.base import FileSetConverter
from lisdatastore.models import PanGeneSet
from lisdatastore.tokenizer import iter_tabular_lines

logger = logging.getLogger(__name__)


class PanGeneClusterConverter(FileSetConverter):
    name = "pangene"
    policy = PANGENE_POLICY

    def _scan_lines(self, lines: Iterable[str], path: Path) -> None:
        pan_gene_sets = self.graph.registry(PanGeneSet)
        version = self.context.readme.identifier if self.context.readme else None

        for line in iter_tabular_lines(lines, file_name=path.name, policy=self.policy):
            set_id = self._require(line, 0, "pan-gene set")
            pan_gene_set = pan_gene_sets.get_or_create(set_id)
            pan_gene_set.version = version
            pan_gene_set.data_sets.add(self._current_data_set)
            if self.context.readme is not None:
                pan_gene_set.description = self.context.readme.description

            for index in range(1, len(line.fields)):
                protein_id = line.get(index)
                if protein_id is None:
                    logger.debug("%s:%d: skipping empty member column %d", path.name, line.line_number, index)
                    continue

                protein = self._protein(protein_id)
                gene = self._gene(self._parent_identifier(protein_id, line.line_number))
                protein.gene = gene
                gene.proteins.add(protein)

                protein.pan_gene_sets.add(pan_gene_set)
                gene.pan_gene_sets.add(pan_gene_set)
                pan_gene_set.proteins.add(protein)
                pan_gene_set.genes.add(gene)

            self.records_parsed += 1
