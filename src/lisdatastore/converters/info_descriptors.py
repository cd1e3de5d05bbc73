"""Converter for gene description files (``*.info_descriptors.txt``).

Each line holds a gene identifier and a descriptor value::

    arahy.Tifrunner.gnm1.ann1.GU6A2U	RING finger protein 5-like [Glycine max]; IPR013083 (Zinc finger, RING/FYVE/PHD-type); GO:0005515 (protein binding)

The description lands on the gene; GO terms become ontology annotations of it.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from lisdatastore.config import INFO_DESCRIPTORS_POLICY
from lisdatastore.converters.base import FileSetConverter
from lisdatastore.converters.common import DescriptorValue
from lisdatastore.models import OntologyAnnotation, OntologyTerm
from lisdatastore.tokenizer import iter_tabular_lines


class InfoDescriptorsConverter(FileSetConverter):
    name = "info_descriptors"
    policy = INFO_DESCRIPTORS_POLICY

    def _scan_lines(self, lines: Iterable[str], path: Path) -> None:
        terms = self.graph.registry(OntologyTerm)
        annotations = self.graph.registry(OntologyAnnotation)

        for line in iter_tabular_lines(lines, file_name=path.name, policy=self.policy):
            gene_id = self._require(line, 0, "gene")
            value = DescriptorValue.parse(line.get(1) or "")

            gene = self._gene(gene_id)
            if value.description is not None:
                gene.description = value.description

            for term_id, term_name in value.go.items():
                term = terms.get_or_create(term_id)
                term.name = term_name
                term.ontology = "GO"
                annotation = annotations.get_or_create((gene, term))
                annotation.data_sets.add(self._current_data_set)

            self.records_parsed += 1
