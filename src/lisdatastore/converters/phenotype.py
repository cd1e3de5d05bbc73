"""Converter for phenotype-to-ontology files (``*phenotype.tsv``)."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from lisdatastore.config import PHENOTYPE_POLICY
from lisdatastore.converters.base import FileSetConverter
from lisdatastore.models import OntologyAnnotation, OntologyTerm, Phenotype
from lisdatastore.tokenizer import iter_tabular_lines


class PhenotypeConverter(FileSetConverter):
    name = "phenotype"
    policy = PHENOTYPE_POLICY

    def _scan_lines(self, lines: Iterable[str], path: Path) -> None:
        phenotypes = self.graph.registry(Phenotype)
        terms = self.graph.registry(OntologyTerm)
        annotations = self.graph.registry(OntologyAnnotation)

        for line in iter_tabular_lines(lines, file_name=path.name, policy=self.policy):
            phenotype_id = self._require(line, 0, "phenotype")
            term_id = self._require(line, 1, "ontology term")

            phenotype = phenotypes.get_or_create(phenotype_id)
            phenotype.data_sets.add(self._current_data_set)
            term = terms.get_or_create(term_id)

            annotation = annotations.get_or_create((phenotype, term))
            annotation.data_sets.add(self._current_data_set)

            self.records_parsed += 1
