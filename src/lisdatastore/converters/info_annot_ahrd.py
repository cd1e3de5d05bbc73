"""Converter for gene family AHRD description files (``*.info_annot_ahrd.tsv``).

The first column is a versioned gene family identifier, e.g.
``legfed_v1_0.L_QQS5LC`` (version ``legfed_v1_0``); a ``-consensus`` suffix is
dropped. The second column is a descriptor value whose InterPro entries become
protein domains of the family and whose GO terms become its annotations.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from lisdatastore.config import INFO_ANNOT_AHRD_POLICY
from lisdatastore.converters.base import FileSetConverter
from lisdatastore.converters.common import DescriptorValue
from lisdatastore.models import GeneFamily, OntologyAnnotation, OntologyTerm, ProteinDomain
from lisdatastore.tokenizer import iter_tabular_lines

CONSENSUS_SUFFIX = "-consensus"


class GeneFamilyDescriptionConverter(FileSetConverter):
    name = "info_annot_ahrd"
    policy = INFO_ANNOT_AHRD_POLICY

    def _scan_lines(self, lines: Iterable[str], path: Path) -> None:
        families = self.graph.registry(GeneFamily)
        domains = self.graph.registry(ProteinDomain)
        terms = self.graph.registry(OntologyTerm)
        annotations = self.graph.registry(OntologyAnnotation)

        for line in iter_tabular_lines(lines, file_name=path.name, policy=self.policy):
            raw_id = self._require(line, 0, "gene family")
            family_id = raw_id.replace(CONSENSUS_SUFFIX, "")
            value = DescriptorValue.parse(line.get(1) or "")

            family = families.get_or_create(family_id)
            family.version = family_id.split(".")[0] if "." in family_id else None
            if value.description is not None:
                family.description = value.description
            family.data_sets.add(self._current_data_set)

            for domain_id, domain_name in value.interpro.items():
                domain = domains.get_or_create(domain_id)
                domain.description = domain_name
                domain.gene_families.add(family)
                domain.data_sets.add(self._current_data_set)
                family.protein_domains.add(domain)

            for term_id, term_name in value.go.items():
                term = terms.get_or_create(term_id)
                term.name = term_name
                term.ontology = "GO"
                annotation = annotations.get_or_create((family, term))
                annotation.data_sets.add(self._current_data_set)

            self.records_parsed += 1
