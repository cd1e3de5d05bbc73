"""Converter for InterProScan protein match files (``*iprscan.gff3``).

Column 1 is the protein, column 3 either ``protein_match`` or
``protein_hmm_match``; any other record type aborts the run. Attributes
supply the match identifier (``ID``), accession (``Name``), ``status``,
``date``, ``Target`` and ``signature_desc``.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from lisdatastore.config import IPRSCAN_POLICY
from lisdatastore.converters.base import FileSetConverter
from lisdatastore.errors import UnsupportedRecordType, ValidationError
from lisdatastore.models import Location, ProteinHmmMatch, ProteinMatch
from lisdatastore.tokenizer import GFF3Record

MATCH_TYPES: dict[str, type[ProteinMatch]] = {
    "protein_match": ProteinMatch,
    "protein_hmm_match": ProteinHmmMatch,
}


class InterProScanGFFConverter(FileSetConverter):
    name = "iprscan"
    policy = IPRSCAN_POLICY

    def _scan_lines(self, lines: Iterable[str], path: Path) -> None:
        locations = self.graph.registry(Location)

        for line_number, raw in enumerate(lines, start=1):
            if raw.startswith("##FASTA"):
                break
            if raw.startswith("#") or not raw.strip():
                continue

            record = GFF3Record.from_line(raw, file_name=path.name, line_number=line_number)
            match_type = MATCH_TYPES.get(record.type)
            if match_type is None:
                raise UnsupportedRecordType(
                    f"GFF record type {record.type} is not supported by the {self.name} converter",
                    file_name=path.name,
                    line_number=line_number,
                )
            if not record.seqid.strip():
                raise ValidationError("empty protein identifier", file_name=path.name, line_number=line_number)
            if not record.identifier:
                raise ValidationError("empty match identifier", file_name=path.name, line_number=line_number)

            protein = self._protein(record.seqid.strip())
            match = self.graph.registry(match_type).get_or_create(record.identifier)
            match.protein = protein
            match.source = record.source
            match.accession = record.attribute("Name")
            match.status = record.attribute("status")
            match.date = record.attribute("date")
            match.target = record.attribute("Target")
            match.signature_desc = record.attribute("signature_desc")
            match.data_sets.add(self._current_data_set)

            if match_type is ProteinHmmMatch:
                protein.protein_hmm_matches.add(match)
            else:
                protein.protein_matches.add(match)

            location = locations.get_or_create((match, protein, record.start, record.end))
            location.data_sets.add(self._current_data_set)
            match.location = location

            self.records_parsed += 1
