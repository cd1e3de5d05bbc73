"""Base interface for all datastore file converters."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from contextlib import closing
from pathlib import Path
from typing import ClassVar

from lisdatastore.catalog import OrganismCatalog
from lisdatastore.config import DEFAULT_DATASTORE_URL, DataSourceConfig, FormatPolicy
from lisdatastore.context import RunContext, RunState, advance
from lisdatastore.errors import EmptyRunError, MissingMetadataError, ParseError, ValidationError
from lisdatastore.filenames import strip_compression_suffix
from lisdatastore.graph import EntityGraph
from lisdatastore.identifiers import derive_parent_identifier
from lisdatastore.models import DataSet, Gene, Protein
from lisdatastore.quality import ReferenceValidator
from lisdatastore.readme import ReadmeLoader, build_run_context
from lisdatastore.storage.base import EntityStorage
from lisdatastore.tokenizer import TabularLine, read_lines
from lisdatastore.wiring import ContextWiring

logger = logging.getLogger(__name__)


class FileSetConverter(ABC):
    """Convert the data files of one datastore collection into an entity graph.

    One instance is one run: ``load`` the README (when the format has one),
    ``scan`` each data file, ``finalize`` once, then ``emit`` to a storage sink.
    """

    name: ClassVar[str]
    policy: ClassVar[FormatPolicy]

    def __init__(
        self,
        *,
        catalog: OrganismCatalog | None = None,
        data_source: DataSourceConfig | None = None,
    ) -> None:
        self.catalog = catalog or OrganismCatalog()
        self.data_source = data_source
        self.graph = EntityGraph()
        self.state = RunState.INIT
        self.records_parsed = 0
        self.files_scanned: list[str] = []
        self.context: RunContext = build_run_context(
            self.graph, None, catalog=self.catalog, data_source=data_source
        )
        self._current_data_set: DataSet | None = None
        self._current_file: str | None = None

    @classmethod
    def accepts(cls, path: str | Path) -> bool:
        """Return True if ``path`` names a data file of this format."""

        return strip_compression_suffix(Path(path).name).endswith(cls.policy.suffix)

    def load(self, readme_path: str | Path) -> RunContext:
        """Parse the collection README and resolve the run context from it."""

        next_state = advance(self.state, RunState.METADATA_LOADED)
        readme = ReadmeLoader.for_policy(self.policy).load(readme_path)
        self.context = build_run_context(
            self.graph, readme, catalog=self.catalog, data_source=self.data_source
        )
        self.state = next_state
        return self.context

    def scan(self, path: str | Path) -> int:
        """Stream one data file into the graph; return the number of records parsed."""

        next_state = advance(self.state, RunState.DATA_SCANNED)
        path = Path(path)
        if not self.accepts(path):
            raise ParseError(
                f"not a {self.name} file (expected suffix {self.policy.suffix})",
                file_name=path.name,
            )

        before = self.records_parsed
        self._current_file = path.name
        self._current_data_set = self.context.data_set or self._file_data_set(path)
        with closing(read_lines(path)) as lines:
            self._scan_lines(lines, path)

        self.files_scanned.append(path.name)
        self.state = next_state
        parsed = self.records_parsed - before
        logger.info("%s: parsed %d records from %s", self.name, parsed, path.name)
        return parsed

    @abstractmethod
    def _scan_lines(self, lines: Iterable[str], path: Path) -> None:
        """Consume the lines of one data file, counting records in ``records_parsed``."""

    def finalize(self) -> EntityGraph:
        """Check run preconditions, wire shared context and validate references."""

        next_state = advance(self.state, RunState.FINALIZED)
        inputs = ", ".join(self.files_scanned) or None
        if self.policy.requires_readme and self.context.readme is None:
            raise MissingMetadataError(
                f"README file missing for {self.name} run. Aborting.", file_name=inputs
            )
        if self.records_parsed == 0:
            raise EmptyRunError(
                f"no {self.name} data records parsed from {len(self.files_scanned)} file(s)",
                file_name=inputs,
            )

        self._before_wiring()
        ContextWiring(self.context).wire(self.graph)
        ReferenceValidator().validate(self.graph, file_name=inputs)
        self.state = next_state
        return self.graph

    def _before_wiring(self) -> None:
        """Hook for derived attributes computed over the whole graph."""

    def emit(self, storage: EntityStorage) -> dict[str, int]:
        """Persist the finalized graph, one homogeneous batch per kind."""

        next_state = advance(self.state, RunState.EMITTED)
        counts: dict[str, int] = {}
        for entity_type, batch in self.graph.emission_batches():
            storage.persist(entity_type, batch)
            counts[entity_type] = len(batch)
        self.state = next_state
        return counts

    # Helpers for subclasses

    def _file_data_set(self, path: Path) -> DataSet:
        data_set = self.graph.registry(DataSet).get_or_create(path.name)
        data_set.description = data_set.description or "LIS datastore file."
        data_set.url = data_set.url or f"{DEFAULT_DATASTORE_URL}{path.parent.name}/{path.name}"
        data_set.data_source = self.context.data_source
        return data_set

    def _require(self, line: TabularLine, index: int, what: str) -> str:
        """Return field ``index`` of ``line``, raising if it is empty."""

        value = line.get(index)
        if value is None:
            raise ValidationError(
                f"empty {what} identifier",
                file_name=self._current_file,
                line_number=line.line_number,
            )
        return value

    def _parent_identifier(self, identifier: str, line_number: int) -> str:
        try:
            return derive_parent_identifier(identifier)
        except ValidationError as exc:
            raise ValidationError(
                exc.message, file_name=self._current_file, line_number=line_number
            ) from exc

    def _gene(self, identifier: str) -> Gene:
        gene = self.graph.registry(Gene).get_or_create(identifier)
        gene.data_sets.add(self._current_data_set)
        return gene

    def _protein(self, identifier: str) -> Protein:
        protein = self.graph.registry(Protein).get_or_create(identifier)
        protein.data_sets.add(self._current_data_set)
        return protein
