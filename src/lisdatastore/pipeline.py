"""Conversion run orchestrator."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from lisdatastore.converters.base import FileSetConverter
from lisdatastore.converters.common import expand_input_paths, find_readme
from lisdatastore.errors import ConversionError
from lisdatastore.storage.base import EntityStorage

logger = logging.getLogger(__name__)

ConverterFactory = Callable[[], FileSetConverter]


class RunStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class ConversionRunReport:
    """Execution summary for a conversion run."""

    converter: str
    status: RunStatus
    files_scanned: list[str] = field(default_factory=list)
    records_parsed: int = 0
    entity_counts: dict[str, int] = field(default_factory=dict)
    error: ConversionError | None = None

    @property
    def ok(self) -> bool:
        return self.status is RunStatus.SUCCEEDED

    def raise_for_error(self) -> None:
        """Re-raise the error that aborted the run, if any."""

        if self.error is not None:
            raise self.error

    def to_dict(self) -> dict[str, Any]:
        return {
            "converter": self.converter,
            "status": self.status.value,
            "files_scanned": list(self.files_scanned),
            "records_parsed": self.records_parsed,
            "entity_counts": dict(self.entity_counts),
            "error": str(self.error) if self.error is not None else None,
            "error_type": type(self.error).__name__ if self.error is not None else None,
        }


class ConversionPipeline:
    """Run one converter over a README and its data files, then emit to storage.

    Every ``run`` builds a fresh converter, so registries and context never
    leak between runs. A ``ConversionError`` anywhere aborts the run: the
    graph is discarded, storage is left untouched and the report carries the
    error.
    """

    def __init__(
        self,
        *,
        converter_factory: ConverterFactory,
        data_paths: Iterable[str | Path],
        readme_path: str | Path | None = None,
        storage: EntityStorage | None = None,
    ) -> None:
        self.converter_factory = converter_factory
        self.data_paths = [Path(path) for path in data_paths]
        self.readme_path = Path(readme_path) if readme_path is not None else None
        self.storage = storage

    @classmethod
    def for_collection(
        cls,
        converter_factory: ConverterFactory,
        collection_dir: str | Path,
        *,
        converter_cls: type[FileSetConverter],
        storage: EntityStorage | None = None,
    ) -> "ConversionPipeline":
        """Build a pipeline over a datastore collection directory.

        The README is the directory's ``README*.yml``; data files are the
        members ``converter_cls`` accepts.
        """

        return cls(
            converter_factory=converter_factory,
            data_paths=expand_input_paths(collection_dir, converter_cls.accepts),
            readme_path=find_readme(collection_dir),
            storage=storage,
        )

    def run(self) -> ConversionRunReport:
        converter = self.converter_factory()
        logger.info(
            "Starting %s run over %d file(s)%s",
            converter.name,
            len(self.data_paths),
            f" with {self.readme_path.name}" if self.readme_path else "",
        )

        try:
            if self.readme_path is not None:
                converter.load(self.readme_path)
            for path in self.data_paths:
                converter.scan(path)
            graph = converter.finalize()
            if self.storage is not None:
                entity_counts = converter.emit(self.storage)
            else:
                entity_counts = graph.counts()
        except ConversionError as exc:
            logger.error("%s run aborted: %s", converter.name, exc)
            return ConversionRunReport(
                converter=converter.name,
                status=RunStatus.FAILED,
                files_scanned=list(converter.files_scanned),
                records_parsed=converter.records_parsed,
                error=exc,
            )

        logger.info(
            "%s run finished: %d records from %d file(s), %d entities",
            converter.name,
            converter.records_parsed,
            len(converter.files_scanned),
            sum(entity_counts.values()),
        )
        return ConversionRunReport(
            converter=converter.name,
            status=RunStatus.SUCCEEDED,
            files_scanned=list(converter.files_scanned),
            records_parsed=converter.records_parsed,
            entity_counts=entity_counts,
        )
