"""LIS datastore conversion primitives.

This package turns the flat files of a Legume Information System datastore
collection into a deduplicated, cross-referenced graph of biological
entities and hands it to a storage sink.
"""

from .catalog import OrganismCatalog, OrganismCatalogLoader, OrganismInfo
from .config import (
    DEFAULT_DATASET_LICENCE,
    DEFAULT_GENE_FAMILY_VERSION,
    DataSourceConfig,
    FormatPolicy,
    RaggedLinePolicy,
    VersionMismatchPolicy,
)
from .context import RunContext, RunState
from .converters import FileSetConverter
from .errors import (
    ConversionError,
    EmptyRunError,
    MissingMetadataError,
    ParseError,
    ReferenceResolutionError,
    RunStateError,
    UnsupportedRecordType,
    ValidationError,
)
from .filenames import FileNameParts, decompose_filename
from .graph import EntityGraph, EntityRegistry
from .identifiers import derive_parent_identifier
from .pipeline import ConversionPipeline, ConversionRunReport, RunStatus
from .readme import Readme, ReadmeLoader, build_run_context
from .registry import ConverterPluginSpec, ConverterRegistry, build_default_converter_registry

__all__ = [
    "ConversionError",
    "ConversionPipeline",
    "ConversionRunReport",
    "ConverterPluginSpec",
    "ConverterRegistry",
    "DEFAULT_DATASET_LICENCE",
    "DEFAULT_GENE_FAMILY_VERSION",
    "DataSourceConfig",
    "EmptyRunError",
    "EntityGraph",
    "EntityRegistry",
    "FileNameParts",
    "FileSetConverter",
    "FormatPolicy",
    "MissingMetadataError",
    "OrganismCatalog",
    "OrganismCatalogLoader",
    "OrganismInfo",
    "ParseError",
    "RaggedLinePolicy",
    "Readme",
    "ReadmeLoader",
    "ReferenceResolutionError",
    "RunContext",
    "RunState",
    "RunStateError",
    "RunStatus",
    "UnsupportedRecordType",
    "ValidationError",
    "VersionMismatchPolicy",
    "build_default_converter_registry",
    "build_run_context",
    "decompose_filename",
    "derive_parent_identifier",
]
