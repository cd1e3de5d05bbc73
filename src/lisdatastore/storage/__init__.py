"""Entity storage backends for datastore conversion runs."""

from .base import EntityStorage
from .duckdb_parquet import DuckDBParquetStorage
from .memory import InMemoryStorage

__all__ = ["DuckDBParquetStorage", "EntityStorage", "InMemoryStorage"]
