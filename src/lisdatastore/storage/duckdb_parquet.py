"""DuckDB + Parquet storage backend for entity batches."""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from lisdatastore.models import Entity
from lisdatastore.storage.base import EntityStorage

try:
    import duckdb
except ImportError:  # pragma: no cover - exercised only when dependency missing
    duckdb = None


_TABLE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def table_name_for(entity_type: str, prefix: str = "") -> str:
    """``GeneFamily`` -> ``gene_family`` (with an optional prefix)."""

    return prefix + _CAMEL_RE.sub("_", entity_type).lower()


class DuckDBParquetStorage(EntityStorage):
    """Persist each entity kind as a DuckDB table and a Parquet file."""

    def __init__(
        self,
        *,
        db_path: str | Path,
        parquet_dir: str | Path,
        table_prefix: str = "",
    ) -> None:
        if table_prefix and not _TABLE_RE.match(table_prefix):
            raise ValueError(f"Unsafe table prefix: {table_prefix}")

        self.db_path = Path(db_path)
        self.parquet_dir = Path(parquet_dir)
        self.table_prefix = table_prefix

    def persist(self, entity_type: str, entities: Sequence[Entity]) -> None:
        if not entities:
            return

        table_name = table_name_for(entity_type, self.table_prefix)
        if not _TABLE_RE.match(table_name):
            raise ValueError(f"Unsafe table name: {table_name}")

        if duckdb is None:
            raise RuntimeError(
                "duckdb is not installed. Add it to requirements before running datastore storage."
            )

        frame = self._to_frame(entities)

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.parquet_dir.mkdir(parents=True, exist_ok=True)
        parquet_path = self.parquet_dir / f"{table_name}.parquet"

        connection = duckdb.connect(str(self.db_path))
        try:
            connection.register("entity_frame", frame)
            connection.execute(
                f"CREATE OR REPLACE TABLE {table_name} AS SELECT * FROM entity_frame"
            )

            if parquet_path.exists():
                parquet_path.unlink()

            parquet_target = parquet_path.as_posix().replace("'", "''")
            connection.execute(f"COPY {table_name} TO '{parquet_target}' (FORMAT PARQUET)")
        finally:
            connection.close()

    @staticmethod
    def _to_frame(entities: Sequence[Entity]) -> pd.DataFrame:
        frame = pd.DataFrame([entity.to_row() for entity in entities])
        for column in frame.columns:
            if frame[column].map(lambda value: isinstance(value, (list, dict))).any():
                frame[column] = frame[column].map(lambda payload: json.dumps(payload, sort_keys=True))
            elif frame[column].isna().all():
                frame[column] = frame[column].astype("string")
        return frame
