#!/usr/bin/env python3
"""Run a datastore conversion from a JSON config via the converter registry."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from functools import partial
from pathlib import Path
from typing import Any

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from lisdatastore import (  # noqa: E402
    ConversionPipeline,
    ConverterPluginSpec,
    DataSourceConfig,
    OrganismCatalogLoader,
    build_default_converter_registry,
)
from lisdatastore.converters.common import expand_input_paths, find_readme  # noqa: E402
from lisdatastore.storage import DuckDBParquetStorage, InMemoryStorage  # noqa: E402

logger = logging.getLogger("run_conversion")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Convert a LIS datastore collection from JSON config")
    parser.add_argument("--config", required=True, help="Path to conversion JSON config")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    return parser.parse_args(argv)


def load_json(path: str | Path) -> dict[str, Any]:
    return json.loads(Path(path).read_text())


def build_storage(config: dict[str, Any]) -> Any:
    storage_config = config.get("storage")
    if not storage_config:
        return None

    storage_type = str(storage_config.get("type", "")).strip().lower()
    params = dict(storage_config.get("params", {}))

    if storage_type == "duckdb_parquet":
        return DuckDBParquetStorage(**params)
    if storage_type == "memory":
        return InMemoryStorage()

    raise ValueError(f"Unknown storage type: {storage_type}")


def build_registry(config: dict[str, Any]) -> Any:
    registry = build_default_converter_registry()
    for plugin_raw in config.get("plugins", []):
        registry.register_plugin(
            ConverterPluginSpec(
                name=plugin_raw["name"],
                module=plugin_raw["module"],
                class_name=plugin_raw["class_name"],
            )
        )
    return registry


def resolve_inputs(config: dict[str, Any], registry: Any) -> tuple[str, Path | None, list[Path]]:
    """Return ``(converter name, README path, data paths)`` from the config."""

    collection_dir = config.get("collection_dir")
    raw_paths = config.get("data_paths", [])

    converter_name = config.get("converter")
    if not converter_name:
        candidates = list(raw_paths)
        if not candidates and collection_dir:
            candidates = [path.name for path in sorted(Path(collection_dir).iterdir()) if path.is_file()]
        for candidate in candidates:
            try:
                converter_name = registry.for_file(candidate)
                break
            except KeyError:
                continue
        if not converter_name:
            raise ValueError("No converter configured and none matches the input files. Set 'converter'.")

    converter_cls = registry.get(converter_name)
    inputs = raw_paths or ([collection_dir] if collection_dir else [])
    data_paths = expand_input_paths(inputs, converter_cls.accepts)

    readme = config.get("readme")
    if readme is None and collection_dir:
        readme = find_readme(collection_dir)
    return converter_name, Path(readme) if readme else None, data_paths


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = load_json(args.config)

    registry = build_registry(config)
    converter_name, readme_path, data_paths = resolve_inputs(config, registry)
    if not data_paths:
        raise ValueError("No data files found. Set data_paths[] and/or collection_dir.")

    catalog_loader = OrganismCatalogLoader(config.get("config_dir"))
    catalog = catalog_loader.load(config.get("organism_catalog", "organisms"))
    data_source = DataSourceConfig.from_mapping(config.get("data_source"))

    logger.info("Converting %d %s file(s)", len(data_paths), converter_name)
    report = ConversionPipeline(
        converter_factory=partial(
            registry.create, converter_name, catalog=catalog, data_source=data_source
        ),
        data_paths=data_paths,
        readme_path=readme_path,
        storage=build_storage(config),
    ).run()

    print(json.dumps(report.to_dict(), indent=2))
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
