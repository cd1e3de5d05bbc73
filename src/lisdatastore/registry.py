"""Converter registry selecting a per-format strategy by name or file suffix."""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from lisdatastore.converters import (
    FileSetConverter,
    GeneFamilyAssignmentConverter,
    GeneFamilyDescriptionConverter,
    GeneInfoAnnotationConverter,
    GenotypingVCFConverter,
    InfoDescriptorsConverter,
    InterProScanGFFConverter,
    PanGeneClusterConverter,
    PanGeneHashConverter,
    PathwayConverter,
    PhenotypeConverter,
)
from lisdatastore.filenames import strip_compression_suffix


@dataclass(frozen=True)
class ConverterPluginSpec:
    """Spec describing a dynamically imported converter implementation."""

    name: str
    module: str
    class_name: str


class ConverterRegistry:
    """Registry that maps stable converter names to converter classes."""

    def __init__(self) -> None:
        self._factories: dict[str, type[FileSetConverter]] = {}

    def register(self, name: str, factory: type[FileSetConverter]) -> None:
        """Register a converter class under a unique name."""

        key = name.strip().lower()
        if not key:
            raise ValueError("Converter name cannot be empty")
        if key in self._factories:
            raise ValueError(f"Converter already registered: {name}")
        self._factories[key] = factory

    def register_plugin(self, plugin: ConverterPluginSpec) -> None:
        """Register a converter by importing a module/class at runtime."""

        module = importlib.import_module(plugin.module)
        converter_cls = getattr(module, plugin.class_name)
        self.register(plugin.name, converter_cls)

    def get(self, name: str) -> type[FileSetConverter]:
        key = name.strip().lower()
        if key not in self._factories:
            raise KeyError(
                f"Unknown converter '{name}'. Available: {', '.join(self.available())}"
            )
        return self._factories[key]

    def create(self, name: str, **kwargs: Any) -> FileSetConverter:
        """Instantiate a fresh converter (a new run) by name."""

        return self.get(name)(**kwargs)

    def for_file(self, file_name: str | Path) -> str:
        """Return the name of the converter whose suffix matches ``file_name``.

        The longest matching suffix wins.
        """

        stripped = strip_compression_suffix(Path(file_name).name)
        matches = [
            (len(factory.policy.suffix), key)
            for key, factory in self._factories.items()
            if stripped.endswith(factory.policy.suffix)
        ]
        if not matches:
            raise KeyError(
                f"No converter handles '{Path(file_name).name}'. Available: {', '.join(self.available())}"
            )
        return max(matches)[1]

    def available(self) -> list[str]:
        """Return sorted list of known converter names."""

        return sorted(self._factories.keys())


def build_default_converter_registry() -> ConverterRegistry:
    """Create a registry preloaded with the built-in datastore converters."""

    registry = ConverterRegistry()
    for converter_cls in (
        GeneFamilyAssignmentConverter,
        PanGeneHashConverter,
        PathwayConverter,
        PhenotypeConverter,
        InterProScanGFFConverter,
        GenotypingVCFConverter,
        InfoDescriptorsConverter,
        GeneFamilyDescriptionConverter,
        GeneInfoAnnotationConverter,
        PanGeneClusterConverter,
    ):
        registry.register(converter_cls.name, converter_cls)
    return registry
