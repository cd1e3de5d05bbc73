"""Shared utilities for datastore file converters."""

from __future__ import annotations

import glob
import os
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_INTERPRO_RE = re.compile(r"(IPR\d{6})\s*\(([^)]*)\)")
_GO_RE = re.compile(r"(GO:\d{7})\s*\(([^)]*)\)")


def expand_input_paths(
    input_paths: str | Path | Iterable[str | Path],
    accepts: Callable[[Path], bool],
) -> list[Path]:
    """Expand file, directory, or glob inputs into concrete data file paths.

    Explicit files are kept as given; directory members and glob matches are
    filtered through ``accepts``.
    """

    if isinstance(input_paths, (str, Path)):
        items: list[str | Path] = [input_paths]
    else:
        items = list(input_paths)

    resolved: list[Path] = []
    for item in items:
        expanded_item = os.path.expandvars(os.path.expanduser(str(item)))
        item_path = Path(expanded_item)

        if item_path.is_dir():
            resolved.extend(
                sorted(path for path in item_path.iterdir() if path.is_file() and accepts(path))
            )
            continue

        if item_path.exists():
            resolved.append(item_path)
            continue

        matches = [Path(path) for path in glob.glob(expanded_item)]
        resolved.extend(sorted(match for match in matches if accepts(match)))

    return resolved


def find_readme(directory: str | Path) -> Path | None:
    """Return the ``README.*.yml`` of a datastore collection directory, if any."""

    candidates = sorted(Path(directory).glob("README*.yml"))
    return candidates[0] if candidates else None


def to_float(value: Any) -> float | None:
    if value is None:
        return None

    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class DescriptorValue:
    """Parsed ``description; IPR... (name), ...; GO:... (name), ...`` text.

    Names may contain commas; each runs up to its closing parenthesis.
    """

    description: str | None
    interpro: dict[str, str] = field(default_factory=dict)
    go: dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, text: str) -> "DescriptorValue":
        parts = text.strip().split("; ")
        description = parts[0].strip() or None
        interpro: dict[str, str] = {}
        go: dict[str, str] = {}
        for part in parts[1:]:
            for match in _INTERPRO_RE.finditer(part):
                interpro[match.group(1)] = match.group(2).strip()
            for match in _GO_RE.finditer(part):
                go[match.group(1)] = match.group(2).strip()
        return cls(description=description, interpro=interpro, go=go)
