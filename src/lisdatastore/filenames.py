"""Structured datastore file name decomposition."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from lisdatastore.config import FormatPolicy, VersionMismatchPolicy
from lisdatastore.errors import ParseError

logger = logging.getLogger(__name__)

_COMPRESSION_SUFFIXES = (".gz",)


@dataclass(frozen=True)
class FileNameParts:
    """Tokens of a dot-separated datastore file name.

    ``phalu.G27455.gnm1.ann1.JD7C.legfed_v1_0.M65K.gfa.tsv`` decomposes to
    nine tokens: organism code, strain, assembly, annotation, collection key,
    gene family version, family key, then the format suffix tokens.
    """

    name: str
    tokens: tuple[str, ...]
    version: str | None = None
    key4: str | None = None

    @property
    def gensp(self) -> str | None:
        return self.tokens[0] if self.tokens else None

    @property
    def strain(self) -> str | None:
        return self.tokens[1] if len(self.tokens) > 1 else None

    @property
    def assembly_version(self) -> str | None:
        if len(self.tokens) > 2 and self.tokens[2].startswith("gnm"):
            return self.tokens[2]
        return None

    @property
    def annotation_version(self) -> str | None:
        if len(self.tokens) > 3 and self.tokens[3].startswith("ann"):
            return self.tokens[3]
        return None


def strip_compression_suffix(name: str) -> str:
    for suffix in _COMPRESSION_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def decompose_filename(file_name: str | Path, policy: FormatPolicy) -> FileNameParts:
    """Split ``file_name`` on dots and resolve its version per ``policy``.

    A token count that differs from ``policy.expected_tokens`` either logs a
    warning and falls back to ``policy.default_version`` or raises
    :class:`ParseError`, depending on ``policy.version_mismatch``.
    """

    name = Path(file_name).name
    tokens = tuple(strip_compression_suffix(name).split("."))

    key4 = None
    if policy.key4_index is not None and policy.key4_index < len(tokens):
        key4 = tokens[policy.key4_index]

    if policy.expected_tokens is None or len(tokens) == policy.expected_tokens:
        version = tokens[policy.version_index] if policy.version_index is not None else None
        return FileNameParts(name=name, tokens=tokens, version=version, key4=key4)

    message = (
        f"file name does not have the required {policy.expected_tokens} "
        f"dot-separated parts (found {len(tokens)})"
    )
    if policy.version_mismatch is VersionMismatchPolicy.REJECT:
        raise ParseError(message, file_name=name)

    logger.warning("%s: %s; using default version %s", name, message, policy.default_version)
    return FileNameParts(name=name, tokens=tokens, version=policy.default_version, key4=key4)
