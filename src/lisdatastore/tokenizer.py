"""Line-level readers for datastore files.

``read_lines`` decodes a possibly gzipped file line by line;
``iter_tabular_lines`` classifies tab-separated lines per a ``FormatPolicy``;
``GFF3Record`` and ``VariantCall`` are minimal structured readers for the GFF3
and VCF conventions, producing only what converters consume.
"""

from __future__ import annotations

import gzip
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import unquote

from lisdatastore.config import FormatPolicy, RaggedLinePolicy
from lisdatastore.errors import ParseError

logger = logging.getLogger(__name__)


def read_lines(path: str | Path) -> Iterator[str]:
    """Yield the decoded lines of ``path``, decompressing ``*.gz`` transparently.

    Read and decoding failures surface as ``ParseError`` naming the file and,
    once reading has started, the line that could not be read.
    """

    path = Path(path)
    opener = gzip.open if path.suffix == ".gz" else open
    line_number = 0
    try:
        with opener(path, "rb") as stream:
            for line_number, raw in enumerate(stream, start=1):
                try:
                    yield raw.decode("utf-8")
                except UnicodeDecodeError as exc:
                    raise ParseError(
                        f"line is not valid UTF-8 ({exc.reason})",
                        file_name=path.name,
                        line_number=line_number,
                    ) from exc
    except (OSError, EOFError) as exc:
        raise ParseError(
            f"cannot read file: {exc}",
            file_name=path.name,
            line_number=line_number + 1 if line_number else None,
        ) from exc


@dataclass(frozen=True)
class TabularLine:
    """A header or data line with its 1-based line number."""

    line_number: int
    fields: tuple[str, ...]
    header_key: str | None = None

    @property
    def is_header(self) -> bool:
        return self.header_key is not None

    def get(self, index: int) -> str | None:
        """Return the stripped field at ``index``, or None when absent or empty."""

        if index >= len(self.fields):
            return None
        value = self.fields[index].strip()
        return value or None


def iter_tabular_lines(
    lines: Iterable[str],
    *,
    file_name: str,
    policy: FormatPolicy,
) -> Iterator[TabularLine]:
    """Classify tab-separated lines.

    Comment (``#``) and blank lines are dropped. Two-field lines whose first
    field is one of ``policy.header_keys`` are header lines. Lines whose field
    count the policy accepts are data lines. Anything else is skipped, or
    raises ``ParseError`` when the policy rejects ragged lines.
    """

    for line_number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if line.startswith("#") or not line.strip():
            continue

        fields = tuple(line.split("\t"))
        if len(fields) == 2 and fields[0] in policy.header_keys:
            yield TabularLine(line_number=line_number, fields=fields, header_key=fields[0])
            continue

        if policy.is_data_field_count(len(fields)):
            yield TabularLine(line_number=line_number, fields=fields)
            continue

        if policy.ragged_lines is RaggedLinePolicy.REJECT:
            raise ParseError(
                f"unexpected number of fields ({len(fields)})",
                file_name=file_name,
                line_number=line_number,
            )
        logger.debug("%s: skipping line %d with %d fields", file_name, line_number, len(fields))


@dataclass(frozen=True)
class GFF3Record:
    seqid: str
    source: str
    type: str
    start: int
    end: int
    score: str | None
    strand: str | None
    phase: str | None
    attributes: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_line(cls, line: str, *, file_name: str, line_number: int) -> "GFF3Record":
        columns = line.rstrip("\r\n").split("\t")
        if len(columns) != 9:
            raise ParseError(
                f"GFF3 record has {len(columns)} columns, expected 9",
                file_name=file_name,
                line_number=line_number,
            )
        try:
            start, end = int(columns[3]), int(columns[4])
        except ValueError as exc:
            raise ParseError(
                f"GFF3 record has a non-integer start/end ({columns[3]}, {columns[4]})",
                file_name=file_name,
                line_number=line_number,
            ) from exc

        return cls(
            seqid=columns[0],
            source=columns[1],
            type=columns[2],
            start=start,
            end=end,
            score=_dot_to_none(columns[5]),
            strand=_dot_to_none(columns[6]),
            phase=_dot_to_none(columns[7]),
            attributes=_parse_gff3_attributes(columns[8]),
        )

    def attribute(self, name: str) -> str | None:
        """First value of attribute ``name``, if present."""

        values = self.attributes.get(name)
        return values[0] if values else None

    @property
    def identifier(self) -> str | None:
        return self.attribute("ID")


def _parse_gff3_attributes(column: str) -> dict[str, list[str]]:
    attributes: dict[str, list[str]] = {}
    if column in ("", "."):
        return attributes
    for pair in column.split(";"):
        pair = pair.strip()
        if not pair or "=" not in pair:
            continue
        key, value = pair.split("=", 1)
        attributes[unquote(key)] = [unquote(item) for item in value.split(",")]
    return attributes


def _dot_to_none(value: str) -> str | None:
    value = value.strip()
    return None if value in ("", ".") else value


@dataclass(frozen=True)
class VCFHeader:
    """Sample names declared by the ``#CHROM`` line."""

    samples: tuple[str, ...]

    @classmethod
    def from_line(cls, line: str) -> "VCFHeader":
        columns = line.rstrip("\r\n").split("\t")
        # #CHROM POS ID REF ALT QUAL FILTER INFO [FORMAT sample...]
        return cls(samples=tuple(columns[9:]))


@dataclass(frozen=True)
class SampleCall:
    sample: str
    genotype: str | None
    likelihoods: str | None


@dataclass(frozen=True)
class VariantCall:
    contig: str
    start: int
    end: int
    identifier: str | None
    ref: str
    alt: str | None
    qual: float | None
    filters: tuple[str, ...]
    info: dict[str, str]
    calls: tuple[SampleCall, ...] = ()

    @property
    def info_text(self) -> str:
        """INFO map re-joined as ``key=value`` pairs separated by ``;``."""

        return ";".join(f"{key}={value}" if value else key for key, value in self.info.items())

    @property
    def filter_text(self) -> str | None:
        return ";".join(self.filters) or None

    @classmethod
    def from_line(
        cls,
        line: str,
        header: VCFHeader,
        *,
        file_name: str,
        line_number: int,
    ) -> "VariantCall":
        columns = line.rstrip("\r\n").split("\t")
        if len(columns) < 8:
            raise ParseError(
                f"VCF record has {len(columns)} columns, expected at least 8",
                file_name=file_name,
                line_number=line_number,
            )
        if header.samples and len(columns) != 9 + len(header.samples):
            raise ParseError(
                f"VCF record has {len(columns) - 9} sample columns, header declares {len(header.samples)}",
                file_name=file_name,
                line_number=line_number,
            )

        try:
            position = int(columns[1])
        except ValueError as exc:
            raise ParseError(
                f"VCF record has a non-integer position '{columns[1]}'",
                file_name=file_name,
                line_number=line_number,
            ) from exc

        ref = columns[3]
        alts = [] if columns[4] in ("", ".") else columns[4].split(",")
        qual_text = _dot_to_none(columns[5])
        try:
            qual = float(qual_text) if qual_text is not None else None
        except ValueError:
            logger.debug("%s:%d: unparseable QUAL '%s'", file_name, line_number, qual_text)
            qual = None

        filter_text = _dot_to_none(columns[6])
        filters = tuple(filter_text.split(";")) if filter_text else ()

        calls: tuple[SampleCall, ...] = ()
        if header.samples:
            format_keys = columns[8].split(":")
            alleles = [ref, *alts]
            calls = tuple(
                _sample_call(sample, format_keys, value, alleles)
                for sample, value in zip(header.samples, columns[9:])
            )

        return cls(
            contig=columns[0],
            start=position,
            end=position + max(len(ref), 1) - 1,
            identifier=_dot_to_none(columns[2]),
            ref=ref,
            alt=alts[0] if alts else None,
            qual=qual,
            filters=filters,
            info=_parse_info(columns[7]),
            calls=calls,
        )


def _parse_info(column: str) -> dict[str, str]:
    info: dict[str, str] = {}
    if column in ("", "."):
        return info
    for item in column.split(";"):
        if not item:
            continue
        key, _, value = item.partition("=")
        info[key] = value
    return info


def _sample_call(sample: str, format_keys: list[str], value: str, alleles: list[str]) -> SampleCall:
    data = dict(zip(format_keys, value.split(":")))
    likelihoods = data.get("PL") or data.get("GL")
    return SampleCall(
        sample=sample,
        genotype=_genotype_bases(data.get("GT"), alleles),
        likelihoods=None if likelihoods in (None, ".") else likelihoods,
    )


def _genotype_bases(gt: str | None, alleles: list[str]) -> str | None:
    """Translate allele indices (``0/1``) into bases (``A/G``)."""

    if gt is None or gt in (".", "./.", ".|."):
        return None
    separator = "|" if "|" in gt else "/"
    bases = []
    for index in gt.split(separator):
        if index == "." or not index.isdigit() or int(index) >= len(alleles):
            bases.append(".")
        else:
            bases.append(alleles[int(index)])
    return separator.join(bases)
