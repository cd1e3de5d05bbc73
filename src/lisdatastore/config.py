"""Configuration contracts for datastore converters."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


DEFAULT_DATASOURCE_NAME = "Legume Information System"
DEFAULT_DATASOURCE_URL = "https://legumeinfo.org/"
DEFAULT_DATASOURCE_DESCRIPTION = (
    "LIS is a genomic data portal (GDP) for the legume family. "
    "LIS is hosted at the USDA-ARS SCINet high performance computing cluster at Ames, Iowa."
)
DEFAULT_DATASTORE_URL = "https://data.legumeinfo.org/"
DEFAULT_DATASET_LICENCE = "ODC Public Domain Dedication and Licence (PDDL)"

# Gene family set most datastore gfa.tsv files are computed against.
DEFAULT_GENE_FAMILY_VERSION = "legfed_v1_0"


class VersionMismatchPolicy(str, Enum):
    """What to do when a file name has the wrong number of dot-separated tokens."""

    WARN_DEFAULT = "warn_default"
    REJECT = "reject"


class RaggedLinePolicy(str, Enum):
    """What to do with a line whose field count is neither header nor data."""

    SKIP = "skip"
    REJECT = "reject"


@dataclass(frozen=True)
class FormatPolicy:
    """File name and line-shape conventions of one datastore format.

    ``expected_tokens`` of ``None`` means the file name is decomposed without a
    token count check. A line is a data line when its field count is greater
    than ``data_threshold`` and, if ``max_data_fields`` is set, not greater
    than it.
    """

    suffix: str
    expected_tokens: int | None = None
    version_index: int | None = None
    version_mismatch: VersionMismatchPolicy = VersionMismatchPolicy.WARN_DEFAULT
    default_version: str | None = None
    key4_index: int | None = None
    data_threshold: int = 1
    max_data_fields: int | None = None
    header_keys: frozenset[str] = frozenset()
    ragged_lines: RaggedLinePolicy = RaggedLinePolicy.SKIP
    requires_readme: bool = False
    required_readme_keys: tuple[str, ...] = ("identifier",)

    def is_data_field_count(self, count: int) -> bool:
        """Return True if a line with ``count`` fields is a data line."""

        if count <= self.data_threshold:
            return False
        return self.max_data_fields is None or count <= self.max_data_fields


@dataclass(frozen=True)
class DataSourceConfig:
    """The single DataSource every run hangs its DataSets from."""

    name: str = DEFAULT_DATASOURCE_NAME
    url: str | None = DEFAULT_DATASOURCE_URL
    description: str | None = DEFAULT_DATASOURCE_DESCRIPTION

    @classmethod
    def from_mapping(cls, payload: dict[str, str] | None) -> "DataSourceConfig":
        """Build from a config block; LIS url/description apply only to the LIS name."""

        if not payload:
            return cls()

        name = str(payload.get("name") or DEFAULT_DATASOURCE_NAME).strip()
        if name == DEFAULT_DATASOURCE_NAME:
            return cls(
                name=name,
                url=payload.get("url") or DEFAULT_DATASOURCE_URL,
                description=payload.get("description") or DEFAULT_DATASOURCE_DESCRIPTION,
            )
        return cls(name=name, url=payload.get("url"), description=payload.get("description"))


GFA_POLICY = FormatPolicy(
    suffix=".gfa.tsv",
    expected_tokens=9,
    version_index=5,
    key4_index=4,
    version_mismatch=VersionMismatchPolicy.WARN_DEFAULT,
    default_version=DEFAULT_GENE_FAMILY_VERSION,
    data_threshold=2,
    header_keys=frozenset({"ScoreMeaning"}),
)

HSH_POLICY = FormatPolicy(
    suffix=".hsh.tsv",
    expected_tokens=6,
    version_index=2,
    key4_index=3,
    version_mismatch=VersionMismatchPolicy.REJECT,
    data_threshold=1,
    max_data_fields=2,
    ragged_lines=RaggedLinePolicy.REJECT,
)

PATHWAY_POLICY = FormatPolicy(
    suffix="pathway.tsv",
    data_threshold=2,
    max_data_fields=3,
    requires_readme=True,
    required_readme_keys=("identifier", "taxid", "genotype"),
)

PHENOTYPE_POLICY = FormatPolicy(
    suffix="phenotype.tsv",
    data_threshold=1,
)

IPRSCAN_POLICY = FormatPolicy(
    suffix="iprscan.gff3",
    requires_readme=True,
    required_readme_keys=("identifier", "taxid", "genotype"),
)

GT_VCF_POLICY = FormatPolicy(
    suffix=".vcf",
    key4_index=4,
    requires_readme=True,
    required_readme_keys=("identifier", "subject", "description", "taxid"),
)

INFO_DESCRIPTORS_POLICY = FormatPolicy(
    suffix=".info_descriptors.txt",
    data_threshold=1,
)

INFO_ANNOT_AHRD_POLICY = FormatPolicy(
    suffix=".info_annot_ahrd.tsv",
    data_threshold=1,
)

PANGENE_POLICY = FormatPolicy(
    suffix=".clust.tsv",
    data_threshold=1,
    requires_readme=True,
    required_readme_keys=("identifier", "description"),
)

INFO_ANNOT_POLICY = FormatPolicy(
    suffix=".info_annot.txt",
    expected_tokens=7,
    key4_index=4,
    version_mismatch=VersionMismatchPolicy.REJECT,
    data_threshold=3,
)
