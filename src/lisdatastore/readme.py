"""README metadata records and run-context resolution.

Every datastore collection ships a YAML ``README.<collection>.yml`` describing
its provenance. Converters that require one refuse to finalize without it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml
from jsonschema import FormatChecker
from jsonschema.validators import validator_for

from lisdatastore.catalog import OrganismCatalog, OrganismInfo
from lisdatastore.config import DEFAULT_DATASET_LICENCE, DataSourceConfig, FormatPolicy
from lisdatastore.context import RunContext, register_organism, register_strain
from lisdatastore.errors import MissingMetadataError, ParseError
from lisdatastore.graph import EntityGraph
from lisdatastore.identifiers import gensp_for, split_scientific_name
from lisdatastore.models import DataSet, DataSource, Publication

logger = logging.getLogger(__name__)

JSON_SCHEMA_DRAFT = "https://json-schema.org/draft/2020-12/schema"


@dataclass
class Readme:
    """Parsed README fields; unknown keys are kept in ``extra``."""

    identifier: str | None = None
    provenance: str | None = None
    source: str | None = None
    subject: str | None = None
    related_to: str | None = None
    scientific_name: str | None = None
    taxid: str | None = None
    bioproject: str | None = None
    scientific_name_abbrev: str | None = None
    genotype: list[str] = field(default_factory=list)
    description: str | None = None
    dataset_doi: str | None = None
    genbank_accession: str | None = None
    original_file_creation_date: str | None = None
    local_file_creation_date: str | None = None
    publication_doi: str | None = None
    dataset_release_date: str | None = None
    publication_title: str | None = None
    contributors: str | None = None
    data_curators: str | None = None
    public_access_level: str | None = None
    license: str | None = None
    keywords: str | None = None
    citations: str | None = None
    file_transformation: str | None = None
    changes: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, payload: dict[str, Any]) -> "Readme":
        known = {item.name for item in fields(cls)} - {"extra", "genotype"}
        values: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in payload.items():
            if key in known:
                values[key] = _as_text(value)
            elif key != "genotype":
                extra[key] = value

        genotype = payload.get("genotype")
        if isinstance(genotype, list):
            values["genotype"] = [str(item).strip() for item in genotype if str(item).strip()]
        elif genotype is not None and str(genotype).strip():
            values["genotype"] = [str(genotype).strip()]

        return cls(**values, extra=extra)

    @property
    def single_genotype(self) -> str | None:
        """The strain name when the README names exactly one genotype."""

        return self.genotype[0] if len(self.genotype) == 1 else None


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, list):
        value = ", ".join(str(item) for item in value)
    text = str(value).strip()
    return text or None


def build_readme_schema(required_keys: tuple[str, ...]) -> dict[str, Any]:
    """JSON Schema asserting that ``required_keys`` are present and non-empty."""

    properties: dict[str, Any] = {}
    for key in required_keys:
        if key == "genotype":
            properties[key] = {
                "anyOf": [
                    {"type": "string", "minLength": 1},
                    {"type": "array", "items": {"type": "string"}, "minItems": 1},
                ]
            }
        elif key == "taxid":
            properties[key] = {"type": ["string", "integer"], "minLength": 1}
        else:
            properties[key] = {"type": "string", "minLength": 1}

    return {
        "$schema": JSON_SCHEMA_DRAFT,
        "type": "object",
        "required": list(required_keys),
        "properties": properties,
    }


class ReadmeLoader:
    """Parse a YAML README and validate the keys a format declares mandatory."""

    def __init__(self, required_keys: tuple[str, ...] = ("identifier",)) -> None:
        self.required_keys = required_keys
        self.schema = build_readme_schema(required_keys)
        validator_cls = validator_for(self.schema)
        validator_cls.check_schema(self.schema)
        self._validator = validator_cls(self.schema, format_checker=FormatChecker())

    @classmethod
    def for_policy(cls, policy: FormatPolicy) -> "ReadmeLoader":
        return cls(policy.required_readme_keys)

    def read_mapping(self, path: str | Path) -> dict[str, Any]:
        """Return the README's raw YAML mapping without validating it."""

        path = Path(path)
        if not path.exists():
            raise MissingMetadataError("README file missing", file_name=path.name)
        try:
            payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ParseError(f"README is not valid YAML: {exc}", file_name=path.name) from exc
        if not isinstance(payload, dict):
            raise MissingMetadataError("README does not hold a key/value mapping", file_name=path.name)
        return payload

    def errors(self, payload: dict[str, Any]) -> list[str]:
        """Human-readable violations of the mandatory-key schema, in key order."""

        messages = []
        for error in sorted(self._validator.iter_errors(payload), key=lambda e: list(e.path)):
            if error.validator == "required":
                messages.append(f"missing mandatory key: {error.message}")
            else:
                key = error.path[0] if error.path else "?"
                messages.append(f"mandatory key '{key}' is empty or invalid: {error.message}")
        return messages

    def load(self, path: str | Path) -> Readme:
        path = Path(path)
        payload = self.read_mapping(path)
        problems = self.errors(payload)
        if problems:
            raise MissingMetadataError("README " + "; ".join(problems), file_name=path.name)
        readme = Readme.from_mapping(payload)
        logger.info("Loaded README %s (identifier=%s)", path.name, readme.identifier)
        return readme


def build_run_context(
    graph: EntityGraph,
    readme: Readme | None,
    *,
    catalog: OrganismCatalog,
    data_source: DataSourceConfig | None = None,
) -> RunContext:
    """Resolve the shared context objects of a run into ``graph``."""

    source_config = data_source or DataSourceConfig()
    source = graph.registry(DataSource).get_or_create(source_config.name)
    source.url = source_config.url
    source.description = source_config.description

    if readme is None:
        return RunContext(data_source=source, catalog=catalog)

    publication = None
    if readme.publication_doi:
        publication = graph.registry(Publication).get_or_create(readme.publication_doi)
        if readme.publication_title:
            publication.title = readme.publication_title

    data_set = None
    if readme.identifier:
        data_set = graph.registry(DataSet).get_or_create(readme.identifier)
        data_set.description = readme.description
        data_set.licence = readme.license or DEFAULT_DATASET_LICENCE
        data_set.url = f"https://doi.org/{readme.dataset_doi}" if readme.dataset_doi else None
        data_set.version = readme.dataset_release_date
        data_set.data_source = source
        data_set.publication = publication

    organism = None
    info = _resolve_organism_info(readme, catalog)
    if info is not None:
        organism = register_organism(graph, info)

    strain = None
    if readme.single_genotype:
        strain = register_strain(graph, readme.single_genotype, organism)

    return RunContext(
        data_source=source,
        catalog=catalog,
        readme=readme,
        data_set=data_set,
        organism=organism,
        strain=strain,
        publication=publication,
    )


def _resolve_organism_info(readme: Readme, catalog: OrganismCatalog) -> OrganismInfo | None:
    if readme.taxid:
        info = catalog.by_taxon_id(readme.taxid)
        if info is not None:
            return info
        if not readme.scientific_name:
            raise MissingMetadataError(
                f"README taxid {readme.taxid} is not in the organism catalog and no scientific_name is given"
            )
        genus, species = split_scientific_name(readme.scientific_name)
        gensp = readme.scientific_name_abbrev or gensp_for(genus, species)
        return OrganismInfo(gensp=gensp, taxon_id=readme.taxid, genus=genus, species=species)

    return catalog.by_gensp(readme.scientific_name_abbrev)
