"""Finalize-time reference validation for entity graphs."""

from __future__ import annotations

from dataclasses import dataclass, field

from lisdatastore.errors import ReferenceResolutionError
from lisdatastore.graph import EntityGraph
from lisdatastore.models import BioEntity

REQUIRED_REFERENCES = ("organism", "strain")


@dataclass(frozen=True)
class ReferenceIssue:
    """An organism-scoped entity that reached finalize without a shared reference."""

    entity_type: str
    key: str
    field_name: str


@dataclass
class ReferenceReport:
    checked: int = 0
    issues: list[ReferenceIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


class ReferenceValidator:
    """Check that every organism-scoped entity carries organism and strain."""

    def inspect(self, graph: EntityGraph) -> ReferenceReport:
        report = ReferenceReport()
        for entity in graph.entities():
            if not isinstance(entity, BioEntity):
                continue
            report.checked += 1
            for field_name in REQUIRED_REFERENCES:
                if getattr(entity, field_name) is None:
                    report.issues.append(
                        ReferenceIssue(
                            entity_type=entity.entity_type,
                            key=entity.key_text(),
                            field_name=field_name,
                        )
                    )
        return report

    def validate(self, graph: EntityGraph, *, file_name: str | None = None) -> ReferenceReport:
        """Raise ``ReferenceResolutionError`` naming the first unresolved entity."""

        report = self.inspect(graph)
        if not report.ok:
            first = report.issues[0]
            raise ReferenceResolutionError(
                f"{len(report.issues)} unresolved reference(s); "
                f"{first.entity_type} '{first.key}' has no {first.field_name}",
                file_name=file_name,
            )
        return report
