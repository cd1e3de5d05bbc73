"""Organism catalog mapping LIS organism codes to taxa."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class OrganismInfo:
    """Taxon behind a five-letter organism code such as ``phavu``."""

    gensp: str
    taxon_id: str
    genus: str
    species: str

    @property
    def scientific_name(self) -> str:
        return f"{self.genus} {self.species}"


class OrganismCatalog:
    """Lookup of ``OrganismInfo`` by organism code or taxon id."""

    def __init__(self, organisms: list[OrganismInfo] | None = None) -> None:
        self._by_gensp: dict[str, OrganismInfo] = {}
        self._by_taxon_id: dict[str, OrganismInfo] = {}
        for info in organisms or []:
            self._by_gensp[info.gensp] = info
            self._by_taxon_id[info.taxon_id] = info

    def by_gensp(self, gensp: str | None) -> OrganismInfo | None:
        if not gensp:
            return None
        return self._by_gensp.get(gensp.lower())

    def by_taxon_id(self, taxon_id: str | int | None) -> OrganismInfo | None:
        if taxon_id is None:
            return None
        return self._by_taxon_id.get(str(taxon_id))

    def __contains__(self, gensp: object) -> bool:
        return isinstance(gensp, str) and gensp.lower() in self._by_gensp

    def __len__(self) -> int:
        return len(self._by_gensp)


class OrganismCatalogLoader:
    """Load organism catalogs from ``config/`` or a custom path."""

    def __init__(self, config_dir: str | Path | None = None) -> None:
        if config_dir is None:
            config_dir = Path(__file__).resolve().parents[2] / "config"
        self.config_dir = Path(config_dir)

    def list_catalogs(self) -> list[str]:
        return sorted(path.stem for path in self.config_dir.glob("*.json"))

    def load(self, name_or_path: str | Path = "organisms") -> OrganismCatalog:
        """Load a catalog by name (for example, ``organisms``) or explicit path."""

        path = self._resolve_path(name_or_path)
        payload = json.loads(path.read_text())
        return self._parse(payload, source=str(path))

    def _resolve_path(self, name_or_path: str | Path) -> Path:
        requested = Path(name_or_path)

        if requested.exists():
            return requested

        candidate = self.config_dir / f"{requested}.json"
        if candidate.exists():
            return candidate

        raise FileNotFoundError(
            f"Organism catalog not found: {name_or_path}. Available: {', '.join(self.list_catalogs())}"
        )

    def _parse(self, payload: dict[str, Any], *, source: str) -> OrganismCatalog:
        entries = payload.get("organisms")
        if not isinstance(entries, list):
            raise ValueError(f"{source}: expected an 'organisms' list")

        organisms = []
        for entry in entries:
            try:
                organisms.append(
                    OrganismInfo(
                        gensp=str(entry["gensp"]).lower(),
                        taxon_id=str(entry["taxon_id"]),
                        genus=str(entry["genus"]),
                        species=str(entry["species"]),
                    )
                )
            except KeyError as exc:
                raise ValueError(f"{source}: organism entry missing {exc}") from exc
        return OrganismCatalog(organisms)
