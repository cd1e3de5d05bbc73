"""LIS identifier decomposition helpers.

LIS feature identifiers are dot-segmented and self-describing::

    gensp.strain.gnm.secondaryIdentifier          (assembly feature)
    gensp.strain.gnm.ann.secondaryIdentifier      (annotation feature)

e.g. ``phalu.G27455.gnm1.ann1.tig000546640010.1`` is a protein whose parent
gene is ``phalu.G27455.gnm1.ann1.tig000546640010``.
"""

from __future__ import annotations

from lisdatastore.errors import ValidationError


def derive_parent_identifier(identifier: str) -> str:
    """Drop the trailing isoform/transcript segment of a compound identifier.

    >>> derive_parent_identifier("phalu.G27455.gnm1.ann1.tig000546640010.1")
    'phalu.G27455.gnm1.ann1.tig000546640010'
    >>> derive_parent_identifier("Phvul.002G040500.1")
    'Phvul.002G040500'
    """

    segments = identifier.split(".")
    if len(segments) < 2 or not all(segments):
        raise ValidationError(f"cannot derive a parent identifier from '{identifier}'")
    return ".".join(segments[:-1])


def extract_secondary_identifier(identifier: str, is_annotation_feature: bool = True) -> str | None:
    """Strip the ``gensp.strain.gnm[.ann]`` prefix from a full LIS identifier.

    Returns None when the identifier has too few segments to carry a prefix.

    >>> extract_secondary_identifier("glyma.Wm82.gnm2.ann1.Glyma.01G000100")
    'Glyma.01G000100'
    >>> extract_secondary_identifier("glyma.Wm82.gnm2.Gm01", is_annotation_feature=False)
    'Gm01'
    """

    prefix_length = 4 if is_annotation_feature else 3
    segments = identifier.split(".")
    if len(segments) <= prefix_length:
        return None
    return ".".join(segments[prefix_length:])


def extract_gensp(identifier: str) -> str | None:
    """Return the organism code (e.g. ``glyma``) of a full LIS identifier."""

    segments = identifier.split(".")
    if len(segments) >= 4:
        return segments[0]
    return None


def extract_strain_identifier(identifier: str) -> str | None:
    """Return the strain segment of a full LIS identifier."""

    segments = identifier.split(".")
    if len(segments) >= 4:
        return segments[1]
    return None


def gensp_for(genus: str, species: str) -> str:
    """Form the five-letter organism code from a genus and species.

    >>> gensp_for("Phaseolus", "vulgaris")
    'phavu'
    """

    return genus[:3].lower() + species[:2].lower()


def split_scientific_name(scientific_name: str) -> tuple[str, str]:
    """Split ``Genus species`` (or ``Genus_species``) into its two parts."""

    parts = scientific_name.replace("_", " ").split()
    if len(parts) < 2:
        raise ValidationError(f"scientific name '{scientific_name}' is not 'Genus species'")
    return parts[0], parts[1]
