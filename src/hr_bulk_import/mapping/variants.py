from __future__ import annotations

from collections.abc import Iterable, Mapping
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from ..models.fields import CanonicalField
from .normalize import normalize_header

"""Known header variants per canonical field.

The packaged table (``hr_bulk_import/config/header_variants.yml``) holds the
spellings seen in HR spreadsheets; a site can replace it with its own YAML
file of the same shape (wire field name -> list of spellings).
"""

__all__ = [
    "HeaderVariantTable",
    "VariantTableError",
]

DEFAULT_VARIANTS_RESOURCE = "header_variants.yml"


class VariantTableError(Exception):
    """Raised when a header variant file is missing or malformed."""


class HeaderVariantTable:
    """Normalized, de-duplicated variant spellings keyed by CanonicalField.

    Order is preserved: it decides which variant wins when several match.
    """

    def __init__(self, variants: Mapping[CanonicalField, Iterable[str]]) -> None:
        self._variants: dict[CanonicalField, tuple[str, ...]] = {}
        for f in CanonicalField:
            seen: list[str] = []
            for raw in variants.get(f, ()):
                norm = normalize_header(raw)
                if norm and norm not in seen:
                    seen.append(norm)
            self._variants[f] = tuple(seen)

    def for_field(self, f: CanonicalField) -> tuple[str, ...]:
        return self._variants[f]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderVariantTable):
            return NotImplemented
        return self._variants == other._variants

    def __repr__(self) -> str:  # pragma: no cover (trivial)
        total = sum(len(v) for v in self._variants.values())
        return f"HeaderVariantTable(fields={len(self._variants)}, variants={total})"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> HeaderVariantTable:
        """Build from a wire-name keyed mapping (the YAML shape)."""
        variants: dict[CanonicalField, list[str]] = {}
        for key, spellings in data.items():
            try:
                f = CanonicalField.from_wire(str(key))
            except ValueError as e:
                raise VariantTableError(str(e)) from e
            if isinstance(spellings, str) or not isinstance(spellings, Iterable):
                raise VariantTableError(f"variants for '{key}' must be a list of strings")
            variants[f] = [str(s) for s in spellings]
        return cls(variants)

    @classmethod
    def from_yaml_text(cls, text: str) -> HeaderVariantTable:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise VariantTableError(f"invalid yaml: {e}") from e
        if not isinstance(data, dict):
            raise VariantTableError("header variant file must be a mapping of field -> list")
        return cls.from_mapping(data)

    @classmethod
    def from_file(cls, path: Path) -> HeaderVariantTable:
        if not path.exists():
            raise VariantTableError(f"header variant file not found: {path}")
        return cls.from_yaml_text(path.read_text(encoding="utf-8"))

    @classmethod
    def default(cls) -> HeaderVariantTable:
        return _load_default()


@lru_cache(maxsize=1)
def _load_default() -> HeaderVariantTable:
    text = (
        resources.files("hr_bulk_import.config")
        .joinpath(DEFAULT_VARIANTS_RESOURCE)
        .read_text(encoding="utf-8")
    )
    return HeaderVariantTable.from_yaml_text(text)
