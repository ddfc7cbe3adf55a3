"""
Pencil Catalog — reference colors the matcher scores against.

The built-in catalog ships as JSON and is loaded once into an immutable tuple.
Users may add custom pencils; a point-in-time read of those is merged after
the built-ins to form the candidate list.

Identity is a (brand, number) pair. The joined `brand|number` form is only
used where an id has to cross a string boundary (JSON, query params, storage
keys), so neither field may contain the separator.
"""
from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Protocol, Sequence

from .color_space import hex_to_rgb

logger = logging.getLogger(__name__)

DATA_PATH = Path(
    os.environ.get(
        "PENCILS_DATA_PATH",
        Path(__file__).parent.parent / "data" / "pencils.json",
    )
)

ID_SEPARATOR = "|"

_DIGIT_RUN = re.compile(r"(\d+)")


class InvalidPencilKey(ValueError):
    """Raised when a brand/number pair cannot form a composite id."""


@dataclass(frozen=True, order=True)
class PencilKey:
    brand: str
    number: str

    def __post_init__(self) -> None:
        for label, value in (("brand", self.brand), ("number", self.number)):
            if not isinstance(value, str) or not value.strip():
                raise InvalidPencilKey(f"Pencil {label} must be a non-empty string")
            if ID_SEPARATOR in value:
                raise InvalidPencilKey(
                    f"Pencil {label} {value!r} must not contain {ID_SEPARATOR!r}"
                )

    @property
    def composite_id(self) -> str:
        return f"{self.brand}{ID_SEPARATOR}{self.number}"

    @classmethod
    def parse(cls, composite_id: str) -> "PencilKey":
        parts = composite_id.split(ID_SEPARATOR)
        if len(parts) != 2:
            raise InvalidPencilKey(
                f"Pencil id {composite_id!r} must look like 'brand{ID_SEPARATOR}number'"
            )
        return cls(brand=parts[0], number=parts[1])


@dataclass(frozen=True)
class Pencil:
    brand: str
    number: str
    name: str
    hex: str
    custom: bool = False
    key: PencilKey = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", PencilKey(self.brand, self.number))

    @property
    def id(self) -> str:
        return self.key.composite_id

    @property
    def rgb(self) -> tuple[int, int, int]:
        """Parsed color. Raises InvalidColorFormat for a corrupt entry."""
        return hex_to_rgb(self.hex)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "brand": self.brand,
            "number": self.number,
            "name": self.name,
            "hex": self.hex,
            "custom": self.custom,
        }

    @classmethod
    def from_dict(cls, data: dict, custom: bool = False) -> "Pencil":
        # Built-in JSON stores the catalog number under "id"
        number = data.get("number", data.get("id"))
        if number is None:
            raise KeyError("number")
        return cls(
            brand=data["brand"],
            number=str(number),
            name=data.get("name", ""),
            hex=data.get("hex", ""),
            custom=data.get("custom", custom),
        )


def get_composite_id(pencil: Pencil) -> str:
    return pencil.key.composite_id


def natural_sort_key(text: str) -> tuple:
    """
    Key that compares embedded digit runs as numbers: "PC9" < "PC10".
    Each chunk is tagged so numbers and text never compare directly.
    """
    parts = _DIGIT_RUN.split(text)
    key: list[tuple[int, int | str]] = []
    for i, part in enumerate(parts):
        if i % 2:
            key.append((0, int(part)))
        elif part:
            key.append((1, part.casefold()))
    return tuple(key)


def merge_catalogs(built_in: Sequence[Pencil], custom: Iterable[Pencil]) -> list[Pencil]:
    """Built-ins in catalog order, then customs in natural number order."""
    ordered_custom = sorted(custom, key=lambda p: natural_sort_key(p.number))
    return list(built_in) + ordered_custom


class CatalogProvider(Protocol):
    def get_builtin_catalog(self) -> Sequence[Pencil]: ...

    def get_custom_catalog(self, user_id: str) -> Sequence[Pencil]: ...


def catalog_snapshot(provider: CatalogProvider, user_id: str) -> list[Pencil]:
    """Merge built-ins with a point-in-time read of one user's custom pencils."""
    return merge_catalogs(
        provider.get_builtin_catalog(),
        provider.get_custom_catalog(user_id),
    )


def load_builtin_catalog(path: Path | None = None) -> tuple[Pencil, ...]:
    """Load the shipped catalog, falling back to a small list when the file is missing."""
    path = path or DATA_PATH
    if path.exists():
        raw = json.loads(path.read_text(encoding="utf-8"))
    else:
        logger.warning(f"Pencil catalog not found at {path}, using fallback list")
        raw = _builtin_fallback()

    pencils: list[Pencil] = []
    for entry in raw:
        try:
            pencils.append(Pencil.from_dict(entry))
        except (KeyError, InvalidPencilKey) as e:
            logger.warning(f"Skipping catalog entry {entry!r}: {e}")
    logger.info(f"Loaded {len(pencils)} built-in pencils")
    return tuple(pencils)


def _builtin_fallback() -> list[dict]:
    return [
        {"id": "101", "brand": "Faber-Castell Polychromos", "name": "White", "hex": "#FFFFFF"},
        {"id": "199", "brand": "Faber-Castell Polychromos", "name": "Black", "hex": "#1D1D1B"},
        {"id": "107", "brand": "Faber-Castell Polychromos", "name": "Cadmium Yellow", "hex": "#FFDD00"},
        {"id": "121", "brand": "Faber-Castell Polychromos", "name": "Pale Geranium Lake", "hex": "#E7344A"},
        {"id": "151", "brand": "Faber-Castell Polychromos", "name": "Helioblue-Reddish", "hex": "#1F4E9C"},
        {"id": "163", "brand": "Faber-Castell Polychromos", "name": "Emerald Green", "hex": "#00876A"},
    ]
