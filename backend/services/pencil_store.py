"""
Pencil Store — per-user custom pencils, brands, inventory and drawing associations.

In-memory stand-in for the relational store. Everything keyed by a pencil id
(ownership, drawing associations) is rewritten in the same critical section
when a custom pencil is re-keyed or deleted, so readers never observe a
half-renamed pencil. Only writes create per-user or per-drawing entries.
"""
from __future__ import annotations

import logging
import re
import threading
from typing import Sequence

from .catalog import ID_SEPARATOR, Pencil, PencilKey, natural_sort_key
from .color_space import normalize_hex

logger = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")


class PencilNotFound(LookupError):
    pass


class DuplicatePencil(ValueError):
    pass


class InvalidBrand(ValueError):
    pass


def brand_slug(name: str) -> str:
    """Lowercase the name and turn whitespace runs into dashes: "My Brand" → "my-brand"."""
    return _WHITESPACE_RUN.sub("-", name.strip().lower())


class PencilStore:
    """Implements CatalogProvider on top of in-memory per-user state."""

    def __init__(self, built_in: Sequence[Pencil] = ()) -> None:
        self._built_in = tuple(built_in)
        self._lock = threading.RLock()
        # user_id → composite id → Pencil
        self._custom: dict[str, dict[str, Pencil]] = {}
        # user_id → owned composite ids
        self._owned: dict[str, set[str]] = {}
        # user_id → drawing_id → composite ids
        self._drawings: dict[str, dict[str, set[str]]] = {}
        # user_id → brand slug → display name
        self._brands: dict[str, dict[str, str]] = {}

    # ------------------------------------------------------------------ #
    # CatalogProvider                                                      #
    # ------------------------------------------------------------------ #

    def get_builtin_catalog(self) -> tuple[Pencil, ...]:
        return self._built_in

    def get_custom_catalog(self, user_id: str) -> list[Pencil]:
        return self.list_custom_pencils(user_id)

    # ------------------------------------------------------------------ #
    # Custom pencils                                                       #
    # ------------------------------------------------------------------ #

    def list_custom_pencils(self, user_id: str) -> list[Pencil]:
        with self._lock:
            pencils = list(self._custom.get(user_id, {}).values())
        return sorted(pencils, key=lambda p: natural_sort_key(p.number))

    def get_custom_pencil(self, user_id: str, pencil_id: str) -> Pencil:
        with self._lock:
            pencil = self._custom.get(user_id, {}).get(pencil_id)
        if pencil is None:
            raise PencilNotFound(pencil_id)
        return pencil

    def create_custom_pencil(
        self,
        user_id: str,
        brand: str,
        name: str,
        number: str,
        hex_color: str,
    ) -> Pencil:
        """Add a custom pencil and mark it as owned."""
        pencil = Pencil(
            brand=brand,
            number=number,
            name=name,
            hex=normalize_hex(hex_color),
            custom=True,
        )
        with self._lock:
            custom = self._custom.setdefault(user_id, {})
            if pencil.id in custom:
                raise DuplicatePencil(pencil.id)
            custom[pencil.id] = pencil
            self._owned.setdefault(user_id, set()).add(pencil.id)
        logger.info(f"User {user_id} created custom pencil {pencil.id}")
        return pencil

    def update_custom_pencil(
        self,
        user_id: str,
        old_id: str,
        brand: str,
        name: str,
        number: str,
        hex_color: str,
    ) -> Pencil:
        """
        Replace a custom pencil. If brand or number changed, the composite id
        changes and every reference to the old id is moved to the new one.
        """
        pencil = Pencil(
            brand=brand,
            number=number,
            name=name,
            hex=normalize_hex(hex_color),
            custom=True,
        )
        with self._lock:
            custom = self._custom.get(user_id, {})
            if old_id not in custom:
                raise PencilNotFound(old_id)
            new_id = pencil.id
            if new_id != old_id and new_id in custom:
                raise DuplicatePencil(new_id)

            del custom[old_id]
            custom[new_id] = pencil
            if new_id != old_id:
                self._rekey_references(user_id, old_id, new_id)

        if new_id != old_id:
            logger.info(f"User {user_id} re-keyed custom pencil {old_id} → {new_id}")
        return pencil

    def delete_custom_pencil(self, user_id: str, pencil_id: str) -> None:
        with self._lock:
            if self._custom.get(user_id, {}).pop(pencil_id, None) is None:
                raise PencilNotFound(pencil_id)
            self._owned.get(user_id, set()).discard(pencil_id)
            for pencil_ids in self._drawings.get(user_id, {}).values():
                pencil_ids.discard(pencil_id)
        logger.info(f"User {user_id} deleted custom pencil {pencil_id}")

    def _rekey_references(self, user_id: str, old_id: str, new_id: str) -> None:
        owned = self._owned.get(user_id, set())
        if old_id in owned:
            owned.discard(old_id)
            owned.add(new_id)
        for pencil_ids in self._drawings.get(user_id, {}).values():
            if old_id in pencil_ids:
                pencil_ids.discard(old_id)
                pencil_ids.add(new_id)

    # ------------------------------------------------------------------ #
    # Custom brands                                                        #
    # ------------------------------------------------------------------ #

    def list_brands(self, user_id: str) -> list[dict[str, str]]:
        with self._lock:
            brands = dict(self._brands.get(user_id, {}))
        return [{"id": slug, "name": name} for slug, name in brands.items()]

    def create_brand(self, user_id: str, name: str) -> dict[str, str]:
        """Register a brand name; re-adding an existing slug keeps the first name."""
        name = name.strip() if isinstance(name, str) else ""
        if not name:
            raise InvalidBrand("Brand name is required")
        if ID_SEPARATOR in name:
            raise InvalidBrand(f"Brand {name!r} must not contain {ID_SEPARATOR!r}")
        slug = brand_slug(name)
        with self._lock:
            stored = self._brands.setdefault(user_id, {}).setdefault(slug, name)
        return {"id": slug, "name": stored}

    def delete_brand(self, user_id: str, brand_id: str) -> None:
        with self._lock:
            self._brands.get(user_id, {}).pop(brand_id, None)

    # ------------------------------------------------------------------ #
    # Inventory                                                            #
    # ------------------------------------------------------------------ #

    def set_owned(self, user_id: str, pencil_id: str, owned: bool) -> None:
        PencilKey.parse(pencil_id)
        with self._lock:
            if owned:
                self._owned.setdefault(user_id, set()).add(pencil_id)
            else:
                self._owned.get(user_id, set()).discard(pencil_id)

    def owned_ids(self, user_id: str) -> frozenset[str]:
        with self._lock:
            return frozenset(self._owned.get(user_id, ()))

    # ------------------------------------------------------------------ #
    # Drawing associations                                                 #
    # ------------------------------------------------------------------ #

    def add_pencil_to_drawing(self, user_id: str, drawing_id: str, pencil_id: str) -> None:
        PencilKey.parse(pencil_id)
        with self._lock:
            drawings = self._drawings.setdefault(user_id, {})
            drawings.setdefault(drawing_id, set()).add(pencil_id)

    def remove_pencil_from_drawing(self, user_id: str, drawing_id: str, pencil_id: str) -> None:
        with self._lock:
            self._drawings.get(user_id, {}).get(drawing_id, set()).discard(pencil_id)

    def drawing_pencils(self, user_id: str, drawing_id: str) -> list[str]:
        with self._lock:
            return sorted(self._drawings.get(user_id, {}).get(drawing_id, ()))
