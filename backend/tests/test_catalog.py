"""Unit tests for catalog.py — pencil identity, natural ordering and catalog merge."""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import json

import pytest

from backend.services.catalog import (
    ID_SEPARATOR,
    InvalidPencilKey,
    Pencil,
    PencilKey,
    catalog_snapshot,
    get_composite_id,
    load_builtin_catalog,
    merge_catalogs,
    natural_sort_key,
)
from backend.services.color_space import InvalidColorFormat


class _FakeProvider:
    def __init__(self, built_in, custom):
        self._built_in = built_in
        self._custom = custom

    def get_builtin_catalog(self):
        return self._built_in

    def get_custom_catalog(self, user_id):
        return self._custom.get(user_id, [])


# ─────────────────────────────────────────────────────────────────────────────
# Tests: PencilKey / composite id
# ─────────────────────────────────────────────────────────────────────────────

class TestPencilKey:
    def test_composite_id(self):
        assert PencilKey("Prismacolor Premier", "PC901").composite_id == "Prismacolor Premier|PC901"

    def test_separator_is_pipe(self):
        assert ID_SEPARATOR == "|"

    def test_parse_round_trip(self):
        key = PencilKey.parse("Caran d'Ache Pablo|070")
        assert key == PencilKey("Caran d'Ache Pablo", "070")

    def test_brand_with_separator_rejected(self):
        with pytest.raises(InvalidPencilKey):
            PencilKey("Bad|Brand", "1")

    def test_number_with_separator_rejected(self):
        with pytest.raises(InvalidPencilKey):
            PencilKey("Brand", "1|2")

    def test_blank_fields_rejected(self):
        with pytest.raises(InvalidPencilKey):
            PencilKey("  ", "1")
        with pytest.raises(InvalidPencilKey):
            PencilKey("Brand", "")

    @pytest.mark.parametrize("bad", ["no-separator", "a|b|c", "|1", "brand|"])
    def test_parse_rejects_malformed(self, bad):
        with pytest.raises(InvalidPencilKey):
            PencilKey.parse(bad)


# ─────────────────────────────────────────────────────────────────────────────
# Tests: Pencil
# ─────────────────────────────────────────────────────────────────────────────

class TestPencil:
    def test_get_composite_id(self):
        p = Pencil(brand="Derwent Coloursoft", number="C120", name="Red", hex="#D9262B")
        assert get_composite_id(p) == "Derwent Coloursoft|C120"
        assert p.id == "Derwent Coloursoft|C120"

    def test_rgb(self):
        p = Pencil(brand="B", number="1", name="Teal", hex="#2a7a6e")
        assert p.rgb == (42, 122, 110)

    def test_corrupt_color_only_fails_on_access(self):
        p = Pencil(brand="B", number="1", name="Broken", hex="oops")
        with pytest.raises(InvalidColorFormat):
            p.rgb

    def test_from_builtin_dict(self):
        p = Pencil.from_dict({"id": "101", "brand": "Faber-Castell Polychromos",
                              "name": "White", "hex": "#FFFFFF"})
        assert p.number == "101"
        assert p.custom is False

    def test_from_custom_dict(self):
        p = Pencil.from_dict({"brand": "Mine", "number": "7", "name": "Sky",
                              "hex": "#7DB8D8"}, custom=True)
        assert p.id == "Mine|7"
        assert p.custom is True

    def test_from_dict_without_number_raises(self):
        with pytest.raises(KeyError):
            Pencil.from_dict({"brand": "Mine", "name": "Sky", "hex": "#7DB8D8"})

    def test_to_dict(self):
        p = Pencil(brand="B", number="1", name="N", hex="#000000")
        assert p.to_dict() == {"id": "B|1", "brand": "B", "number": "1",
                               "name": "N", "hex": "#000000", "custom": False}


# ─────────────────────────────────────────────────────────────────────────────
# Tests: natural ordering and merge
# ─────────────────────────────────────────────────────────────────────────────

class TestNaturalSort:
    def test_numeric_runs(self):
        numbers = ["PC10", "PC9", "PC100", "PC2"]
        assert sorted(numbers, key=natural_sort_key) == ["PC2", "PC9", "PC10", "PC100"]

    def test_pure_numbers(self):
        assert sorted(["10", "9", "1"], key=natural_sort_key) == ["1", "9", "10"]

    def test_mixed_digits_and_text(self):
        numbers = ["B1", "A10", "A2", "10", "2"]
        assert sorted(numbers, key=natural_sort_key) == ["2", "10", "A2", "A10", "B1"]

    def test_text_is_case_insensitive(self):
        assert natural_sort_key("pc9") == natural_sort_key("PC9")


class TestMergeCatalogs:
    def _builtins(self):
        return (
            Pencil(brand="Z", number="3", name="z3", hex="#000000"),
            Pencil(brand="A", number="1", name="a1", hex="#FFFFFF"),
        )

    def test_builtins_first_in_catalog_order(self):
        custom = [Pencil(brand="Mine", number="1", name="m", hex="#123456", custom=True)]
        merged = merge_catalogs(self._builtins(), custom)
        assert [p.id for p in merged] == ["Z|3", "A|1", "Mine|1"]

    def test_custom_sorted_naturally(self):
        custom = [
            Pencil(brand="Mine", number=n, name=n, hex="#123456", custom=True)
            for n in ["PC10", "PC9", "PC1"]
        ]
        merged = merge_catalogs(self._builtins(), custom)
        assert [p.number for p in merged[2:]] == ["PC1", "PC9", "PC10"]

    def test_snapshot_uses_provider(self):
        custom = {"u1": [Pencil(brand="Mine", number="1", name="m", hex="#123456", custom=True)]}
        provider = _FakeProvider(self._builtins(), custom)
        assert len(catalog_snapshot(provider, "u1")) == 3
        assert len(catalog_snapshot(provider, "u2")) == 2


# ─────────────────────────────────────────────────────────────────────────────
# Tests: built-in catalog loading
# ─────────────────────────────────────────────────────────────────────────────

class TestLoadBuiltinCatalog:
    def test_shipped_catalog_loads(self):
        catalog = load_builtin_catalog()
        assert isinstance(catalog, tuple)
        assert len(catalog) >= 30
        assert len({p.id for p in catalog}) == len(catalog)

    def test_loads_from_path(self, tmp_path):
        path = tmp_path / "pencils.json"
        path.write_text(json.dumps([
            {"id": "1", "brand": "B", "name": "One", "hex": "#010101"},
            {"id": "2", "brand": "B", "name": "Two", "hex": "#020202"},
        ]), encoding="utf-8")
        catalog = load_builtin_catalog(path)
        assert [p.id for p in catalog] == ["B|1", "B|2"]

    def test_skips_entries_with_bad_keys(self, tmp_path):
        path = tmp_path / "pencils.json"
        path.write_text(json.dumps([
            {"id": "1", "brand": "B|ad", "name": "Bad", "hex": "#010101"},
            {"id": "2", "brand": "B", "name": "Good", "hex": "#020202"},
        ]), encoding="utf-8")
        assert [p.id for p in load_builtin_catalog(path)] == ["B|2"]

    def test_skips_entries_without_number(self, tmp_path):
        path = tmp_path / "pencils.json"
        path.write_text(json.dumps([
            {"brand": "B", "name": "Nameless", "hex": "#010101"},
            {"id": "2", "brand": "B", "name": "Good", "hex": "#020202"},
        ]), encoding="utf-8")
        catalog = load_builtin_catalog(path)
        assert [p.id for p in catalog] == ["B|2"]
        assert "B|None" not in {p.id for p in catalog}

    def test_missing_file_falls_back(self, tmp_path):
        catalog = load_builtin_catalog(tmp_path / "missing.json")
        assert len(catalog) > 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
