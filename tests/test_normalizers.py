"""
Tests for text, brand and OEM normalization.
"""

import pytest

from normalizers import (
    BRAND_ALIASES,
    brand_aliases_for,
    normalize_brand,
    normalize_oem,
    normalize_text,
    strip_diacritics,
)


class TestNormalizeText:

    def test_lowercases_and_collapses_punctuation(self):
        assert normalize_text("  Spark--Plug,  (front) ") == "spark plug front"

    def test_strips_diacritics(self):
        assert normalize_text("Zündkerze Stoßdämpfer") == "zundkerze sto dampfer"

    def test_empty(self):
        assert normalize_text("") == ""
        assert normalize_text(None) == ""

    def test_strip_diacritics_keeps_base_letters(self):
        assert strip_diacritics("Citroën Škoda") == "Citroen Skoda"


class TestNormalizeBrand:

    @pytest.mark.parametrize("raw", ["VW", "VAG", "Volkswagen", " vw "])
    def test_volkswagen_aliases(self, raw):
        assert normalize_brand(raw) == "VOLKSWAGEN"

    def test_mercedes_aliases(self):
        assert normalize_brand("Mercedes") == "MERCEDES-BENZ"
        assert normalize_brand("mercedes benz") == "MERCEDES-BENZ"
        assert normalize_brand("MB") == "MERCEDES-BENZ"

    def test_diacritics(self):
        assert normalize_brand("Citroën") == "CITROEN"
        assert normalize_brand("Škoda") == "SKODA"

    def test_unknown_passes_through_uppercased(self):
        assert normalize_brand("Lada") == "LADA"

    def test_empty(self):
        assert normalize_brand(None) == ""

    def test_aliases_for_canonical(self):
        assert brand_aliases_for("VOLKSWAGEN") == ["VW", "VOLKSWAGEN", "VAG"]

    def test_every_alias_is_canonical_or_maps_to_one(self):
        canonicals = set(BRAND_ALIASES.values())
        for canonical in canonicals:
            assert normalize_brand(canonical) == canonical


class TestNormalizeOem:

    def test_spaces_and_punctuation_removed(self):
        assert normalize_oem("12 12 0 037 244") == "12120037244"
        assert normalize_oem("12120037244") == "12120037244"

    def test_case_insensitive(self):
        assert normalize_oem("1k0-698-151a") == "1K0698151A"

    @pytest.mark.parametrize("raw", ["12 12 0 037 244", "a 000-180.26 09", "04152-YZZA1", "", "  "])
    def test_idempotent(self, raw):
        once = normalize_oem(raw)
        assert normalize_oem(once) == once

    def test_empty(self):
        assert normalize_oem(None) == ""
        assert normalize_oem("--  ..") == ""
