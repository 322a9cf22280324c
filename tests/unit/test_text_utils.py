"""
Unit tests for product name text utilities.

Run: pytest tests/unit/test_text_utils.py -v
"""

from utils.text_utils import normalize_product_name, clean_product_name


class TestNormalizeProductName:
    """Tests for normalize_product_name()"""

    def test_lowercases(self):
        assert normalize_product_name("STEEL ROD") == "steel rod"

    def test_collapses_and_trims_whitespace(self):
        assert normalize_product_name("  Stainless   Steel\tPipe ") == "stainless steel pipe"

    def test_folds_diacritics(self):
        """Should fold accents: Crème Fraîche → creme fraiche."""
        assert normalize_product_name("Crème Fraîche") == "creme fraiche"

    def test_keeps_digits_and_hyphens(self):
        assert normalize_product_name("Wire-Mesh 12mm") == "wire-mesh 12mm"

    def test_punctuation_becomes_separator(self):
        assert normalize_product_name("PVC (rigid),grade:A") == "pvc rigid grade a"

    def test_none_returns_empty(self):
        assert normalize_product_name(None) == ""

    def test_empty_returns_empty(self):
        assert normalize_product_name("") == ""

    def test_symbols_only_returns_empty(self):
        assert normalize_product_name("!!! ***") == ""

    def test_is_idempotent(self):
        once = normalize_product_name("Café-Crème, 250g")

        assert normalize_product_name(once) == once


class TestCleanProductName:
    """Tests for clean_product_name()"""

    def test_strips_and_preserves_case(self):
        assert clean_product_name("  Steel Rod ") == "Steel Rod"

    def test_blank_returns_none(self):
        assert clean_product_name("   ") is None

    def test_none_returns_none(self):
        assert clean_product_name(None) is None

    def test_truncates_to_max_length(self):
        assert clean_product_name("abcdef", max_length=3) == "abc"
