"""
Unit tests for SuggestionIndex and SuggestionRanker.

Run: pytest tests/unit/test_suggestion_service.py -v
"""

import pytest

from services.suggestion_service import (
    SuggestionIndex,
    SuggestionRanker,
    EXACT_SCORE,
)
from exceptions import VocabularyLoadError


class TestSuggestionIndex:
    """Tests for building the vocabulary index."""

    def test_from_names_keeps_insertion_order(self):
        index = SuggestionIndex.from_names(["Steel Rod", "Copper Cathode", "PVC Resin"])

        assert [entry.original for entry in index] == ["Steel Rod", "Copper Cathode", "PVC Resin"]

    def test_from_names_normalizes(self):
        index = SuggestionIndex.from_names(["  Crème Fraîche Powder "])

        entry = index.entries[0]
        assert entry.original == "Crème Fraîche Powder"
        assert entry.normalized == "creme fraiche powder"

    def test_from_names_skips_blanks_and_duplicates(self):
        index = SuggestionIndex.from_names(["Steel Rod", "", "   ", "STEEL  ROD", None])

        assert len(index) == 1
        assert index.entries[0].original == "Steel Rod"

    def test_from_file_ignores_comments(self, tmp_path):
        path = tmp_path / "names.txt"
        path.write_text("# canonical names\nSteel Rod\n\n  # indented comment\nPVC Resin\n", encoding="utf-8")

        index = SuggestionIndex.from_file(path)

        assert [entry.original for entry in index] == ["Steel Rod", "PVC Resin"]

    def test_from_file_missing_raises(self, tmp_path):
        with pytest.raises(VocabularyLoadError) as exc_info:
            SuggestionIndex.from_file(tmp_path / "missing.txt")

        assert exc_info.value.code == "VOCABULARY_LOAD_FAILED"
        assert exc_info.value.details["path"].endswith("missing.txt")

    def test_bundled_vocabulary_loads(self):
        from services.suggestion_service import PROJECT_ROOT

        index = SuggestionIndex.from_file(PROJECT_ROOT / "data" / "product_names.txt")

        assert len(index) > 0
        assert all(entry.normalized for entry in index)


class TestSuggestionRankerScore:
    """Tests for SuggestionRanker.score()"""

    def test_exact_match(self):
        assert SuggestionRanker.score("steel rod", "steel rod") == EXACT_SCORE

    def test_prefix_match(self):
        """90 - 2 * (9 - 5)."""
        assert SuggestionRanker.score("steel", "steel rod") == 82

    def test_prefix_can_go_negative(self):
        assert SuggestionRanker.score("a", "a" + "x" * 60) == 90 - 120

    def test_substring_match(self):
        """80 - 5 * 6 - 2 * (9 - 3)."""
        assert SuggestionRanker.score("rod", "steel rod") == 38

    def test_substring_clamps_to_zero_without_fuzzy_fallback(self):
        """80 - 5 * 10 - 2 * (20 - 5) = 0, even though a subsequence exists."""
        assert SuggestionRanker.score("steel", "stainless steel pipe") == 0

    def test_fuzzy_full_subsequence(self):
        """s,t matched, e,e skipped, l matched: 6 - 2 + 10 - 6."""
        assert SuggestionRanker.score("stl", "steel rod") == 8

    def test_fuzzy_no_match_clamps_to_zero(self):
        assert SuggestionRanker.score("xyz", "steel rod") == 0


class TestSearchSuggestions:
    """Tests for SuggestionRanker.search_suggestions()"""

    def test_prefix_matches_outrank_later_substring(self, ranker):
        results = ranker.search_suggestions("steel")

        names = [result.suggestion for result in results]
        assert names[:2] == ["Steel Rod", "Steel Wire Mesh"]
        assert results[0].score == 82
        assert results[1].score == 70
        if "Stainless Steel Pipe" in names:
            assert names.index("Stainless Steel Pipe") > 1

    def test_only_positive_scores_returned(self, ranker):
        results = ranker.search_suggestions("steel")

        assert all(result.score > 0 for result in results)

    def test_match_index_reported(self, ranker):
        results = ranker.search_suggestions("rod")

        rod = next(result for result in results if result.suggestion == "Steel Rod")
        assert rod.match_index == 6

    def test_fuzzy_match_has_no_match_index(self, ranker):
        results = ranker.search_suggestions("stl")

        assert results
        assert all(result.match_index == -1 for result in results)

    def test_exact_match_first(self, ranker):
        results = ranker.search_suggestions("steel rod")

        assert results[0].suggestion == "Steel Rod"
        assert results[0].score == EXACT_SCORE

    def test_query_is_normalized(self, ranker):
        results = ranker.search_suggestions("  CRÈME  fraiche")

        assert results[0].suggestion == "Crème Fraîche Powder"

    def test_blank_query_returns_empty(self, ranker):
        assert ranker.search_suggestions("") == []
        assert ranker.search_suggestions("   ") == []
        assert ranker.search_suggestions(None) == []

    def test_max_results_bounds_output(self):
        names = [f"Steel Item {i}" for i in range(20)]
        ranker = SuggestionRanker(SuggestionIndex.from_names(names))

        assert len(ranker.search_suggestions("steel", max_results=5)) == 5
        assert ranker.search_suggestions("steel", max_results=0) == []

    def test_ties_keep_vocabulary_order(self):
        ranker = SuggestionRanker(SuggestionIndex.from_names(["Rod B", "Rod A", "Rod C"]))

        results = ranker.search_suggestions("rod")

        assert [result.suggestion for result in results] == ["Rod B", "Rod A", "Rod C"]

    def test_equal_score_shorter_name_first(self):
        """Both normalize to 5 chars and score 86; the displayed name breaks the tie."""
        ranker = SuggestionRanker(SuggestionIndex.from_names(["Rod (X)", "Rod Y"]))

        results = ranker.search_suggestions("rod")

        assert [result.suggestion for result in results] == ["Rod Y", "Rod (X)"]
        assert results[0].score == results[1].score == 86

    def test_equal_score_earlier_match_first(self):
        """Both substrings score 59; position 1 beats position 3."""
        ranker = SuggestionRanker(SuggestionIndex.from_names(["Ab Rod", "Xrod Abcdef"]))

        results = ranker.search_suggestions("rod")

        assert [result.suggestion for result in results] == ["Xrod Abcdef", "Ab Rod"]
        assert [result.match_index for result in results] == [1, 3]

    def test_bands_rank_exact_prefix_substring_fuzzy(self):
        """The last three all normalize to 7 chars, so only the band separates them."""
        ranker = SuggestionRanker(SuggestionIndex.from_names(["R-o-d-x", "Ab Rodx", "Rod Abc", "Rod"]))

        results = ranker.search_suggestions("rod")

        assert [result.suggestion for result in results] == ["Rod", "Rod Abc", "Ab Rodx", "R-o-d-x"]
        assert [result.score for result in results] == [100, 82, 57, 10]

    def test_is_deterministic(self, ranker):
        first = ranker.search_suggestions("st")
        second = ranker.search_suggestions("st")

        assert first == second


class TestValidation:
    """Tests for is_valid_suggestion() and get_exact_matches()"""

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_is_valid(self, ranker, value):
        assert ranker.is_valid_suggestion(value) is True

    def test_exact_after_normalization_is_valid(self, ranker):
        assert ranker.is_valid_suggestion("  steel   ROD ") is True

    def test_diacritics_folded(self, ranker):
        assert ranker.is_valid_suggestion("creme fraiche powder") is True

    def test_fuzzy_match_is_not_valid(self, ranker):
        assert ranker.is_valid_suggestion("steel") is False
        assert ranker.is_valid_suggestion("Steel Rods") is False

    def test_get_exact_matches_returns_canonical(self, ranker):
        assert ranker.get_exact_matches("STEEL rod") == ["Steel Rod"]

    def test_get_exact_matches_none(self, ranker):
        assert ranker.get_exact_matches("unknown thing") == []
        assert ranker.get_exact_matches(None) == []

    def test_every_bundled_name_is_valid(self):
        from services.suggestion_service import PROJECT_ROOT

        index = SuggestionIndex.from_file(PROJECT_ROOT / "data" / "product_names.txt")
        ranker = SuggestionRanker(index)

        for entry in index.entries:
            assert ranker.is_valid_suggestion(entry.original), entry.original
            assert ranker.is_valid_suggestion(entry.normalized), entry.normalized
