"""
Product name suggestion service.

Ranks the canonical product vocabulary against free text for autocomplete,
and decides whether a value may be saved (exact match after normalization).
"""

from pathlib import Path
from typing import Iterable, Optional, Union
import structlog

from config import settings
from exceptions import VocabularyLoadError
from models.suggestion import VocabularyEntry, SuggestionResult
from utils.text_utils import normalize_product_name

logger = structlog.get_logger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent


# Score bands
EXACT_SCORE = 100
PREFIX_BASE = 90
SUBSTRING_BASE = 80
FUZZY_SUBSEQUENCE_BONUS = 10

# Sorts "not a substring" after every real position
_NOT_FOUND_RANK = float("inf")


class SuggestionIndex:
    """
    Immutable, insertion-ordered product vocabulary.

    Holds each name in original and normalized form. Loaded once and shared
    read-only by every query.
    """

    def __init__(self, entries: Iterable[VocabularyEntry]):
        self._entries = tuple(entries)
        self._by_normalized: dict[str, list[str]] = {}
        for entry in self._entries:
            self._by_normalized.setdefault(entry.normalized, []).append(entry.original)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "SuggestionIndex":
        """
        Build an index from canonical names.

        Blank names and names whose normalized form is already present are
        skipped; the first spelling wins.
        """
        entries = []
        seen = set()
        for name in names:
            original = (name or "").strip()
            normalized = normalize_product_name(original)
            if not normalized or normalized in seen:
                continue
            seen.add(normalized)
            entries.append(VocabularyEntry(original=original, normalized=normalized))
        return cls(entries)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SuggestionIndex":
        """
        Load one name per line. Blank lines and '#' comments are ignored.

        Raises:
            VocabularyLoadError: If the file cannot be read
        """
        path = Path(path)
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            logger.error("vocabulary_load_failed", path=str(path), error=str(e))
            raise VocabularyLoadError(str(path), str(e)) from e

        names = [
            line for line in lines
            if line.strip() and not line.lstrip().startswith("#")
        ]
        index = cls.from_names(names)

        logger.info(
            "vocabulary_loaded",
            path=str(path),
            lines=len(names),
            entries=len(index)
        )
        return index

    @property
    def entries(self) -> tuple[VocabularyEntry, ...]:
        return self._entries

    def originals_for(self, normalized: str) -> list[str]:
        """Original spellings whose normalized form equals `normalized`."""
        return list(self._by_normalized.get(normalized, ()))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)


class SuggestionRanker:
    """
    Ranks vocabulary entries against a query.

    Usage:
        ranker = SuggestionRanker(SuggestionIndex.from_names(["Steel Rod"]))
        ranker.search_suggestions("steel")
        ranker.is_valid_suggestion("STEEL  rod")   # True
    """

    def __init__(self, index: SuggestionIndex):
        self.index = index

    # ===================
    # SCORING
    # ===================

    @staticmethod
    def score(query: str, entry: str) -> int:
        """
        Score a normalized query against a normalized entry.

        Exact (100) > prefix > substring > ordered-subsequence fuzzy. The
        first band that applies decides the score, even when it clamps to 0.

        Args:
            query: Normalized, non-empty query
            entry: Normalized vocabulary entry

        Returns:
            Integer score; only values > 0 make an entry a candidate
        """
        if query == entry:
            return EXACT_SCORE

        length_gap = len(entry) - len(query)

        # Prefix can go negative for long entries
        if entry.startswith(query):
            return PREFIX_BASE - 2 * length_gap

        position = entry.find(query)
        if position != -1:
            return max(0, SUBSTRING_BASE - 5 * position - 2 * length_gap)

        return SuggestionRanker._fuzzy_score(query, entry)

    @staticmethod
    def _fuzzy_score(query: str, entry: str) -> int:
        """Walk both strings; +2 per matched char, -1 per skipped entry char."""
        score = 0
        q = 0
        e = 0
        while q < len(query) and e < len(entry):
            if query[q] == entry[e]:
                score += 2
                q += 1
            else:
                score -= 1
            e += 1

        if q == len(query):
            score += FUZZY_SUBSEQUENCE_BONUS

        score -= abs(len(query) - len(entry))
        return max(0, score)

    # ===================
    # QUERIES
    # ===================

    def search_suggestions(
        self,
        query: Optional[str],
        max_results: int = 10
    ) -> list[SuggestionResult]:
        """
        Rank the vocabulary against a query.

        Order: score desc, then match position asc (non-substrings last),
        then shorter names first, then vocabulary order.

        Args:
            query: Free text as typed
            max_results: Upper bound on returned results

        Returns:
            At most max_results suggestions, all scoring > 0
        """
        normalized_query = normalize_product_name(query)
        if not normalized_query or max_results <= 0:
            return []

        ranked = []
        for position, entry in enumerate(self.index.entries):
            score = self.score(normalized_query, entry.normalized)
            if score <= 0:
                continue
            match_index = entry.normalized.find(normalized_query)
            ranked.append((
                -score,
                match_index if match_index != -1 else _NOT_FOUND_RANK,
                len(entry.original),
                position,
                match_index
            ))

        ranked.sort()
        results = [
            SuggestionResult(
                suggestion=self.index.entries[position].original,
                score=-neg_score,
                match_index=match_index
            )
            for neg_score, _, _, position, match_index in ranked[:max_results]
        ]

        logger.debug(
            "suggestions_ranked",
            query=normalized_query,
            candidates=len(ranked),
            returned=len(results)
        )
        return results

    def get_exact_matches(self, value: Optional[str]) -> list[str]:
        """Vocabulary names equal to value after normalization."""
        normalized = normalize_product_name(value)
        if not normalized:
            return []
        return self.index.originals_for(normalized)

    def is_valid_suggestion(self, value: Optional[str]) -> bool:
        """
        Whether value may be saved.

        Empty or None is valid (clears the field). Anything else must equal a
        vocabulary entry after normalization; a fuzzy match is not enough.
        """
        if value is None or not value.strip():
            return True
        return bool(self.get_exact_matches(value))


# Singleton instance for convenience
_suggestion_ranker: Optional[SuggestionRanker] = None


def get_suggestion_service() -> SuggestionRanker:
    """Get or create the ranker over the configured vocabulary file."""
    global _suggestion_ranker
    if _suggestion_ranker is None:
        path = Path(settings.vocabulary_path)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        _suggestion_ranker = SuggestionRanker(SuggestionIndex.from_file(path))
    return _suggestion_ranker


def reset_suggestion_service() -> None:
    """Drop the cached ranker so the next call reloads the vocabulary."""
    global _suggestion_ranker
    _suggestion_ranker = None
