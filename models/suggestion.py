"""
Product name suggestion schemas.
"""

from dataclasses import dataclass
from pydantic import Field
from typing import Optional

from models.base import BaseSchema


@dataclass(frozen=True)
class VocabularyEntry:
    """Canonical product name and its comparison form."""
    original: str
    normalized: str


class SuggestionResult(BaseSchema):
    """One ranked autocomplete candidate."""

    suggestion: str = Field(..., description="Canonical product name")
    score: int = Field(..., description="Match score, higher is better")
    match_index: int = Field(
        ...,
        description="Position of the query inside the name, -1 when not a substring"
    )


class SuggestionListResponse(BaseSchema):
    """Ranked suggestions for a query."""

    query: str
    data: list[SuggestionResult]
    total: int


class SuggestionValidationResponse(BaseSchema):
    """Whether a value may be saved."""

    value: Optional[str] = None
    valid: bool
    matches: list[str] = Field(default_factory=list)
