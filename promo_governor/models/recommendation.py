"""Recommendations — advisory items produced by the insight generator."""

from enum import Enum
from typing import List, Optional, Union

from pydantic import Field, model_validator

from promo_governor.models.base import DocumentModel


class RecommendationCategory(str, Enum):
    RE_FEATURE = "re-feature"
    EXPERIMENT_GRADUATION = "experiment-graduation"
    IMPROVE_PROOF = "improve-proof"
    STUCK_SUBMISSION = "stuck-submission"
    LINT_PROMOTION = "lint-promotion"

    @classmethod
    def from_raw(cls, raw: str) -> Optional["RecommendationCategory"]:
        """None for categories this version does not know."""
        try:
            return cls(raw)
        except ValueError:
            return None


class Recommendation(DocumentModel):
    category: str                           # Raw string; may be unrecognized
    slug: str = ""
    priority: Optional[Union[int, str]] = None
    evidence: dict = Field(default_factory=dict)
    insight: Optional[str] = None


class RecommendationList(DocumentModel):
    """recommendations.json. Accepts {recommendations: [...]} or a bare list."""

    recommendations: List[Recommendation] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _wrap_bare_list(cls, data):
        if isinstance(data, list):
            return {"recommendations": data}
        return data
