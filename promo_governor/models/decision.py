"""Decision output — what one scoring pass concludes about each candidate."""

from enum import Enum
from typing import List, Optional, Union

from pydantic import ConfigDict, Field

from promo_governor.models.base import DocumentModel


class DecisionAction(str, Enum):
    PROMOTE = "promote"
    SKIP = "skip"
    DEFER = "defer"     # Cooldown; overrides skip and never consumes budget


class SignalScore(DocumentModel):
    """One dimension's contribution for one candidate."""

    score: int
    explanation: str
    defer: bool = False


class ScoredCandidate(DocumentModel):
    """Scoring engine output, before ranking."""

    slug: str
    score: int
    defer: bool = False
    explanation: List[str] = Field(default_factory=list)


class Decision(DocumentModel):
    slug: str
    action: DecisionAction
    score: int
    explanation: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class Budget(DocumentModel):
    tier: Union[int, str]     # Numeric tiers are written as numbers
    headroom: float
    items_allowed: int


class DecisionReport(DocumentModel):
    """promo-decisions.json. Each run replaces the previous report whole."""

    generated_at: Optional[str] = None
    decisions: List[Decision] = Field(default_factory=list)
    budget: Budget
    warnings: List[str] = Field(default_factory=list)
