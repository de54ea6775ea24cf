"""Input documents consumed by the decision engine."""

from typing import Any, Dict, List, Optional, Union

from pydantic import Field, field_validator, model_validator

from promo_governor.models.base import DocumentModel
from promo_governor.models.experiment import ExperimentRoster


class QueueEntry(DocumentModel):
    """Object form of a promotion-queue slot."""

    slug: str
    channels: List[str] = Field(default_factory=list)

    @field_validator("channels", mode="before")
    @classmethod
    def _single_channel(cls, v):
        return [v] if isinstance(v, str) else v


class PromotionQueue(DocumentModel):
    """promo-queue.json — the candidates for this cycle, in declared order."""

    week: Optional[Union[str, int]] = None
    slugs: List[Union[str, QueueEntry]] = Field(default_factory=list)
    promotion_type: Optional[str] = None

    def slug_ids(self) -> List[str]:
        return [s if isinstance(s, str) else s.slug for s in self.slugs]


class SlugOverride(DocumentModel):
    public_proof: Any = None               # Any truthy value counts
    proven_claims: List[Any] = Field(default_factory=list)


class WorthinessResult(DocumentModel):
    worthy: Any = False                     # Only a literal true counts
    score: float = 0


class WorthinessRubric(DocumentModel):
    """worthy.json. Accepts either {repos: {...}} or a bare slug map."""

    repos: Dict[str, WorthinessResult] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _wrap_bare_map(cls, data):
        if isinstance(data, dict) and "repos" not in data:
            return {"repos": data}
        return data


class OutcomeCounts(DocumentModel):
    """Aggregated outreach outcomes for one slug or one experiment arm."""

    sent: int = 0
    opened: int = 0
    replied: int = 0
    ignored: int = 0
    bounced: int = 0
    entries: Optional[int] = None

    @property
    def total(self) -> int:
        return self.sent + self.opened + self.replied + self.ignored + self.bounced

    @property
    def entry_count(self) -> int:
        """Explicit entries counter when recorded, else the outcome total."""
        return self.entries if self.entries is not None else self.total


class EngagementSummary(DocumentModel):
    """feedback-summary.json."""

    per_slug: Dict[str, OutcomeCounts] = Field(default_factory=dict)
    per_experiment: Dict[str, Dict[str, OutcomeCounts]] = Field(default_factory=dict)


class PromotionEvent(DocumentModel):
    """One ops-history entry. History is stored newest first."""

    date: Optional[str] = None
    promoted_slugs: List[str] = Field(default_factory=list)
    slugs: List[str] = Field(default_factory=list)

    def promoted(self) -> List[str]:
        return self.promoted_slugs or self.slugs


class TierBudget(DocumentModel):
    headroom: float = 0


class CostProjection(DocumentModel):
    """baseline.json — minute budgets by tier plus observed run cost."""

    minute_budgets: Dict[str, TierBudget] = Field(default_factory=dict)
    avg_minutes_per_run: float = 0


class DecisionInputs(DocumentModel):
    """Everything one scoring pass reads, bundled for explicit injection."""

    promo_queue: PromotionQueue = PromotionQueue()
    overrides: Dict[str, SlugOverride] = Field(default_factory=dict)
    worthiness: WorthinessRubric = WorthinessRubric()
    engagement: EngagementSummary = EngagementSummary()
    history: List[PromotionEvent] = Field(default_factory=list)
    cost: CostProjection = CostProjection()
    experiments: ExperimentRoster = ExperimentRoster()
