"""Promotion governance data models."""

from promo_governor.models.config import KitConfig
from promo_governor.models.decision import (
    Budget,
    Decision,
    DecisionAction,
    DecisionReport,
    ScoredCandidate,
    SignalScore,
)
from promo_governor.models.experiment import (
    Experiment,
    ExperimentArm,
    ExperimentRoster,
    ExperimentStatus,
    InvalidTransitionError,
)
from promo_governor.models.governance import Governance
from promo_governor.models.inputs import (
    CostProjection,
    DecisionInputs,
    EngagementSummary,
    OutcomeCounts,
    PromotionEvent,
    PromotionQueue,
    QueueEntry,
    SlugOverride,
    WorthinessRubric,
)
from promo_governor.models.patch import (
    AuditArtifact,
    MutableState,
    Patch,
    PatchPlan,
    PlanNote,
    Translation,
    TranslationKind,
)
from promo_governor.models.recommendation import (
    Recommendation,
    RecommendationCategory,
    RecommendationList,
)

__all__ = [
    "AuditArtifact",
    "Budget",
    "CostProjection",
    "Decision",
    "DecisionAction",
    "DecisionInputs",
    "DecisionReport",
    "EngagementSummary",
    "Experiment",
    "ExperimentArm",
    "ExperimentRoster",
    "ExperimentStatus",
    "Governance",
    "InvalidTransitionError",
    "KitConfig",
    "MutableState",
    "OutcomeCounts",
    "Patch",
    "PatchPlan",
    "PlanNote",
    "PromotionEvent",
    "PromotionQueue",
    "QueueEntry",
    "Recommendation",
    "RecommendationCategory",
    "RecommendationList",
    "ScoredCandidate",
    "SignalScore",
    "SlugOverride",
    "Translation",
    "TranslationKind",
    "WorthinessRubric",
]
