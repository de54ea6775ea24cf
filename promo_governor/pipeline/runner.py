"""
Pipeline Runner — load documents, run the core, write outputs.

This is the only layer that touches the document store. Core functions
receive governance, configuration and the evaluation time as arguments.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ValidationError

from promo_governor.governor.applier import (
    apply_patches,
    build_audit_artifact,
    write_audit_artifact,
)
from promo_governor.governor.planner import build_patch_plan
from promo_governor.models.config import KitConfig, deep_merge
from promo_governor.models.decision import DecisionReport
from promo_governor.models.experiment import ExperimentRoster
from promo_governor.models.governance import Governance
from promo_governor.models.inputs import (
    CostProjection,
    DecisionInputs,
    EngagementSummary,
    PromotionEvent,
    PromotionQueue,
    SlugOverride,
    WorthinessRubric,
)
from promo_governor.models.patch import AuditArtifact, MutableState
from promo_governor.models.recommendation import RecommendationList
from promo_governor.scoring.engine import DecisionEngine
from promo_governor.store import documents
from promo_governor.store.documents import DocumentStore

logger = logging.getLogger(__name__)


def load_kit_config(path: Optional[Union[str, Path]]) -> KitConfig:
    """Deep-merge kit.config.json over defaults. Absent or bad file: defaults."""
    if path is None or not Path(path).is_file():
        return KitConfig()
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        merged = deep_merge(KitConfig().to_document(), raw)
        return KitConfig.model_validate(merged)
    except (OSError, ValueError, ValidationError) as exc:
        logger.warning("config %s unusable (%s), using defaults", path, exc)
        return KitConfig()


def load_governance(store: DocumentStore) -> Governance:
    return store.load(documents.GOVERNANCE, Governance)


def load_decision_inputs(store: DocumentStore) -> DecisionInputs:
    return DecisionInputs(
        promo_queue=store.load(documents.PROMO_QUEUE, PromotionQueue),
        overrides=store.load_mapping(documents.OVERRIDES, SlugOverride),
        worthiness=store.load(documents.WORTHY, WorthinessRubric),
        engagement=store.load(documents.FEEDBACK_SUMMARY, EngagementSummary),
        history=store.load_list(documents.OPS_HISTORY, PromotionEvent),
        cost=store.load(documents.BASELINE, CostProjection),
        experiments=store.load(documents.EXPERIMENTS, ExperimentRoster),
    )


def load_mutable_state(store: DocumentStore) -> MutableState:
    """Raw target documents, so patches carry forward whatever is on disk."""
    return MutableState(
        promo_queue=store.read_raw(documents.PROMO_QUEUE, default={}),
        experiments=store.read_raw(documents.EXPERIMENTS, default={}),
    )


def run_decisions(
    store: DocumentStore,
    config: KitConfig,
    as_of: datetime,
    dry_run: bool = False,
) -> DecisionReport:
    """Score the promo queue and, unless dry_run, replace promo-decisions.json."""
    governance = load_governance(store)
    inputs = load_decision_inputs(store)

    engine = DecisionEngine(budget_tier=config.budget.tier)
    report = engine.build_decisions(inputs, governance, as_of)

    if dry_run:
        logger.info("dry run: promo-decisions.json not written")
        return report

    written = report.model_copy(update={"generated_at": as_of.isoformat()})
    store.write(documents.DECISIONS_OUTPUT, written.to_document())
    return written


class PatchRunResult(BaseModel):
    artifact: AuditArtifact
    files_written: List[str] = []
    dry_run: bool = False


def run_recommendation_patch(
    store: DocumentStore,
    config: KitConfig,
    as_of: datetime,
    dry_run: bool = False,
    max_patches: Optional[int] = None,
) -> PatchRunResult:
    """Build the patch plan; unless dry_run, apply it and write the audit."""
    governance = load_governance(store)
    recommendations = store.load(documents.RECOMMENDATIONS, RecommendationList)
    state = load_mutable_state(store)
    cap = max_patches if max_patches is not None else config.guardrails.max_data_patches_per_run

    plan = build_patch_plan(recommendations.recommendations, governance, state, cap)

    if dry_run:
        return PatchRunResult(artifact=build_audit_artifact(plan, as_of), dry_run=True)

    files_written = apply_patches(plan.patches, store) if plan.patches else []
    artifact = write_audit_artifact(plan, store, as_of)
    return PatchRunResult(artifact=artifact, files_written=files_written)
