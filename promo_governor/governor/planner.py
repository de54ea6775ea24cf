"""
Patch-Plan Builder — sequences translations under the global patch cap.

The plan is a left fold over the ordered recommendations. The accumulator
holds the plan so far plus the evolving copy of every target document, so a
later recommendation sees the effect of each earlier accepted patch. A patch
downgraded by the cap is never folded into the evolving state.
"""

import logging
from functools import reduce
from typing import List, NamedTuple

from promo_governor.models.governance import Governance
from promo_governor.models.patch import (
    MutableState,
    PatchPlan,
    PlanNote,
    TranslationKind,
)
from promo_governor.models.recommendation import Recommendation
from promo_governor.governor.translator import translate_recommendation

logger = logging.getLogger(__name__)

MAX_DATA_PATCHES_DEFAULT = 5


class PlanState(NamedTuple):
    """Fold accumulator: the plan so far and the evolving documents."""

    plan: PatchPlan
    state: MutableState


def fold_recommendation(
    acc: PlanState,
    rec: Recommendation,
    governance: Governance,
    max_patches: int = MAX_DATA_PATCHES_DEFAULT,
) -> PlanState:
    """One fold step. Returns a new accumulator; acc is left untouched."""
    plan, state = acc
    result = translate_recommendation(rec, governance, state)
    note = PlanNote(category=rec.category, slug=rec.slug, note=result.note)

    if result.kind == TranslationKind.PATCH:
        if len(plan.patches) >= max_patches:
            logger.debug("patch cap %d reached, downgrading %s", max_patches, rec.slug)
            capped = PlanNote(
                category=rec.category,
                slug=rec.slug,
                note=f"Exceeded max patch cap ({max_patches}): {result.note}",
            )
            return PlanState(
                plan.model_copy(update={"advisory_notes": [*plan.advisory_notes, capped]}),
                state,
            )

        risk_notes = [*plan.risk_notes, result.risk_note] if result.risk_note else plan.risk_notes
        return PlanState(
            plan.model_copy(update={
                "patches": [*plan.patches, result.patch],
                "risk_notes": risk_notes,
            }),
            state.with_patch(result.patch),
        )

    if result.kind == TranslationKind.FROZEN:
        return PlanState(
            plan.model_copy(update={"frozen_actions": [*plan.frozen_actions, note]}),
            state,
        )

    return PlanState(
        plan.model_copy(update={"advisory_notes": [*plan.advisory_notes, note]}),
        state,
    )


def build_patch_plan(
    recommendations: List[Recommendation],
    governance: Governance,
    initial_state: MutableState,
    max_patches: int = MAX_DATA_PATCHES_DEFAULT,
) -> PatchPlan:
    """
    Translate every recommendation in order into one PatchPlan.

    Deterministic: identical inputs give an identical plan.
    """
    final = reduce(
        lambda acc, rec: fold_recommendation(acc, rec, governance, max_patches),
        recommendations,
        PlanState(PatchPlan(), initial_state),
    )
    plan = final.plan
    logger.info(
        "patch plan: %d patches, %d advisory, %d frozen",
        len(plan.patches), len(plan.advisory_notes), len(plan.frozen_actions),
    )
    return plan
