"""
Recommendation Translator — one recommendation in, one verdict out.

Pure function of (Recommendation, Governance, MutableState). Only re-feature
and experiment-graduation can produce a data patch; every other known
category is advisory, and an unrecognized category is reported as advisory
rather than dropped.
"""

from pydantic import ValidationError

from promo_governor.models.experiment import (
    Experiment,
    ExperimentStatus,
    InvalidTransitionError,
)
from promo_governor.models.governance import Governance
from promo_governor.models.patch import (
    EXPERIMENTS_FILE,
    PROMO_QUEUE_FILE,
    MutableState,
    Patch,
    Translation,
    TranslationKind,
)
from promo_governor.models.recommendation import Recommendation, RecommendationCategory

_ADVISORY_DEFAULTS = {
    RecommendationCategory.IMPROVE_PROOF: "Low proof engagement: improve evidence quality",
    RecommendationCategory.STUCK_SUBMISSION: "High friction submission: needs attention",
    RecommendationCategory.LINT_PROMOTION: "Lint warning pattern: consider promoting to error",
}


def _advisory(note: str) -> Translation:
    return Translation(kind=TranslationKind.ADVISORY, note=note)


def _frozen(note: str) -> Translation:
    return Translation(kind=TranslationKind.FROZEN, note=note)


def _translate_re_feature(
    rec: Recommendation, governance: Governance, state: MutableState
) -> Translation:
    if governance.decisions_frozen:
        return _frozen(f'decisionsFrozen: skipped re-feature for "{rec.slug}"')

    entries = state.queue_entries()
    capacity = governance.max_promos_per_week

    if rec.slug in state.queued_slug_ids():
        return _advisory("Already in promo queue")
    if len(entries) >= capacity:
        return _advisory(f"Promo queue full ({len(entries)}/{capacity})")

    new_slugs = [*entries, rec.slug]
    risk = f"Promo queue now has {len(new_slugs)}/{capacity} slots filled"

    score = rec.evidence.get("proofEngagementScore")
    reason = f"proof engagement: {score}" if score else "re-feature"
    return Translation(
        kind=TranslationKind.PATCH,
        note="Add to promo queue",
        risk_note=risk,
        patch=Patch(
            category=rec.category,
            slug=rec.slug,
            target_file=PROMO_QUEUE_FILE,
            description=f"Add {rec.slug} to promo queue ({reason})",
            apply={"slugs": new_slugs},
            risk_note=risk,
        ),
    )


def _translate_graduation(
    rec: Recommendation, governance: Governance, state: MutableState
) -> Translation:
    if governance.experiments_frozen:
        return _frozen(f'experimentsFrozen: skipped graduation for "{rec.slug}"')

    entries = state.experiment_entries()
    index = next(
        (i for i, e in enumerate(entries) if isinstance(e, dict) and e.get("id") == rec.slug),
        None,
    )
    if index is None:
        return _advisory(f'Experiment "{rec.slug}" not found in {EXPERIMENTS_FILE}')
    try:
        experiment = Experiment.model_validate(entries[index])
    except ValidationError:
        return _advisory(f'Experiment "{rec.slug}" is malformed in {EXPERIMENTS_FILE}')

    if experiment.status == ExperimentStatus.CONCLUDED:
        return _advisory(f'Experiment "{rec.slug}" already concluded')
    try:
        concluded = experiment.transition(ExperimentStatus.CONCLUDED)
    except InvalidTransitionError:
        return _advisory(
            f'Experiment "{rec.slug}" is {experiment.status.value}; '
            f"only active experiments can be concluded"
        )

    # Only the graduated entry changes; the rest are carried over as read.
    updated = list(entries)
    updated[index] = {**entries[index], "status": concluded.status.value}
    risk = f"Experiment {rec.slug} will be marked concluded"
    winner = rec.evidence.get("winnerKey") or "unknown"
    return Translation(
        kind=TranslationKind.PATCH,
        note="Graduate experiment",
        risk_note=risk,
        patch=Patch(
            category=rec.category,
            slug=rec.slug,
            target_file=EXPERIMENTS_FILE,
            description=f"Graduate experiment {rec.slug} (winner: {winner})",
            apply={"experiments": updated},
            risk_note=risk,
        ),
    )


def translate_recommendation(
    rec: Recommendation,
    governance: Governance,
    state: MutableState,
) -> Translation:
    """Map a recommendation to a patch, advisory, or frozen verdict."""
    category = RecommendationCategory.from_raw(rec.category)

    if category is RecommendationCategory.RE_FEATURE:
        return _translate_re_feature(rec, governance, state)
    elif category is RecommendationCategory.EXPERIMENT_GRADUATION:
        return _translate_graduation(rec, governance, state)
    elif category in (
        RecommendationCategory.IMPROVE_PROOF,
        RecommendationCategory.STUCK_SUBMISSION,
        RecommendationCategory.LINT_PROMOTION,
    ):
        return _advisory(rec.insight or _ADVISORY_DEFAULTS[category])
    else:
        return _advisory(f'Unknown category "{rec.category}": advisory only')
