"""
Scoring Engine — combines the four signal dimensions per candidate.

Behavioral Contract:
- Total score = proof + engagement + freshness + worthiness (0-100)
- Explanation lists dimensions in that order, then experiment notes
- Only freshness may set defer
- Reads only its explicit inputs; the evaluation instant is a parameter
- Never raises on absent or empty inputs; they score zero
"""

import logging
from datetime import datetime
from typing import List

from promo_governor.models.decision import DecisionReport, ScoredCandidate
from promo_governor.models.governance import Governance
from promo_governor.models.inputs import DecisionInputs
from promo_governor.scoring.budget import DEFAULT_TIER, allocate_budget
from promo_governor.scoring.experiments import evaluate_candidate_experiments
from promo_governor.scoring.ranker import rank_decisions
from promo_governor.signals.readers import (
    compute_engagement_score,
    compute_freshness_score,
    compute_proof_score,
    compute_worthiness_score,
)

logger = logging.getLogger(__name__)


def score_candidate(
    slug: str,
    inputs: DecisionInputs,
    governance: Governance,
    as_of: datetime,
) -> ScoredCandidate:
    """Score one candidate and build its explanation trace."""
    proof = compute_proof_score(slug, inputs.overrides)
    engagement = compute_engagement_score(slug, inputs.engagement)
    freshness = compute_freshness_score(
        slug, inputs.history, governance.cooldown_days_per_slug, as_of
    )
    worthiness = compute_worthiness_score(slug, inputs.worthiness)

    dimensions = [proof, engagement, freshness, worthiness]
    explanation = [d.explanation for d in dimensions]
    explanation.extend(evaluate_candidate_experiments(
        slug,
        inputs.experiments,
        inputs.engagement,
        governance.min_experiment_data_threshold,
    ))

    return ScoredCandidate(
        slug=slug,
        score=sum(d.score for d in dimensions),
        defer=freshness.defer,
        explanation=explanation,
    )


class DecisionEngine:
    """
    Runs one batch scoring pass: score, allocate budget, rank.

    Stateless between calls. Governance, inputs and the evaluation time are
    always passed in.
    """

    def __init__(self, budget_tier: str = DEFAULT_TIER):
        self.budget_tier = budget_tier

    def score_all(
        self,
        inputs: DecisionInputs,
        governance: Governance,
        as_of: datetime,
    ) -> List[ScoredCandidate]:
        return [
            score_candidate(slug, inputs, governance, as_of)
            for slug in inputs.promo_queue.slug_ids()
        ]

    def build_decisions(
        self,
        inputs: DecisionInputs,
        governance: Governance,
        as_of: datetime,
    ) -> DecisionReport:
        """Produce the full decision report for the current queue."""
        warnings: List[str] = []

        budget, budget_warning = allocate_budget(
            inputs.cost, governance, tier=self.budget_tier
        )
        if budget_warning:
            warnings.append(budget_warning)

        if not inputs.promo_queue.slugs:
            warnings.append("Promo queue is empty: no candidates to evaluate")

        scored = self.score_all(inputs, governance, as_of)
        decisions = rank_decisions(scored, budget.items_allowed)

        for decision in decisions:
            logger.debug(
                "slug=%s action=%s score=%d",
                decision.slug, decision.action.value, decision.score,
            )

        return DecisionReport(
            decisions=decisions,
            budget=budget,
            warnings=warnings,
        )
