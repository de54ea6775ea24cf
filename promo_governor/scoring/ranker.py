"""Decision Ranker — assigns promote / skip / defer against the budget."""

from typing import List

from promo_governor.models.decision import Decision, DecisionAction, ScoredCandidate


def rank_decisions(scored: List[ScoredCandidate], items_allowed: int) -> List[Decision]:
    """
    Sort by score (stable, so ties keep queue order) and walk the list.

    Deferred candidates are always DEFER and never consume budget.
    """
    ordered = sorted(scored, key=lambda c: -c.score)

    promoted = 0
    decisions = []
    for candidate in ordered:
        if candidate.defer:
            action = DecisionAction.DEFER
        elif promoted < items_allowed:
            action = DecisionAction.PROMOTE
            promoted += 1
        else:
            action = DecisionAction.SKIP

        decisions.append(Decision(
            slug=candidate.slug,
            action=action,
            score=candidate.score,
            explanation=list(candidate.explanation),
        ))
    return decisions
