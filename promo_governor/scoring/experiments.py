"""
Experiment Evaluator — annotates a candidate's trace with A/B results.

Experiments never change the four-dimension score. Each active experiment
attached to a candidate yields exactly one note:

  no feedback data      -> "no feedback data available"
  any arm below minimum -> "insufficient data"
  best/second > 2       -> "variant X outperforms at Nx"
  otherwise             -> "no clear winner"
  second-best rate 0    -> informational, no comparison possible
"""

import logging
from typing import Dict, List

from promo_governor.models.experiment import Experiment, ExperimentArm, ExperimentRoster
from promo_governor.models.inputs import EngagementSummary, OutcomeCounts
from promo_governor.signals.readers import round_half_up

logger = logging.getLogger(__name__)

WINNER_RATIO = 2


def build_arms(arm_counts: Dict[str, OutcomeCounts]) -> List[ExperimentArm]:
    """Arms ranked by reply rate, descending. Ties keep document order."""
    arms = []
    for key, counts in arm_counts.items():
        entries = counts.entry_count
        rate = counts.replied / entries if entries > 0 else 0.0
        arms.append(ExperimentArm(
            key=key, entries=entries, replied=counts.replied, rate=rate,
        ))
    return sorted(arms, key=lambda a: -a.rate)


def evaluate_experiment(
    experiment: Experiment,
    engagement: EngagementSummary,
    min_entries: int,
) -> str:
    """Return the trace note for one experiment."""
    arm_counts = engagement.per_experiment.get(experiment.id)
    if not arm_counts:
        return f"experiment {experiment.id}: no feedback data available"

    arms = build_arms(arm_counts)
    sufficient = len(arms) >= 2 and all(a.entries >= min_entries for a in arms)
    if not sufficient:
        return (
            f"experiment {experiment.id}: insufficient data "
            f"(need >={min_entries} per arm)"
        )

    best, second = arms[0], arms[1]
    if second.rate > 0:
        ratio = round_half_up(best.rate / second.rate, 2)
        if ratio > WINNER_RATIO:
            return (
                f"experiment {experiment.id}: variant {best.key} "
                f"outperforms at {ratio:g}x"
            )
        return (
            f"experiment {experiment.id}: no clear winner "
            f"(best {best.key} at {ratio:g}x, needs >{WINNER_RATIO}x)"
        )

    if best.rate > 0:
        return (
            f"experiment {experiment.id}: only variant {best.key} has replies "
            f"(informational, no comparison possible)"
        )
    return f"experiment {experiment.id}: no replies in any arm yet"


def evaluate_candidate_experiments(
    slug: str,
    roster: ExperimentRoster,
    engagement: EngagementSummary,
    min_entries: int,
) -> List[str]:
    """Notes for every active experiment on slug, in roster order."""
    notes = []
    for experiment in roster.active_for(slug):
        note = evaluate_experiment(experiment, engagement, min_entries)
        logger.debug("slug=%s %s", slug, note)
        notes.append(note)
    return notes
