"""
Signal Readers — one scoring dimension each.

Every reader is a pure function of (slug, source document) and returns a
SignalScore whose explanation carries the numeric contribution. The
explanation strings end up verbatim in the decision trace.

  proof       0-30   +15 public proof, +3 per proven claim (max 5 claims)
  engagement  0-30   reply rate mapped onto 30 points
  freshness   0-20   0 and defer while inside the cooldown window
  worthiness  0-20   +20 when the rubric marks the slug worthy
"""

import math
from datetime import datetime, timezone
from typing import Dict, List, Optional

from promo_governor.models.decision import SignalScore
from promo_governor.models.inputs import (
    EngagementSummary,
    PromotionEvent,
    SlugOverride,
    WorthinessRubric,
)

PUBLIC_PROOF_POINTS = 15
POINTS_PER_CLAIM = 3
MAX_COUNTED_CLAIMS = 5
ENGAGEMENT_SCALE = 30
FRESHNESS_POINTS = 20
WORTHY_POINTS = 20


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for positives (2.5 -> 3, not 2)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _parse_date(raw: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date or datetime; naive values are taken as UTC."""
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def compute_proof_score(slug: str, overrides: Dict[str, SlugOverride]) -> SignalScore:
    entry = overrides.get(slug) or SlugOverride()
    score = 0
    parts: List[str] = []

    if entry.public_proof:
        score += PUBLIC_PROOF_POINTS
        parts.append(f"+{PUBLIC_PROOF_POINTS} publicProof")

    claims = min(len(entry.proven_claims), MAX_COUNTED_CLAIMS)
    claim_points = claims * POINTS_PER_CLAIM
    score += claim_points
    if claims > 0:
        parts.append(f"proven claims: {claims} -> +{claim_points}")

    detail = ", ".join(parts) if parts else "+0"
    return SignalScore(
        score=score,
        explanation=f"publicProof: {detail} (total proof: {score})",
    )


def compute_engagement_score(slug: str, engagement: EngagementSummary) -> SignalScore:
    counts = engagement.per_slug.get(slug)
    if counts is None:
        return SignalScore(score=0, explanation="engagement: no data -> +0")

    total = counts.total
    reply_rate = counts.replied / total if total > 0 else 0.0
    score = int(round_half_up(reply_rate * ENGAGEMENT_SCALE))
    return SignalScore(
        score=score,
        explanation=f"engagement: replyRate {reply_rate:.2f} -> +{score}",
    )


def compute_freshness_score(
    slug: str,
    history: List[PromotionEvent],
    cooldown_days: int,
    as_of: datetime,
) -> SignalScore:
    """
    Freshness from the most recent promotion of slug.

    history must be ordered newest first; the first hit wins. as_of is the
    evaluation instant and is always supplied by the caller.
    """
    last_event = next((e for e in history if slug in e.promoted()), None)
    if last_event is None or not last_event.date:
        return SignalScore(
            score=FRESHNESS_POINTS,
            explanation=f"freshness: no prior promotion -> +{FRESHNESS_POINTS}",
        )

    promoted_at = _parse_date(last_event.date)
    if promoted_at is None:
        return SignalScore(
            score=FRESHNESS_POINTS,
            explanation=(
                f"freshness: unreadable promotion date {last_event.date!r} "
                f"-> +{FRESHNESS_POINTS}"
            ),
        )

    if as_of.tzinfo is None:
        as_of = as_of.replace(tzinfo=timezone.utc)
    days_since = (as_of - promoted_at).days

    if days_since < cooldown_days:
        return SignalScore(
            score=0,
            defer=True,
            explanation=(
                f"DEFER: within cooldown (promoted {days_since}d ago, "
                f"cooldown {cooldown_days}d)"
            ),
        )

    return SignalScore(
        score=FRESHNESS_POINTS,
        explanation=(
            f"freshness: last promoted {days_since}d ago "
            f"(cooldown {cooldown_days}d) -> +{FRESHNESS_POINTS}"
        ),
    )


def compute_worthiness_score(slug: str, rubric: WorthinessRubric) -> SignalScore:
    entry = rubric.repos.get(slug)
    is_worthy = entry is not None and entry.worthy is True
    rubric_score = entry.score if entry is not None else 0
    points = WORTHY_POINTS if is_worthy else 0
    return SignalScore(
        score=points,
        explanation=f"worthy: score {rubric_score:g} -> +{points}",
    )
