"""Budget Allocator — how many promotions this cycle can afford."""

import logging
import math
from typing import List, Optional, Tuple

from promo_governor.models.decision import Budget
from promo_governor.models.governance import Governance
from promo_governor.models.inputs import CostProjection

logger = logging.getLogger(__name__)

DEFAULT_TIER = "200"


def allocate_budget(
    cost: CostProjection,
    governance: Governance,
    tier: str = DEFAULT_TIER,
) -> Tuple[Budget, Optional[str]]:
    """
    Convert the cost projection into an integer item allowance.

    Returns (budget, warning). With no run history the governance cap applies
    unconstrained; otherwise the cap is further limited by how many average
    runs fit in the tier's headroom. A tier missing from the projection is
    assumed to be untouched, so its headroom is the tier size itself.
    """
    tier_budget = cost.minute_budgets.get(str(tier))
    if tier_budget is not None:
        headroom = tier_budget.headroom
    else:
        try:
            headroom = float(tier)
        except ValueError:
            headroom = 0.0

    cap = governance.max_promos_per_week
    avg = cost.avg_minutes_per_run

    if avg <= 0:
        items_allowed = cap
    else:
        items_allowed = max(0, min(cap, math.floor(headroom / avg)))

    warning = None
    if items_allowed == 0 and avg > 0:
        warning = (
            f"Budget headroom ({headroom:g} min) insufficient for even one run "
            f"(avg {avg:g} min/run)"
        )
        logger.warning(warning)

    tier_key = int(tier) if str(tier).isdigit() else str(tier)
    return Budget(tier=tier_key, headroom=headroom, items_allowed=items_allowed), warning
