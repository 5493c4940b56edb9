"""Bias-weighted tier selection."""

import random
from collections.abc import Mapping

from raritygen.allocation.quota import QuotaState
from raritygen.core.errors import ExhaustionError
from raritygen.core.sampling import pick_weighted

# Outermost ring first; the median tier takes the last entry.
BELL_CURVE_RINGS: tuple[float, ...] = (0.5, 0.7, 1.2, 1.8, 2.5)


def bell_curve_multipliers(tier_ids: list[str]) -> dict[str, float]:
    """Symmetric multipliers favoring central tiers over extreme ones.

    Tiers are ranked by distance from the median position; the median gets
    2.5 and each ring outward steps down the table, bottoming out at 0.5.
    """
    n = len(tier_ids)
    center = (n - 1) / 2
    multipliers: dict[str, float] = {}
    for index, tier_id in enumerate(tier_ids):
        distance = int(abs(index - center))
        ring = max(len(BELL_CURVE_RINGS) - 1 - distance, 0)
        multipliers[tier_id] = BELL_CURVE_RINGS[ring]
    return multipliers


def tier_weights(
    quota: QuotaState,
    multipliers: Mapping[str, float] | None = None,
) -> list[tuple[str, float]]:
    """(tier_id, weight) for every tier with remaining capacity."""
    tier_ids = quota.config.tier_ids
    if multipliers is None:
        multipliers = bell_curve_multipliers(tier_ids)
    return [
        (tier_id, quota.remaining_tier(tier_id) * multipliers.get(tier_id, 1.0))
        for tier_id in tier_ids
        if quota.remaining_tier(tier_id) > 0
    ]


def select_tier(
    quota: QuotaState,
    rng: random.Random,
    multipliers: Mapping[str, float] | None = None,
) -> str:
    weighted = tier_weights(quota, multipliers)
    if not weighted:
        raise ExhaustionError("No available tiers with remaining quota")
    tier_ids = [tier_id for tier_id, _ in weighted]
    weights = [weight for _, weight in weighted]
    return pick_weighted(tier_ids, weights, rng)
