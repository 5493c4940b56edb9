import random

from raritygen.allocation.quota import QuotaState
from raritygen.core.errors import ExhaustionError
from raritygen.core.models import Selection
from raritygen.core.sampling import pick_weighted


def select_variants(
    tier_id: str,
    quota: QuotaState,
    rng: random.Random,
) -> list[Selection]:
    """Pick one variant per category, weighted by remaining quota.

    Categories are drawn independently and in configured order, so the
    combined score is not guaranteed to land in the tier's range.
    """
    selections: list[Selection] = []
    for category in quota.config.categories:
        available = [
            variant
            for variant in category.variants_for_tier(tier_id)
            if quota.remaining_variant(category.id, variant.id) > 0
        ]
        if not available:
            raise ExhaustionError(
                f"No available variants for category {category.id} "
                f"in tier {tier_id}",
                tier_id=tier_id,
                category_id=category.id,
            )
        weights = [
            quota.remaining_variant(category.id, variant.id)
            for variant in available
        ]
        chosen = pick_weighted(available, weights, rng)
        selections.append(
            Selection(
                category=category.id,
                variant=chosen.id,
                points=chosen.points,
            )
        )
    return selections
