from collections.abc import Sequence

from raritygen.core.errors import RangeMismatch
from raritygen.core.models import GenerationResult, RarityConfig, Selection


def score(selections: Sequence[Selection]) -> int:
    return sum(selection.points for selection in selections)


def in_range(total: int, tier_id: str, config: RarityConfig) -> bool:
    lo, hi = config.tier(tier_id).score_range
    return lo <= total <= hi


def require_in_range(total: int, tier_id: str, config: RarityConfig) -> None:
    if not in_range(total, tier_id, config):
        raise RangeMismatch(
            score=total,
            tier_id=tier_id,
            score_range=config.tier(tier_id).score_range,
        )


def verify_result(result: GenerationResult, config: RarityConfig) -> None:
    """Re-derive a committed result's score from the configuration.

    Raises ValueError when the result names unknown or mis-tiered variants,
    and RangeMismatch when its score disagrees with the configured points or
    falls outside the tier's range.
    """
    if not result.success or result.tier_id is None or result.score is None:
        raise ValueError("only successful results can be verified")
    tier = config.tier(result.tier_id)
    if [s.category for s in result.selections] != config.category_ids:
        raise ValueError(
            "selections must cover every category in configured order"
        )

    total = 0
    for selection in result.selections:
        variant = config.category(selection.category).variant(
            selection.variant
        )
        if variant.tier != tier.id:
            raise ValueError(
                f"variant {variant.id} in {selection.category} belongs to "
                f"tier {variant.tier}, not {tier.id}"
            )
        total += variant.points

    if total != result.score:
        raise RangeMismatch(
            score=result.score, tier_id=tier.id, score_range=tier.score_range
        )
    require_in_range(total, tier.id, config)
