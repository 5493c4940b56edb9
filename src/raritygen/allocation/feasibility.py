"""Configuration-time feasibility analysis for tiers."""

from raritygen.core.models import RarityConfig
from raritygen.core.validate import Issue, Severity

CODE_TIER_CATEGORY_EMPTY = "TIER_CATEGORY_EMPTY"
CODE_TIER_SCORE_UNREACHABLE = "TIER_SCORE_UNREACHABLE"
CODE_TIER_VARIANT_QUOTA_MISMATCH = "TIER_VARIANT_QUOTA_MISMATCH"


def reachable_scores(config: RarityConfig, tier_id: str) -> set[int]:
    """Every score reachable by one drawable tier-tagged variant per category.

    Zero-quota variants are never drawn, so they do not count. Empty when
    some category has no drawable variant for the tier.
    """
    sums = {0}
    for category in config.categories:
        points = {v.points for v in category.eligible_for_tier(tier_id)}
        if not points:
            return set()
        sums = {total + p for total in sums for p in points}
    return sums


def check_feasibility(config: RarityConfig) -> list[Issue]:
    issues: list[Issue] = []
    for tier in config.tiers:
        empty_categories: list[str] = []
        for category in config.categories:
            tagged = category.variants_for_tier(tier.id)
            if not category.eligible_for_tier(tier.id):
                empty_categories.append(category.id)
            tagged_quota = sum(v.quota for v in tagged)
            if tagged_quota != tier.quota:
                issues.append(
                    Issue(
                        code=CODE_TIER_VARIANT_QUOTA_MISMATCH,
                        severity=Severity.WARNING,
                        message=(
                            f"variants tagged {tier.id} in {category.id} "
                            f"have total quota {tagged_quota}, tier quota is "
                            f"{tier.quota}"
                        ),
                        location=f"categories.{category.id}.{tier.id}",
                    )
                )

        if tier.quota == 0:
            continue
        if empty_categories:
            issues.append(
                Issue(
                    code=CODE_TIER_CATEGORY_EMPTY,
                    severity=Severity.ERROR,
                    message=(
                        f"tier {tier.id} has quota {tier.quota} but no "
                        f"variants with quota in: {', '.join(empty_categories)}"
                    ),
                    location=f"tiers.{tier.id}",
                )
            )
            continue

        lo, hi = tier.score_range
        reachable = reachable_scores(config, tier.id)
        if not any(lo <= s <= hi for s in reachable):
            issues.append(
                Issue(
                    code=CODE_TIER_SCORE_UNREACHABLE,
                    severity=Severity.ERROR,
                    message=(
                        f"no combination of {tier.id} variants sums into "
                        f"[{lo}, {hi}] (reachable {min(reachable)}.."
                        f"{max(reachable)})"
                    ),
                    location=f"tiers.{tier.id}",
                )
            )
    return issues
