"""Operator-facing summaries of generated populations."""

from collections import Counter
from collections.abc import Iterable

from pydantic import BaseModel

from raritygen.core.models import GenerationResult, RarityConfig


class ScoreStats(BaseModel):
    count: int = 0
    min_score: int | None = None
    max_score: int | None = None
    mean_score: float | None = None


def score_stats(results: Iterable[GenerationResult]) -> ScoreStats:
    scores = [r.score for r in results if r.success and r.score is not None]
    if not scores:
        return ScoreStats()
    return ScoreStats(
        count=len(scores),
        min_score=min(scores),
        max_score=max(scores),
        mean_score=sum(scores) / len(scores),
    )


def tier_distribution(results: Iterable[GenerationResult]) -> dict[str, int]:
    """Committed items per tier, keyed in first-seen order."""
    counts = Counter(r.tier_id for r in results if r.success and r.tier_id)
    return dict(counts)


def tier_distribution_rows(
    distribution: dict[str, int],
    config: RarityConfig,
) -> list[tuple[str, str, int, int, str]]:
    """Compare achieved tier counts with their quotas.

    Returns list of (tier_id, name, target, achieved, status) tuples.
    """
    rows: list[tuple[str, str, int, int, str]] = []
    for tier in config.tiers:
        achieved = distribution.get(tier.id, 0)
        if achieved == tier.quota:
            status = "OK"
        elif achieved < tier.quota:
            status = "UNDER"
        else:
            status = "OVER"
        rows.append((tier.id, tier.name, tier.quota, achieved, status))
    return rows


def render_distribution(
    distribution: dict[str, int],
    config: RarityConfig,
    bar_width: int = 50,
) -> str:
    total = sum(distribution.values())
    lines: list[str] = []
    for tier_id, name, target, achieved, status in tier_distribution_rows(
        distribution, config
    ):
        share = achieved / total * 100 if total else 0.0
        bar = "#" * (round(achieved / total * bar_width) if total else 0)
        lines.append(
            f"  {tier_id:<4} {name:<16} {achieved:>6}/{target:<6} "
            f"({share:5.2f}%) {status:<5} {bar}"
        )
    return "\n".join(lines)
