"""allocation: quota-exact tier and variant assignment for a population."""

from raritygen.allocation.engine import (
    GenerationStatus,
    RarityEngine,
    RunSummary,
    run_generation,
)
from raritygen.allocation.feasibility import check_feasibility, reachable_scores
from raritygen.allocation.quota import QuotaState
from raritygen.allocation.score import in_range, score, verify_result
from raritygen.allocation.tiers import bell_curve_multipliers, select_tier
from raritygen.allocation.variants import select_variants

__all__ = [
    "GenerationStatus",
    "QuotaState",
    "RarityEngine",
    "RunSummary",
    "bell_curve_multipliers",
    "check_feasibility",
    "in_range",
    "reachable_scores",
    "run_generation",
    "score",
    "select_tier",
    "select_variants",
    "verify_result",
]
