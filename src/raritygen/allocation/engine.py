"""Per-item retry loop, quota commits, and whole-population validation."""

import logging
import random
from collections.abc import Callable, Iterator, Mapping
from enum import Enum

from pydantic import BaseModel, Field

from raritygen.allocation.quota import QuotaState, TierStatus
from raritygen.allocation.score import in_range, score
from raritygen.allocation.tiers import bell_curve_multipliers, select_tier
from raritygen.allocation.variants import select_variants
from raritygen.core.errors import ExhaustionError, ValidationError
from raritygen.core.models import GenerationResult, RarityConfig
from raritygen.core.sampling import DEFAULT_SEED, LcgRandom
from raritygen.core.trace import GenerationTrace, TraceStep
from raritygen.core.validate import Issue, Severity
from raritygen.report import score_stats, tier_distribution

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 100
DEFAULT_PROGRESS_EVERY = 100

CODE_TIER_QUOTA_REMAINING = "TIER_QUOTA_REMAINING"
CODE_VARIANT_QUOTA_REMAINING = "VARIANT_QUOTA_REMAINING"


class AttemptOutcome(str, Enum):
    COMMITTED = "committed"
    RANGE_MISMATCH = "range_mismatch"
    EXHAUSTED = "exhausted"


class GenerationStatus(BaseModel):
    total_generated: int = Field(description="Items committed so far")
    total_remaining: int = Field(description="Remaining tier capacity")
    population_size: int
    progress: float = Field(description="Percent of population committed")
    tiers: list[TierStatus]
    variants: dict[str, dict[str, int]] = Field(
        description="category -> variant -> remaining"
    )


class RunSummary(BaseModel):
    requested: int
    succeeded: int = 0
    failed: int = 0
    stopped: bool = False
    total_attempts: int = 0
    tier_distribution: dict[str, int] = Field(default_factory=dict)
    min_score: int | None = None
    max_score: int | None = None
    mean_score: float | None = None
    status: GenerationStatus
    issues: list[Issue] = Field(
        default_factory=list,
        description="Completion failures; empty for a complete run",
    )

    @property
    def complete(self) -> bool:
        return not self.stopped and not self.issues


def _build_trace(steps: list[TraceStep] | None) -> GenerationTrace | None:
    if steps is None:
        return None
    return GenerationTrace(steps=tuple(steps))


class RarityEngine:
    """Sequential generator over one configuration and one QuotaState."""

    def __init__(
        self,
        config: RarityConfig,
        *,
        rng: random.Random | None = None,
        seed: int = DEFAULT_SEED,
        max_retries: int = DEFAULT_MAX_RETRIES,
        multipliers: Mapping[str, float] | None = None,
        record_trace: bool = False,
    ):
        if max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {max_retries}")
        self.config = config
        self.quota = QuotaState.initialize(config)
        self.rng = rng if rng is not None else LcgRandom(seed)
        self.max_retries = max_retries
        self.multipliers = (
            dict(multipliers)
            if multipliers is not None
            else bell_curve_multipliers(config.tier_ids)
        )
        self.record_trace = record_trace
        self.committed = 0

    def generate_item(self) -> GenerationResult:
        steps: list[TraceStep] | None = [] if self.record_trace else None
        last_error: str | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                tier_id = select_tier(self.quota, self.rng, self.multipliers)
                selections = select_variants(tier_id, self.quota, self.rng)
            except ExhaustionError as err:
                last_error = str(err)
                logger.debug("Attempt %d failed: %s", attempt, last_error)
                if steps is not None:
                    steps.append(
                        TraceStep(
                            step=f"attempt_{attempt}",
                            choice=AttemptOutcome.EXHAUSTED.value,
                            value={
                                "tier_id": err.tier_id,
                                "category_id": err.category_id,
                                "error": last_error,
                            },
                        )
                    )
                continue

            total = score(selections)
            if not in_range(total, tier_id, self.config):
                lo, hi = self.config.tier(tier_id).score_range
                last_error = (
                    f"score {total} outside tier {tier_id} range [{lo}, {hi}]"
                )
                logger.debug("Attempt %d failed: %s", attempt, last_error)
                if steps is not None:
                    steps.append(
                        TraceStep(
                            step=f"attempt_{attempt}",
                            choice=AttemptOutcome.RANGE_MISMATCH.value,
                            value={
                                "tier_id": tier_id,
                                "score": total,
                                "variants": [s.variant for s in selections],
                            },
                        )
                    )
                continue

            self.quota.commit(tier_id, selections)
            self.committed += 1
            if steps is not None:
                steps.append(
                    TraceStep(
                        step=f"attempt_{attempt}",
                        choice=AttemptOutcome.COMMITTED.value,
                        value={"tier_id": tier_id, "score": total},
                    )
                )
            tier = self.config.tier(tier_id)
            return GenerationResult(
                success=True,
                tier_id=tier.id,
                tier_name=tier.name,
                score=total,
                selections=tuple(selections),
                attempts=attempt,
                trace=_build_trace(steps),
            )

        return GenerationResult(
            success=False,
            attempts=self.max_retries,
            error=(
                f"Failed to generate item after {self.max_retries} "
                f"attempts: {last_error}"
            ),
            trace=_build_trace(steps),
        )

    def generate(
        self,
        count: int | None = None,
        *,
        should_stop: Callable[[], bool] | None = None,
    ) -> Iterator[GenerationResult]:
        """Yield ``count`` items (default: remaining tier capacity).

        ``should_stop`` is polled between items, never mid-attempt.
        """
        if count is None:
            count = self.quota.total_remaining
        for index in range(count):
            if should_stop is not None and should_stop():
                logger.info("Stop requested after %d item(s)", index)
                return
            yield self.generate_item()

    def status(self) -> GenerationStatus:
        snapshot = self.quota.snapshot()
        return GenerationStatus(
            total_generated=self.committed,
            total_remaining=self.quota.total_remaining,
            population_size=self.config.population_size,
            progress=self.committed / self.config.population_size * 100,
            tiers=snapshot.tiers,
            variants=snapshot.variants,
        )

    def completion_issues(self) -> list[Issue]:
        issues: list[Issue] = []
        for tier in self.config.tiers:
            remaining = self.quota.remaining_tier(tier.id)
            if remaining != 0:
                issues.append(
                    Issue(
                        code=CODE_TIER_QUOTA_REMAINING,
                        severity=Severity.ERROR,
                        message=f"tier {tier.id} has {remaining} remaining",
                        location=f"tiers.{tier.id}",
                    )
                )
        for category in self.config.categories:
            for variant in category.variants:
                remaining = self.quota.remaining_variant(
                    category.id, variant.id
                )
                if remaining != 0:
                    issues.append(
                        Issue(
                            code=CODE_VARIANT_QUOTA_REMAINING,
                            severity=Severity.ERROR,
                            message=(
                                f"variant {variant.id} in {category.id} has "
                                f"{remaining} remaining"
                            ),
                            location=f"categories.{category.id}.{variant.id}",
                        )
                    )
        return issues

    def validate_completion(self) -> None:
        """Raise ValidationError unless every counter is exactly zero."""
        issues = self.completion_issues()
        if issues:
            raise ValidationError(issues)


def _remaining_line(status: GenerationStatus) -> str:
    return " ".join(f"{t.id}={t.remaining}" for t in status.tiers)


def run_generation(
    config: RarityConfig,
    *,
    count: int | None = None,
    rng: random.Random | None = None,
    seed: int = DEFAULT_SEED,
    max_retries: int = DEFAULT_MAX_RETRIES,
    multipliers: Mapping[str, float] | None = None,
    record_trace: bool = False,
    should_stop: Callable[[], bool] | None = None,
    progress_every: int = DEFAULT_PROGRESS_EVERY,
    validate: bool = True,
) -> tuple[list[GenerationResult], RunSummary]:
    """Generate a population and summarize it.

    ``count`` defaults to the configured population size. Item failures are
    counted, not raised. With ``validate`` set, a run that finishes with any
    nonzero counter raises ValidationError; a stopped run is never validated.
    """
    engine = RarityEngine(
        config,
        rng=rng,
        seed=seed,
        max_retries=max_retries,
        multipliers=multipliers,
        record_trace=record_trace,
    )
    requested = config.population_size if count is None else count
    results: list[GenerationResult] = []
    succeeded = 0
    failed = 0
    total_attempts = 0

    for result in engine.generate(requested, should_stop=should_stop):
        results.append(result)
        total_attempts += result.attempts
        if result.success:
            succeeded += 1
        else:
            failed += 1
            logger.warning("Item %d failed: %s", len(results), result.error)
        if progress_every > 0 and len(results) % progress_every == 0:
            logger.info(
                "%d/%d items | success=%d failed=%d | mean attempts %.2f | "
                "remaining %s",
                len(results),
                requested,
                succeeded,
                failed,
                total_attempts / len(results),
                _remaining_line(engine.status()),
            )

    stopped = len(results) < requested
    stats = score_stats(results)
    summary = RunSummary(
        requested=requested,
        succeeded=succeeded,
        failed=failed,
        stopped=stopped,
        total_attempts=total_attempts,
        tier_distribution=tier_distribution(results),
        min_score=stats.min_score,
        max_score=stats.max_score,
        mean_score=stats.mean_score,
        status=engine.status(),
        issues=[] if stopped else engine.completion_issues(),
    )
    logger.info(
        "Generation finished: %d succeeded, %d failed, %d attempts",
        succeeded,
        failed,
        total_attempts,
    )
    if validate and summary.issues:
        raise ValidationError(summary.issues)
    return results, summary
