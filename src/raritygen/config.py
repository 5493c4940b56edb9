"""Loading and validation of rarity configuration documents."""

import logging
from pathlib import Path
from typing import Any

import srsly
from pydantic import ValidationError as PydanticValidationError

from raritygen.allocation.feasibility import check_feasibility
from raritygen.core.errors import ConfigurationError
from raritygen.core.models import RarityConfig
from raritygen.core.validate import Issue, Severity, format_issues

logger = logging.getLogger(__name__)

EXPECTED_CATEGORY_COUNT = 6
EXPECTED_VARIANT_COUNT = 26

CODE_TIER_QUOTA_SUM_MISMATCH = "TIER_QUOTA_SUM_MISMATCH"
CODE_VARIANT_QUOTA_SUM_MISMATCH = "VARIANT_QUOTA_SUM_MISMATCH"

_JSON_SUFFIXES = frozenset({".json"})
_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def _render_pydantic_error(err: PydanticValidationError) -> str:
    first_error = err.errors(include_url=False)[0]
    loc = ".".join(str(item) for item in first_error["loc"])
    message = first_error["msg"]
    if not loc:
        return message
    return f"at '{loc}': {message}"


def _check_counts(
    config: RarityConfig,
    expected_categories: int | None,
    expected_variants: int | None,
) -> None:
    if (
        expected_categories is not None
        and len(config.categories) != expected_categories
    ):
        raise ConfigurationError(
            f"Expected {expected_categories} categories, "
            f"got {len(config.categories)}"
        )
    if expected_variants is None:
        return
    for category in config.categories:
        if len(category.variants) != expected_variants:
            raise ConfigurationError(
                f"Category {category.id} must have exactly "
                f"{expected_variants} variants, got {len(category.variants)}"
            )


def quota_sum_issues(config: RarityConfig) -> list[Issue]:
    issues: list[Issue] = []
    tier_total = sum(t.quota for t in config.tiers)
    if tier_total != config.population_size:
        issues.append(
            Issue(
                code=CODE_TIER_QUOTA_SUM_MISMATCH,
                severity=Severity.WARNING,
                message=(
                    f"total tier quota = {tier_total}, expected "
                    f"{config.population_size}"
                ),
                location="tiers",
            )
        )
    for category in config.categories:
        variant_total = sum(v.quota for v in category.variants)
        if variant_total != config.population_size:
            issues.append(
                Issue(
                    code=CODE_VARIANT_QUOTA_SUM_MISMATCH,
                    severity=Severity.WARNING,
                    message=(
                        f"category {category.id} total quota = "
                        f"{variant_total}, expected {config.population_size}"
                    ),
                    location=f"categories.{category.id}",
                )
            )
    return issues


def config_issues(config: RarityConfig) -> list[Issue]:
    """Non-fatal findings: quota sums and tier feasibility."""
    return quota_sum_issues(config) + check_feasibility(config)


def load_config(
    data: dict[str, Any] | RarityConfig,
    *,
    expected_categories: int | None = EXPECTED_CATEGORY_COUNT,
    expected_variants: int | None = EXPECTED_VARIANT_COUNT,
    strict: bool = False,
    log_issues: bool = True,
) -> RarityConfig:
    """Validate a configuration document and return an independent copy.

    Structural problems raise ConfigurationError. Quota-sum and feasibility
    findings are logged as warnings (unless ``log_issues`` is off), or
    raised when ``strict`` is set.
    """
    if isinstance(data, RarityConfig):
        data = data.model_dump()
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid rarity config: expected a mapping, got "
            f"{type(data).__name__}"
        )

    try:
        config = RarityConfig.model_validate(data)
    except PydanticValidationError as err:
        raise ConfigurationError(
            f"Invalid rarity config {_render_pydantic_error(err)}"
        ) from err

    _check_counts(config, expected_categories, expected_variants)

    issues = config_issues(config)
    if strict and issues:
        raise ConfigurationError(
            f"Rarity config failed strict checks: {format_issues(issues)}"
        )
    if not log_issues:
        return config
    for issue in issues:
        logger.warning("%s: %s", issue.location, issue.message)
    return config


def read_config(path: Path, **kwargs: Any) -> RarityConfig:
    """Read a JSON or YAML document from disk and pass it to load_config."""
    if not path.exists():
        raise ConfigurationError(f"Rarity config file not found: {path}")
    suffix = path.suffix.lower()
    if suffix not in _JSON_SUFFIXES | _YAML_SUFFIXES:
        raise ConfigurationError(
            f"Unsupported config format {suffix!r} for {path} "
            "(expected .json, .yaml or .yml)"
        )
    try:
        if suffix in _JSON_SUFFIXES:
            data = srsly.read_json(path)
        else:
            data = srsly.read_yaml(path)
    except ValueError as err:
        raise ConfigurationError(
            f"Could not parse rarity config {path}: {err}"
        ) from err
    return load_config(data, **kwargs)


def config_summary(config: RarityConfig) -> str:
    lines = [
        "=== Rarity Configuration Summary ===",
        f"Population size: {config.population_size}",
        f"Tiers: {len(config.tiers)}",
        f"Categories: {len(config.categories)}",
        "",
        "Tier distribution:",
    ]
    for tier in config.tiers:
        share = tier.quota / config.population_size * 100
        lo, hi = tier.score_range
        label = f"{tier.id} ({tier.name})" if tier.name else tier.id
        lines.append(
            f"  {label}: {tier.quota} items ({share:.2f}%) - score {lo}-{hi}"
        )
    lines.append("")
    lines.append("Categories:")
    for category in config.categories:
        lines.append(f"  {category.id}: {len(category.variants)} variants")
    return "\n".join(lines)
