"""Reference configuration: 9 tiers, 6 categories x 26 variants, N=10,000."""

from typing import Any

from raritygen.config import load_config
from raritygen.core.models import DEFAULT_POPULATION_SIZE, RarityConfig

REFERENCE_CATEGORY_IDS = ("socks", "shoes", "pants", "shirt", "face", "hat")

# (id, name, quota, variants per category)
REFERENCE_TIERS: tuple[tuple[str, str, int, int], ...] = (
    ("T1", "Minimal", 10, 1),
    ("T2", "Low", 100, 2),
    ("T3", "BelowAverage", 500, 3),
    ("T4", "Moderate", 2390, 4),
    ("T5", "Common", 4000, 6),
    ("T6", "AboveAverage", 2390, 4),
    ("T7", "High", 500, 3),
    ("T8", "Peak", 100, 2),
    ("T9", "Maximal", 10, 1),
)

POINTS_PER_LEVEL = 10


def split_quota(total: int, parts: int) -> list[int]:
    """Split ``total`` into ``parts`` near-equal shares, larger shares first."""
    if parts < 1:
        raise ValueError(f"parts must be >= 1, got {parts}")
    base, extra = divmod(total, parts)
    return [base + (1 if i < extra else 0) for i in range(parts)]


def _variant_offsets(n_variants: int) -> list[int]:
    if n_variants == 1:
        return [0]
    return [(i % 3) - 1 for i in range(n_variants)]


def reference_config_data(
    category_ids: tuple[str, ...] = REFERENCE_CATEGORY_IDS,
) -> dict[str, Any]:
    """Build the reference document.

    Variants of tier level k score ``10k - 1``, ``10k`` or ``10k + 1``; the
    tier range spans every such combination, and single-variant tiers get a
    single-point range.
    """
    n_categories = len(category_ids)
    tiers: list[dict[str, Any]] = []
    for level, (tier_id, name, quota, n_variants) in enumerate(
        REFERENCE_TIERS, start=1
    ):
        center = POINTS_PER_LEVEL * level * n_categories
        spread = 0 if n_variants == 1 else n_categories
        tiers.append(
            {
                "id": tier_id,
                "name": name,
                "quota": quota,
                "score_range": [center - spread, center + spread],
            }
        )

    categories: list[dict[str, Any]] = []
    for category_id in category_ids:
        variants: list[dict[str, Any]] = []
        for level, (tier_id, _, quota, n_variants) in enumerate(
            REFERENCE_TIERS, start=1
        ):
            for share, offset in zip(
                split_quota(quota, n_variants),
                _variant_offsets(n_variants),
                strict=True,
            ):
                variants.append(
                    {
                        "id": f"{category_id}_{len(variants) + 1:02d}",
                        "tier": tier_id,
                        "points": POINTS_PER_LEVEL * level + offset,
                        "quota": share,
                    }
                )
        categories.append({"id": category_id, "variants": variants})

    return {
        "population_size": DEFAULT_POPULATION_SIZE,
        "tiers": tiers,
        "categories": categories,
    }


def reference_config() -> RarityConfig:
    return load_config(reference_config_data())
