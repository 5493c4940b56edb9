import random
from collections.abc import Sequence
from typing import Any

from raritygen.config import load_config
from raritygen.core.models import RarityConfig


class ScriptedRandom(random.Random):
    """Replays a fixed list of ``random()`` values, then fails loudly."""

    def __new__(cls, values: Sequence[float]):  # noqa: ARG003
        return super().__new__(cls)

    def __init__(self, values: Sequence[float]):
        self._values = list(values)
        super().__init__(0)

    def seed(self, a=None, version=2) -> None:  # noqa: ARG002
        self.gauss_next = None

    def random(self) -> float:
        if not self._values:
            raise AssertionError("ScriptedRandom ran out of values")
        return self._values.pop(0)

    def getstate(self) -> list[float]:
        return list(self._values)

    def setstate(self, state) -> None:
        self._values = list(state)

    @property
    def remaining(self) -> int:
        return len(self._values)


def tier(
    tier_id: str, quota: int, score_range: tuple[int, int], name: str = ""
) -> dict[str, Any]:
    return {
        "id": tier_id,
        "name": name or tier_id,
        "quota": quota,
        "score_range": list(score_range),
    }


def variant(
    variant_id: str, tier_id: str, points: int, quota: int
) -> dict[str, Any]:
    return {"id": variant_id, "tier": tier_id, "points": points, "quota": quota}


def config_data(
    tiers: list[dict[str, Any]],
    categories: dict[str, list[dict[str, Any]]],
    population_size: int | None = None,
) -> dict[str, Any]:
    if population_size is None:
        population_size = sum(t["quota"] for t in tiers)
    return {
        "population_size": population_size,
        "tiers": tiers,
        "categories": [
            {"id": category_id, "variants": variants}
            for category_id, variants in categories.items()
        ],
    }


def build_config(
    tiers: list[dict[str, Any]],
    categories: dict[str, list[dict[str, Any]]],
    population_size: int | None = None,
) -> RarityConfig:
    return load_config(
        config_data(tiers, categories, population_size),
        expected_categories=None,
        expected_variants=None,
    )


def two_tier_config() -> RarityConfig:
    """Every combination lands in range; always completes."""
    return build_config(
        [tier("A", 3, (2, 2)), tier("B", 2, (4, 4))],
        {
            "c1": [variant("a1", "A", 1, 3), variant("b1", "B", 2, 2)],
            "c2": [variant("a2", "A", 1, 3), variant("b2", "B", 2, 2)],
        },
    )


def mixed_range_config() -> RarityConfig:
    """One tier, range [3, 3]: only (1, 2) and (2, 1) are valid."""
    return build_config(
        [tier("A", 2, (3, 3))],
        {
            "c1": [variant("x1", "A", 1, 1), variant("x2", "A", 2, 1)],
            "c2": [variant("y1", "A", 1, 1), variant("y2", "A", 2, 1)],
        },
    )


def exhausted_category_config() -> RarityConfig:
    """Tier T5 has quota left, but category c1 has no T5 variant left."""
    return build_config(
        [tier("T4", 1, (2, 2)), tier("T5", 1, (4, 4))],
        {
            "c1": [variant("v4", "T4", 1, 1), variant("v5", "T5", 2, 0)],
            "c2": [variant("w4", "T4", 1, 1), variant("w5", "T5", 2, 1)],
        },
    )


def stranded_variant_config() -> RarityConfig:
    """Category c2 sums to N + 1: 'spare' keeps one use after a full run."""
    return build_config(
        [tier("A", 2, (2, 2)), tier("B", 0, (2, 2))],
        {
            "c1": [variant("a1", "A", 1, 2)],
            "c2": [variant("a2", "A", 1, 2), variant("spare", "B", 1, 1)],
        },
    )
