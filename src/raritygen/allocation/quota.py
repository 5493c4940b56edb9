"""Remaining-capacity counters for one generation run."""

from collections.abc import Sequence

from pydantic import BaseModel, Field

from raritygen.core.models import RarityConfig, Selection


class TierStatus(BaseModel):
    id: str
    name: str
    remaining: int
    original_quota: int


class QuotaSnapshot(BaseModel):
    tiers: list[TierStatus] = Field(description="Tiers in configured order")
    variants: dict[str, dict[str, int]] = Field(
        description="category -> variant -> remaining"
    )


class QuotaState:
    """Mutable tier and variant counters derived from one configuration.

    Scoped to a single run: selectors only read it, and ``commit`` is the
    only mutation.
    """

    def __init__(self, config: RarityConfig):
        self.config = config
        self._tiers: dict[str, int] = {t.id: t.quota for t in config.tiers}
        self._variants: dict[str, dict[str, int]] = {
            c.id: {v.id: v.quota for v in c.variants}
            for c in config.categories
        }

    @classmethod
    def initialize(cls, config: RarityConfig) -> "QuotaState":
        return cls(config)

    def remaining_tier(self, tier_id: str) -> int:
        try:
            return self._tiers[tier_id]
        except KeyError:
            raise KeyError(f"Unknown tier ID: {tier_id}") from None

    def remaining_variant(self, category_id: str, variant_id: str) -> int:
        try:
            return self._variants[category_id][variant_id]
        except KeyError:
            raise KeyError(
                f"Unknown variant {variant_id!r} in category {category_id!r}"
            ) from None

    @property
    def total_remaining(self) -> int:
        return sum(self._tiers.values())

    def commit(self, tier_id: str, selections: Sequence[Selection]) -> None:
        """Decrement the tier and every selected variant by one.

        All counters are checked before any is touched, so a rejected
        commit leaves the state unchanged.
        """
        if self.remaining_tier(tier_id) <= 0:
            raise ValueError(f"Tier {tier_id} has no remaining quota")
        for selection in selections:
            if self.remaining_variant(selection.category, selection.variant) <= 0:
                raise ValueError(
                    f"Variant {selection.variant} in {selection.category} "
                    "has no remaining quota"
                )

        self._tiers[tier_id] -= 1
        for selection in selections:
            self._variants[selection.category][selection.variant] -= 1

    def snapshot(self) -> QuotaSnapshot:
        return QuotaSnapshot(
            tiers=[
                TierStatus(
                    id=tier.id,
                    name=tier.name,
                    remaining=self._tiers[tier.id],
                    original_quota=tier.quota,
                )
                for tier in self.config.tiers
            ],
            variants={
                category_id: dict(counters)
                for category_id, counters in self._variants.items()
            },
        )
