from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    model_validator,
)

from raritygen.core.trace import GenerationTrace

DEFAULT_POPULATION_SIZE = 10_000


def _find_duplicates(ids: list[str]) -> list[str]:
    seen: set[str] = set()
    duplicates: list[str] = []
    for item_id in ids:
        if item_id in seen and item_id not in duplicates:
            duplicates.append(item_id)
        seen.add(item_id)
    return duplicates


# --- Configuration ---


class TierSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Tier identifier, e.g. T1")
    name: str = Field(default="", description="Display name")
    quota: StrictInt = Field(
        ge=0, description="Target population size for the tier"
    )
    score_range: tuple[StrictInt, StrictInt] = Field(
        validation_alias=AliasChoices("score_range", "scoreRange"),
        description="Inclusive [min, max] score range",
    )

    @model_validator(mode="after")
    def validate_score_range(self) -> "TierSpec":
        lo, hi = self.score_range
        if lo > hi:
            raise ValueError(
                f"score_range: min ({lo}) must be <= max ({hi})"
            )
        return self


class VariantSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("id", "name"),
        description="Variant identifier, unique within its category",
    )
    tier: str = Field(
        min_length=1,
        validation_alias=AliasChoices("tier", "tier_id"),
        description="Identifier of the tier this variant is eligible for",
    )
    points: StrictInt = Field(description="Point value added to the score")
    quota: StrictInt = Field(
        ge=0, description="Total uses across the whole population"
    )


class CategorySpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("id", "trait", "category"),
        description="Category (trait slot) identifier",
    )
    variants: tuple[VariantSpec, ...] = Field(
        min_length=1, description="Ordered variants of the category"
    )

    @model_validator(mode="after")
    def validate_unique_variants(self) -> "CategorySpec":
        duplicates = _find_duplicates([v.id for v in self.variants])
        if duplicates:
            raise ValueError(
                f"category {self.id!r} has duplicate variant ids: "
                f"{', '.join(duplicates)}"
            )
        return self

    def variants_for_tier(self, tier_id: str) -> tuple[VariantSpec, ...]:
        return tuple(v for v in self.variants if v.tier == tier_id)

    def eligible_for_tier(self, tier_id: str) -> tuple[VariantSpec, ...]:
        """Tier-tagged variants that can be drawn at least once."""
        return tuple(
            v for v in self.variants if v.tier == tier_id and v.quota > 0
        )

    def variant(self, variant_id: str) -> VariantSpec:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        raise KeyError(
            f"Unknown variant {variant_id!r} in category {self.id!r}"
        )


class RarityConfig(BaseModel):
    """Immutable description of tiers and categories for one population."""

    model_config = ConfigDict(frozen=True)

    population_size: StrictInt = Field(
        default=DEFAULT_POPULATION_SIZE,
        gt=0,
        validation_alias=AliasChoices(
            "population_size", "collectionSize", "collection_size"
        ),
        description="Number of items in the population",
    )
    tiers: tuple[TierSpec, ...] = Field(
        min_length=1, description="Tiers in configured order"
    )
    categories: tuple[CategorySpec, ...] = Field(
        min_length=1,
        validation_alias=AliasChoices("categories", "traits"),
        description="Categories in configured order",
    )

    @model_validator(mode="after")
    def validate_references(self) -> "RarityConfig":
        tier_duplicates = _find_duplicates([t.id for t in self.tiers])
        if tier_duplicates:
            raise ValueError(
                f"duplicate tier ids: {', '.join(tier_duplicates)}"
            )
        category_duplicates = _find_duplicates(
            [c.id for c in self.categories]
        )
        if category_duplicates:
            raise ValueError(
                f"duplicate category ids: {', '.join(category_duplicates)}"
            )
        tier_ids = {t.id for t in self.tiers}
        for category in self.categories:
            for variant in category.variants:
                if variant.tier not in tier_ids:
                    raise ValueError(
                        f"variant {variant.id!r} in category "
                        f"{category.id!r} references unknown tier "
                        f"{variant.tier!r}"
                    )
        return self

    @property
    def tier_ids(self) -> list[str]:
        return [t.id for t in self.tiers]

    @property
    def category_ids(self) -> list[str]:
        return [c.id for c in self.categories]

    def tier(self, tier_id: str) -> TierSpec:
        for tier in self.tiers:
            if tier.id == tier_id:
                return tier
        raise KeyError(f"Unknown tier ID: {tier_id}")

    def category(self, category_id: str) -> CategorySpec:
        for category in self.categories:
            if category.id == category_id:
                return category
        raise KeyError(f"Unknown category ID: {category_id}")


# --- Generation output ---


class Selection(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str = Field(description="Category identifier")
    variant: str = Field(description="Chosen variant identifier")
    points: int = Field(description="Configured point value of the variant")


class GenerationResult(BaseModel):
    """Outcome of one item. Immutable once produced."""

    model_config = ConfigDict(frozen=True)

    success: bool = Field(description="Whether a combination was committed")
    tier_id: str | None = Field(default=None, description="Committed tier")
    tier_name: str | None = Field(
        default=None, description="Display name of the committed tier"
    )
    score: int | None = Field(
        default=None, description="Sum of the selected variants' points"
    )
    selections: tuple[Selection, ...] = Field(
        default=(), description="One selection per category, config order"
    )
    attempts: int = Field(ge=0, description="Attempts made for this item")
    error: str | None = Field(
        default=None, description="Last failure reason when unsuccessful"
    )
    trace: GenerationTrace | None = Field(
        default=None, description="Per-attempt trace when tracing is on"
    )
