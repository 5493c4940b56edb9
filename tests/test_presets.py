import pytest

from raritygen.config import quota_sum_issues
from raritygen.presets import (
    REFERENCE_CATEGORY_IDS,
    REFERENCE_TIERS,
    reference_config,
    reference_config_data,
    split_quota,
)


class TestSplitQuota:
    def test_even_split(self) -> None:
        assert split_quota(100, 2) == [50, 50]

    def test_larger_shares_first(self) -> None:
        assert split_quota(2390, 4) == [598, 598, 597, 597]
        assert split_quota(4000, 6) == [667, 667, 667, 667, 666, 666]

    def test_single_part(self) -> None:
        assert split_quota(10, 1) == [10]

    def test_rejects_zero_parts(self) -> None:
        with pytest.raises(ValueError, match="parts"):
            split_quota(10, 0)


class TestReferenceConfig:
    def test_shape(self) -> None:
        config = reference_config()
        assert config.population_size == 10_000
        assert config.tier_ids == [f"T{i}" for i in range(1, 10)]
        assert config.category_ids == list(REFERENCE_CATEGORY_IDS)
        assert [t.name for t in config.tiers] == [
            name for _, name, _, _ in REFERENCE_TIERS
        ]

    def test_quotas(self) -> None:
        config = reference_config()
        assert [t.quota for t in config.tiers] == [
            10, 100, 500, 2390, 4000, 2390, 500, 100, 10
        ]
        assert quota_sum_issues(config) == []

    def test_variant_counts_per_tier(self) -> None:
        config = reference_config()
        for category in config.categories:
            for tier_id, _, quota, n_variants in REFERENCE_TIERS:
                tagged = category.variants_for_tier(tier_id)
                assert len(tagged) == n_variants
                assert sum(v.quota for v in tagged) == quota

    def test_extreme_tiers(self) -> None:
        config = reference_config()
        assert config.tier("T1").score_range == (60, 60)
        assert config.tier("T9").score_range == (540, 540)
        assert config.category("hat").variants_for_tier("T9")[0].points == 90

    def test_variant_ids(self) -> None:
        config = reference_config()
        ids = [v.id for v in config.category("socks").variants]
        assert ids[0] == "socks_01"
        assert ids[-1] == "socks_26"

    def test_custom_categories(self) -> None:
        data = reference_config_data(("head", "body"))
        assert [c["id"] for c in data["categories"]] == ["head", "body"]
        assert data["tiers"][0]["score_range"] == [20, 20]
