"""Error taxonomy for rarity allocation."""

from raritygen.core.validate import Issue, format_issues


class RarityError(Exception):
    """Base class for every error raised by raritygen."""


class ConfigurationError(RarityError, ValueError):
    """Malformed or incomplete configuration. Raised at load, never later."""


class ExhaustionError(RarityError):
    """No eligible tier, or no eligible variant in a category for a tier."""

    def __init__(
        self,
        message: str,
        *,
        tier_id: str | None = None,
        category_id: str | None = None,
    ):
        self.tier_id = tier_id
        self.category_id = category_id
        super().__init__(message)


class RangeMismatch(RarityError):
    """A score outside the declared range of its tier."""

    def __init__(
        self, *, score: int, tier_id: str, score_range: tuple[int, int]
    ):
        self.score = score
        self.tier_id = tier_id
        self.score_range = score_range
        super().__init__(
            f"score {score} outside tier {tier_id} range "
            f"[{score_range[0]}, {score_range[1]}]"
        )


class ValidationError(RarityError):
    """Post-run quota mismatch. Output of the run must not be used."""

    def __init__(self, issues: list[Issue]):
        self.issues = issues
        super().__init__(
            f"Generation incomplete ({len(issues)} counter(s) nonzero): "
            f"{format_issues(issues)}"
        )
