"""Threshold cutoff and ordering of recipe matches.

Two ranking policies:

- CATALOG_POLICY: matches against the structured catalog. Keeps recipes with
  match percentage >= 25 and orders them by match percentage.
- FREE_TEXT_POLICY: matches against AI-generated ingredient names. Keeps any
  recipe with a non-zero match and orders them by composite score.

Sorting is stable: equal keys keep their input order. No secondary key is applied.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from pantrypal.models.models import RecipeMatch


@dataclass(frozen=True)
class ThresholdPolicy:
    """How a result list is cut and ordered.

    Attributes:
        name: Policy name used in logs.
        min_match_percentage: Lowest match percentage kept (inclusive).
        sort_key: "match_percentage" or "score".
    """

    name: str
    min_match_percentage: int
    sort_key: str = "match_percentage"

    def __post_init__(self) -> None:
        if self.sort_key not in ("match_percentage", "score"):
            raise ValueError(f"sort_key must be 'match_percentage' or 'score', got: {self.sort_key}")
        if not (1 <= self.min_match_percentage <= 100):
            # A 0% recipe shares no ingredient with the user and is never surfaced
            raise ValueError(
                f"min_match_percentage must be between 1 and 100, got: {self.min_match_percentage}"
            )

    def accepts(self, match: RecipeMatch) -> bool:
        return match.match_percentage >= self.min_match_percentage

    def key(self, match: RecipeMatch) -> float:
        if self.sort_key == "score":
            if match.score is None:
                raise ValueError(f"Policy {self.name} ranks by score but recipe {match.recipe.title!r} is unscored")
            return match.score
        return match.match_percentage


CATALOG_POLICY = ThresholdPolicy(name="catalog", min_match_percentage=25, sort_key="match_percentage")
FREE_TEXT_POLICY = ThresholdPolicy(name="free-text", min_match_percentage=1, sort_key="score")


def catalog_policy(min_match_percentage: int) -> ThresholdPolicy:
    """Catalog policy with a configured threshold (CATALOG_MIN_MATCH_PERCENTAGE)."""
    if min_match_percentage == CATALOG_POLICY.min_match_percentage:
        return CATALOG_POLICY
    return ThresholdPolicy(name="catalog", min_match_percentage=max(1, min_match_percentage))


def rank(
    matches: Iterable[RecipeMatch],
    policy: ThresholdPolicy,
    limit: Optional[int] = None,
) -> List[RecipeMatch]:
    """Apply the policy threshold, then sort descending on the policy key.

    Args:
        matches: Candidate matches in input order.
        policy: CATALOG_POLICY, FREE_TEXT_POLICY or a configured variant.
        limit: Keep at most this many results after sorting.

    Returns:
        New list; the input is not modified.
    """
    kept = [match for match in matches if policy.accepts(match)]
    # sorted() is stable, reverse=True keeps equal keys in input order
    ranked = sorted(kept, key=policy.key, reverse=True)
    if limit is not None:
        ranked = ranked[: max(0, limit)]
    return ranked
