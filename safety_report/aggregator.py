"""Statistics over the full (untrimmed) set of normalized observations."""

from collections import Counter
from typing import Any

from .normalizer import RISK_LEVELS, UNKNOWN_LOCATION

DEFAULT_TOP_CATEGORIES = 5


def compute_statistics(
    observations: list[dict[str, Any]],
    top_category_limit: int = DEFAULT_TOP_CATEGORIES,
) -> dict[str, Any]:
    """
    Compute totalObservations, riskDistribution, topCategories and locationsAffected.

    All three risk levels are always reported, so the distribution sums to the total.
    Categories are ranked by count; equal counts keep first-seen order.
    Locations that were never given (the default placeholder) are not counted.
    """
    risk_count = {level: 0 for level in RISK_LEVELS}
    categories: Counter[str] = Counter()
    locations: set[str] = set()

    for obs in observations:
        risk_count[obs["risk"]] += 1
        categories[obs["category"]] += 1
        location = obs["location"]
        if location and location != UNKNOWN_LOCATION:
            locations.add(location)

    # sorted() is stable and Counter keeps insertion order
    ranked = sorted(categories.items(), key=lambda item: item[1], reverse=True)
    top_categories = [[cat, count] for cat, count in ranked[:top_category_limit]]

    return {
        "totalObservations": len(observations),
        "riskDistribution": risk_count,
        "topCategories": top_categories,
        "locationsAffected": len(locations),
    }


def risk_percentage(count: int, total: int) -> int:
    """Whole-number percentage rounded half up; 0 when there is nothing to divide by."""
    if total <= 0:
        return 0
    return (count * 200 + total) // (total * 2)
