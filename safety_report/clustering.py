"""Recurring-pattern detection: group observations by category + location."""

from typing import Any

DEFAULT_CLUSTER_THRESHOLD = 3


def group_observations(observations: list[dict[str, Any]]) -> dict[tuple[str, str], list[int]]:
    """
    Bucket observations by exact (category, location). Values are positions into
    `observations`; buckets keep first-seen order.
    """
    key_to_indices: dict[tuple[str, str], list[int]] = {}
    for i, obs in enumerate(observations):
        key = (obs["category"], obs["location"])
        key_to_indices.setdefault(key, []).append(i)
    return key_to_indices


def find_recurring_clusters(
    observations: list[dict[str, Any]],
    threshold: int = DEFAULT_CLUSTER_THRESHOLD,
) -> list[dict[str, Any]]:
    """
    Return clusters with at least `threshold` members, largest first.
    Equal-sized clusters stay in the order their key was first seen.
    An empty list is a normal outcome (no repetition in the data).
    """
    if not observations:
        return []

    groups = [
        (key, indices)
        for key, indices in group_observations(observations).items()
        if len(indices) >= threshold
    ]
    groups.sort(key=lambda item: len(item[1]), reverse=True)

    clusters: list[dict[str, Any]] = []
    for n, ((category, location), indices) in enumerate(groups, start=1):
        clusters.append({
            "cluster_id": f"cluster_{n}",
            "label": f"{category} at {location}",
            "category": category,
            "location": location,
            "size": len(indices),
            "observation_indices": list(indices),
        })
    return clusters
