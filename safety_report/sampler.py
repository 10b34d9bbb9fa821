"""Select a bounded, risk-prioritized subset of observations for the report prompt."""

import logging
from datetime import datetime
from typing import Any

from .normalizer import parse_date

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_CAP = 60
DEFAULT_EXAMPLES_PER_CLUSTER = 3
DEFAULT_BACKFILL_BELOW = 10
DEFAULT_BACKFILL_SIZE = 10


def _newest_first(observations: list[dict[str, Any]], positions: list[int]) -> list[int]:
    """Order positions by observation date, newest first. Undated entries go last, in input order."""
    def sort_key(i: int) -> datetime:
        return parse_date(observations[i].get("date")) or datetime.min

    return sorted(positions, key=sort_key, reverse=True)


def select_sample(
    observations: list[dict[str, Any]],
    clusters: list[dict[str, Any]] | None = None,
    cap: int = DEFAULT_SAMPLE_CAP,
    per_cluster: int = DEFAULT_EXAMPLES_PER_CLUSTER,
    backfill_below: int = DEFAULT_BACKFILL_BELOW,
    backfill_size: int = DEFAULT_BACKFILL_SIZE,
) -> list[dict[str, Any]]:
    """
    Pick at most `cap` observations, in priority order:

    1. every HIGH observation, newest dated first;
    2. up to `per_cluster` further members of each recurring cluster, in cluster order;
    3. when fewer than `backfill_below` are chosen, up to `backfill_size` MEDIUM/LOW
       observations in input order.

    No observation is picked twice. If nothing qualifies, the first `cap`
    observations are returned unchanged.
    """
    if not observations or cap <= 0:
        return []

    chosen: list[int] = []
    seen: set[int] = set()

    def take(i: int) -> bool:
        """Add position i if new; False once the cap is reached."""
        if len(chosen) >= cap:
            return False
        if i not in seen:
            seen.add(i)
            chosen.append(i)
        return True

    high = [i for i, obs in enumerate(observations) if obs["risk"] == "HIGH"]
    for i in _newest_first(observations, high):
        if not take(i):
            break

    for cluster in clusters or []:
        if len(chosen) >= cap:
            break
        added = 0
        for i in cluster["observation_indices"]:
            if added >= per_cluster or len(chosen) >= cap:
                break
            if i in seen:
                continue
            take(i)
            added += 1

    if len(chosen) < backfill_below:
        added = 0
        for i, obs in enumerate(observations):
            if added >= backfill_size or len(chosen) >= cap:
                break
            if obs["risk"] == "HIGH" or i in seen:
                continue
            take(i)
            added += 1

    if not chosen:
        logger.info("No observation matched the sampling rules; using the first %d", cap)
        return list(observations[:cap])

    if len(chosen) < len(observations):
        logger.debug("Sampled %d of %d observations for the prompt", len(chosen), len(observations))
    return [observations[i] for i in chosen]
