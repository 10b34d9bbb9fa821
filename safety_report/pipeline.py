"""Orchestrates the safety report pipeline."""

import logging
from typing import Any

from .aggregator import compute_statistics
from .clustering import find_recurring_clusters
from .config import PipelineConfig
from .errors import InputError, ReportServiceError
from .generator import PromptBuilder, generate_report
from .normalizer import normalize_observations, normalize_site_info
from .sampler import select_sample

logger = logging.getLogger(__name__)


def validate_observations(data: Any) -> list[Any]:
    """Reject a payload that is absent, not a list, or empty."""
    if not data or not isinstance(data, list):
        raise InputError("No observations provided")
    return data


def prepare_report(
    data: Any,
    site_info: dict[str, Any] | None = None,
    config: PipelineConfig | None = None,
    builder: PromptBuilder | None = None,
) -> dict[str, Any]:
    """
    Run every step up to (not including) the report service call.
    Returns statistics, recurring clusters, the sampled observations and the prompt.
    """
    config = config or PipelineConfig()
    observations = normalize_observations(validate_observations(data))
    site = normalize_site_info(site_info)

    statistics = compute_statistics(observations, top_category_limit=config.top_category_limit)
    logger.info(
        "Aggregated %d observations (HIGH=%d, MEDIUM=%d, LOW=%d) across %d locations",
        statistics["totalObservations"],
        statistics["riskDistribution"]["HIGH"],
        statistics["riskDistribution"]["MEDIUM"],
        statistics["riskDistribution"]["LOW"],
        statistics["locationsAffected"],
    )

    clusters = find_recurring_clusters(observations, threshold=config.cluster_threshold)
    logger.info("Found %d recurring clusters", len(clusters))

    sample = select_sample(
        observations,
        clusters,
        cap=config.sample_cap,
        per_cluster=config.examples_per_cluster,
        backfill_below=config.backfill_below,
        backfill_size=config.backfill_size,
    )
    logger.info("Selected %d example observations (cap %d)", len(sample), config.sample_cap)

    builder = builder or PromptBuilder(cluster_threshold=config.cluster_threshold)
    prompt = builder.build(site, statistics, sample, clusters)

    return {
        "site_info": site,
        "statistics": statistics,
        "clusters": clusters,
        "sample": sample,
        "prompt": prompt,
    }


def run_pipeline(
    data: Any,
    site_info: dict[str, Any] | None = None,
    config: PipelineConfig | None = None,
) -> dict[str, Any]:
    """
    Run the full pipeline and return {"analysis", "statistics"}.

    If the report service fails, the ReportServiceError raised carries the
    statistics computed beforehand.
    """
    config = config or PipelineConfig()
    prepared = prepare_report(data, site_info, config)
    statistics = prepared["statistics"]

    try:
        analysis = generate_report(
            prepared["prompt"],
            model=config.model,
            timeout_seconds=config.timeout_seconds,
            max_retries=config.max_retries,
            retry_delay_seconds=config.retry_delay_seconds,
        )
    except ReportServiceError as e:
        e.statistics = statistics
        raise
    logger.info("Report generated (%d characters)", len(analysis))

    return {"analysis": analysis, "statistics": statistics}
