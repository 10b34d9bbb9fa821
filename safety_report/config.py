"""Pipeline configuration: sampling limits, clustering threshold, and report service settings."""

import os
from dataclasses import dataclass, fields

from .aggregator import DEFAULT_TOP_CATEGORIES
from .clustering import DEFAULT_CLUSTER_THRESHOLD
from .sampler import (
    DEFAULT_BACKFILL_BELOW,
    DEFAULT_BACKFILL_SIZE,
    DEFAULT_EXAMPLES_PER_CLUSTER,
    DEFAULT_SAMPLE_CAP,
)

DEFAULT_MODEL = "gemini-2.0-flash"

# Logging
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

ENV_PREFIX = "SAFETY_REPORT_"


@dataclass(frozen=True)
class PipelineConfig:
    """Knobs honored by the aggregation, clustering, sampling and generation steps."""

    sample_cap: int = DEFAULT_SAMPLE_CAP
    cluster_threshold: int = DEFAULT_CLUSTER_THRESHOLD
    top_category_limit: int = DEFAULT_TOP_CATEGORIES
    examples_per_cluster: int = DEFAULT_EXAMPLES_PER_CLUSTER
    backfill_below: int = DEFAULT_BACKFILL_BELOW
    backfill_size: int = DEFAULT_BACKFILL_SIZE
    model: str = DEFAULT_MODEL
    timeout_seconds: float = 60.0
    max_retries: int = 2
    retry_delay_seconds: float = 65.0

    def __post_init__(self) -> None:
        for name in ("sample_cap", "cluster_threshold", "top_category_limit", "examples_per_cluster"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

    @classmethod
    def from_env(cls, **overrides) -> "PipelineConfig":
        """Build config from SAFETY_REPORT_* environment variables; explicit overrides win."""
        values = {}
        for f in fields(cls):
            raw = os.environ.get(ENV_PREFIX + f.name.upper())
            if raw is None or not raw.strip():
                continue
            caster = type(f.default)
            try:
                values[f.name] = caster(raw.strip())
            except ValueError as e:
                raise ValueError(f"Invalid value for {ENV_PREFIX}{f.name.upper()}: {raw!r}") from e
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
