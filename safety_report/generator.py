"""Report prompt assembly from site info, statistics and sampled observations."""

from pathlib import Path
from typing import Any

import yaml

from . import llm
from .aggregator import risk_percentage
from .clustering import DEFAULT_CLUSTER_THRESHOLD
from .config import DEFAULT_MODEL

PROMPT_PATH = Path(__file__).resolve().parent / "prompts" / "report.yaml"

TEMPLATE_KEYS = (
    "report_prompt",
    "recurring_focus",
    "recurring_section",
    "recurring_examples_note",
    "cluster_line",
    "observation_line",
)


def load_templates(path: Path = PROMPT_PATH) -> dict[str, str]:
    """Load the report prompt templates from YAML."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    missing = [key for key in TEMPLATE_KEYS if key not in (data or {})]
    if missing:
        raise ValueError(f"Prompt template {path} is missing keys: {', '.join(missing)}")
    return {key: data[key] for key in TEMPLATE_KEYS}


class PromptBuilder:
    """
    Renders the report prompt. Templates are read once at construction;
    build() does no I/O and returns the same text for the same inputs.
    """

    def __init__(
        self,
        templates: dict[str, str] | None = None,
        cluster_threshold: int = DEFAULT_CLUSTER_THRESHOLD,
    ) -> None:
        self.templates = templates or load_templates()
        self.cluster_threshold = cluster_threshold

    def format_observation(self, obs: dict[str, Any], ordinal: int) -> str:
        date = obs.get("date") or ""
        line = self.templates["observation_line"].format(
            ordinal=ordinal,
            date_prefix=f"{date} - " if date else "",
            risk=obs["risk"],
            category=obs["category"],
            location=obs["location"],
            status=obs["status"],
            description=obs.get("description") or "",
        )
        return line.rstrip()

    def format_top_categories(self, top_categories: list[list[Any]]) -> str:
        if not top_categories:
            return "n/a"
        return ", ".join(f"{cat} ({count})" for cat, count in top_categories)

    def format_recurring_section(self, clusters: list[dict[str, Any]]) -> str:
        if not clusters:
            return ""
        lines = [
            self.templates["cluster_line"].format(label=c["label"], size=c["size"])
            for c in clusters
        ]
        section = self.templates["recurring_section"].format(
            threshold=self.cluster_threshold,
            clusters="\n".join(lines),
        )
        return f"\n{section.rstrip()}\n"

    def build(
        self,
        site_info: dict[str, str],
        statistics: dict[str, Any],
        sample: list[dict[str, Any]],
        clusters: list[dict[str, Any]] | None = None,
    ) -> str:
        """Render the full prompt. Without recurring clusters the repetition emphasis is left out."""
        total = statistics["totalObservations"]
        dist = statistics["riskDistribution"]
        high, medium, low = dist.get("HIGH", 0), dist.get("MEDIUM", 0), dist.get("LOW", 0)
        has_clusters = bool(clusters)

        examples = "\n\n".join(
            self.format_observation(obs, i) for i, obs in enumerate(sample, start=1)
        )

        prompt = self.templates["report_prompt"].format(
            site_name=site_info["siteName"],
            inspector_name=site_info["inspectorName"],
            inspection_date=site_info["inspectionDate"],
            total=total,
            high=high,
            medium=medium,
            low=low,
            high_pct=risk_percentage(high, total),
            medium_pct=risk_percentage(medium, total),
            low_pct=risk_percentage(low, total),
            top_categories=self.format_top_categories(statistics["topCategories"]),
            locations_affected=statistics["locationsAffected"],
            recurring_focus=self.templates["recurring_focus"] if has_clusters else ".",
            recurring_section=self.format_recurring_section(clusters or []),
            recurring_examples_note=self.templates["recurring_examples_note"] if has_clusters else ".",
            examples=examples or "No observations selected.",
        )
        return prompt.strip()


def build_report_prompt(
    site_info: dict[str, str],
    statistics: dict[str, Any],
    sample: list[dict[str, Any]],
    clusters: list[dict[str, Any]] | None = None,
    cluster_threshold: int = DEFAULT_CLUSTER_THRESHOLD,
) -> str:
    """Build the report prompt with the packaged templates."""
    builder = PromptBuilder(cluster_threshold=cluster_threshold)
    return builder.build(site_info, statistics, sample, clusters)


def generate_report(prompt: str, model: str = DEFAULT_MODEL, **kwargs: Any) -> str:
    """Send the assembled prompt to the report service and return the report text."""
    return llm.call_llm(prompt, model=model, **kwargs)
