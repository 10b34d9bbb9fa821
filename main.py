#!/usr/bin/env python3
"""CLI entry point for the Safety Report Generator."""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (same folder as main.py)
load_dotenv(Path(__file__).resolve().parent / ".env")

from safety_report.config import LOG_FORMAT, PipelineConfig
from safety_report.errors import ConfigurationError, InputError, ReportServiceError
from safety_report.pipeline import prepare_report, run_pipeline

logger = logging.getLogger(__name__)


def load_observations(path: Path) -> tuple[object, dict]:
    """
    Read observations from JSON. Accepts either a bare list of observations or
    an object {"data": [...], "siteInfo": {...}} as posted to the web app.
    """
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)
    if isinstance(payload, dict):
        site_info = payload.get("siteInfo")
        return payload.get("data"), dict(site_info) if isinstance(site_info, dict) else {}
    return payload, {}


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Generate an Occupational Safety Analysis Report from inspection observations."
    )
    parser.add_argument(
        "--observations",
        "-i",
        type=Path,
        required=True,
        help="Path to a JSON file with the observations",
    )
    parser.add_argument("--site-name", help="Site or cost center name")
    parser.add_argument("--inspector", help="Inspector name")
    parser.add_argument("--date", help="Inspection date or period")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Output file path for the report",
    )
    parser.add_argument(
        "--format",
        "-f",
        choices=["text", "json"],
        default="text",
        help="text prints the report; json prints {analysis, statistics} (default: text)",
    )
    parser.add_argument(
        "--prompt-only",
        action="store_true",
        help="Print the assembled prompt and statistics without calling the report service",
    )
    parser.add_argument("--sample-cap", type=int, help="Maximum observations included in the prompt")
    parser.add_argument("--cluster-threshold", type=int, help="Minimum size of a recurring cluster")
    parser.add_argument("--top-categories", type=int, help="Number of top categories to report")
    parser.add_argument("--model", "-m", help="Gemini model")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print intermediate progress",
    )

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, format=LOG_FORMAT)

    try:
        data, site_info = load_observations(args.observations)
    except (OSError, json.JSONDecodeError) as e:
        parser.error(f"Could not read observations: {e}")

    for key, value in (
        ("siteName", args.site_name),
        ("inspectorName", args.inspector),
        ("inspectionDate", args.date),
    ):
        if value:
            site_info[key] = value

    try:
        config = PipelineConfig.from_env(
            sample_cap=args.sample_cap,
            cluster_threshold=args.cluster_threshold,
            top_category_limit=args.top_categories,
            model=args.model,
        )
    except ValueError as e:
        parser.error(str(e))

    try:
        if args.prompt_only:
            prepared = prepare_report(data, site_info, config)
            output = json.dumps(
                {"prompt": prepared["prompt"], "statistics": prepared["statistics"]},
                indent=2,
            ) if args.format == "json" else prepared["prompt"]
        else:
            result = run_pipeline(data, site_info, config)
            output = json.dumps(result, indent=2) if args.format == "json" else result["analysis"]
    except InputError as e:
        parser.error(str(e))
    except ReportServiceError as e:
        logger.error("%s", e)
        if e.statistics:
            print(json.dumps({"error": str(e), "statistics": e.statistics}, indent=2), file=sys.stderr)
        raise SystemExit(1) from e
    except ConfigurationError as e:
        logger.error("%s", e)
        raise SystemExit(1) from e

    if args.output:
        args.output.write_text(output, encoding="utf-8")
    else:
        print(output)


if __name__ == "__main__":
    main()
