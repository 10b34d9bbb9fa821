"""Flask web app for the Safety Report Generator."""

import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify, request

from safety_report.config import LOG_FORMAT, LOG_LEVEL, PipelineConfig
from safety_report.errors import ConfigurationError, InputError, ReportServiceError
from safety_report.llm import get_api_key
from safety_report.pipeline import prepare_report, run_pipeline

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = 16 * 1024 * 1024  # 16 MB max payload
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)


def _read_payload() -> tuple[object, dict | None]:
    body = request.get_json(silent=True) or {}
    if not isinstance(body, dict):
        body = {}
    return body.get("data"), body.get("siteInfo")


@app.errorhandler(405)
def method_not_allowed(_error):
    return jsonify({"error": "Method not allowed"}), 405


@app.route("/analyze", methods=["POST"])
def analyze():
    data, site_info = _read_payload()

    if not get_api_key():
        return jsonify({
            "error": "API key not configured. Please add GOOGLE_API_KEY to the server environment.",
        }), 500

    try:
        config = PipelineConfig.from_env()
        app.logger.info("Running pipeline...")
        result = run_pipeline(data, site_info, config=config)
        app.logger.info("Pipeline complete.")
        return jsonify(result)
    except InputError as e:
        app.logger.warning("Rejected request: %s", e)
        return jsonify({"error": str(e)}), 400
    except ReportServiceError as e:
        app.logger.error("Report service failed: %s", e)
        return jsonify({
            "error": str(e),
            "details": e.details,
            "statistics": e.statistics,
        }), 500
    except ConfigurationError as e:
        return jsonify({"error": str(e)}), 500
    except Exception as e:
        app.logger.exception("Generation failed")
        return jsonify({"error": str(e) or "Server error"}), 500


@app.route("/statistics", methods=["POST"])
def statistics():
    """Statistics, recurring clusters and sample size without calling the report service."""
    data, site_info = _read_payload()
    try:
        config = PipelineConfig.from_env()
        prepared = prepare_report(data, site_info, config=config)
    except InputError as e:
        return jsonify({"error": str(e)}), 400
    except ValueError as e:
        app.logger.error("Invalid configuration: %s", e)
        return jsonify({"error": str(e)}), 500
    return jsonify({
        "statistics": prepared["statistics"],
        "recurringClusters": [
            {"category": c["category"], "location": c["location"], "size": c["size"]}
            for c in prepared["clusters"]
        ],
        "sampleSize": len(prepared["sample"]),
    })


if __name__ == "__main__":
    load_dotenv(Path(__file__).resolve().parent / ".env")
    app.run(host="127.0.0.1", port=5000, debug=True)
