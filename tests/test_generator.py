"""Unit tests for report prompt assembly."""

from unittest.mock import patch

import pytest

from safety_report.aggregator import compute_statistics
from safety_report.clustering import find_recurring_clusters
from safety_report.generator import PromptBuilder, build_report_prompt, generate_report, load_templates
from safety_report.normalizer import normalize_observations, normalize_site_info
from safety_report.sampler import select_sample

SECTION_ORDER = [
    "CONTEXT",
    "OVERALL STATISTICS FOR THE PERIOD",
    "REPRESENTATIVE EXAMPLE OBSERVATIONS",
    "TASK",
    "STYLE REQUIREMENTS",
]

REQUIRED_SECTIONS = [
    "1. Executive Summary",
    "2. Risk Distribution Analysis",
    "3. Top Critical and Recurrent Issues",
    "4. Categorized Issues and Patterns",
    "5. Root Cause Analysis",
    "6. Recommendations and Priority Actions",
    "7. Compliance Standards",
    "8. Performance Metrics",
    "9. Implementation Timeline",
    "10. Conclusion",
]


@pytest.fixture
def builder():
    return PromptBuilder()


@pytest.fixture
def prompt_inputs(observations, site_info):
    clusters = find_recurring_clusters(observations)
    return (
        normalize_site_info(site_info),
        compute_statistics(observations),
        select_sample(observations, clusters),
        clusters,
    )


def test_templates_load():
    templates = load_templates()
    assert "{examples}" in templates["report_prompt"]


def test_sections_in_order(builder, prompt_inputs):
    prompt = builder.build(*prompt_inputs)
    positions = [prompt.index(heading) for heading in SECTION_ORDER]
    assert positions == sorted(positions)
    for section in REQUIRED_SECTIONS:
        assert section in prompt


def test_context_and_statistics(builder, prompt_inputs):
    prompt = builder.build(*prompt_inputs)
    assert "Occupational Safety Analysis Report for Plant 7 covering the period 2025" in prompt
    assert "- Prepared by: J. Virtanen" in prompt
    assert "- Total observations: 7" in prompt
    assert "- HIGH: 2 (29% of all observations)" in prompt
    assert "- MEDIUM: 3 (43% of all observations)" in prompt
    assert "- LOW: 2 (29% of all observations)" in prompt
    assert "Top categories (by frequency): Lighting (4), Fire (1), Electrical (1), Housekeeping (1)" in prompt
    assert "Number of distinct locations affected: 4" in prompt


def test_observation_lines(builder, prompt_inputs):
    prompt = builder.build(*prompt_inputs)
    assert "1. 2025-04-20 - [HIGH] Electrical at Workshop (Status: Open)\n   Exposed wiring" in prompt
    assert "2. 2025-03-01 - [HIGH] Fire at Warehouse (Status: Open)" in prompt
    # No date recorded: line starts with the risk tag
    assert "5. [MEDIUM] Lighting at Site A (Status: Open)\n   Broken light in corridor" in prompt


def test_recurring_patterns_listed(builder, prompt_inputs):
    prompt = builder.build(*prompt_inputs)
    assert "RECURRING PATTERNS" in prompt
    assert "- Lighting at Site A: 3 observations" in prompt
    assert "repetitive patterns (similar issues happening again and again)" in prompt


def test_recurring_emphasis_omitted_without_clusters(builder, site_info):
    observations = normalize_observations([{"risk": "HIGH", "category": "Fire", "location": "A"}])
    stats = compute_statistics(observations)
    prompt = builder.build(normalize_site_info(site_info), stats, observations, [])

    assert "RECURRING PATTERNS" not in prompt
    assert "similar issues happening again and again" not in prompt
    assert "- critical HIGH risk incidents." in prompt


def test_zero_total_guarded(builder):
    stats = compute_statistics([])
    prompt = builder.build(normalize_site_info({}), stats, [])
    assert "- HIGH: 0 (0% of all observations)" in prompt
    assert "Top categories (by frequency): n/a" in prompt
    assert "No observations selected." in prompt


def test_build_is_deterministic(builder, prompt_inputs):
    assert builder.build(*prompt_inputs) == builder.build(*prompt_inputs)
    assert build_report_prompt(*prompt_inputs) == builder.build(*prompt_inputs)


def test_braces_in_user_text_are_kept(builder, site_info):
    observations = normalize_observations([{"description": "Label reads {danger}"}])
    prompt = builder.build(normalize_site_info(site_info), compute_statistics(observations), observations)
    assert "Label reads {danger}" in prompt


def test_generate_report_forwards_to_llm():
    with patch("safety_report.llm.call_llm", return_value="REPORT") as mock_call:
        assert generate_report("prompt text", model="gemini-test", timeout_seconds=5) == "REPORT"
    mock_call.assert_called_once_with("prompt text", model="gemini-test", timeout_seconds=5)
