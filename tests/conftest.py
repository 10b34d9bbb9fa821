"""Shared fixtures for the safety report tests."""

import pytest

from safety_report.normalizer import normalize_observations


@pytest.fixture
def raw_observations():
    """A small mixed set: one recurring lighting cluster plus assorted findings."""
    return [
        {"risk": "HIGH", "category": "Fire", "location": "Warehouse", "status": "Open",
         "description": "Blocked fire exit", "date": "2025-03-01"},
        {"risk": "low", "category": "Lighting", "location": "Site A", "status": "Closed",
         "description": "Flickering lamp", "date": "2025-01-10"},
        {"risk": "medium", "category": "Lighting", "location": "Site A", "status": "Open",
         "description": "Dark stairwell", "date": "2025-02-11"},
        {"risk": "HIGH", "category": "Electrical", "location": "Workshop", "status": "Open",
         "description": "Exposed wiring", "date": "2025-04-20"},
        {"risk": "MEDIUM", "category": "Lighting", "location": "Site A", "status": "Open",
         "description": "Broken light in corridor"},
        {"risk": "LOW", "category": "Lighting", "location": "Site B", "status": "Closed",
         "description": "Dim parking lot"},
        {"category": "Housekeeping", "description": "Boxes in walkway"},
    ]


@pytest.fixture
def observations(raw_observations):
    return normalize_observations(raw_observations)


@pytest.fixture
def site_info():
    return {
        "siteName": "Plant 7",
        "inspectorName": "J. Virtanen",
        "inspectionDate": "2025",
    }
