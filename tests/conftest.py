"""Shared fixtures for the neurocalc test suite."""

import json

import pytest

from neurocalc.catalog import TrialCatalog
from neurocalc.tools import CalculatorToolHandler


@pytest.fixture(scope="session")
def catalog():
    """The bundled trial catalog."""
    return TrialCatalog.from_json()


@pytest.fixture
def handler(catalog):
    return CalculatorToolHandler(catalog=catalog)


@pytest.fixture
def trial_dict():
    """A minimal superiority trial record as stored in the JSON catalog."""
    return {
        "id": "demo-trial",
        "title": "Demo Trial",
        "stats": {
            "sample_size": {"value": "100", "label": "Randomized Patients"},
            "primary_endpoint": {"value": "mRS 0-2", "label": "at 90 Days"},
            "p_value": {"value": "<0.001", "label": "Statistically Sig."},
            "effect_size": {"value": "28%", "label": "Absolute Increase"},
        },
        "efficacy_results": {
            "treatment": {"percentage": 45, "label": "mRS 0-2", "name": "Treatment"},
            "control": {"percentage": 17, "label": "mRS 0-2", "name": "Control"},
        },
    }


@pytest.fixture
def trials_file(tmp_path, trial_dict):
    path = tmp_path / "trials.json"
    path.write_text(json.dumps({"trials": [trial_dict]}), encoding="utf-8")
    return path


@pytest.fixture
def full_nihss():
    """Every NIHSS item answered with 0."""
    return {item: 0 for item in
            ("1a", "1b", "1c", "2", "3", "4", "5a", "5b", "6a", "6b", "7", "8", "9", "10", "11")}
