"""Tests for plain-text rendering and its numeric round-trip."""

import pytest

from neurocalc.calculators import GCS, ICH_SCORE, evaluate
from neurocalc.classifiers import assess_boston_criteria, classify_heidelberg_bleeding
from neurocalc.display import (
    format_classification,
    format_heidelberg,
    format_number,
    format_outcome,
    format_score,
    parse_outcome_text,
    parse_score_text,
)
from neurocalc.models import TrialFlags
from neurocalc.trials import summarize, summarize_trial


class TestFormatNumber:

    @pytest.mark.parametrize("value,signed,expected", [
        (28.0, True, "+28"),
        (-1.2, True, "-1.2"),
        (45.0, False, "45"),
        (3.25, False, "3.25"),
        (0.0, True, "+0"),
    ])
    def test_format(self, value, signed, expected):
        assert format_number(value, signed=signed) == expected


class TestOutcomeRoundTrip:
    """Numbers written by format_outcome read back unchanged."""

    @pytest.mark.parametrize("treatment,control,flags", [
        (45, 17, None),
        (2.9, 4.1, TrialFlags(is_estimation_trial=True)),
        (52.4, 45.2, None),
        (34.7, 37.5, TrialFlags(is_negative_trial=True)),
        (53.3, 41.8, TrialFlags(nnt_override=8.7)),
    ])
    def test_round_trip(self, treatment, control, flags):
        outcome = summarize(treatment, control, flags)
        parsed = parse_outcome_text(format_outcome(outcome))
        assert parsed["risk_difference"] == outcome.risk_difference
        assert parsed["nnt"] == outcome.nnt

    def test_estimation_text(self):
        text = format_outcome(summarize(2.9, 4.1, TrialFlags(is_estimation_trial=True)))
        assert "Absolute risk difference: -1.2 percentage points" in text
        assert "NNT: not applicable (estimation design)" in text

    def test_estimation_reports_interval(self, catalog):
        text = format_outcome(summarize_trial(catalog["elan-study"]))
        assert "Reported effect: -1.18% (Risk Difference (95% CI: -2.84 to 0.47))" in text
        assert "NNT: not applicable (estimation design)" in text

    def test_superiority_has_no_reported_effect_line(self, catalog):
        assert "Reported effect" not in format_outcome(summarize_trial(catalog["dawn-trial"]))

    def test_malformed_rates(self):
        text = format_outcome(summarize("Non-inf", None))
        assert "Absolute risk difference: N/A" in text
        assert parse_outcome_text(text) == {"risk_difference": None, "nnt": None}

    def test_catalog_trials(self, catalog):
        for trial_id in catalog:
            outcome = summarize_trial(catalog[trial_id])
            parsed = parse_outcome_text(format_outcome(outcome, title=trial_id))
            assert parsed["risk_difference"] == outcome.risk_difference, trial_id


class TestScoreText:

    def test_score_round_trip(self):
        result = evaluate(ICH_SCORE, {"gcs": "5-12", "volume_ml": 35, "ivh": True,
                                      "origin": "supratentorial", "age": 75})
        text = format_score(result, ICH_SCORE.title)
        assert text.startswith("ICH Score\nScore: 3 (3/6)")
        assert parse_score_text(text) == 3

    def test_incomplete_and_display(self):
        result = evaluate(GCS, {"eye": 3, "motor": 5, "verbal_not_testable": True})
        text = format_score(result)
        assert "Score: 8 (8T)" in text
        assert "Incomplete" not in text
        text = format_score(evaluate(GCS, {"motor": 5}))
        assert "Incomplete: missing eye, verbal" in text


class TestClassificationText:

    def test_boston(self):
        result = assess_boston_criteria({"age": 70, "has_qualifying_presentation": True,
                                         "lobar_hemorrhagic_lesions": 1})
        text = format_classification(result)
        assert text.startswith("Diagnosis: Possible CAA")
        assert "- One strictly lobar hemorrhagic lesion" in text
        assert "Anticoagulation risk: moderate" in text

    def test_heidelberg(self):
        text = format_heidelberg(classify_heidelberg_bleeding("2", symptomatic=True))
        assert text.splitlines()[:2] == ["Heidelberg: Class 2 (PH2)", "Symptomatic: yes"]
