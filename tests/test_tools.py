"""Tests for the tool facade."""

import pytest

from neurocalc.tools import TOOL_DEFINITIONS, CalculatorToolHandler, format_calc_info


class TestListing:
    """Instrument listing and id resolution."""

    def test_list_calculators(self, handler):
        ids = [c["id"] for c in handler.list_calculators()]
        assert ids == ["nihss", "abcd2", "ich_score", "gcs", "rope", "has_bled"]

    def test_list_calculators_returns_fresh_list(self, handler):
        first = handler.list_calculators()
        first.clear()
        assert len(handler.list_calculators()) == 6

    def test_resolve_case_insensitive(self, handler):
        assert handler._resolve_calc_id("NIHSS") == "nihss"
        assert handler._resolve_calc_id("Has-Bled") == "has_bled"
        assert handler._resolve_calc_id("unknown") == "unknown"

    def test_tool_names(self):
        names = {t["function"]["name"] for t in TOOL_DEFINITIONS}
        assert names == {"calc_info", "execute_calc", "classify", "summarize_trial"}


class TestCalcInfo:
    """Input schema lookup."""

    def test_ich_schema(self, handler):
        info = handler.calc_info("ich_score")
        ids = [i["id"] for i in info.inputs]
        assert ids == ["gcs", "volume_ml", "ivh", "origin", "age"]
        volume = info.inputs[1]
        assert volume["type"] == "numeric"
        assert volume["canonical_unit"] == "mL"
        assert info.score_range == (0, 6)
        assert len(info.interpretation_table) == 7

    def test_format_calc_info(self, handler):
        text = format_calc_info(handler.calc_info("abcd2"))
        assert "Calculator: ABCD² Score for TIA (abcd2)" in text
        assert "one of under60, 60plus" in text
        assert "6-7: High risk" in text


class TestExecuteCalc:
    """Scoring through the facade."""

    def test_complete_execution(self, handler):
        result = handler.execute_calc("ich_score", {
            "gcs": "5-12", "volume_ml": {"value": 35, "unit": "mL"}, "ivh": True,
            "origin": "supratentorial", "age": 75,
        })
        assert result.success
        assert result.outputs["score"] == 3
        assert result.outputs["metrics"]["thirty_day_mortality_percent"] == 72

    def test_incomplete_returns_partial_score(self, handler):
        result = handler.execute_calc("gcs", {"eye": 4, "motor": 6})
        assert not result.success
        assert result.outputs["score"] == 10
        assert "verbal" in result.error_messages()[0]

    def test_unknown_calculator(self, handler):
        result = handler.execute_calc("cha2ds2_vasc", {})
        assert not result.success
        assert result.error_messages() == ["Calculator 'cha2ds2_vasc' not found"]

    def test_nihss_warnings_surface(self, handler, full_nihss):
        full_nihss["9"] = 3
        result = handler.execute_calc("nihss", full_nihss)
        assert result.success
        assert result.warnings


class TestClassify:
    """Classifier dispatch."""

    def test_boston(self, handler):
        result = handler.classify("boston_caa", {"age": 72, "has_qualifying_presentation": True,
                                                 "lobar_hemorrhagic_lesions": 2})
        assert result.success
        assert result.outputs["diagnosis"] == "probable-CAA"
        assert result.outputs["anticoagulation_risk"] == "high"

    def test_boston_validation_error(self, handler):
        result = handler.classify("boston_caa", {"has_qualifying_presentation": True})
        assert not result.success
        assert result.errors[0]["field"] == "age"

    def test_heidelberg(self, handler):
        result = handler.classify("heidelberg-bleeding", {"bleeding_class": "3b", "symptomatic": True})
        assert result.success
        assert result.outputs["classification"] == "Class 3b (IVH)"
        assert "SICH" in result.outputs["management_note"]

    @pytest.mark.parametrize("raw,expected", [("false", False), ("no", False), ("0", False),
                                              (False, False), ("true", True), ("yes", True)])
    def test_heidelberg_symptomatic_text_flag(self, handler, raw, expected):
        result = handler.classify("heidelberg_bleeding", {"bleeding_class": "2", "symptomatic": raw})
        assert result.success
        assert result.outputs["symptomatic"] is expected
        assert ("SICH" in result.outputs["management_note"]) is expected

    def test_heidelberg_missing_class(self, handler):
        result = handler.classify("heidelberg_bleeding", {"symptomatic": True})
        assert not result.success
        assert result.errors[0]["field"] == "bleeding_class"

    def test_heidelberg_bad_class(self, handler):
        result = handler.classify("heidelberg_bleeding", {"bleeding_class": "9z"})
        assert not result.success

    def test_unknown_classifier(self, handler):
        assert not handler.classify("fazekas", {}).success


class TestSummarizeTrial:
    """Trial summaries from the injected catalog."""

    def test_known_trial(self, handler):
        result = handler.summarize_trial("defuse-3-trial")
        assert result.success
        assert result.outputs["risk_difference"] == 28
        assert result.outputs["nnt_display"] == "3.6"
        assert result.outputs["mode"] == "superiority"

    def test_unknown_trial(self, handler):
        result = handler.summarize_trial("missing")
        assert not result.success

    def test_injected_catalog(self, trials_file):
        from neurocalc.catalog import TrialCatalog

        handler = CalculatorToolHandler(catalog=TrialCatalog.from_json(trials_file))
        assert handler.summarize_trial("demo-trial").outputs["nnt"] == 3.6


class TestExecuteTool:
    """Name-based dispatch returns plain dicts."""

    def test_calc_info(self, handler):
        assert handler.execute_tool("calc_info", {"calc_id": "rope"})["calc_id"] == "rope"

    def test_calc_info_unknown(self, handler):
        assert "error" in handler.execute_tool("calc_info", {"calc_id": "nope"})

    def test_missing_parameter(self, handler):
        assert handler.execute_tool("execute_calc", {}) == {"error": "Missing required parameter: calc_id"}

    def test_summarize(self, handler):
        out = handler.execute_tool("summarize_trial", {"trial_id": "elan-study"})
        assert out["success"]
        assert out["outputs"]["nnt"] is None

    def test_unknown_tool(self, handler):
        assert handler.execute_tool("delete_everything", {}) == {"error": "Unknown tool: delete_everything"}
