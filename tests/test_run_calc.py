"""Tests for the command line front end."""

import importlib.util
from pathlib import Path

import pytest

from neurocalc import tools
from neurocalc.classifiers import CLASSIFIERS, classify_heidelberg_bleeding
from neurocalc.models import HeidelbergClass

_SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "run_calc.py"


@pytest.fixture(scope="module")
def run_calc():
    spec = importlib.util.spec_from_file_location("run_calc", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestClassifyCommand:
    """classify renders the facade outputs."""

    def test_heidelberg_text_flag(self, run_calc, capsys):
        code = run_calc.main(["classify", "heidelberg_bleeding", "--set", "bleeding_class=2",
                              "--set", "symptomatic=no"])
        out = capsys.readouterr().out
        assert code == 0
        assert out.startswith("Heidelberg: Class 2 (PH2)")
        assert "Symptomatic: yes" not in out
        assert "SICH" not in out

    def test_boston(self, run_calc, capsys):
        code = run_calc.main(["classify", "boston_caa", "--json",
                              '{"age": 72, "has_qualifying_presentation": true, "lobar_hemorrhagic_lesions": 2}'])
        out = capsys.readouterr().out
        assert code == 0
        assert "Anticoagulation risk: high" in out

    def test_classifier_runs_once(self, run_calc, capsys, monkeypatch):
        calls = []

        def counting(bleeding_class, symptomatic=False):
            calls.append(bleeding_class)
            return classify_heidelberg_bleeding(bleeding_class, symptomatic)

        monkeypatch.setattr(tools, "classify_heidelberg_bleeding", counting)
        assert run_calc.main(["classify", "heidelberg_bleeding", "--set", "bleeding_class=3b"]) == 0
        assert calls == [HeidelbergClass.IVH]
        assert "Class 3b (IVH)" in capsys.readouterr().out

    def test_invalid_input_exit_code(self, run_calc, capsys):
        assert run_calc.main(["classify", "heidelberg_bleeding", "--set", "bleeding_class=9z"]) == 1
        assert "Error:" in capsys.readouterr().err


class TestTrialCommand:
    """trial prints the outcome summary."""

    def test_estimation_trial(self, run_calc, capsys):
        assert run_calc.main(["trial", "elan-study"]) == 0
        out = capsys.readouterr().out
        assert "Reported effect: -1.18% (Risk Difference (95% CI: -2.84 to 0.47))" in out

    def test_unknown_trial(self, run_calc, capsys):
        assert run_calc.main(["trial", "nope"]) == 1


def test_every_classifier_has_input_model():
    assert all(entry["input_model"] is not None for entry in CLASSIFIERS.values())
