"""Tests for the read-only trial catalog."""

import json

import pytest
from pydantic import ValidationError

from neurocalc.catalog import DEFAULT_TRIALS_PATH, TRIALS_PATH_ENV, TrialCatalog, resolve_trials_path


class TestLoading:
    """Loading from the bundled file and from overrides."""

    def test_bundled_catalog(self, catalog):
        assert len(catalog) >= 10
        assert "dawn-trial" in catalog
        assert catalog["elan-study"].special_design == "estimation-trial"

    def test_lookup_is_case_insensitive(self, catalog):
        assert catalog["DAWN-Trial"].id == "dawn-trial"

    def test_missing_id_raises_key_error(self, catalog):
        with pytest.raises(KeyError):
            catalog["no-such-trial"]

    def test_explicit_path(self, trials_file):
        catalog = TrialCatalog.from_json(trials_file)
        assert catalog.ids() == ["demo-trial"]

    def test_environment_override(self, monkeypatch, trials_file):
        monkeypatch.setenv(TRIALS_PATH_ENV, str(trials_file))
        assert resolve_trials_path() == trials_file
        assert list(TrialCatalog.from_json()) == ["demo-trial"]

    def test_default_path(self, monkeypatch):
        monkeypatch.delenv(TRIALS_PATH_ENV, raising=False)
        assert resolve_trials_path() == DEFAULT_TRIALS_PATH

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(OSError):
            TrialCatalog.from_json(tmp_path / "absent.json")

    def test_duplicate_ids_rejected(self, tmp_path, trial_dict):
        path = tmp_path / "dup.json"
        path.write_text(json.dumps({"trials": [trial_dict, trial_dict]}), encoding="utf-8")
        with pytest.raises(ValueError, match="Duplicate"):
            TrialCatalog.from_json(path)


class TestReadOnly:
    """Loaded content cannot be mutated."""

    def test_records_mapping_is_immutable(self, catalog):
        with pytest.raises(TypeError):
            catalog.records["new"] = catalog["dawn-trial"]

    def test_records_are_frozen(self, catalog):
        with pytest.raises(ValidationError):
            catalog["dawn-trial"].title = "changed"
