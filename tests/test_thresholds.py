"""Tests for ordered threshold tables."""

import pytest

from neurocalc.thresholds import ThresholdTable


@pytest.fixture
def table():
    return ThresholdTable.from_bands([
        (6, 7, "High", "high"),
        (0, 3, "Low", "low"),
        (4, 5, "Moderate", "moderate"),
    ])


class TestLookup:
    """Band lookup, ordering and fallback."""

    def test_bands_sorted_ascending(self, table):
        assert [b.label for b in table.bands] == ["Low", "Moderate", "High"]

    def test_inclusive_bounds(self, table):
        assert table.label(3) == "Low"
        assert table.label(4) == "Moderate"
        assert table.label(7) == "High"

    def test_below_min_clamps_to_first_band(self, table):
        assert table.label(-5) == "Low"

    def test_above_max_clamps_to_last_band(self, table):
        assert table.value(42) == "high"

    def test_gap_resolves_to_nearest_band(self):
        t = ThresholdTable.from_bands([(0, 1, "A", None), (5, 6, "B", None)])
        assert t.label(1.5) == "A"
        assert t.label(4.6) == "B"

    def test_overlapping_bands_rejected(self):
        with pytest.raises(ValueError, match="Overlapping"):
            ThresholdTable.from_bands([(0, 3, "A", None), (3, 5, "B", None)])


class TestFromMapping:
    """Exact-key tables such as ICH mortality."""

    def test_single_point_bands(self):
        t = ThresholdTable.from_mapping({0: 0, 1: 13, 2: 26}, labels={0: "zero"})
        assert t.value(1) == 13
        assert t.label(0) == "zero"
        assert t.label(2) == "26"
        assert (t.min_score, t.max_score) == (0, 2)

    def test_as_rows(self, table):
        rows = table.as_rows()
        assert rows[0] == {"low": 0, "high": 3, "label": "Low", "value": "low"}
