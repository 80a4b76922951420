"""Ordered score -> label lookup tables shared by the scoring instruments."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class Band(BaseModel):
    """A closed score interval [low, high] mapped to a label and optional value."""

    model_config = ConfigDict(frozen=True)

    low: float
    high: float
    label: str
    value: Any = None

    def contains(self, score: float) -> bool:
        return self.low <= score <= self.high


class ThresholdTable(BaseModel):
    """
    Bands ordered by ascending score.

    Lookup is first-match-from-top. A score that falls outside every band
    clamps to the nearest bound (below the first band -> first band, above
    the last -> last) so a lookup never comes back empty.
    """

    model_config = ConfigDict(frozen=True)

    bands: Tuple[Band, ...]

    @classmethod
    def from_bands(cls, bands: Sequence[Tuple[float, float, str, Any]]) -> "ThresholdTable":
        ordered = sorted(bands, key=lambda b: b[0])
        for prev, nxt in zip(ordered, ordered[1:]):
            if nxt[0] <= prev[1]:
                raise ValueError(f"Overlapping bands: {prev[:2]} and {nxt[:2]}")
        return cls(bands=tuple(Band(low=lo, high=hi, label=label, value=value)
                               for lo, hi, label, value in ordered))

    @classmethod
    def from_mapping(cls, mapping: Mapping[int, Any],
                     labels: Optional[Mapping[int, str]] = None) -> "ThresholdTable":
        """Build a table keyed by exact integer score (ICH mortality, RoPE, ...)."""
        labels = labels or {}
        return cls.from_bands([
            (key, key, labels.get(key, str(val)), val)
            for key, val in mapping.items()
        ])

    @property
    def min_score(self) -> float:
        return self.bands[0].low

    @property
    def max_score(self) -> float:
        return self.bands[-1].high

    def band_for(self, score: float) -> Band:
        for band in self.bands:
            if band.contains(score):
                return band
        # Gaps between integer keys and out-of-range scores
        if score < self.min_score:
            fallback = self.bands[0]
        elif score > self.max_score:
            fallback = self.bands[-1]
        else:
            fallback = min(self.bands, key=lambda b: min(abs(score - b.low), abs(score - b.high)))
        logger.debug(f"Score {score} outside table bands, falling back to [{fallback.low}, {fallback.high}]")
        return fallback

    def label(self, score: float) -> str:
        return self.band_for(score).label

    def value(self, score: float) -> Any:
        return self.band_for(score).value

    def as_rows(self) -> List[Dict[str, Any]]:
        return [band.model_dump() for band in self.bands]
