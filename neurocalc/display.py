"""
Plain-text rendering of results for export and the command line.

Numbers are written so that reading them back recovers the stored value:
risk differences are already rounded to two decimals, and NNT to one.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from .models import ClassificationResult, ComparativeOutcome, HeidelbergResult, OutcomeMode, ScoreResult

_RISK_DIFFERENCE_LINE = re.compile(r"^Absolute risk difference: ([+-]?\d+(?:\.\d+)?) percentage points$", re.M)
_NNT_LINE = re.compile(r"^NNT: (\d+(?:\.\d+)?)$", re.M)
_SCORE_LINE = re.compile(r"^Score: (-?\d+)", re.M)


def format_number(value: float, signed: bool = False) -> str:
    """Two decimals with trailing zeros stripped: 28.0 -> "28", -1.2 -> "-1.2"."""
    text = f"{value:+.2f}" if signed else f"{value:.2f}"
    return text.rstrip("0").rstrip(".")


def format_score(result: ScoreResult, title: Optional[str] = None) -> str:
    lines = [title or result.instrument_id]
    score_line = f"Score: {result.score}"
    if result.display and result.display != str(result.score):
        score_line += f" ({result.display})"
    lines.append(score_line)
    lines.append(f"Interpretation: {result.interpretation}")
    for key, value in result.metrics.items():
        if value is not None:
            lines.append(f"  {key}: {value}")
    if not result.complete:
        lines.append(f"Incomplete: missing {', '.join(result.missing)}")
    for warning in result.warnings:
        lines.append(f"Warning: {warning}")
    return "\n".join(lines)


def format_classification(result: ClassificationResult) -> str:
    lines = [f"Diagnosis: {result.label}", "Criteria met:"]
    lines.extend(f"- {c}" for c in result.criteria_met)
    lines.append(f"Clinical implications: {result.clinical_implications}")
    lines.append(f"Anticoagulation risk: {result.anticoagulation_risk.value}")
    lines.append("Recommendations:")
    lines.extend(f"- {r}" for r in result.recommendations)
    return "\n".join(lines)


def format_heidelberg(result: HeidelbergResult) -> str:
    lines = [
        f"Heidelberg: {result.classification}",
        f"Clinical significance: {result.clinical_significance}",
        f"Management: {result.management_note}",
    ]
    if result.symptomatic:
        lines.insert(1, "Symptomatic: yes")
    return "\n".join(lines)


def format_outcome(outcome: ComparativeOutcome, title: Optional[str] = None) -> str:
    lines: List[str] = []
    if title:
        lines.append(title)
    lines.append(f"Design: {outcome.mode.value}")
    if outcome.treatment_rate is not None:
        lines.append(f"Treatment rate: {format_number(outcome.treatment_rate)}%")
    if outcome.control_rate is not None:
        lines.append(f"Control rate: {format_number(outcome.control_rate)}%")
    if outcome.risk_difference is None:
        lines.append("Absolute risk difference: N/A")
    else:
        lines.append(f"Absolute risk difference: {format_number(outcome.risk_difference, signed=True)} "
                     f"percentage points")
    if outcome.mode is OutcomeMode.ESTIMATION:
        if outcome.effect_size:
            interval = f" ({outcome.effect_size_label})" if outcome.effect_size_label else ""
            lines.append(f"Reported effect: {outcome.effect_size}{interval}")
        lines.append("NNT: not applicable (estimation design)")
    else:
        lines.append(f"NNT: {outcome.nnt_display}")
    if outcome.nnt_explanation:
        lines.append(outcome.nnt_explanation)
    return "\n".join(lines)


def parse_outcome_text(text: str) -> Dict[str, Any]:
    """Recover the numeric fields of a format_outcome() rendering."""
    rd = _RISK_DIFFERENCE_LINE.search(text)
    nnt = _NNT_LINE.search(text)
    return {
        "risk_difference": float(rd.group(1)) if rd else None,
        "nnt": float(nnt.group(1)) if nnt else None,
    }


def parse_score_text(text: str) -> Optional[int]:
    match = _SCORE_LINE.search(text)
    return int(match.group(1)) if match else None
