"""
Comparative-outcome summarizer for randomized trial results.

Given treatment and control event rates (percent) and design flags, derives
the absolute risk difference and, for positive superiority trials only, the
number needed to treat. Estimation-design trials never get an NNT, and
neither do trials whose result does not support benefit.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Optional

from .models import ComparativeOutcome, OutcomeMode, TrialFlags, TrialRecord

logger = logging.getLogger(__name__)

RISK_DIFFERENCE_DECIMALS = 2
NNT_DECIMALS = 1
NEGATIVE_P_THRESHOLD = 0.05
NOT_AVAILABLE = "N/A"

_LEADING_FLOAT = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _leading_float(text: str) -> Optional[float]:
    """Parse the numeric prefix of text ("0.04", "0.05 adjusted", "1e-4"); None if there is none."""
    match = _LEADING_FLOAT.match(text)
    return float(match.group(0)) if match else None


def parse_rate(raw: Any) -> Optional[float]:
    """Coerce an arm event rate to a float percentage, or None when it is not numeric."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return None if math.isnan(raw) else float(raw)
    text = str(raw).strip().rstrip("%").strip()
    try:
        return float(text)
    except ValueError:
        logger.debug(f"Unparsable event rate {raw!r}")
        return None


def round_half_up(value: float, decimals: int = 0) -> float:
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def format_nnt(nnt: Optional[float]) -> str:
    return f"{nnt:.{NNT_DECIMALS}f}" if nnt is not None else NOT_AVAILABLE


def is_estimation_design(special_design: Optional[str], p_value_label: str) -> bool:
    return special_design == "estimation-trial" or "estimation" in (p_value_label or "").lower()


def is_non_beneficial(p_value: str, p_value_label: str, effect_size: str) -> bool:
    """Derived negative-result judgment from the reported p-value and effect size text."""
    label = (p_value_label or "").lower()
    effect = (effect_size or "").lower()
    if "not significant" in label or "worse" in label:
        return True
    if "no benefit" in effect or "harm" in effect:
        return True
    p_value = p_value or NOT_AVAILABLE
    if p_value != NOT_AVAILABLE and "<" not in p_value and ">" not in p_value:
        parsed = _leading_float(p_value)
        return parsed is not None and parsed >= NEGATIVE_P_THRESHOLD
    return False


def derive_flags(record: TrialRecord) -> TrialFlags:
    """Read the design flags a summary needs off a catalog record."""
    p_value = record.stats.p_value
    effect_size = record.stats.effect_size
    estimation = is_estimation_design(record.special_design, p_value.label)
    negative = record.trial_result == "NEGATIVE" or (
        not estimation and is_non_beneficial(p_value.value, p_value.label, effect_size.value)
    )
    calculations = record.calculations
    return TrialFlags(
        is_estimation_trial=estimation,
        is_negative_trial=negative,
        p_value=p_value.value,
        p_value_label=p_value.label,
        effect_size=effect_size.value,
        effect_size_label=effect_size.label,
        nnt_override=calculations.nnt if calculations else None,
        nnt_explanation=calculations.nnt_explanation if calculations else None,
    )


def summarize(treatment_rate: Any, control_rate: Any,
              flags: Optional[TrialFlags] = None) -> ComparativeOutcome:
    """
    Summarize a two-arm comparison.

    Mode precedence is estimation, then negative, then superiority. The
    risk difference keeps its sign and is reported in every mode when both
    rates parse, and the reported effect size with its interval label is
    carried through for estimation designs. The NNT is only produced in superiority mode with a
    positive difference, and a truthy editorial override replaces the
    formula. Never raises: malformed rates give risk_difference=None.
    """
    flags = flags or TrialFlags()
    treatment = parse_rate(treatment_rate)
    control = parse_rate(control_rate)

    if flags.is_estimation_trial:
        mode = OutcomeMode.ESTIMATION
    elif flags.is_negative_trial:
        mode = OutcomeMode.NEGATIVE
    else:
        mode = OutcomeMode.SUPERIORITY

    difference = None
    if treatment is not None and control is not None:
        difference = round(treatment - control, RISK_DIFFERENCE_DECIMALS)

    nnt = None
    nnt_source = None
    nnt_explanation = None
    if mode is OutcomeMode.SUPERIORITY and difference is not None and treatment - control > 0:
        if flags.nnt_override:
            nnt = float(flags.nnt_override)
            nnt_source = "override"
            nnt_explanation = flags.nnt_explanation
        else:
            nnt = round_half_up(1 / ((treatment - control) / 100), NNT_DECIMALS)
            nnt_source = "computed"

    return ComparativeOutcome(
        treatment_rate=treatment,
        control_rate=control,
        mode=mode,
        risk_difference=difference,
        nnt=nnt,
        nnt_display=format_nnt(nnt),
        nnt_source=nnt_source,
        nnt_explanation=nnt_explanation,
        is_negative_trial=flags.is_negative_trial,
        is_estimation_trial=flags.is_estimation_trial,
        effect_size=flags.effect_size or None,
        effect_size_label=flags.effect_size_label or None,
    )


def summarize_trial(record: TrialRecord) -> ComparativeOutcome:
    """Summarize a catalog record; a record without efficacy results yields an empty outcome."""
    flags = derive_flags(record)
    results = record.efficacy_results
    if results is None:
        logger.debug(f"Trial {record.id} has no efficacy results")
        return summarize(None, None, flags)
    return summarize(results.treatment.percentage, results.control.percentage, flags)
