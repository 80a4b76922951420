"""
Scoring instrument registry for neurocalc.

Each instrument is a plain InstrumentDef value: an ordered list of InputSpecs
(carrying their own points and polarity), a ThresholdTable and a compute
function. evaluate() never raises on a partial values map; missing inputs
score as absent and are reported through ScoreResult.complete / .missing.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .models import (
    Bounds,
    Choice,
    Citation,
    InputKind,
    InputSpec,
    InstrumentDef,
    ScoreResult,
)
from .thresholds import ThresholdTable

logger = logging.getLogger(__name__)


# ── Helpers ──────────────────────────────────────────────────────────────────

def _clamp(val: float, lo: float, hi: float) -> float:
    return max(lo, min(val, hi))


def _parse_num(raw: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """Parse a numeric variable (ignore unit)."""
    if isinstance(raw, dict):
        raw = raw.get("value", default)
    if raw is None or isinstance(raw, bool):
        return default
    try:
        return float(raw)
    except (TypeError, ValueError):
        return default


def _parse_bool(raw: Any) -> bool:
    if isinstance(raw, dict):
        return _parse_bool(raw.get("value", False))
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        return raw.strip().lower() in ("true", "yes", "1", "y")
    if isinstance(raw, (int, float)):
        return bool(raw)
    return False


def _unwrap(raw: Any) -> Any:
    if isinstance(raw, dict):
        return raw.get("value")
    return raw


def _is_present(values: Dict[str, Any], key: str) -> bool:
    raw = _unwrap(values.get(key))
    return raw is not None and raw != ""


def _bool_field(id: str, label: str, points_if_true: int = 1, points_if_false: int = 0,
                required: bool = True, **kw: Any) -> InputSpec:
    return InputSpec(id=id, label=label, kind=InputKind.BOOLEAN,
                     points_if_true=points_if_true, points_if_false=points_if_false,
                     required=required, **kw)


def _choice_field(id: str, label: str, options: Sequence[Tuple[Any, str, int]],
                  required: bool = True, **kw: Any) -> InputSpec:
    return InputSpec(id=id, label=label, kind=InputKind.ENUMERATED,
                     choices=tuple(Choice(value=v, label=lbl, points=pts) for v, lbl, pts in options),
                     required=required, **kw)


def _is_suppressed(spec: InputSpec, values: Dict[str, Any]) -> bool:
    return bool(spec.suppressed_by) and _parse_bool(values.get(spec.suppressed_by))


def field_points(spec: InputSpec, values: Dict[str, Any]) -> Optional[int]:
    """Points contributed by one input, or None when it is absent or suppressed."""
    if _is_suppressed(spec, values) or not _is_present(values, spec.id):
        return None
    raw = values.get(spec.id)

    if spec.kind == InputKind.BOOLEAN:
        points = spec.points_if_true if _parse_bool(raw) else spec.points_if_false
    elif spec.kind == InputKind.ENUMERATED:
        choice = spec.choice_for(_unwrap(raw))
        if choice is None:
            choice = _choice_by_points(spec, raw)
        if choice is None:
            logger.debug(f"Unknown value {raw!r} for {spec.id}, scoring 0")
            return 0
        points = choice.points
    else:
        num = _parse_num(raw, None)
        if num is None:
            logger.debug(f"Unparsable numeric value {raw!r} for {spec.id}")
            return None
        if spec.bounds:
            num = _clamp(num, spec.bounds.min, spec.bounds.max)
        points = 0
        for threshold, pts in spec.cutoffs:
            if num >= threshold:
                points = pts

    if spec.gated_by and not _parse_bool(values.get(spec.gated_by)):
        return 0
    return points


def _choice_by_points(spec: InputSpec, raw: Any) -> Optional[Choice]:
    # Callers may send the selected option's points instead of its value
    num = _parse_num(raw, None)
    if num is None:
        return None
    matches = [c for c in spec.choices if c.points == num]
    return matches[0] if len(matches) == 1 else None


def missing_inputs(instrument: InstrumentDef, values: Dict[str, Any]) -> List[str]:
    """Required input ids not yet supplied, honouring suppression flags."""
    return [
        spec.id for spec in instrument.inputs
        if spec.required and not _is_suppressed(spec, values) and not _is_present(values, spec.id)
    ]


def is_complete(instrument: InstrumentDef, values: Dict[str, Any]) -> bool:
    return not missing_inputs(instrument, values)


def weighted_sum(instrument: InstrumentDef, values: Dict[str, Any]) -> Tuple[int, Dict[str, int]]:
    score = 0
    breakdown: Dict[str, int] = {}
    for spec in instrument.inputs:
        pts = field_points(spec, values)
        if pts is None:
            continue
        breakdown[spec.id] = pts
        score += pts
    return score, breakdown


def _result(instrument: InstrumentDef, values: Dict[str, Any], score: int,
            breakdown: Dict[str, int], interpretation: str, tier: Optional[str] = None,
            metrics: Optional[Dict[str, Any]] = None, display: Optional[str] = None,
            warnings: Optional[List[str]] = None) -> ScoreResult:
    missing = missing_inputs(instrument, values)
    return ScoreResult(
        instrument_id=instrument.id,
        score=score,
        interpretation=interpretation,
        tier=tier,
        metrics=metrics or {},
        breakdown=breakdown,
        display=display if display is not None else str(score),
        complete=not missing,
        missing=missing,
        warnings=warnings or [],
    )


def evaluate(instrument: InstrumentDef, values: Optional[Dict[str, Any]] = None) -> ScoreResult:
    """Score an instrument against a (possibly partial) values map."""
    return instrument.compute(instrument, dict(values or {}))


# ── Instrument implementations ───────────────────────────────────────────────

# 1. NIH Stroke Scale ─────────────────────────────────────────────────────────
_NIHSS_MOTOR = [(0, "0: No Drift", 0), (1, "1: Drift", 1), (2, "2: Can't Hold", 2),
                (3, "3: No Gravity", 3), (4, "4: No Move", 4)]

NIHSS_INPUTS = (
    _choice_field("1a", "1a. Level of Consciousness",
                  [(0, "0: Alert", 0), (1, "1: Drowsy", 1), (2, "2: Stupor", 2), (3, "3: Coma", 3)]),
    _choice_field("1b", "1b. LOC Questions",
                  [(0, "0: Both Correct", 0), (1, "1: One Correct", 1), (2, "2: None Correct", 2)]),
    _choice_field("1c", "1c. LOC Commands",
                  [(0, "0: Both Correct", 0), (1, "1: One Correct", 1), (2, "2: None Correct", 2)]),
    _choice_field("2", "2. Best Gaze",
                  [(0, "0: Normal", 0), (1, "1: Partial Palsy", 1), (2, "2: Forced Dev", 2)]),
    _choice_field("3", "3. Visual Fields",
                  [(0, "0: No Loss", 0), (1, "1: Partial", 1), (2, "2: Complete", 2), (3, "3: Bilateral", 3)]),
    _choice_field("4", "4. Facial Palsy",
                  [(0, "0: Normal", 0), (1, "1: Minor", 1), (2, "2: Partial", 2), (3, "3: Complete", 3)]),
    _choice_field("5a", "5a. Motor Left Arm", _NIHSS_MOTOR),
    _choice_field("5b", "5b. Motor Right Arm", _NIHSS_MOTOR),
    _choice_field("6a", "6a. Motor Left Leg", _NIHSS_MOTOR),
    _choice_field("6b", "6b. Motor Right Leg", _NIHSS_MOTOR),
    _choice_field("7", "7. Limb Ataxia",
                  [(0, "0: Absent", 0), (1, "1: Present (1 limb)", 1), (2, "2: Present (2+)", 2)]),
    _choice_field("8", "8. Sensory",
                  [(0, "0: Normal", 0), (1, "1: Mild Loss", 1), (2, "2: Severe Loss", 2)]),
    _choice_field("9", "9. Best Language",
                  [(0, "0: Normal", 0), (1, "1: Mild-Mod", 1), (2, "2: Severe", 2), (3, "3: Mute/Global", 3)]),
    # 9 = UN (intubated / physical barrier): recorded, never added to the total
    _choice_field("10", "10. Dysarthria",
                  [(0, "0: Normal", 0), (1, "1: Mild-Mod", 1), (2, "2: Severe", 2), (9, "UN: Intubated", 0)]),
    _choice_field("11", "11. Extinction/Inattention",
                  [(0, "0: None", 0), (1, "1: Partial", 1), (2, "2: Complete", 2)]),
)

NIHSS_SEVERITY = ThresholdTable.from_bands([
    (0, 0, "No stroke symptoms", "none"),
    (1, 4, "Minor stroke", "minor"),
    (5, 15, "Moderate stroke", "moderate"),
    (16, 20, "Moderate to severe stroke", "moderate_severe"),
    (21, 42, "Severe stroke", "severe"),
])

# RACE-equivalent large vessel occlusion estimate derived from NIHSS items
LVO_PROBABILITY = ThresholdTable.from_bands([
    (0, 4, "Low", 20),
    (5, 6, "Moderate", 55),
    (7, 9, "High", 85),
])


def _item(values: Dict[str, Any], item_id: str) -> int:
    return int(_parse_num(values.get(item_id), 0) or 0)


def estimate_lvo(values: Dict[str, Any]) -> Dict[str, Any]:
    """Map NIHSS items onto the RACE scale and look up LVO probability."""
    face = _item(values, "4")
    arm = max(_item(values, "5a"), _item(values, "5b"))
    leg = max(_item(values, "6a"), _item(values, "6b"))
    language = _item(values, "9")
    breakdown = {
        "facial": 0 if face == 0 else (1 if face == 1 else 2),
        "arm": 0 if arm == 0 else (1 if arm <= 2 else 2),
        "leg": 0 if leg == 0 else (1 if leg <= 2 else 2),
        "gaze": 1 if _item(values, "2") > 0 else 0,
        "aphasia": min(language, 2),
        "agnosia": 1 if _item(values, "11") > 0 else 0,
    }
    # Aphasia (dominant) and agnosia (non-dominant) share one cortical slot
    race = (breakdown["facial"] + breakdown["arm"] + breakdown["leg"] + breakdown["gaze"]
            + max(breakdown["aphasia"], breakdown["agnosia"]))
    band = LVO_PROBABILITY.band_for(race)
    return {"race_score": race, "label": band.label, "probability": band.value, "breakdown": breakdown}


def nihss_item_warnings(values: Dict[str, Any]) -> List[str]:
    """Internal-consistency alerts between NIHSS items."""
    warnings = []
    if _item(values, "9") >= 2 and _item(values, "1c") == 0:
        warnings.append(
            "Alert: You selected Severe Aphasia, but 'Commands' (1c) is scored as Normal. "
            "Usually severe aphasia impairs command following."
        )
    if _item(values, "7") > 0 and any(_item(values, limb) == 4 for limb in ("5a", "5b", "6a", "6b")):
        warnings.append("Alert: Ataxia cannot be scored (must be 0) in a fully paralyzed limb (Motor=4).")
    if _item(values, "10") == 2 and _item(values, "9") == 0 and _item(values, "4") == 0:
        warnings.append(
            "Alert: Severe/Anarthric dysarthria is uncommon without Facial Palsy (4) or Aphasia (9). "
            "Verify patient isn't aphasic."
        )
    return warnings


def run_nihss(instrument: InstrumentDef, v: Dict[str, Any]) -> ScoreResult:
    score, breakdown = weighted_sum(instrument, v)
    band = instrument.table.band_for(score)
    lvo = estimate_lvo(v)
    return _result(
        instrument, v, score, breakdown,
        interpretation=band.label,
        tier=band.value,
        metrics={
            "lvo_race_score": lvo["race_score"],
            "lvo_likelihood": lvo["label"],
            "lvo_probability_percent": lvo["probability"],
        },
        display=f"{score}/42",
        warnings=nihss_item_warnings(v),
    )


# 2. ABCD² ────────────────────────────────────────────────────────────────────
ABCD2_TABLE = ThresholdTable.from_bands([
    (0, 3, "Low risk", {"tier": "low", "two_day_risk_percent": 1.0}),
    (4, 5, "Moderate risk", {"tier": "moderate", "two_day_risk_percent": 4.1}),
    (6, 7, "High risk", {"tier": "high", "two_day_risk_percent": 8.1}),
])


def run_abcd2(instrument: InstrumentDef, v: Dict[str, Any]) -> ScoreResult:
    score, breakdown = weighted_sum(instrument, v)
    band = instrument.table.band_for(score)
    pct = band.value["two_day_risk_percent"]
    return _result(
        instrument, v, score, breakdown,
        interpretation=f"{band.label} ({pct}% 2-day stroke risk)",
        tier=band.value["tier"],
        metrics={"two_day_stroke_risk_percent": pct},
        display=f"{score}/7",
    )


# 3. ICH Score ────────────────────────────────────────────────────────────────
ICH_MORTALITY_BY_SCORE = {0: 0, 1: 13, 2: 26, 3: 72, 4: 97, 5: 99, 6: 100}
ICH_SEVERITY_LABELS = {
    0: "Very low risk", 1: "Low risk", 2: "Moderate risk", 3: "High risk",
    4: "Very high risk", 5: "Very high risk", 6: "Very high risk",
}
ICH_TABLE = ThresholdTable.from_mapping(ICH_MORTALITY_BY_SCORE, labels=ICH_SEVERITY_LABELS)


def run_ich_score(instrument: InstrumentDef, v: Dict[str, Any]) -> ScoreResult:
    score, breakdown = weighted_sum(instrument, v)
    score = int(_clamp(score, 0, 6))
    band = instrument.table.band_for(score)
    return _result(
        instrument, v, score, breakdown,
        interpretation=f"{band.label}: approx. 30-day mortality {band.value}%",
        tier=band.label,
        metrics={"thirty_day_mortality_percent": band.value},
        display=f"{score}/6",
    )


# 4. Glasgow Coma Scale ───────────────────────────────────────────────────────
GCS_SEVERITY = ThresholdTable.from_bands([
    (0, 3, "Deep coma (3)", "deep_coma"),
    (4, 8, "Severe impairment / coma (3-8)", "severe"),
    (9, 13, "Moderate impairment (9-13)", "moderate"),
    (14, 15, "Mild impairment (14-15)", "mild"),
])


def run_gcs(instrument: InstrumentDef, v: Dict[str, Any]) -> ScoreResult:
    eye_nt = _parse_bool(v.get("eye_not_testable"))
    verbal_nt = _parse_bool(v.get("verbal_not_testable"))
    # Raw component selections, independent of the not-testable flags
    raw = {spec.id: field_points(spec.model_copy(update={"suppressed_by": None}), v)
           for spec in instrument.inputs if spec.kind == InputKind.ENUMERATED}
    eye, verbal, motor = raw["eye"], raw["verbal"], raw["motor"]

    _, breakdown = weighted_sum(instrument, v)
    severity_total = sum(breakdown.values())
    band = instrument.table.band_for(severity_total)

    if verbal_nt:
        score = (eye if eye is not None else 1) + (motor or 0)
        display = f"{score}T"
    elif eye_nt:
        score = severity_total
        display = f"E=C V{verbal if verbal is not None else '-'} M{motor if motor is not None else '-'}"
    else:
        score = severity_total
        display = str(score)

    return _result(
        instrument, v, score, breakdown,
        interpretation=band.label,
        tier=band.value,
        metrics={
            "eye": eye,
            "verbal": "T" if verbal_nt else verbal,
            "motor": motor,
            "severity_total": severity_total,
        },
        display=display,
    )


# 5. RoPE ─────────────────────────────────────────────────────────────────────
ROPE_PFO_ATTRIBUTABLE = {0: 0, 1: 0, 2: 0, 3: 0, 4: 38, 5: 34, 6: 62, 7: 72, 8: 84, 9: 88, 10: 88}
ROPE_TABLE = ThresholdTable.from_mapping(
    ROPE_PFO_ATTRIBUTABLE,
    labels={k: ("Likely pathogenic PFO" if k >= 7 else "Incidental PFO" if k <= 3 else "Possibly pathogenic PFO")
            for k in ROPE_PFO_ATTRIBUTABLE},
)


def run_rope(instrument: InstrumentDef, v: Dict[str, Any]) -> ScoreResult:
    score, breakdown = weighted_sum(instrument, v)
    band = instrument.table.band_for(score)
    return _result(
        instrument, v, score, breakdown,
        interpretation=f"{band.value}% PFO-attributable fraction ({band.label})",
        tier=band.label,
        metrics={"pfo_attributable_percent": band.value},
        display=f"{score}/10",
    )


# 6. HAS-BLED ─────────────────────────────────────────────────────────────────
HASBLED_RISK = ThresholdTable.from_bands([
    (0, 0, "Low risk", "low"),
    (1, 2, "Moderate risk", "moderate"),
    (3, 3, "High risk", "high"),
    (4, 9, "Very high risk", "very_high"),
])
# Major bleeds per 100 patient-years (Pisters et al. Chest 2010)
HASBLED_BLEEDS_PER_100 = ThresholdTable.from_mapping(
    {0: 1.13, 1: 1.02, 2: 1.88, 3: 3.74, 4: 8.70, 5: 8.70, 6: 8.70, 7: 8.70, 8: 8.70, 9: 8.70}
)


def run_has_bled(instrument: InstrumentDef, v: Dict[str, Any]) -> ScoreResult:
    score, breakdown = weighted_sum(instrument, v)
    band = instrument.table.band_for(score)
    bleeds = HASBLED_BLEEDS_PER_100.value(score)
    return _result(
        instrument, v, score, breakdown,
        interpretation=f"{band.label} ({bleeds:.2f} major bleeds per 100 patient-years)",
        tier=band.value,
        metrics={"bleeds_per_100_patient_years": bleeds},
        display=f"{score}/9",
    )


# ── Instrument registry ─────────────────────────────────────────────────────

NIHSS = InstrumentDef(
    id="nihss",
    title="NIH Stroke Scale (NIHSS)",
    description="Standardized quantification of stroke severity. Total score 0-42.",
    tags=["stroke", "severity"],
    inputs=NIHSS_INPUTS,
    table=NIHSS_SEVERITY,
    score_range=(0, 42),
    compute=run_nihss,
)

ABCD2 = InstrumentDef(
    id="abcd2",
    title="ABCD² Score for TIA",
    description="Estimates the risk of stroke within 2 days after a transient ischemic attack.",
    tags=["stroke", "tia", "risk"],
    inputs=(
        _choice_field("age", "Age", [("under60", "< 60 years", 0), ("60plus", ">= 60 years", 1)]),
        _choice_field("blood_pressure", "Blood pressure",
                      [("normal", "< 140/90 mmHg", 0), ("elevated", ">= 140/90 mmHg", 1)]),
        _choice_field("clinical_features", "Clinical features",
                      [("weakness", "Unilateral weakness", 2),
                       ("speech", "Speech impairment without weakness", 1),
                       ("other", "Other", 0)]),
        _choice_field("duration", "Duration of symptoms",
                      [("60plus", ">= 60 minutes", 2), ("10to59", "10-59 minutes", 1),
                       ("under10", "< 10 minutes", 0)]),
        _bool_field("diabetes", "Diabetes"),
    ),
    table=ABCD2_TABLE,
    score_range=(0, 7),
    citation=Citation(
        authors="Johnston SC, Rothwell PM, Nguyen-Huynh MN, et al.",
        title="Validation and refinement of scores to predict very early stroke risk "
              "after transient ischaemic attack",
        journal="Lancet", year=2007, volume=369, issue=9558, pages="283-292",
        doi="10.1016/S0140-6736(07)60150-0",
    ),
    compute=run_abcd2,
)

ICH_SCORE = InstrumentDef(
    id="ich_score",
    title="ICH Score",
    description="Predicts 30-day mortality for spontaneous intracerebral hemorrhage.",
    tags=["hemorrhage", "mortality"],
    inputs=(
        _choice_field("gcs", "GCS score",
                      [("13-15", "13-15 (mild impairment)", 0),
                       ("5-12", "5-12 (moderate impairment)", 1),
                       ("3-4", "3-4 (severe impairment)", 2)]),
        InputSpec(id="volume_ml", label="ICH volume", kind=InputKind.NUMERIC,
                  bounds=Bounds(min=0, max=500), cutoffs=((30, 1),), canonical_unit="mL"),
        _bool_field("ivh", "Intraventricular hemorrhage"),
        _choice_field("origin", "Origin",
                      [("supratentorial", "Supratentorial", 0), ("infratentorial", "Infratentorial", 1)]),
        InputSpec(id="age", label="Age", kind=InputKind.NUMERIC,
                  bounds=Bounds(min=0, max=120), cutoffs=((80, 1),), canonical_unit="years"),
    ),
    table=ICH_TABLE,
    score_range=(0, 6),
    citation=Citation(
        authors="Hemphill JC 3rd, Bonovich DC, Besmertis L, Manley GT, Johnston SC",
        title="The ICH Score: A simple, reliable grading scale for intracerebral hemorrhage",
        journal="Stroke", year=2001, volume=32, issue=4, pages="891-897",
        doi="10.1161/01.str.32.4.891", pubmed_id="11283388",
    ),
    compute=run_ich_score,
)

GCS = InstrumentDef(
    id="gcs",
    title="Glasgow Coma Scale (GCS)",
    description="Level of consciousness from eye, verbal and motor responses.",
    tags=["consciousness", "severity"],
    inputs=(
        _choice_field("eye", "Eye opening",
                      [(4, "Spontaneous", 4), (3, "To verbal command", 3), (2, "To pain", 2), (1, "None", 1)],
                      suppressed_by="eye_not_testable"),
        _choice_field("verbal", "Verbal response",
                      [(5, "Oriented", 5), (4, "Confused conversation", 4), (3, "Inappropriate words", 3),
                       (2, "Incomprehensible sounds", 2), (1, "None", 1)],
                      suppressed_by="verbal_not_testable"),
        _choice_field("motor", "Motor response",
                      [(6, "Obeys commands", 6), (5, "Localizes to pain", 5), (4, "Withdraws from pain", 4),
                       (3, "Abnormal flexion (decorticate)", 3), (2, "Abnormal extension (decerebrate)", 2),
                       (1, "None", 1)]),
        _bool_field("eye_not_testable", "Eye not testable (e.g. swelling)", points_if_true=0, required=False),
        _bool_field("verbal_not_testable", "Verbal not testable (e.g. intubated)", points_if_true=0,
                    required=False),
    ),
    table=GCS_SEVERITY,
    score_range=(3, 15),
    citation=Citation(
        authors="Teasdale G, Jennett B",
        title="Assessment of coma and impaired consciousness",
        journal="Lancet", year=1974, volume=2, issue=7872, pages="81-84",
        doi="10.1016/S0140-6736(74)91639-0",
    ),
    compute=run_gcs,
)

ROPE = InstrumentDef(
    id="rope",
    title="RoPE Score",
    description="Likelihood that a patent foramen ovale is causal in cryptogenic stroke.",
    tags=["stroke", "pfo"],
    inputs=(
        _choice_field("age_band", "Age",
                      [("under30", "< 30 years", 5), ("30_39", "30-39 years", 4), ("40_49", "40-49 years", 3),
                       ("50_59", "50-59 years", 2), ("60_69", "60-69 years", 1), ("70plus", ">= 70 years", 0)]),
        # Absence of the risk factor scores
        _bool_field("hypertension", "History of hypertension", points_if_true=0, points_if_false=1),
        _bool_field("diabetes", "History of diabetes", points_if_true=0, points_if_false=1),
        _bool_field("prior_stroke_tia", "Prior stroke or TIA", points_if_true=0, points_if_false=1),
        _bool_field("nonsmoker", "Non-smoker"),
        _bool_field("cortical_infarct", "Cortical infarct on imaging"),
    ),
    table=ROPE_TABLE,
    score_range=(0, 10),
    citation=Citation(
        authors="Kent DM, Thaler DE",
        title="An index to identify stroke-related vs incidental patent foramen ovale in cryptogenic stroke",
        journal="Stroke", year=2013, volume=44, issue=5, pages="1449-1452",
        doi="10.1161/STROKEAHA.111.000158",
    ),
    compute=run_rope,
)

HAS_BLED = InstrumentDef(
    id="has_bled",
    title="HAS-BLED Score",
    description="One-year major bleeding risk in atrial fibrillation on anticoagulation.",
    tags=["anticoagulation", "bleeding", "risk"],
    inputs=(
        _bool_field("hypertension", "Hypertension (systolic > 160 mmHg)", required=False),
        _bool_field("abnormal_renal", "Abnormal renal function", required=False),
        _bool_field("abnormal_liver", "Abnormal liver function", required=False),
        _bool_field("stroke_history", "History of stroke", required=False),
        _bool_field("prior_bleeding", "Prior major bleeding or predisposition", required=False),
        _bool_field("on_warfarin", "On warfarin", points_if_true=0, required=False),
        _bool_field("labile_inr", "Labile INR (TTR < 60%)", required=False, gated_by="on_warfarin"),
        _bool_field("elderly", "Elderly (age > 65)", required=False),
        _bool_field("drugs", "Antiplatelets or NSAIDs", required=False),
        _bool_field("alcohol", "Alcohol excess", required=False),
    ),
    table=HASBLED_RISK,
    score_range=(0, 9),
    citation=Citation(
        authors="Pisters R, Lane DA, Nieuwlaat R, de Vos CB, Crijns HJ, Lip GY",
        title="A novel user-friendly score (HAS-BLED) to assess 1-year risk of major bleeding "
              "in patients with atrial fibrillation",
        journal="Chest", year=2010, volume=138, issue=5, pages="1093-1100",
        doi="10.1378/chest.10-0134",
    ),
    compute=run_has_bled,
)

INSTRUMENTS: Dict[str, InstrumentDef] = {
    inst.id: inst for inst in (NIHSS, ABCD2, ICH_SCORE, GCS, ROPE, HAS_BLED)
}
