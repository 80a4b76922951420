"""Pydantic models for neurocalc."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .thresholds import ThresholdTable


# ── Instrument definitions ──────────────────────────────────────────────────

class InputKind(str, Enum):
    BOOLEAN = "boolean"
    ENUMERATED = "enumerated"
    NUMERIC = "numeric"


class Citation(BaseModel):
    model_config = ConfigDict(frozen=True)

    authors: str
    title: str
    journal: str
    year: int
    volume: Optional[int] = None
    issue: Optional[int] = None
    pages: str = ""
    doi: str = ""
    pubmed_id: Optional[str] = None


class Choice(BaseModel):
    """One labelled option of an enumerated input."""

    model_config = ConfigDict(frozen=True)

    value: Union[int, float, str]
    label: str
    points: int
    description: str = ""


class Bounds(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float
    max: float


class InputSpec(BaseModel):
    """
    A single instrument input.

    Scoring data lives on the field itself so the evaluator stays generic:
      - boolean:    points_if_true / points_if_false (polarity is per field)
      - enumerated: points of the selected Choice
      - numeric:    points of the highest reached cutoff (ascending pairs)

    suppressed_by names a boolean flag that, when true, drops this field from
    both the sum and the completeness requirement (GCS "not testable").
    gated_by names a boolean field that must be true for this field to score
    (HAS-BLED labile INR only counts on warfarin).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    kind: InputKind
    choices: Tuple[Choice, ...] = ()
    bounds: Optional[Bounds] = None
    points_if_true: int = 0
    points_if_false: int = 0
    cutoffs: Tuple[Tuple[float, int], ...] = ()
    required: bool = True
    suppressed_by: Optional[str] = None
    gated_by: Optional[str] = None
    canonical_unit: str = ""

    def choice_for(self, raw: Any) -> Optional[Choice]:
        """Match a supplied value against the choice values (case-insensitive for text)."""
        if raw is None:
            return None
        for choice in self.choices:
            if raw == choice.value and type(raw) is not bool:
                return choice
        text = str(raw).strip().lower()
        for choice in self.choices:
            if str(choice.value).lower() == text:
                return choice
        return None

    def public(self) -> Dict[str, Any]:
        """Schema view returned by calc_info."""
        info: Dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.kind.value,
            "required": self.required,
            "canonical_unit": self.canonical_unit,
            "constraints": {},
        }
        if self.choices:
            info["constraints"]["allowed_values"] = [c.value for c in self.choices]
            info["choices"] = [c.model_dump() for c in self.choices]
        if self.bounds:
            info["constraints"]["min"] = self.bounds.min
            info["constraints"]["max"] = self.bounds.max
        if self.suppressed_by:
            info["suppressed_by"] = self.suppressed_by
        return info


class InstrumentDef(BaseModel):
    """A named scoring instrument: ordered inputs, a score table and a compute function."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    title: str
    description: str = ""
    version: str = "1.0"
    tags: List[str] = []
    inputs: Tuple[InputSpec, ...]
    table: ThresholdTable
    score_range: Tuple[int, int]
    citation: Optional[Citation] = None
    # (instrument, values) -> ScoreResult
    compute: Callable[..., Any] = Field(exclude=True)

    def input(self, input_id: str) -> InputSpec:
        for spec in self.inputs:
            if spec.id == input_id:
                return spec
        raise KeyError(input_id)


class ScoreResult(BaseModel):
    """Output of one instrument evaluation."""

    model_config = ConfigDict(frozen=True)

    instrument_id: str
    score: int
    interpretation: str
    tier: Optional[str] = None
    metrics: Dict[str, Any] = {}
    breakdown: Dict[str, int] = {}
    display: str = ""
    complete: bool = True
    missing: List[str] = []
    warnings: List[str] = []


# ── Tool facade results ─────────────────────────────────────────────────────

class CalcInfoResult(BaseModel):
    """Result from calc_info tool."""

    calc_id: str
    title: str
    description: Optional[str] = None
    version: str
    tags: List[str] = []
    inputs: List[Dict[str, Any]]
    score_range: Optional[Tuple[int, int]] = None
    interpretation_table: List[Dict[str, Any]] = []
    citation: Optional[Dict[str, Any]] = None


class ExecuteCalcResult(BaseModel):
    """Result from execute_calc / classify / summarize_trial tools."""

    success: bool
    outputs: Optional[Dict[str, Any]] = None
    errors: List[Any] = []
    warnings: List[Any] = []
    audit_trace: Optional[Dict[str, Any]] = None

    def error_messages(self) -> List[str]:
        """Get error messages as strings."""
        msgs = []
        for e in self.errors:
            if isinstance(e, str):
                msgs.append(e)
            elif isinstance(e, dict):
                msgs.append(e.get("message", str(e)))
            else:
                msgs.append(str(e))
        return msgs


# ── Boston Criteria 2.0 ─────────────────────────────────────────────────────

class BostonCaaDiagnosis(str, Enum):
    DEFINITE = "definite-CAA"
    PROBABLE_SUPPORTING_PATHOLOGY = "probable-CAA-supporting-pathology"
    PROBABLE = "probable-CAA"
    POSSIBLE = "possible-CAA"
    UNLIKELY = "unlikely-CAA"
    EXCLUDED = "excluded"


class AnticoagulationRisk(str, Enum):
    """Ordered severity vocabulary: very-high > high > moderate > low > n/a."""

    VERY_HIGH = "very-high"
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"
    NOT_APPLICABLE = "n/a"

    @property
    def rank(self) -> int:
        return _ANTICOAGULATION_RANK[self]


_ANTICOAGULATION_RANK = {
    AnticoagulationRisk.NOT_APPLICABLE: 0,
    AnticoagulationRisk.LOW: 1,
    AnticoagulationRisk.MODERATE: 2,
    AnticoagulationRisk.HIGH: 3,
    AnticoagulationRisk.VERY_HIGH: 4,
}


class BostonCaaInputs(BaseModel):
    """Clinical and MRI findings evaluated by the Boston Criteria 2.0."""

    model_config = ConfigDict(frozen=True)

    age: float = Field(ge=0)
    pathology_definite_caa: bool = False
    pathology_supporting_caa: bool = False
    has_qualifying_presentation: bool = False
    # 0, 1 or 2 where 2 stands for ">= 2" strictly lobar hemorrhagic lesions
    lobar_hemorrhagic_lesions: int = 0
    white_matter_feature: bool = False
    deep_hemorrhagic_lesions: bool = False
    other_cause_of_hemorrhage: bool = False

    @field_validator("lobar_hemorrhagic_lesions")
    @classmethod
    def _cap_lobar_count(cls, v: int) -> int:
        if v < 0:
            raise ValueError("lobar_hemorrhagic_lesions must be 0, 1 or >=2")
        return min(v, 2)


class ClassificationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    diagnosis: BostonCaaDiagnosis
    label: str
    criteria_met: Tuple[str, ...]
    clinical_implications: str
    anticoagulation_risk: AnticoagulationRisk
    recommendations: Tuple[str, ...]
    rule: str = ""


# ── Heidelberg Bleeding Classification ──────────────────────────────────────

class HeidelbergClass(str, Enum):
    HI1 = "1a"
    HI2 = "1b"
    PH1 = "1c"
    PH2 = "2"
    REMOTE_PH = "3a"
    IVH = "3b"
    SAH = "3c"
    SDH = "3d"


class HeidelbergInputs(BaseModel):
    """Imaging class of a hemorrhagic transformation and whether it caused deterioration."""

    model_config = ConfigDict(frozen=True)

    bleeding_class: HeidelbergClass
    # Lax bool parsing: "false", "no", "0" are False
    symptomatic: bool = False

    @field_validator("bleeding_class", mode="before")
    @classmethod
    def _normalize_class(cls, v: Any) -> Any:
        # Command line values arrive JSON-decoded, so class "2" may be an int
        if isinstance(v, HeidelbergClass):
            return v
        return str(v).strip().lower()


class HeidelbergResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    bleeding_class: HeidelbergClass
    classification: str
    short_label: str
    clinical_significance: str
    management_note: str
    symptomatic: bool = False


# ── Trial records and comparative outcomes ──────────────────────────────────

class StatField(BaseModel):
    value: str
    label: str = ""
    info: Optional[str] = None


class TrialStats(BaseModel):
    sample_size: StatField
    primary_endpoint: StatField
    p_value: StatField
    effect_size: StatField


class ArmResult(BaseModel):
    # Kept loose: curated content occasionally carries text ("Non-inf") here
    percentage: Union[float, str, None] = None
    label: str = ""
    name: str = ""


class EfficacyResults(BaseModel):
    treatment: ArmResult
    control: ArmResult


class TrialCalculations(BaseModel):
    nnt: Optional[float] = None
    nnt_explanation: Optional[str] = None


class TrialRecord(BaseModel):
    """A read-only trial entry from the content catalog."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    subtitle: str = ""
    category: str = ""
    stats: TrialStats
    efficacy_results: Optional[EfficacyResults] = None
    calculations: Optional[TrialCalculations] = None
    special_design: Optional[str] = None
    trial_result: Optional[str] = None
    key_message: Optional[str] = None
    source: str = ""
    clinical_trials_id: Optional[str] = None


class OutcomeMode(str, Enum):
    SUPERIORITY = "superiority"
    NEGATIVE = "negative"
    ESTIMATION = "estimation"


class TrialFlags(BaseModel):
    """Design metadata that steers the summarizer."""

    model_config = ConfigDict(frozen=True)

    is_estimation_trial: bool = False
    is_negative_trial: bool = False
    p_value: str = "N/A"
    p_value_label: str = ""
    effect_size: str = ""
    effect_size_label: str = ""
    nnt_override: Optional[float] = None
    nnt_explanation: Optional[str] = None


class ComparativeOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    treatment_rate: Optional[float]
    control_rate: Optional[float]
    mode: OutcomeMode
    risk_difference: Optional[float] = None
    nnt: Optional[float] = None
    nnt_display: str = "N/A"
    nnt_source: Optional[str] = None
    nnt_explanation: Optional[str] = None
    is_negative_trial: bool = False
    is_estimation_trial: bool = False
    # Reported effect and its interval label, e.g. "-1.18%" / "Risk Difference (95% CI: -2.84 to 0.47)"
    effect_size: Optional[str] = None
    effect_size_label: Optional[str] = None
