"""
Diagnostic classifiers.

Boston Criteria 2.0 for cerebral amyloid angiopathy is an ordered list of
(name, predicate, builder) rules evaluated top to bottom; the first match
wins. The order encodes clinical precedence (exclusion, then pathology, then
the age and presentation gates, then imaging) and must not be rearranged.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Sequence, Tuple, Union

from .models import (
    AnticoagulationRisk,
    BostonCaaDiagnosis,
    BostonCaaInputs,
    Citation,
    ClassificationResult,
    HeidelbergClass,
    HeidelbergInputs,
    HeidelbergResult,
)

logger = logging.getLogger(__name__)

BOSTON_CAA_CITATION = Citation(
    authors="Charidimou A, Boulouis G, Frosch M et al.",
    title="The Boston Criteria Version 2.0 for Cerebral Amyloid Angiopathy: A Multicentre, "
          "Retrospective, MRI–neuropathology Diagnostic Accuracy Study",
    journal="Lancet Neurol", year=2022, volume=21, issue=8, pages="714-725",
    doi="10.1016/s1474-4422(22)00208-3",
)

BOSTON_DIAGNOSIS_LABELS: Dict[BostonCaaDiagnosis, str] = {
    BostonCaaDiagnosis.DEFINITE: "Definite CAA",
    BostonCaaDiagnosis.PROBABLE_SUPPORTING_PATHOLOGY: "Probable CAA (supporting pathology)",
    BostonCaaDiagnosis.PROBABLE: "Probable CAA",
    BostonCaaDiagnosis.POSSIBLE: "Possible CAA",
    BostonCaaDiagnosis.UNLIKELY: "CAA unlikely",
    BostonCaaDiagnosis.EXCLUDED: "Excluded (other cause or criteria not met)",
}

_IMAGING_PREAMBLE = ("Age ≥50", "Qualifying presentation")
_IMAGING_TAIL = ("No deep hemorrhagic lesions", "No other cause")

Predicate = Callable[[BostonCaaInputs], bool]
Builder = Callable[[BostonCaaInputs, str], ClassificationResult]


def _build(diagnosis: BostonCaaDiagnosis, criteria: Sequence[str], implications: str,
           risk: AnticoagulationRisk, recommendations: Sequence[str]) -> Builder:
    def builder(_: BostonCaaInputs, rule: str) -> ClassificationResult:
        return ClassificationResult(
            diagnosis=diagnosis,
            label=BOSTON_DIAGNOSIS_LABELS[diagnosis],
            criteria_met=tuple(criteria),
            clinical_implications=implications,
            anticoagulation_risk=risk,
            recommendations=tuple(recommendations),
            rule=rule,
        )
    return builder


def _unlikely(*criteria: str) -> Builder:
    return _build(
        BostonCaaDiagnosis.UNLIKELY,
        criteria,
        "Imaging and clinical picture do not meet possible CAA. "
        "CAA is still a differential in elderly with lobar hemorrhage.",
        AnticoagulationRisk.MODERATE,
        ["Consider CAA in differential if future lobar hemorrhage or TFNE.",
         "Anticoagulation decision per stroke vs bleeding risk (e.g. CHA2DS2-VASc vs HAS-BLED)."],
    )


def _unlikely_young(inputs: BostonCaaInputs, rule: str) -> ClassificationResult:
    age = int(inputs.age) if float(inputs.age).is_integer() else inputs.age
    return _unlikely(
        f"Age {age} < 50 years; Boston 2.0 criteria require age ≥50 for probable/possible CAA."
    )(inputs, rule)


BOSTON_RULES: Tuple[Tuple[str, Predicate, Builder], ...] = (
    (
        "other_cause",
        lambda i: i.other_cause_of_hemorrhage,
        _build(
            BostonCaaDiagnosis.EXCLUDED,
            ["Other cause of hemorrhagic lesions present (trauma, hemorrhagic transformation, "
             "AVM, tumor, warfarin INR >3, vasculitis)."],
            "Another cause of hemorrhage or exclusion criterion present. "
            "Do not apply Boston CAA criteria for diagnosis.",
            AnticoagulationRisk.NOT_APPLICABLE,
            ["Address identified cause of hemorrhage.",
             "Reassess anticoagulation indication separately if applicable."],
        ),
    ),
    (
        "definite_pathology",
        lambda i: i.pathology_definite_caa,
        _build(
            BostonCaaDiagnosis.DEFINITE,
            ["Full brain post-mortem: severe CAA with vasculopathy, no other diagnostic lesion."],
            "Pathology-proven CAA. High recurrence risk for lobar hemorrhage; "
            "anticoagulation carries very high ICH risk.",
            AnticoagulationRisk.VERY_HIGH,
            ["Avoid anticoagulation if possible; consider left atrial appendage closure or "
             "antiplatelet per shared decision-making.",
             "BP control; avoid antiplatelets when not clearly indicated.",
             "Counsel on recurrence risk."],
        ),
    ),
    (
        "supporting_pathology",
        lambda i: i.pathology_supporting_caa,
        _build(
            BostonCaaDiagnosis.PROBABLE_SUPPORTING_PATHOLOGY,
            ["Pathological tissue (evacuated hematoma or cortical biopsy) showing CAA, "
             "no other diagnostic lesion."],
            "Probable CAA with pathological support. High recurrence risk; "
            "anticoagulation carries high ICH risk.",
            AnticoagulationRisk.HIGH,
            ["Avoid anticoagulation if feasible; discuss alternatives.",
             "BP control; minimize antiplatelet use unless indicated.",
             "Counsel on recurrence risk."],
        ),
    ),
    ("age_under_50", lambda i: i.age < 50, _unlikely_young),
    (
        "no_qualifying_presentation",
        lambda i: not i.has_qualifying_presentation,
        _unlikely("No qualifying presentation (spontaneous ICH, TFNE, or cognitive impairment/dementia)."),
    ),
    (
        "deep_only",
        lambda i: (i.deep_hemorrhagic_lesions and i.lobar_hemorrhagic_lesions == 0
                   and not i.white_matter_feature),
        _unlikely("Deep hemorrhagic lesions present; no lobar or white matter features. Strict criteria "
                  "improve specificity; deep microbleeds can occur in ~15% of proven CAA."),
    ),
    (
        "deep_with_single_lobar",
        lambda i: (i.deep_hemorrhagic_lesions and i.lobar_hemorrhagic_lesions < 2
                   and not i.white_matter_feature),
        _unlikely("Deep hemorrhagic lesions present; Boston 2.0 requires absence of deep hemorrhagic "
                  "lesions for probable/possible CAA (improves specificity)."),
    ),
    (
        "multiple_lobar",
        lambda i: i.lobar_hemorrhagic_lesions == 2 and not i.deep_hemorrhagic_lesions,
        _build(
            BostonCaaDiagnosis.PROBABLE,
            [*_IMAGING_PREAMBLE,
             "≥2 strictly lobar hemorrhagic lesions (ICH, microbleeds, cortical superficial siderosis, "
             "or convexity SAH)",
             *_IMAGING_TAIL],
            "Probable CAA by imaging. High recurrence risk; anticoagulation significantly increases ICH risk.",
            AnticoagulationRisk.HIGH,
            ["Avoid anticoagulation if possible; consider LAA closure or antiplatelet.",
             "BP control; limit antiplatelet to clear indications.",
             "Counsel on recurrence risk (e.g. ~5–10% per year)."],
        ),
    ),
    (
        "lobar_with_white_matter",
        lambda i: (i.lobar_hemorrhagic_lesions >= 1 and i.white_matter_feature
                   and not i.deep_hemorrhagic_lesions),
        _build(
            BostonCaaDiagnosis.PROBABLE,
            [*_IMAGING_PREAMBLE,
             "One lobar hemorrhagic lesion + one white matter feature (severe centrum semiovale PVS "
             "or multispot WMH)",
             *_IMAGING_TAIL],
            "Probable CAA by imaging (lobar + white matter). High recurrence risk; "
            "anticoagulation carries high ICH risk.",
            AnticoagulationRisk.HIGH,
            ["Avoid anticoagulation if feasible.",
             "BP control; minimize antiplatelet use.",
             "Counsel on recurrence risk."],
        ),
    ),
    (
        "single_lobar",
        lambda i: i.lobar_hemorrhagic_lesions >= 1 and not i.deep_hemorrhagic_lesions,
        _build(
            BostonCaaDiagnosis.POSSIBLE,
            [*_IMAGING_PREAMBLE, "One strictly lobar hemorrhagic lesion", *_IMAGING_TAIL],
            "Possible CAA. Moderate recurrence risk; anticoagulation increases ICH risk.",
            AnticoagulationRisk.MODERATE,
            ["Shared decision-making for anticoagulation; consider HAS-BLED and stroke risk.",
             "BP control.",
             "Repeat MRI if TFNE or recurrent symptoms."],
        ),
    ),
    (
        "white_matter_only",
        lambda i: (i.white_matter_feature and not i.deep_hemorrhagic_lesions
                   and i.lobar_hemorrhagic_lesions == 0),
        _build(
            BostonCaaDiagnosis.POSSIBLE,
            [*_IMAGING_PREAMBLE,
             "One white matter feature (severe centrum semiovale PVS or multispot WMH)",
             *_IMAGING_TAIL],
            "Possible CAA (white matter feature only). Lower sensitivity; consider CAA in differential.",
            AnticoagulationRisk.MODERATE,
            ["Consider CAA in differential; follow up for new hemorrhagic lesions.",
             "Anticoagulation decision per stroke vs bleeding risk."],
        ),
    ),
    (
        "imaging_criteria_not_met",
        lambda i: True,
        _unlikely("Does not meet probable or possible CAA imaging criteria."),
    ),
)


def assess_boston_criteria(inputs: Union[BostonCaaInputs, Mapping[str, Any]]) -> ClassificationResult:
    """Classify CAA likelihood; exactly one rule fires for any input."""
    if not isinstance(inputs, BostonCaaInputs):
        inputs = BostonCaaInputs.model_validate(dict(inputs))
    # The last rule is the unconditional fallback
    name, _, builder = next(rule for rule in BOSTON_RULES if rule[1](inputs))
    logger.debug(f"Boston criteria matched rule '{name}'")
    return builder(inputs, name)


def boston_rule_names() -> List[str]:
    return [name for name, _, _ in BOSTON_RULES]


# ── Heidelberg Bleeding Classification ──────────────────────────────────────

HEIDELBERG_CITATION = Citation(
    authors="von Kummer R, Broderick J, Campbell B et al.",
    title="The Heidelberg Bleeding Classification",
    journal="Stroke", year=2015, volume=46, issue=10, pages="2981-2986",
    doi="10.1161/strokeaha.115.010049",
)

# class -> (classification, clinical significance, management note)
_HEIDELBERG: Dict[HeidelbergClass, Tuple[str, str, str]] = {
    HeidelbergClass.HI1: (
        "Class 1a (HI1)",
        "Hemorrhagic infarction type 1: scattered small petechiae within infarcted tissue, no mass effect. "
        "Unlikely relatedness to reperfusion therapy.",
        "Asymptomatic HT; typically no change in management. Imaging within 48h of reperfusion and as "
        "needed for new symptoms.",
    ),
    HeidelbergClass.HI2: (
        "Class 1b (HI2)",
        "Hemorrhagic infarction type 2: confluent petechiae, no mass effect. Possible relatedness to "
        "reperfusion if symptomatic.",
        "Monitor; if symptomatic (SICH), consider possible relatedness to intervention. No routine "
        "reversal for HI alone.",
    ),
    HeidelbergClass.PH1: (
        "Class 1c (PH1)",
        "Parenchymal hematoma within infarcted tissue, <30% of infarct, no substantive mass effect. "
        "Probable relatedness if within 24h of treatment.",
        "If symptomatic or treatment within 24h, classify relatedness. Consider BP control per protocol.",
    ),
    HeidelbergClass.PH2: (
        "Class 2 (PH2)",
        "Parenchymal hematoma occupying ≥30% of infarct with obvious mass effect. Definite/probable "
        "relatedness to reperfusion when symptomatic.",
        "Symptomatic PH2 often drives deterioration. BP control, ICP monitoring as indicated; "
        "neurosurgery consult if mass effect.",
    ),
    HeidelbergClass.REMOTE_PH: (
        "Class 3a",
        "Parenchymal hematoma remote from infarcted brain tissue. Possible relatedness to reperfusion.",
        "Remote hemorrhage; exclude procedural complication (e.g. vessel perforation). Imaging and "
        "neurologic monitoring.",
    ),
    HeidelbergClass.IVH: (
        "Class 3b (IVH)",
        "Intraventricular hemorrhage. Possible relatedness to reperfusion; consider extension from "
        "parenchymal hemorrhage.",
        "Assess for hydrocephalus; EVD if indicated. Monitor for worsening.",
    ),
    HeidelbergClass.SAH: (
        "Class 3c (SAH)",
        "Subarachnoid hemorrhage. Possible relatedness; distinguish from aneurysm rupture if "
        "convexity/circumstantial.",
        "Convexity SAH may be CAA-related; if post-reperfusion, possible relatedness. Vascular imaging if "
        "not already done.",
    ),
    HeidelbergClass.SDH: (
        "Class 3d (SDH)",
        "Subdural hemorrhage. Possible relatedness; consider trauma or coagulopathy.",
        "Assess for mass effect and surgical indication. Review anticoagulation and antiplatelet use.",
    ),
}

SICH_NOTE = (
    "Symptomatic ICH (SICH): consider ≥4 pt NIHSS increase or ≥2 pt in one subcategory or intervention "
    "(intubation, hemicraniectomy, EVD); document relatedness to reperfusion."
)


def classify_heidelberg_bleeding(bleeding_class: Union[HeidelbergClass, str],
                                 symptomatic: bool = False) -> HeidelbergResult:
    """Look up a hemorrhagic transformation class; raises ValueError for unknown classes."""
    cls = HeidelbergClass(str(bleeding_class.value if isinstance(bleeding_class, HeidelbergClass)
                              else bleeding_class).strip().lower())
    classification, significance, note = _HEIDELBERG[cls]
    return HeidelbergResult(
        bleeding_class=cls,
        classification=classification,
        short_label=cls.value,
        clinical_significance=significance,
        management_note=f"{note} {SICH_NOTE}" if symptomatic else note,
        symptomatic=symptomatic,
    )


CLASSIFIERS: Dict[str, Dict[str, Any]] = {
    "boston_caa": {
        "title": "Boston Criteria 2.0 for Cerebral Amyloid Angiopathy",
        "citation": BOSTON_CAA_CITATION,
        "input_model": BostonCaaInputs,
    },
    "heidelberg_bleeding": {
        "title": "Heidelberg Bleeding Classification",
        "citation": HEIDELBERG_CITATION,
        "input_model": HeidelbergInputs,
    },
}
