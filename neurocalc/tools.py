"""Tool definitions and handlers for scoring, classification and trial summaries."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .calculators import INSTRUMENTS, evaluate
from .catalog import TrialCatalog, load_default_catalog
from .classifiers import CLASSIFIERS, assess_boston_criteria, classify_heidelberg_bleeding
from .models import CalcInfoResult, ExecuteCalcResult, HeidelbergInputs
from .trials import derive_flags, summarize_trial

logger = logging.getLogger(__name__)

# Tool definitions for LLM function calling
TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "type": "function",
        "function": {
            "name": "calc_info",
            "description": (
                "Get the input schema for a neurology scoring instrument. "
                "Returns field ids, types, allowed values and the interpretation table."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "calc_id": {
                        "type": "string",
                        "description": "Instrument ID (e.g., nihss, abcd2, ich_score, gcs, rope, has_bled)",
                    },
                },
                "required": ["calc_id"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "execute_calc",
            "description": (
                "Score an instrument with extracted variables. "
                "Returns the score, its interpretation and any missing inputs."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "calc_id": {
                        "type": "string",
                        "description": "Instrument ID",
                    },
                    "variables": {
                        "type": "object",
                        "description": (
                            "Variables as key-value pairs keyed by input id. "
                            "For numeric inputs: number or {\"value\": number, \"unit\": string}. "
                            "For booleans: true/false. For enumerated inputs: one of the allowed values."
                        ),
                    },
                },
                "required": ["calc_id", "variables"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "classify",
            "description": (
                "Run a diagnostic classifier: boston_caa (Boston Criteria 2.0) "
                "or heidelberg_bleeding (hemorrhagic transformation class)."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "classifier_id": {"type": "string", "description": "boston_caa or heidelberg_bleeding"},
                    "variables": {"type": "object", "description": "Classifier inputs"},
                },
                "required": ["classifier_id", "variables"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "summarize_trial",
            "description": "Risk difference and NNT for a trial in the catalog.",
            "parameters": {
                "type": "object",
                "properties": {
                    "trial_id": {"type": "string", "description": "Trial ID (e.g., dawn-trial, elan-study)"},
                },
                "required": ["trial_id"],
            },
        },
    },
]


class CalculatorToolHandler:
    """
    Dispatches tool calls to the instrument registry, the classifiers and the
    trial summarizer.

    The trial catalog is injected; when none is given the bundled catalog is
    loaded on first use.
    """

    def __init__(self, catalog: Optional[TrialCatalog] = None):
        self._catalog = catalog

    @property
    def catalog(self) -> TrialCatalog:
        if self._catalog is None:
            self._catalog = load_default_catalog()
        return self._catalog

    def list_calculators(self) -> List[Dict[str, str]]:
        """List the available instruments."""
        return [
            {
                "id": cid,
                "title": inst.title,
                "description": inst.description,
                "version": inst.version,
            }
            for cid, inst in INSTRUMENTS.items()
        ]

    def list_classifiers(self) -> List[Dict[str, str]]:
        return [{"id": cid, "title": c["title"]} for cid, c in CLASSIFIERS.items()]

    def _resolve_calc_id(self, input_id: str) -> str:
        """
        Resolve a potentially malformed calculator ID to a valid one.
        Handles case-insensitive matches and hyphen/underscore mixups.
        """
        if input_id in INSTRUMENTS:
            return input_id
        normalized = input_id.strip().lower().replace("-", "_")
        for cid in INSTRUMENTS:
            if cid.lower() == normalized:
                return cid
        # Let it fail downstream
        return input_id

    def calc_info(self, calc_id: str) -> CalcInfoResult:
        """
        Get an instrument's input schema.

        Returns every input (id, label, type, required, allowed values or
        bounds) plus the score range, the interpretation table and citation.
        """
        resolved = self._resolve_calc_id(calc_id)
        if resolved not in INSTRUMENTS:
            raise ValueError(f"Calculator '{calc_id}' not found")
        inst = INSTRUMENTS[resolved]
        return CalcInfoResult(
            calc_id=resolved,
            title=inst.title,
            description=inst.description,
            version=inst.version,
            tags=inst.tags,
            inputs=[spec.public() for spec in inst.inputs],
            score_range=inst.score_range,
            interpretation_table=inst.table.as_rows(),
            citation=inst.citation.model_dump() if inst.citation else None,
        )

    def execute_calc(self, calc_id: str, variables: Dict[str, Any]) -> ExecuteCalcResult:
        """
        Score an instrument with extracted variables.

        An incomplete input set is reported as a failure, but the partial
        score is still returned in outputs.
        """
        resolved = self._resolve_calc_id(calc_id)
        if resolved not in INSTRUMENTS:
            logger.warning(f"Unknown calculator requested: {calc_id}")
            return ExecuteCalcResult(
                success=False,
                errors=[f"Calculator '{calc_id}' not found"],
            )

        result = evaluate(INSTRUMENTS[resolved], variables or {})
        errors: List[str] = []
        if not result.complete:
            logger.warning(f"{resolved}: incomplete inputs, missing {result.missing}")
            errors.append(f"Missing required inputs: {', '.join(result.missing)}")

        return ExecuteCalcResult(
            success=result.complete,
            outputs=result.model_dump(mode="json"),
            errors=errors,
            warnings=list(result.warnings),
            audit_trace={"calc_id": resolved, "inputs": dict(variables or {}), "breakdown": result.breakdown},
        )

    def classify(self, classifier_id: str, variables: Dict[str, Any]) -> ExecuteCalcResult:
        key = classifier_id.strip().lower().replace("-", "_")
        variables = variables or {}
        try:
            if key == "boston_caa":
                result = assess_boston_criteria(variables)
            elif key == "heidelberg_bleeding":
                inputs = HeidelbergInputs.model_validate(dict(variables))
                result = classify_heidelberg_bleeding(inputs.bleeding_class, inputs.symptomatic)
            else:
                logger.warning(f"Unknown classifier requested: {classifier_id}")
                return ExecuteCalcResult(success=False, errors=[f"Classifier '{classifier_id}' not found"])
        except ValidationError as e:
            return ExecuteCalcResult(
                success=False,
                errors=[{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                        for err in e.errors()],
            )
        except ValueError as e:
            return ExecuteCalcResult(success=False, errors=[str(e)])

        return ExecuteCalcResult(
            success=True,
            outputs=result.model_dump(mode="json"),
            audit_trace={"classifier_id": key, "inputs": dict(variables)},
        )

    def summarize_trial(self, trial_id: str) -> ExecuteCalcResult:
        try:
            record = self.catalog[trial_id]
        except KeyError:
            logger.warning(f"Unknown trial requested: {trial_id}")
            return ExecuteCalcResult(success=False, errors=[f"Trial '{trial_id}' not found"])

        outcome = summarize_trial(record)
        warnings = []
        if outcome.risk_difference is None:
            warnings.append("Event rates are not numeric; risk difference unavailable")
        return ExecuteCalcResult(
            success=True,
            outputs={"trial_id": record.id, "title": record.title, **outcome.model_dump(mode="json")},
            warnings=warnings,
            audit_trace={"trial_id": record.id, "flags": derive_flags(record).model_dump()},
        )

    def execute_tool(self, tool_name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute a tool by name and return the result as a dict.

        This is the main entry point for tool execution.
        """
        if tool_name == "calc_info":
            calc_id = arguments.get("calc_id")
            if not calc_id:
                return {"error": "Missing required parameter: calc_id"}
            try:
                return self.calc_info(calc_id).model_dump()
            except ValueError as e:
                return {"error": str(e)}

        elif tool_name == "execute_calc":
            calc_id = arguments.get("calc_id")
            if not calc_id:
                return {"error": "Missing required parameter: calc_id"}
            return self.execute_calc(calc_id, arguments.get("variables", {})).model_dump()

        elif tool_name == "classify":
            classifier_id = arguments.get("classifier_id")
            if not classifier_id:
                return {"error": "Missing required parameter: classifier_id"}
            return self.classify(classifier_id, arguments.get("variables", {})).model_dump()

        elif tool_name == "summarize_trial":
            trial_id = arguments.get("trial_id")
            if not trial_id:
                return {"error": "Missing required parameter: trial_id"}
            return self.summarize_trial(trial_id).model_dump()

        else:
            return {"error": f"Unknown tool: {tool_name}"}


def format_calc_info(calc_info: CalcInfoResult) -> str:
    """Render an instrument schema as plain text for the CLI."""
    lines = [
        f"Calculator: {calc_info.title} ({calc_info.calc_id})",
        "",
        "Inputs:",
    ]

    for inp in calc_info.inputs:
        inp_id = inp.get("id", "unknown")
        label = inp.get("label", inp_id)
        req_marker = "*" if inp.get("required", False) else ""
        unit = inp.get("canonical_unit", "")
        unit_str = f" ({unit})" if unit else ""
        constraints = inp.get("constraints", {})

        line = f"  - {inp_id}{req_marker}: {label}{unit_str} [{inp.get('type', 'number')}]"
        if "allowed_values" in constraints:
            line += f" one of {', '.join(str(v) for v in constraints['allowed_values'])}"
        if "min" in constraints:
            line += f" min={constraints['min']}"
        if "max" in constraints:
            line += f" max={constraints['max']}"
        lines.append(line)

    if calc_info.interpretation_table:
        lines.append("")
        lines.append("Interpretation:")
        for row in calc_info.interpretation_table:
            low, high = row["low"], row["high"]
            span = f"{low:g}" if low == high else f"{low:g}-{high:g}"
            lines.append(f"  {span}: {row['label']}")

    return "\n".join(lines)
