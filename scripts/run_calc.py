#!/usr/bin/env python3
"""
Command line front end for the neurocalc instruments, classifiers and trial
summaries.

Usage (from repo root):
    python scripts/run_calc.py list
    python scripts/run_calc.py info ich_score
    python scripts/run_calc.py score ich_score --set gcs=5-12 --set volume_ml=35 --set ivh=true \
        --set origin=supratentorial --set age=75
    python scripts/run_calc.py classify boston_caa --json '{"age": 72, "has_qualifying_presentation": true,
        "lobar_hemorrhagic_lesions": 2}'
    python scripts/run_calc.py trial dawn-trial
    python scripts/run_calc.py trials
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add parent directory to path so the package imports from a plain checkout
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
from neurocalc.calculators import INSTRUMENTS, evaluate
from neurocalc.catalog import TrialCatalog
from neurocalc.display import format_classification, format_heidelberg, format_outcome, format_score
from neurocalc.models import ClassificationResult, HeidelbergResult
from neurocalc.tools import CalculatorToolHandler, format_calc_info
from neurocalc.trials import summarize_trial

logger = logging.getLogger("run_calc")


def _parse_value(text: str) -> Any:
    """JSON literal when possible ("true", "2", "3.5"), otherwise the raw string."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def parse_assignments(pairs: Optional[List[str]], raw_json: Optional[str]) -> Dict[str, Any]:
    values: Dict[str, Any] = json.loads(raw_json) if raw_json else {}
    for pair in pairs or []:
        if "=" not in pair:
            raise SystemExit(f"Expected key=value, got '{pair}'")
        key, _, value = pair.partition("=")
        values[key.strip()] = _parse_value(value.strip())
    return values


def cmd_list(handler: CalculatorToolHandler, args: argparse.Namespace) -> int:
    print("Instruments:")
    for calc in handler.list_calculators():
        print(f"  {calc['id']:<12} {calc['title']}")
    print("Classifiers:")
    for clf in handler.list_classifiers():
        print(f"  {clf['id']:<20} {clf['title']}")
    return 0


def cmd_info(handler: CalculatorToolHandler, args: argparse.Namespace) -> int:
    try:
        info = handler.calc_info(args.calc_id)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(format_calc_info(info))
    return 0


def cmd_score(handler: CalculatorToolHandler, args: argparse.Namespace) -> int:
    calc_id = handler._resolve_calc_id(args.calc_id)
    if calc_id not in INSTRUMENTS:
        print(f"Error: Calculator '{args.calc_id}' not found", file=sys.stderr)
        return 1
    inst = INSTRUMENTS[calc_id]
    result = evaluate(inst, parse_assignments(args.set, args.json))
    print(format_score(result, inst.title))
    return 0 if result.complete else 2


def cmd_classify(handler: CalculatorToolHandler, args: argparse.Namespace) -> int:
    values = parse_assignments(args.set, args.json)
    outcome = handler.classify(args.classifier_id, values)
    if not outcome.success:
        for msg in outcome.error_messages():
            print(f"Error: {msg}", file=sys.stderr)
        return 1
    print(render_classification(outcome.outputs or {}))
    return 0


def render_classification(outputs: Dict[str, Any]) -> str:
    """Format classify() outputs without re-running the classifier."""
    if "diagnosis" in outputs:
        return format_classification(ClassificationResult.model_validate(outputs))
    return format_heidelberg(HeidelbergResult.model_validate(outputs))


def cmd_trial(handler: CalculatorToolHandler, args: argparse.Namespace) -> int:
    try:
        record = handler.catalog[args.trial_id]
    except KeyError:
        print(f"Error: Trial '{args.trial_id}' not found", file=sys.stderr)
        return 1
    print(format_outcome(summarize_trial(record), title=f"{record.title}: {record.subtitle}"))
    if record.key_message:
        print(f"Key message: {record.key_message}")
    return 0


def cmd_trials(handler: CalculatorToolHandler, args: argparse.Namespace) -> int:
    for trial_id in handler.catalog.ids():
        record = handler.catalog[trial_id]
        outcome = summarize_trial(record)
        print(f"  {trial_id:<20} {outcome.mode.value:<12} NNT {outcome.nnt_display:<6} {record.title}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Neurology scoring instruments and trial summaries")
    parser.add_argument("--trials", default=None,
                        help="Path to a trials JSON catalog (default: bundled, or $NEUROCALC_TRIALS_PATH)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List instruments and classifiers").set_defaults(func=cmd_list)

    p = sub.add_parser("info", help="Show an instrument's inputs and interpretation table")
    p.add_argument("calc_id")
    p.set_defaults(func=cmd_info)

    for name, target, func, help_text in (
        ("score", "calc_id", cmd_score, "Score an instrument"),
        ("classify", "classifier_id", cmd_classify, "Run boston_caa or heidelberg_bleeding"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument(target)
        p.add_argument("--set", action="append", metavar="KEY=VALUE",
                       help="Input value (repeatable); values are parsed as JSON when possible")
        p.add_argument("--json", default=None, help="All inputs as a JSON object")
        p.set_defaults(func=func)

    p = sub.add_parser("trial", help="Summarize one trial from the catalog")
    p.add_argument("trial_id")
    p.set_defaults(func=cmd_trial)

    sub.add_parser("trials", help="Summarize every trial in the catalog").set_defaults(func=cmd_trials)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    catalog = TrialCatalog.from_json(args.trials) if args.trials else None
    handler = CalculatorToolHandler(catalog=catalog)
    logger.debug(f"Running '{args.command}'")
    return args.func(handler, args)


if __name__ == "__main__":
    sys.exit(main())
