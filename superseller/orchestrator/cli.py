"""
SuperSeller Evaluation CLI
==========================

Command-line interface over a JSON listing snapshot.

Commands:
    evaluate    - Full evaluation (score, action plan, benchmark, hacks) as JSON
    score       - IA Score breakdown and action plan
    hacks       - Growth hacks with history discipline
    gaps        - Benchmark insights and critical gaps

Usage:
    python -m superseller.orchestrator.cli evaluate --input snapshot.json
    python -m superseller.orchestrator.cli score --input snapshot.json --json
    python -m superseller.orchestrator.cli hacks --input snapshot.json
    python -m superseller.orchestrator.cli gaps --input snapshot.json
"""

import argparse
import json
import sys
from typing import Optional, Sequence

from pydantic import ValidationError

from ..data.config import get_settings
from ..data.data_models import ListingSnapshot
from .evaluation import ListingEvaluation, evaluate_listing
from .logging_config import setup_logging_from_settings


class SnapshotError(Exception):
    """Snapshot file could not be read or validated."""


def load_snapshot(path: str) -> ListingSnapshot:
    """Read and validate a snapshot file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise SnapshotError(f"Snapshot file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Invalid JSON in {path}: {e}") from e

    try:
        return ListingSnapshot.model_validate(raw)
    except ValidationError as e:
        raise SnapshotError(f"Invalid snapshot {path}: {e.error_count()} validation error(s)\n{e}") from e


def _evaluate(args) -> Optional[ListingEvaluation]:
    try:
        snapshot = load_snapshot(args.input)
    except SnapshotError as e:
        print(f"ERROR: {e}")
        return None
    return evaluate_listing(snapshot)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def cmd_evaluate(args):
    """Full evaluation as JSON."""
    evaluation = _evaluate(args)
    if evaluation is None:
        return 1
    _print_json(evaluation.to_dict())
    return 0


def cmd_score(args):
    """IA Score of the snapshot listing."""
    evaluation = _evaluate(args)
    if evaluation is None:
        return 1

    score = evaluation.score
    if args.json:
        _print_json({
            **score.to_dict(),
            "actionPlan": [a.to_dict() for a in evaluation.action_plan],
            "scoreExplanation": evaluation.explanations,
        })
        return 0

    print("=" * 60)
    print(f"IA SCORE: {evaluation.listing_id}")
    print("=" * 60)
    print()
    print(f"Final Score: {score.final}/100")
    print(f"Performance source: {score.data_quality.performance_source}")
    print()

    print("Dimensions:")
    for name, comp in score.components.items():
        bar_length = int(comp.score / comp.max_score * 20) if comp.max_score > 0 else 0
        bar = "█" * bar_length + "░" * (20 - bar_length)
        gain = score.potential_gain.get(name)
        suffix = f"  ({gain})" if gain else ""
        print(f"  {name:16} [{bar}] {comp.score}/{comp.max_score}{suffix}")
    print()

    print("Action plan:")
    for item in evaluation.action_plan:
        print(f"  [{item.priority:6}] {item.dimension}: -{item.lost_points}")
        if args.verbose:
            print(f"    {item.why_this_matters}")
    print()

    print("Explanation:")
    for sentence in evaluation.explanations:
        print(f"  - {sentence}")
    return 0


def cmd_hacks(args):
    """Growth hacks for the snapshot listing."""
    evaluation = _evaluate(args)
    if evaluation is None:
        return 1

    output = evaluation.hacks
    if args.json:
        _print_json(output.to_dict())
        return 0

    print("=" * 60)
    print(f"HACKS: {evaluation.listing_id}")
    print("=" * 60)
    print()
    if not output.hacks:
        print("No hack suggested.")
    for hack in output.hacks:
        print(f"  {hack.id.value:32} {hack.confidence:3}% ({hack.confidence_level.value}) impact={hack.impact}")
        print(f"    {hack.title}")
    print()
    meta = output.meta
    print(
        f"Rules: {meta.rules_evaluated} evaluated, {meta.rules_triggered} triggered, "
        f"{meta.skipped_by_history} skipped by history, "
        f"{meta.skipped_by_requirements} skipped by requirements"
    )
    return 0


def cmd_gaps(args):
    """Benchmark insights and critical gaps."""
    evaluation = _evaluate(args)
    if evaluation is None:
        return 1

    insights = evaluation.insights
    if args.json:
        _print_json({
            "benchmark": evaluation.benchmark.to_dict() if evaluation.benchmark else None,
            "benchmarkInsights": insights.to_dict(),
        })
        return 0

    print("=" * 60)
    print(f"BENCHMARK GAPS: {evaluation.listing_id}")
    print("=" * 60)
    print()
    print(f"Confidence: {insights.confidence}")
    if evaluation.benchmark is not None:
        print(f"Sample size: {evaluation.benchmark.summary.sample_size}")
    print()

    for gap in insights.critical_gaps:
        print(f"  [{gap.impact:6}] {gap.dimension}: {gap.title}")
        if args.verbose:
            print(f"    {gap.why_it_matters}")
            print(f"    effort={gap.effort} confidence={gap.confidence}")
    if not insights.critical_gaps:
        print("No critical gap identified.")
    return 0


def main(argv: Optional[Sequence[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="superseller",
        description="SuperSeller listing evaluation CLI",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    evaluate_parser = subparsers.add_parser("evaluate", help="Full evaluation as JSON")
    evaluate_parser.add_argument(
        "--input",
        required=True,
        help="Path to a listing snapshot JSON file",
    )

    for name, help_text in (
        ("score", "IA Score breakdown and action plan"),
        ("hacks", "Growth hacks with history discipline"),
        ("gaps", "Benchmark insights and critical gaps"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--input",
            required=True,
            help="Path to a listing snapshot JSON file",
        )
        sub.add_argument(
            "--json",
            action="store_true",
            help="Output as JSON",
        )

    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"ERROR: Invalid configuration: {e}")
        return 1
    setup_logging_from_settings(settings.logging, verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        return 1

    commands = {
        "evaluate": cmd_evaluate,
        "score": cmd_score,
        "hacks": cmd_hacks,
        "gaps": cmd_gaps,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
