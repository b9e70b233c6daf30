"""
SuperSeller Orchestrator Module
===============================

Composition layer for the evaluation core.

Components:
    - evaluate_listing: All stages for one listing snapshot
    - setup_logging: Console / JSON / rotating file logging
    - CLI: Command-line interface (python -m superseller.orchestrator.cli)

Usage:
    from superseller.orchestrator import evaluate_listing

    evaluation = evaluate_listing(snapshot)
    print(evaluation.to_dict())
"""

from .evaluation import ListingEvaluation, evaluate_listing
from .logging_config import JSONFormatter, setup_logging, setup_logging_from_settings

__all__ = [
    # Pipeline
    "ListingEvaluation",
    "evaluate_listing",
    # Logging
    "JSONFormatter",
    "setup_logging",
    "setup_logging_from_settings",
]
