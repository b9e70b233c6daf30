"""
SuperSeller Hacks Module
========================

Suggestions heuristiques de croissance ("hacks"), conscientes de
l'historique confirm/dismiss.

Components:
    - hack_rules: 5 règles {id, evaluate, build}
    - hack_engine: réduction sur les règles + index d'historique
"""

from .hack_models import (
    HackId,
    ConfidenceLevel,
    RuleOutcome,
    HackSuggestion,
    HackEngineMeta,
    HackEngineInput,
    HackEngineOutput,
)
from .hack_rules import (
    HackRule,
    HackContext,
    RULES,
    normalize_mlb_id,
    build_edit_url,
)
from .hack_engine import HistoryIndex, generate_hacks

__all__ = [
    "HackId",
    "ConfidenceLevel",
    "RuleOutcome",
    "HackSuggestion",
    "HackEngineMeta",
    "HackEngineInput",
    "HackEngineOutput",
    "HackRule",
    "HackContext",
    "RULES",
    "normalize_mlb_id",
    "build_edit_url",
    "HistoryIndex",
    "generate_hacks",
]
