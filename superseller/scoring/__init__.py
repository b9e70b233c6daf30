"""
SuperSeller Scoring Module
==========================

Score déterministe de qualité d'un anúncio Mercado Livre.

Components:
    - IAScoreService: Score 5 dimensions (100% déterministe)
    - generate_action_plan: Plan d'action priorisé
    - explain_score: Une phrase explicative par dimension

PHILOSOPHIE:
    - Chaque point est traçable, aucun ML, aucun LLM
    - Statut inconnu ≠ absent: aucune promesse de clip sans preuve

Usage:
    from superseller.scoring import IAScoreService, generate_action_plan

    result = IAScoreService().calculate_score(listing, daily_metrics, now_utc=now)
    plan = generate_action_plan(result.breakdown, result.data_quality,
                                result.potential_gain, result.media_info)
"""

from .scoring_config import (
    ScoringConfig,
    DEFAULT_CONFIG,
)
from .ia_score import (
    IAScoreService,
    IAScoreResult,
    ComponentScore,
    ScoreBreakdown,
    PotentialGain,
    ScoreMetrics,
    DataQuality,
    VisitsCoverage,
    DIMENSIONS,
)
from .action_engine import (
    ActionPlanItem,
    generate_action_plan,
    detect_promo_aggressive_low_cr,
)
from .explanation import explain_score

__all__ = [
    "ScoringConfig",
    "DEFAULT_CONFIG",
    "IAScoreService",
    "IAScoreResult",
    "ComponentScore",
    "ScoreBreakdown",
    "PotentialGain",
    "ScoreMetrics",
    "DataQuality",
    "VisitsCoverage",
    "DIMENSIONS",
    "ActionPlanItem",
    "generate_action_plan",
    "detect_promo_aggressive_low_cr",
    "explain_score",
]
