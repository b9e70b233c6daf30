"""
Plan d'action - transforme le breakdown du IA Score en actions priorisées.

PHILOSOPHIE:
- Aucune action ne contredit la qualité des données
  (pas d'action performance si les données sont indisponibles)
- Toute formulation mídia passe par le MediaVerdict
- Règles déterministes, aucun LLM

PRIORITÉ:
- lost ≥ 10 → high, 5 ≤ lost < 10 → medium, sinon low
- Tri: lost_points décroissant, puis priorité décroissante (tri stable)

GATILHO PROMO AGRESSIVE + CONVERSION BASSE:
Quand une remise forte ne convertit pas, le goulot n'est pas le prix:
cadastro/mídia/seo montent d'un cran, competitividade passe en low.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..data.data_models import MetricsWindow, PricingInput
from ..media.media_verdict import ClipStatus, MediaInfo
from .ia_score import DIMENSIONS, DataQuality, PotentialGain, ScoreBreakdown
from .scoring_config import DEFAULT_CONFIG, ScoringConfig

logger = logging.getLogger(__name__)


PRIORITY_HIGH = "high"
PRIORITY_MEDIUM = "medium"
PRIORITY_LOW = "low"

PRIORITY_RANK = {PRIORITY_HIGH: 3, PRIORITY_MEDIUM: 2, PRIORITY_LOW: 1}

# Dimensions relevées quand une promo agressive ne convertit pas
PROMO_BOOSTED_DIMENSIONS = ("cadastro", "midia", "seo")

WHY_THIS_MATTERS_BASE = {
    "cadastro": "Um cadastro completo melhora relevância e confiança do comprador.",
    "midia": "Anúncios com mídia mais completa tendem a gerar maior engajamento e conversão.",
    "seo": "Um título otimizado aumenta a visibilidade e o CTR nas buscas.",
    "competitividade": "Preço e condições competitivas influenciam a decisão de compra.",
    "performance": "Métricas de performance ajudam a identificar oportunidades de melhoria.",
}

PROMO_BOTTLENECK_TEXT = (
    " Com desconto alto e conversão baixa, o gargalo provável não é preço:"
    " priorize título, imagens e descrição."
)


@dataclass(frozen=True)
class ActionPlanItem:
    dimension: str
    lost_points: int
    why_this_matters: str
    expected_score_after_fix: int
    priority: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dimension": self.dimension,
            "lostPoints": self.lost_points,
            "whyThisMatters": self.why_this_matters,
            "expectedScoreAfterFix": self.expected_score_after_fix,
            "priority": self.priority,
        }


def detect_promo_aggressive_low_cr(
    pricing: Optional[PricingInput],
    metrics: Optional[MetricsWindow],
    config: Optional[ScoringConfig] = None,
) -> bool:
    """
    Vrai si une promotion agressive coexiste avec une conversion basse.

    Critères: promotion active, remise ≥ 30%, visites ≥ 150, conversion ≤ 0.6%.
    """
    if pricing is None or metrics is None:
        return False

    cfg = (config or DEFAULT_CONFIG).action_plan
    if not pricing.has_promotion:
        return False
    if pricing.discount_percent is None or pricing.discount_percent < cfg.promo_aggressive_discount_pct:
        return False
    if metrics.visits is None or metrics.visits < cfg.min_visits_for_cr_confidence:
        return False
    if metrics.conversion_rate is None:
        return False
    return metrics.conversion_rate <= cfg.low_conversion_threshold


def _base_priority(lost_points: int, config: ScoringConfig) -> str:
    cfg = config.action_plan
    if lost_points >= cfg.high_priority_min_lost:
        return PRIORITY_HIGH
    if lost_points >= cfg.medium_priority_min_lost:
        return PRIORITY_MEDIUM
    return PRIORITY_LOW


def _boost(priority: str) -> str:
    if priority == PRIORITY_LOW:
        return PRIORITY_MEDIUM
    return PRIORITY_HIGH


def _media_is_complete(media_info: MediaInfo, config: ScoringConfig) -> bool:
    """Mídia "assez complète" pour ne pas générer d'action."""
    cfg = config.action_plan
    verdict = media_info.verdict
    pictures = media_info.pictures_count
    if pictures is None:
        return False
    if not verdict.can_suggest_clip and pictures >= cfg.media_complete_pictures_unknown_clip:
        return True
    return media_info.clip_status is ClipStatus.PRESENT and pictures >= cfg.media_complete_pictures_with_clip


def _why_this_matters(
    dimension: str,
    data_quality: DataQuality,
    potential_gain: Optional[str],
    media_info: MediaInfo,
    promo_trigger: bool,
    config: ScoringConfig,
) -> str:
    text = WHY_THIS_MATTERS_BASE[dimension]

    if dimension == "midia":
        text += " " + media_info.verdict.message

    if potential_gain:
        text += f" Potencial de ganho: {potential_gain} pontos no score."

    if dimension == "performance" and data_quality.visits_coverage is not None:
        ratio = data_quality.visits_coverage.ratio
        if ratio < config.action_plan.low_coverage_ratio:
            text += f" Cobertura de dados: {round(ratio * 100)}% (dados parciais de visitas)."

    if promo_trigger and dimension in PROMO_BOOSTED_DIMENSIONS:
        text += PROMO_BOTTLENECK_TEXT

    return text


def generate_action_plan(
    breakdown: ScoreBreakdown,
    data_quality: DataQuality,
    potential_gain: Optional[PotentialGain] = None,
    media_info: Optional[MediaInfo] = None,
    pricing: Optional[PricingInput] = None,
    metrics_30d: Optional[MetricsWindow] = None,
    config: Optional[ScoringConfig] = None,
) -> List[ActionPlanItem]:
    """
    Génère le plan d'action priorisé.

    Args:
        breakdown: Breakdown du IA Score
        data_quality: Disponibilité des données
        potential_gain: Gains potentiels par dimension (contexte textuel)
        media_info: Statut du clip + photos (None → statut inconnu)
        pricing: État promo, pour le gatilho promo agressive
        metrics_30d: Métriques 30j, pour le gatilho promo agressive

    Returns:
        Liste d'actions triée (lost_points desc, priorité desc).
    """
    config = config or DEFAULT_CONFIG
    media_info = media_info or MediaInfo()
    maxima = config.max_by_dimension()
    promo_trigger = detect_promo_aggressive_low_cr(pricing, metrics_30d, config)

    actions: List[ActionPlanItem] = []
    for dimension in DIMENSIONS:
        max_score = maxima[dimension]
        current = breakdown.get(dimension)
        lost_points = max_score - current

        if lost_points <= 0:
            continue
        if dimension == "performance" and not data_quality.performance_available:
            continue
        if dimension == "midia" and _media_is_complete(media_info, config):
            logger.debug("Skipping midia action: media complete enough (%s)", media_info)
            continue

        priority = _base_priority(lost_points, config)
        if promo_trigger:
            if dimension in PROMO_BOOSTED_DIMENSIONS:
                priority = _boost(priority)
            elif dimension == "competitividade":
                priority = PRIORITY_LOW

        actions.append(ActionPlanItem(
            dimension=dimension,
            lost_points=lost_points,
            why_this_matters=_why_this_matters(
                dimension,
                data_quality,
                potential_gain.get(dimension) if potential_gain else None,
                media_info,
                promo_trigger,
                config,
            ),
            expected_score_after_fix=min(max_score, current + lost_points),
            priority=priority,
        ))

    actions.sort(key=lambda a: (-a.lost_points, -PRIORITY_RANK[a.priority]))
    return actions
