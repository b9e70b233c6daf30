"""
Classement des gaps critiques - Top 3 priorités actionnables.

ORDRE (invariant):
1. Impact DESC (high > medium > low)
2. Effort ASC (low > medium > high)
3. Confiance DESC (high > medium > low)
Tri stable: égalité complète → ordre de génération conservé.

Quand le benchmark est indisponible, des gaps heuristiques issus des seules
données internes prennent le relais (confidence "low"), sans inventer de
nombre.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..data.data_models import ConfidenceTier, MetricsWindow
from ..media.media_verdict import ClipStatus, MediaVerdict
from ..scoring.scoring_config import DEFAULT_CONFIG, ScoringConfig
from .benchmark_service import (
    BaselineConversion,
    BenchmarkListing,
    BenchmarkResult,
    BenchmarkStats,
)

logger = logging.getLogger(__name__)


IMPACT_ORDER = {"high": 3, "medium": 2, "low": 1}
EFFORT_ORDER = {"low": 1, "medium": 2, "high": 3}
CONFIDENCE_ORDER = {"high": 3, "medium": 2, "low": 1}

FALLBACK_SOURCE = "internal_heuristics"
FALLBACK_TITLE_MAX_LENGTH = 50
FALLBACK_MIN_PICTURES = 5


@dataclass(frozen=True)
class CriticalGap:
    id: str
    dimension: str  # price | title | images | video | description
    title: str
    why_it_matters: str
    impact: str
    effort: str
    confidence: str
    metrics: Dict[str, Any] = field(default_factory=dict)

    def sort_key(self):
        return (
            -IMPACT_ORDER[self.impact],
            EFFORT_ORDER[self.effort],
            -CONFIDENCE_ORDER[self.confidence],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "dimension": self.dimension,
            "title": self.title,
            "whyItMatters": self.why_it_matters,
            "impact": self.impact,
            "effort": self.effort,
            "confidence": self.confidence,
            "metrics": dict(self.metrics),
        }


@dataclass(frozen=True)
class BenchmarkInsights:
    confidence: str
    wins: List[str] = field(default_factory=list)
    losses: List[str] = field(default_factory=list)
    critical_gaps: List[CriticalGap] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "confidence": self.confidence,
            "wins": [{"message": m} for m in self.wins],
            "losses": [{"message": m} for m in self.losses],
            "criticalGaps": [g.to_dict() for g in self.critical_gaps],
        }


def _sort_and_cap(gaps: Sequence[CriticalGap], limit: int) -> List[CriticalGap]:
    return sorted(gaps, key=CriticalGap.sort_key)[:limit]


def rank_gaps(
    listing: BenchmarkListing,
    stats: BenchmarkStats,
    baseline: BaselineConversion,
    metrics_30d: Optional[MetricsWindow],
    config: Optional[ScoringConfig] = None,
) -> List[CriticalGap]:
    """
    Dérive au plus 3 gaps critiques à partir de l'anúncio et du benchmark.

    Args:
        listing: Vue benchmark de l'anúncio
        stats: Statistiques de la catégorie
        baseline: Baseline de conversion interne
        metrics_30d: Métriques 30 jours

    Returns:
        Gaps triés (impact, effort, confiance), tronqués à 3.
    """
    cfg = (config or DEFAULT_CONFIG).benchmark
    metrics = metrics_30d or MetricsWindow()
    sample_confidence = "high" if stats.sample_size >= cfg.medium_confidence_sample else "medium"
    gaps: List[CriticalGap] = []

    # 1. Images
    if stats.median_pictures_count > 0 and listing.pictures_count < stats.median_pictures_count:
        gap = stats.median_pictures_count - listing.pictures_count
        gaps.append(CriticalGap(
            id="gap_images",
            dimension="images",
            title=f"Adicionar {gap:g} {'imagens' if gap > 1 else 'imagem'} para alcançar a média da categoria",
            why_it_matters="Anúncios com mais imagens tendem a gerar maior engajamento e conversão.",
            impact="high",
            effort="low",
            confidence=sample_confidence,
            metrics={"current": listing.pictures_count, "median": stats.median_pictures_count, "gap": gap},
        ))

    # 2. Vidéo: uniquement si la majorité des concurrents en a
    if stats.percentage_with_video > cfg.video_majority_pct:
        pct = round(stats.percentage_with_video)
        if listing.clip_status is ClipStatus.ABSENT:
            gaps.append(CriticalGap(
                id="gap_video",
                dimension="video",
                title="Adicionar vídeo para aumentar confiança e engajamento",
                why_it_matters=f"{pct}% dos concorrentes têm vídeo. Vídeos aumentam confiança e conversão.",
                impact="high",
                effort="medium",
                confidence=sample_confidence,
                metrics={"competitorsWithVideo": pct, "hasVideo": "false"},
            ))
        elif listing.clip_status is ClipStatus.UNKNOWN:
            gaps.append(CriticalGap(
                id="gap_video_check",
                dimension="video",
                title="Verificar se há vídeo no anúncio",
                why_it_matters=(
                    f"{pct}% dos concorrentes têm vídeo detectável. Se não houver, considere adicionar."
                ),
                impact="medium",
                effort="low",
                confidence="medium",
                metrics={"competitorsWithVideo": pct, "hasVideo": "unknown"},
            ))

    # 3. Titre: écart > 20% de la médiane
    if stats.median_title_length > 0:
        deviation = abs(listing.title_length - stats.median_title_length) / stats.median_title_length
        median_title = round(stats.median_title_length)
        if deviation > cfg.title_deviation_ratio:
            if listing.title_length < stats.median_title_length:
                gap = round(stats.median_title_length - listing.title_length)
                gaps.append(CriticalGap(
                    id="gap_title_short",
                    dimension="title",
                    title=f"Expandir título em {gap} caracteres para alcançar a média da categoria",
                    why_it_matters="Títulos mais completos aumentam a visibilidade e o CTR nas buscas.",
                    impact="medium",
                    effort="low",
                    confidence=sample_confidence,
                    metrics={"current": listing.title_length, "median": median_title, "gap": gap},
                ))
            else:
                gaps.append(CriticalGap(
                    id="gap_title_long",
                    dimension="title",
                    title="Otimizar título para melhor legibilidade",
                    why_it_matters="Títulos muito longos podem reduzir a legibilidade e o CTR.",
                    impact="low",
                    effort="low",
                    confidence="medium",
                    metrics={
                        "current": listing.title_length,
                        "median": median_title,
                        "diff": round(listing.title_length - stats.median_title_length),
                    },
                ))

    # 4. Conversion vs promo: baseline disponible obligatoire
    rate = metrics.conversion_rate
    if (
        listing.has_promotion
        and listing.discount_percent is not None
        and listing.discount_percent >= cfg.promo_aggressive_discount_pct
        and baseline.is_available
        and (metrics.visits or 0) >= cfg.min_visits_for_cr_confidence
        and rate is not None
        and rate < baseline.conversion_rate
    ):
        gaps.append(CriticalGap(
            id="gap_conversion_vs_promo",
            dimension="description",
            title="Otimizar comunicação da promoção para aumentar conversão",
            why_it_matters=(
                f"Você tem promoção ativa ({listing.discount_percent:g}% OFF) mas conversão "
                f"({rate * 100:.2f}%) está abaixo do baseline da categoria "
                f"({baseline.conversion_rate * 100:.2f}%). "
                "Isso indica gargalo em CTR/qualificação/clareza."
            ),
            impact="high",
            effort="medium",
            confidence=baseline.confidence.value,
            metrics={
                "currentCR": rate,
                "baselineCR": baseline.conversion_rate,
                "gap": baseline.conversion_rate - rate,
                "discountPercent": listing.discount_percent,
                "visits": metrics.visits,
            },
        ))

    return _sort_and_cap(gaps, cfg.max_gaps)


def generate_fallback_gaps(
    listing: BenchmarkListing,
    media_verdict: Optional[MediaVerdict] = None,
    title_problem_hint: Optional[str] = None,
    description_diagnostic: Optional[str] = None,
    config: Optional[ScoringConfig] = None,
) -> List[CriticalGap]:
    """Gaps heuristiques issus des données internes uniquement."""
    cfg = (config or DEFAULT_CONFIG).benchmark
    gaps: List[CriticalGap] = []

    if (
        listing.clip_status is ClipStatus.ABSENT
        and media_verdict is not None
        and media_verdict.can_suggest_clip
    ):
        gaps.append(CriticalGap(
            id="gap_video_fallback",
            dimension="video",
            title="Adicionar vídeo para aumentar confiança e engajamento",
            why_it_matters="Vídeos aumentam a confiança do comprador e podem melhorar a conversão.",
            impact="high",
            effort="medium",
            confidence="medium",
            metrics={"hasVideo": "false", "source": FALLBACK_SOURCE},
        ))

    if title_problem_hint and listing.title_length < FALLBACK_TITLE_MAX_LENGTH:
        gaps.append(CriticalGap(
            id="gap_title_fallback",
            dimension="title",
            title="Otimizar título para melhor visibilidade e SEO",
            why_it_matters="Títulos otimizados aumentam a visibilidade nas buscas e melhoram o CTR.",
            impact="high",
            effort="low",
            confidence="medium",
            metrics={"currentLength": listing.title_length, "source": FALLBACK_SOURCE},
        ))

    if listing.pictures_count < FALLBACK_MIN_PICTURES:
        gaps.append(CriticalGap(
            id="gap_images_fallback",
            dimension="images",
            title=f"Adicionar mais imagens (atualmente {listing.pictures_count})",
            why_it_matters="Anúncios com mais imagens tendem a gerar maior engajamento e conversão.",
            impact="medium",
            effort="low",
            confidence="low",
            metrics={"current": listing.pictures_count, "source": FALLBACK_SOURCE},
        ))

    if description_diagnostic:
        gaps.append(CriticalGap(
            id="gap_description_fallback",
            dimension="description",
            title="Otimizar descrição para melhor SEO e conversão",
            why_it_matters="Descrições estruturadas melhoram SEO e reduzem objeções do comprador.",
            impact="medium",
            effort="low",
            confidence="medium",
            metrics={"source": FALLBACK_SOURCE},
        ))

    return _sort_and_cap(gaps, cfg.max_gaps)


def normalize_benchmark_insights(
    result: Optional[BenchmarkResult],
    listing: BenchmarkListing,
    metrics_30d: Optional[MetricsWindow],
    media_verdict: Optional[MediaVerdict] = None,
    title_problem_hint: Optional[str] = None,
    description_diagnostic: Optional[str] = None,
    config: Optional[ScoringConfig] = None,
) -> BenchmarkInsights:
    """
    Transforme le benchmark en insights (gains, pertes, gaps critiques).

    Benchmark absent, indisponible ou vide → gaps heuristiques, confiance "low".
    """
    if (
        result is None
        or result.summary.confidence is ConfidenceTier.UNAVAILABLE
        or result.summary.sample_size == 0
    ):
        logger.debug("Benchmark unavailable for %s, using fallback gaps", listing.listing_id)
        return BenchmarkInsights(
            confidence=ConfidenceTier.LOW.value,
            critical_gaps=generate_fallback_gaps(
                listing, media_verdict, title_problem_hint, description_diagnostic, config,
            ),
        )

    return BenchmarkInsights(
        confidence=result.summary.confidence.value,
        wins=list(result.you_win_here),
        losses=list(result.you_lose_here),
        critical_gaps=rank_gaps(
            listing,
            result.summary.stats,
            result.summary.baseline_conversion,
            metrics_30d,
            config,
        ),
    )
