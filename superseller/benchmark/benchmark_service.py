"""
Benchmark concurrentiel - statistiques de catégorie et baseline de conversion.

PHILOSOPHIE:
- Jamais de nombre inventé: données insuffisantes → confidence "unavailable"
- Vidéo des concurrents en tri-état: % calculé sur les détectables uniquement
- Aucune requête réseau: l'échantillon de concurrents et les métriques de la
  baseline sont fournis par l'appelant

BASELINE DE CONVERSION:
- < 30 anúncios dans la catégorie → unavailable
- < 1000 visites sur 30 jours → unavailable
- high: ≥ 50 anúncios et ≥ 5000 visites; medium: ≥ 30 et ≥ 1000
"""

import logging
import statistics
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ..data.data_models import (
    CategoryBaselineInput,
    CompetitorItem,
    ConfidenceTier,
    MetricsWindow,
)
from ..media.media_verdict import ClipStatus
from ..scoring.scoring_config import DEFAULT_CONFIG, ScoringConfig
from ..signals.signals_builder import Signals

logger = logging.getLogger(__name__)


BASELINE_UNAVAILABLE_NOTE = (
    "Baseline de conversão indisponível (dados insuficientes). "
    "Comparação baseada apenas em features estruturais."
)

DEFAULT_WIN = "Seus dados estão alinhados com a média da categoria"
DEFAULT_LOSS = "Nenhum gap significativo identificado vs concorrentes"


# =============================================================================
# STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class BenchmarkStats:
    median_pictures_count: float = 0
    percentage_with_video: float = 0.0
    median_price: float = 0.0
    median_title_length: float = 0
    sample_size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "medianPicturesCount": self.median_pictures_count,
            "percentageWithVideo": self.percentage_with_video,
            "medianPrice": self.median_price,
            "medianTitleLength": self.median_title_length,
            "sampleSize": self.sample_size,
        }


@dataclass(frozen=True)
class BaselineConversion:
    """Taux de conversion interne de la catégorie; None si non significatif."""
    conversion_rate: Optional[float] = None
    sample_size: int = 0
    total_visits: int = 0
    confidence: ConfidenceTier = ConfidenceTier.UNAVAILABLE

    @property
    def is_available(self) -> bool:
        return self.conversion_rate is not None and self.confidence is not ConfidenceTier.UNAVAILABLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conversionRate": self.conversion_rate,
            "sampleSize": self.sample_size,
            "totalVisits": self.total_visits,
            "confidence": self.confidence.value,
        }


@dataclass(frozen=True)
class BenchmarkListing:
    """Vue de l'anúncio utilisée par le benchmark et le classement des gaps."""
    pictures_count: int
    clip_status: ClipStatus
    title_length: int
    price: float
    has_promotion: bool
    discount_percent: Optional[float]
    listing_id: Optional[str] = None
    listing_id_ext: Optional[str] = None
    category_id: Optional[str] = None

    @classmethod
    def from_signals(cls, signals: Signals) -> "BenchmarkListing":
        return cls(
            pictures_count=signals.pictures_count,
            clip_status=signals.clip_status,
            title_length=len(signals.title),
            price=signals.price,
            has_promotion=signals.has_promotion,
            discount_percent=signals.discount_percent,
            listing_id=signals.listing_id,
            listing_id_ext=signals.listing_id_ext,
            category_id=signals.category_id,
        )


@dataclass(frozen=True)
class BenchmarkSummary:
    category_id: Optional[str]
    sample_size: int
    computed_at: datetime
    confidence: ConfidenceTier
    stats: BenchmarkStats
    baseline_conversion: BaselineConversion
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categoryId": self.category_id,
            "sampleSize": self.sample_size,
            "computedAt": self.computed_at.isoformat(),
            "confidence": self.confidence.value,
            "notes": self.notes,
            "stats": self.stats.to_dict(),
            "baselineConversion": self.baseline_conversion.to_dict(),
        }


@dataclass(frozen=True)
class BenchmarkResult:
    summary: BenchmarkSummary
    you_win_here: List[str] = field(default_factory=list)
    you_lose_here: List[str] = field(default_factory=list)
    tradeoffs: str = ""
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "benchmarkSummary": self.summary.to_dict(),
            "youWinHere": list(self.you_win_here),
            "youLoseHere": list(self.you_lose_here),
            "tradeoffs": self.tradeoffs,
            "recommendations": list(self.recommendations),
        }


# =============================================================================
# CALCULS
# =============================================================================

def _median(values: Sequence[float]) -> float:
    if not values:
        return 0
    return statistics.median(values)


def calculate_benchmark_stats(competitors: Sequence[CompetitorItem]) -> BenchmarkStats:
    """
    Agrège l'échantillon de concurrents.

    Échantillon vide → statistiques à zéro (jamais None, jamais d'exception).
    """
    if not competitors:
        return BenchmarkStats()

    with_video = sum(1 for c in competitors if c.has_video is True)
    detectable = sum(1 for c in competitors if c.has_video is not None)

    return BenchmarkStats(
        median_pictures_count=_median([c.pictures_count for c in competitors]),
        percentage_with_video=(with_video / detectable) * 100 if detectable > 0 else 0.0,
        median_price=_median([c.price for c in competitors if c.price > 0]),
        median_title_length=_median([len(c.title) for c in competitors]),
        sample_size=len(competitors),
    )


def calculate_baseline_conversion(
    baseline_input: Optional[CategoryBaselineInput],
    config: Optional[ScoringConfig] = None,
) -> BaselineConversion:
    """
    Calcule la baseline de conversion interne de la catégorie.

    Args:
        baseline_input: Nombre d'anúncios de la catégorie et leurs métriques 30j

    Returns:
        BaselineConversion; conversion_rate None et confidence "unavailable"
        quand l'échantillon ou le trafic est insuffisant.
    """
    cfg = (config or DEFAULT_CONFIG).benchmark
    if baseline_input is None:
        return BaselineConversion()

    listing_count = baseline_input.listing_count
    if listing_count < cfg.min_baseline_sample_size:
        return BaselineConversion(sample_size=listing_count)

    total_visits = sum(row.visits or 0 for row in baseline_input.metrics)
    total_orders = sum(row.orders for row in baseline_input.metrics)

    if total_visits < cfg.min_baseline_visits:
        return BaselineConversion(sample_size=listing_count, total_visits=total_visits)

    if listing_count >= cfg.high_baseline_sample_size and total_visits >= cfg.high_baseline_visits:
        confidence = ConfidenceTier.HIGH
    elif listing_count >= cfg.min_baseline_sample_size and total_visits >= cfg.min_baseline_visits:
        confidence = ConfidenceTier.MEDIUM
    else:
        confidence = ConfidenceTier.LOW

    return BaselineConversion(
        conversion_rate=total_orders / total_visits,
        sample_size=listing_count,
        total_visits=total_visits,
        confidence=confidence,
    )


def _tradeoffs(wins: List[str], losses: List[str]) -> str:
    if not losses:
        return "Seu anúncio está competitivo em relação aos concorrentes da categoria."
    if not wins:
        return (
            "Seu anúncio está abaixo da média da categoria em vários aspectos. "
            "Foque em melhorar os gaps identificados."
        )
    if len(losses) > len(wins):
        return (
            f"Você perde em {len(losses)} aspectos principais vs concorrentes, "
            f"mas tem {len(wins)} ponto(s) forte(s). "
            "Priorize corrigir os gaps para aumentar competitividade."
        )
    return (
        f"Você está competitivo em {len(wins)} aspectos, mas ainda perde em {len(losses)}. "
        "Foque nos gaps restantes para maximizar resultados."
    )


def _fmt_number(value: float) -> str:
    """Affiche 8.0 comme "8" et 7.5 comme "7.5"."""
    return f"{value:g}"


class BenchmarkService:
    """
    Comparaison d'un anúncio avec sa catégorie.

    LOGIQUE:
    1. Échantillon de concurrents (sans l'anúncio lui-même, max 20)
    2. Statistiques + baseline interne
    3. Confiance globale: high (≥15 et baseline high),
       medium (≥10 et baseline disponible), sinon low
    4. Rapport "você ganha / você perde" + recommandations
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def build_benchmark(
        self,
        listing: BenchmarkListing,
        competitors: Sequence[CompetitorItem],
        baseline_input: Optional[CategoryBaselineInput],
        metrics_30d: Optional[MetricsWindow],
        computed_at: datetime,
    ) -> Optional[BenchmarkResult]:
        """
        Construit le benchmark complet.

        Returns:
            BenchmarkResult, ou None si aucun concurrent n'est disponible.
        """
        cfg = self.config.benchmark
        own_ids = {i for i in (listing.listing_id, listing.listing_id_ext) if i}
        sample = [c for c in competitors if c.id not in own_ids][:cfg.competitors_sample_size]

        if not sample:
            logger.info(
                "No competitors for category %s, benchmark unavailable", listing.category_id,
                extra={"category_id": listing.category_id, "stage": "benchmark"},
            )
            return None

        stats = calculate_benchmark_stats(sample)
        baseline = calculate_baseline_conversion(baseline_input, self.config)

        if stats.sample_size >= cfg.high_confidence_sample and baseline.confidence is ConfidenceTier.HIGH:
            confidence = ConfidenceTier.HIGH
        elif stats.sample_size >= cfg.medium_confidence_sample and baseline.is_available:
            confidence = ConfidenceTier.MEDIUM
        else:
            confidence = ConfidenceTier.LOW

        wins, losses, tradeoffs, recommendations = self.generate_win_lose(
            listing, stats, baseline, metrics_30d or MetricsWindow(),
        )

        summary = BenchmarkSummary(
            category_id=listing.category_id,
            sample_size=stats.sample_size,
            computed_at=computed_at,
            confidence=confidence,
            stats=stats,
            baseline_conversion=baseline,
            notes=None if baseline.is_available else BASELINE_UNAVAILABLE_NOTE,
        )
        return BenchmarkResult(
            summary=summary,
            you_win_here=wins,
            you_lose_here=losses,
            tradeoffs=tradeoffs,
            recommendations=recommendations,
        )

    def generate_win_lose(
        self,
        listing: BenchmarkListing,
        stats: BenchmarkStats,
        baseline: BaselineConversion,
        metrics: MetricsWindow,
    ):
        """
        Rapport gains/pertes basé uniquement sur des écarts réels.

        Returns:
            (wins, losses, tradeoffs, recommendations), tronqués à 4/4/5.
        """
        cfg = self.config.benchmark
        wins: List[str] = []
        losses: List[str] = []
        recommendations: List[str] = []

        visits = metrics.visits or 0
        orders = metrics.orders or 0
        rate = metrics.conversion_rate

        # 1. Images
        median_pics = stats.median_pictures_count
        if listing.pictures_count >= median_pics:
            wins.append(
                f"Você tem {listing.pictures_count} imagens, acima da média de "
                f"{_fmt_number(median_pics)} da categoria"
            )
        else:
            gap = _fmt_number(median_pics - listing.pictures_count)
            losses.append(
                f"Você tem {listing.pictures_count} imagens, {gap} abaixo da média de "
                f"{_fmt_number(median_pics)} da categoria"
            )
            recommendations.append(f"Adicionar {gap} imagens para alcançar a média da categoria")

        # 2. Vidéo (tri-état)
        if stats.percentage_with_video > cfg.video_majority_pct:
            pct = round(stats.percentage_with_video)
            if listing.clip_status is ClipStatus.PRESENT:
                wins.append(f"Você tem vídeo, como {pct}% dos concorrentes")
            elif listing.clip_status is ClipStatus.ABSENT:
                losses.append(f"{pct}% dos concorrentes têm vídeo, você não")
                recommendations.append("Adicionar vídeo para aumentar confiança e engajamento")
            else:
                losses.append(f"{pct}% dos concorrentes têm vídeo detectável")
                recommendations.append("Verificar se há vídeo no anúncio; se não houver, considere adicionar")

        # 3. Titre
        median_title = round(stats.median_title_length)
        if listing.title_length >= stats.median_title_length:
            wins.append(f"Seu título tem {listing.title_length} caracteres, acima da média de {median_title}")
        else:
            gap = round(stats.median_title_length - listing.title_length)
            losses.append(
                f"Seu título tem {listing.title_length} caracteres, {gap} abaixo da média de {median_title}"
            )
            recommendations.append(f"Expandir título em {gap} caracteres para alcançar a média da categoria")

        # 4. Prix
        if stats.median_price > 0:
            price_diff = (listing.price - stats.median_price) / stats.median_price
            if price_diff > cfg.price_above_median_ratio and not listing.has_promotion:
                losses.append(
                    f"Seu preço está {round(price_diff * 100)}% acima da mediana da categoria "
                    f"(R$ {listing.price:.2f} vs R$ {stats.median_price:.2f})"
                )
                if rate and rate < 0.01:
                    recommendations.append("Revisar preço: acima da mediana e conversão baixa")
            elif price_diff < cfg.price_below_median_ratio:
                wins.append(f"Seu preço está {round(abs(price_diff) * 100)}% abaixo da mediana da categoria")

        # 5. Commandes attendues vs réelles (baseline disponible uniquement)
        if baseline.is_available and visits >= cfg.min_visits_for_cr_confidence:
            expected = visits * baseline.conversion_rate
            gap_orders = expected - orders
            gap_pct = (gap_orders / expected) * 100 if expected > 0 else 0
            if gap_orders >= cfg.min_orders_gap and gap_pct >= cfg.min_orders_gap_pct:
                losses.append(
                    f"Você está {round(gap_pct)}% abaixo do esperado em pedidos "
                    f"({orders} vs {round(expected)} esperados)"
                )
                recommendations.append("Otimizar título e imagens para aumentar CTR e conversão")
            elif gap_orders <= -cfg.min_orders_gap:
                wins.append(f"Você está acima do esperado em pedidos ({orders} vs {round(expected)} esperados)")

        # 6. Promo agressive + conversion basse
        if (
            listing.has_promotion
            and listing.discount_percent is not None
            and listing.discount_percent >= cfg.promo_aggressive_discount_pct
            and rate
            and rate <= cfg.low_conversion_threshold
            and visits >= cfg.min_visits_for_cr_confidence
        ):
            losses.append(
                f"Promoção forte ({_fmt_number(listing.discount_percent)}% OFF) mas conversão ainda baixa "
                f"({rate * 100:.2f}%)"
            )
            recommendations.append(
                "Priorizar otimização de título, imagens e descrição (gargalo em CTR/qualificação)"
            )

        tradeoffs = _tradeoffs(wins, losses)

        if not wins:
            wins.append(DEFAULT_WIN)
        if not losses:
            losses.append(DEFAULT_LOSS)

        return (
            wins[:cfg.max_wins],
            losses[:cfg.max_losses],
            tradeoffs,
            recommendations[:cfg.max_recommendations],
        )
