"""
SuperSeller IA Score - Score déterministe de qualité d'un anúncio.

PHILOSOPHIE:
- Pas de ML, pas d'appel LLM: chaque point est traçable
- Chaque dimension est bornée puis sommée, score final borné à 100
- Le clip ne rapporte des points QUE si sa présence est confirmée
- Aucun gain potentiel "clip" n'est promis sans absence confirmée

DIMENSIONS:
- CADASTRO (20 pts): titre, description, catégorie, statut
- MÍDIA (20 pts): photos + clip confirmé
- PERFORMANCE (30 pts): visites, commandes, conversion
- SEO (20 pts): CTR + score sémantique (placeholder)
- COMPETITIVIDADE (10 pts): placeholder fixe

UTILISATION:
    from superseller.scoring import IAScoreService

    service = IAScoreService()
    result = service.calculate_score(listing, daily_metrics, now_utc=now)

    print(result.final)
    print(result.breakdown.to_dict())
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..data.data_models import DailyMetric, ListingRecord, ListingStatus, MetricsWindow
from ..media.media_verdict import ClipStatus, MediaInfo, MediaVerdict
from .scoring_config import DEFAULT_CONFIG, ScoringConfig

logger = logging.getLogger(__name__)


DIMENSIONS: Tuple[str, ...] = ("cadastro", "midia", "performance", "seo", "competitividade")

SOURCE_DAILY = "listing_metrics_daily"
SOURCE_AGGREGATES = "listing_aggregates"


@dataclass(frozen=True)
class ComponentScore:
    """
    Score détaillé d'une dimension.

    Contient le score borné, le détail par critère et la trace textuelle.
    """
    name: str
    score: int
    max_score: int
    details: Dict[str, Any] = field(default_factory=dict)
    explanation: str = ""

    @property
    def lost_points(self) -> int:
        return self.max_score - self.score


@dataclass(frozen=True)
class ScoreBreakdown:
    """Les 5 dimensions du IA Score."""
    cadastro: int = 0
    midia: int = 0
    performance: int = 0
    seo: int = 0
    competitividade: int = 0

    def get(self, dimension: str) -> int:
        return getattr(self, dimension)

    @property
    def total(self) -> int:
        return sum(self.get(d) for d in DIMENSIONS)

    def to_dict(self) -> Dict[str, int]:
        return {d: self.get(d) for d in DIMENSIONS}


@dataclass(frozen=True)
class PotentialGain:
    """Indications "+N" par dimension; None quand rien n'est récupérable ou prouvé."""
    cadastro: Optional[str] = None
    midia: Optional[str] = None
    performance: Optional[str] = None
    seo: Optional[str] = None
    competitividade: Optional[str] = None

    def get(self, dimension: str) -> Optional[str]:
        return getattr(self, dimension)

    def to_dict(self) -> Dict[str, str]:
        return {d: self.get(d) for d in DIMENSIONS if self.get(d) is not None}


@dataclass(frozen=True)
class ScoreMetrics:
    """Métriques agrégées sur la période."""
    visits: int = 0
    orders: int = 0
    revenue: Optional[float] = None
    conversion_rate: Optional[float] = None
    ctr: Optional[float] = None
    impressions: int = 0
    clicks: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "visits": self.visits,
            "orders": self.orders,
            "revenue": self.revenue,
            "conversionRate": self.conversion_rate,
            "ctr": self.ctr,
        }


@dataclass(frozen=True)
class VisitsCoverage:
    filled_days: int
    total_days: int

    @property
    def ratio(self) -> float:
        if self.total_days <= 0:
            return 0.0
        return self.filled_days / self.total_days


@dataclass(frozen=True)
class DataQuality:
    """
    Qualité et disponibilité des données ayant servi au score.

    performance_available = métriques journalières OU agrégats > 0.
    """
    performance_available: bool
    video_status_known: bool = False
    visits_coverage: Optional[VisitsCoverage] = None
    completeness_score: int = 0
    performance_source: str = SOURCE_AGGREGATES
    missing: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        coverage = None
        if self.visits_coverage is not None:
            coverage = {
                "filledDays": self.visits_coverage.filled_days,
                "totalDays": self.visits_coverage.total_days,
            }
        return {
            "performanceAvailable": self.performance_available,
            "videoStatusKnown": self.video_status_known,
            "visitsCoverage": coverage,
            "completenessScore": self.completeness_score,
            "sources": {"performance": self.performance_source},
            "missing": list(self.missing),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class IAScoreResult:
    """Résultat complet du IA Score d'un anúncio."""
    listing_id: str
    final: int
    breakdown: ScoreBreakdown
    potential_gain: PotentialGain
    metrics_30d: ScoreMetrics
    data_quality: DataQuality
    media_info: MediaInfo
    components: Dict[str, ComponentScore] = field(default_factory=dict)

    @property
    def media_verdict(self) -> MediaVerdict:
        return self.media_info.verdict

    def get_explanation(self) -> str:
        """Trace complète du calcul, dimension par dimension."""
        lines = [
            "=== IA SCORE ===",
            f"Anúncio: {self.listing_id}",
            f"Score Final: {self.final}/100",
            "",
            "--- DÉTAIL PAR DIMENSION ---",
        ]
        for name in DIMENSIONS:
            comp = self.components.get(name)
            if comp is None:
                continue
            lines.append(f"\n{name.upper()} ({comp.score}/{comp.max_score}):")
            lines.append(comp.explanation)
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": {
                "final": self.final,
                "breakdown": self.breakdown.to_dict(),
                "potential_gain": self.potential_gain.to_dict(),
            },
            "metrics_30d": self.metrics_30d.to_dict(),
            "dataQuality": self.data_quality.to_dict(),
            "mediaVerdict": self.media_verdict.to_dict(),
        }


def _conversion(orders: int, visits: int) -> Optional[float]:
    if visits <= 0:
        return None
    return min(orders / visits, 1.0)


@dataclass(frozen=True)
class _Aggregate:
    metrics: ScoreMetrics
    has_daily_metrics: bool
    filled_days: int


class IAScoreService:
    """
    Calcul du IA Score - 100% déterministe.

    Le service reçoit l'anúncio et ses métriques déjà chargés: il ne lit
    jamais de base de données ni l'horloge système.
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        """
        Initialise le service avec une configuration.

        Args:
            config: Configuration de scoring. Si None, utilise DEFAULT_CONFIG.
        """
        self.config = config or DEFAULT_CONFIG
        self.config.validate()

    # =========================================================================
    # MÉTHODE PRINCIPALE
    # =========================================================================

    def calculate_score(
        self,
        listing: ListingRecord,
        daily_metrics: Optional[Sequence[DailyMetric]] = None,
        period_days: int = 30,
        now_utc: Optional[datetime] = None,
        metrics_30d: Optional[MetricsWindow] = None,
    ) -> IAScoreResult:
        """
        Calcule le IA Score complet d'un anúncio.

        Args:
            listing: Enregistrement de l'anúncio
            daily_metrics: Métriques journalières (None ou vide → agrégats 7j)
            period_days: Fenêtre d'agrégation en jours
            now_utc: Instant d'évaluation; si fourni, les jours hors fenêtre
                sont ignorés
            metrics_30d: Agrégat 30 jours déjà calculé par l'appelant, utilisé
                quand aucun jour n'est rempli (avant les agrégats 7j)

        Returns:
            IAScoreResult avec breakdown, gains potentiels et qualité des données.
        """
        rows = self._rows_in_window(daily_metrics or [], period_days, now_utc)
        aggregate = self._aggregate_metrics(listing, rows, metrics_30d)
        media_info = MediaInfo.from_flag(listing.has_clips, listing.pictures_count or 0)
        verdict = media_info.verdict

        components = {
            "cadastro": self.score_cadastro(listing),
            "midia": self.score_midia(listing.pictures_count or 0, verdict),
            "performance": self.score_performance(aggregate.metrics),
            "seo": self.score_seo(aggregate.metrics.ctr),
            "competitividade": self.score_competitividade(),
        }
        breakdown = ScoreBreakdown(**{name: comp.score for name, comp in components.items()})
        final = max(0, min(breakdown.total, self.config.max_total_score))

        data_quality = self._data_quality(listing, aggregate, period_days, verdict)
        potential_gain = self.calculate_potential_gain(
            breakdown, listing.pictures_count or 0, verdict, data_quality.performance_available,
        )

        logger.debug(
            "IA score for %s: final=%d breakdown=%s",
            listing.id, final, breakdown.to_dict(),
            extra={"listing_id": listing.id, "score": final},
        )

        return IAScoreResult(
            listing_id=listing.id,
            final=final,
            breakdown=breakdown,
            potential_gain=potential_gain,
            metrics_30d=aggregate.metrics,
            data_quality=data_quality,
            media_info=media_info,
            components=components,
        )

    # =========================================================================
    # AGRÉGATION DES MÉTRIQUES
    # =========================================================================

    @staticmethod
    def _rows_in_window(
        rows: Sequence[DailyMetric],
        period_days: int,
        now_utc: Optional[datetime],
    ) -> List[DailyMetric]:
        if now_utc is None:
            return list(rows)
        since = (now_utc - timedelta(days=period_days)).date()
        return [row for row in rows if row.date >= since]

    @staticmethod
    def _aggregate_metrics(
        listing: ListingRecord,
        rows: Sequence[DailyMetric],
        metrics_30d: Optional[MetricsWindow] = None,
    ) -> _Aggregate:
        """
        Agrège les métriques journalières.

        Un jour avec visits=None n'est pas "rempli". Sans aucun jour rempli,
        repli sur l'agrégat 30 jours fourni, sinon sur les agrégats 7 jours
        de l'anúncio (revenu inconnu).

        Les commandes des jours non remplis restent comptées: la conversion
        est bornée à 1.
        """
        filled = [row for row in rows if row.visits is not None]

        if not filled:
            if metrics_30d is not None and (metrics_30d.visits or metrics_30d.orders):
                visits = metrics_30d.visits or 0
                orders = metrics_30d.orders or 0
                revenue = metrics_30d.revenue
                rate = metrics_30d.conversion_rate
                if rate is None:
                    rate = _conversion(orders, visits)
            else:
                visits = listing.visits_last_7d or 0
                orders = listing.sales_last_7d or 0
                revenue = None
                rate = _conversion(orders, visits)
            return _Aggregate(
                metrics=ScoreMetrics(
                    visits=visits,
                    orders=orders,
                    revenue=revenue,
                    conversion_rate=rate,
                    ctr=None,
                ),
                has_daily_metrics=False,
                filled_days=0,
            )

        visits = sum(row.visits for row in filled)
        orders = sum(row.orders for row in rows)
        revenue = sum(row.gmv for row in rows)
        impressions = sum(row.impressions or 0 for row in rows)
        clicks = sum(row.clicks or 0 for row in rows)

        ctr_values = [row.ctr for row in rows if row.ctr is not None]
        total_ctr = sum(ctr_values)
        avg_ctr = total_ctr / len(ctr_values) if ctr_values and total_ctr > 0 else None

        return _Aggregate(
            metrics=ScoreMetrics(
                visits=visits,
                orders=orders,
                revenue=revenue,
                conversion_rate=_conversion(orders, visits),
                ctr=avg_ctr,
                impressions=impressions,
                clicks=clicks,
            ),
            has_daily_metrics=True,
            filled_days=len({row.date for row in filled}),
        )

    # =========================================================================
    # DIMENSIONS
    # =========================================================================

    def score_cadastro(self, listing: ListingRecord) -> ComponentScore:
        """
        Score CADASTRO (0-20).

        FORMULE:
        +5 titre > 10 caractères, +5 description > 200 caractères,
        +5 catégorie renseignée, +5 statut actif.
        """
        cfg = self.config.cadastro
        title = (listing.title or "").strip()
        description = (listing.description or "").strip()

        checks = {
            "title": len(title) > cfg.min_title_length,
            "description": len(description) > cfg.min_description_length,
            "category": bool((listing.category or "").strip()),
            "active": ListingStatus.from_raw(listing.status) is ListingStatus.ACTIVE,
        }
        raw = sum(cfg.points_per_criterion for ok in checks.values() if ok)
        score = max(0, min(raw, cfg.max_points))

        failed = [name for name, ok in checks.items() if not ok]
        explanation = (
            f"Critères remplis: {len(checks) - len(failed)}/{len(checks)}"
            + (f" (manquants: {', '.join(failed)})" if failed else "")
        )
        return ComponentScore(
            name="cadastro",
            score=score,
            max_score=cfg.max_points,
            details={"checks": checks, "title_length": len(title), "description_length": len(description)},
            explanation=explanation,
        )

    def score_midia(self, pictures_count: int, verdict: MediaVerdict) -> ComponentScore:
        """
        Score MÍDIA (0-20).

        FORMULE:
        Photos: ≥6 → 10, ≥3 → 5.
        Clip: +10 uniquement si présence confirmée (jamais sur statut inconnu).
        """
        cfg = self.config.midia
        picture_points = self._picture_points(pictures_count)
        clip_points = cfg.clip_points if verdict.status is ClipStatus.PRESENT else 0

        score = max(0, min(picture_points + clip_points, cfg.max_points))
        return ComponentScore(
            name="midia",
            score=score,
            max_score=cfg.max_points,
            details={
                "pictures_count": pictures_count,
                "picture_points": picture_points,
                "clip_status": verdict.status.value,
                "clip_points": clip_points,
            },
            explanation=f"Photos: {pictures_count} → {picture_points} pts | {verdict.short_message} → {clip_points} pts",
        )

    def _picture_points(self, pictures_count: int) -> int:
        for threshold, points in self.config.midia.picture_thresholds:
            if pictures_count >= threshold:
                return points
        return 0

    def score_performance(self, metrics: ScoreMetrics) -> ComponentScore:
        """
        Score PERFORMANCE (0-30).

        FORMULE:
        +10 visites > 0, +10 commandes > 0,
        conversion vs baseline 2%: ≥2% → 10, ≥1% → 5, >0 → 2.
        """
        cfg = self.config.performance
        visits_points = cfg.visits_points if metrics.visits > 0 else 0
        orders_points = cfg.orders_points if metrics.orders > 0 else 0

        conversion_points = 0
        rate = metrics.conversion_rate
        if rate is not None and rate > 0:
            conversion_points = cfg.conversion_positive_points
            for threshold, points in cfg.conversion_thresholds:
                if rate >= threshold:
                    conversion_points = points
                    break

        raw = visits_points + orders_points + conversion_points
        score = max(0, min(raw, cfg.max_points))
        rate_label = f"{rate * 100:.2f}%" if rate is not None else "n/a"
        return ComponentScore(
            name="performance",
            score=score,
            max_score=cfg.max_points,
            details={
                "visits": metrics.visits,
                "orders": metrics.orders,
                "conversion_rate": rate,
                "conversion_points": conversion_points,
            },
            explanation=(
                f"Visites: {metrics.visits} → {visits_points} pts | "
                f"Commandes: {metrics.orders} → {orders_points} pts | "
                f"Conversion: {rate_label} → {conversion_points} pts"
            ),
        )

    def score_seo(self, ctr: Optional[float]) -> ComponentScore:
        """
        Score SEO (0-20).

        FORMULE:
        CTR: ≥2% → 10, ≥1% → 5, >0 → 2, plus 10 pts sémantiques fixes.
        """
        cfg = self.config.seo
        ctr_points = 0
        if ctr is not None and ctr > 0:
            ctr_points = cfg.ctr_positive_points
            for threshold, points in cfg.ctr_thresholds:
                if ctr >= threshold:
                    ctr_points = points
                    break

        raw = ctr_points + cfg.semantic_placeholder_points
        score = max(0, min(raw, cfg.max_points))
        ctr_label = f"{ctr * 100:.2f}%" if ctr is not None else "n/a"
        return ComponentScore(
            name="seo",
            score=score,
            max_score=cfg.max_points,
            details={"ctr": ctr, "ctr_points": ctr_points, "semantic_points": cfg.semantic_placeholder_points},
            explanation=f"CTR: {ctr_label} → {ctr_points} pts | Sémantique (fixe): {cfg.semantic_placeholder_points} pts",
        )

    def score_competitividade(self) -> ComponentScore:
        """Score COMPETITIVIDADE (0-10): placeholder fixe."""
        cfg = self.config.competitividade
        score = max(0, min(cfg.placeholder_points, cfg.max_points))
        return ComponentScore(
            name="competitividade",
            score=score,
            max_score=cfg.max_points,
            details={"placeholder": True},
            explanation=f"Valeur fixe en attendant le benchmark de catégorie: {score} pts",
        )

    # =========================================================================
    # GAIN POTENTIEL & QUALITÉ DES DONNÉES
    # =========================================================================

    def calculate_potential_gain(
        self,
        breakdown: ScoreBreakdown,
        pictures_count: int,
        verdict: MediaVerdict,
        performance_available: bool,
    ) -> PotentialGain:
        """
        Indications de points récupérables, jamais utilisées dans le score.

        LOGIQUE MÍDIA:
        - Photos < 6: "+N" = points photo manquants
        - Clip: "+10 clip" UNIQUEMENT si l'absence est confirmée
        """
        maxima = self.config.max_by_dimension()

        def lost(dimension: str) -> int:
            return maxima[dimension] - breakdown.get(dimension)

        midia_cfg = self.config.midia
        photo_gain = 0
        if pictures_count < midia_cfg.picture_thresholds[0][0]:
            photo_gain = midia_cfg.picture_max_points - self._picture_points(pictures_count)
        clip_gain = midia_cfg.clip_points if verdict.can_suggest_clip else 0

        midia = None
        if photo_gain > 0 and clip_gain > 0:
            midia = f"+{photo_gain} (+{clip_gain} clip)"
        elif clip_gain > 0:
            midia = f"+{clip_gain} (clip)"
        elif photo_gain > 0:
            midia = f"+{photo_gain}"

        return PotentialGain(
            cadastro=f"+{lost('cadastro')}" if lost("cadastro") > 0 else None,
            midia=midia,
            performance=(
                f"+{lost('performance')}"
                if performance_available and lost("performance") > 0 else None
            ),
            seo=f"+{lost('seo')}" if lost("seo") > 0 else None,
            competitividade=None,
        )

    def _data_quality(
        self,
        listing: ListingRecord,
        aggregate: _Aggregate,
        period_days: int,
        verdict: MediaVerdict,
    ) -> DataQuality:
        cfg = self.config.completeness
        metrics = aggregate.metrics
        pictures_count = listing.pictures_count or 0
        has_description = bool((listing.description or "").strip())

        completeness = 0
        if has_description:
            completeness += cfg.description_points
        if pictures_count > 0:
            completeness += cfg.media_points
        if aggregate.has_daily_metrics:
            completeness += cfg.daily_metrics_points
        elif metrics.visits > 0 or metrics.orders > 0:
            completeness += cfg.aggregates_points

        performance_available = aggregate.has_daily_metrics or metrics.visits > 0 or metrics.orders > 0
        coverage = VisitsCoverage(filled_days=min(aggregate.filled_days, period_days), total_days=period_days)

        missing = []
        if not has_description:
            missing.append("description")
        if pictures_count == 0:
            missing.append("pictures")
        if not performance_available:
            missing.append("metrics")
        if verdict.status is ClipStatus.UNKNOWN:
            missing.append("clip_status")

        warnings = []
        if not aggregate.has_daily_metrics and performance_available:
            warnings.append("performance_from_aggregates")
        if aggregate.has_daily_metrics and coverage.ratio < self.config.action_plan.low_coverage_ratio:
            warnings.append("low_visits_coverage")

        return DataQuality(
            performance_available=performance_available,
            video_status_known=verdict.status is not ClipStatus.UNKNOWN,
            visits_coverage=coverage,
            completeness_score=completeness,
            performance_source=SOURCE_DAILY if aggregate.has_daily_metrics else SOURCE_AGGREGATES,
            missing=tuple(missing),
            warnings=tuple(warnings),
        )
