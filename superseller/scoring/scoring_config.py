"""
Configuration des seuils et pondérations pour le scoring SuperSeller.

Ce fichier centralise TOUS les paramètres de calibration du IA Score,
du plan d'action et du benchmark concurrentiel.

PHILOSOPHIE:
- Tous les seuils sont explicites et documentés
- Aucun "magic number" dans le code principal
- Aucune dépendance à l'environnement: mêmes inputs → même score

UNITÉS:
- Taux de conversion et CTR en FRACTION (0.02 == 2%)
- Remises en pourcentage (0-100)
"""

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class CadastroConfig:
    """
    Configuration du score CADASTRO (20 points max).

    LOGIQUE:
    Un cadastro complet améliore la pertinence et la confiance de l'acheteur.
    Quatre critères binaires de 5 points chacun.
    """
    max_points: int = 20
    points_per_criterion: int = 5

    # Longueurs STRICTEMENT supérieures
    min_title_length: int = 10
    min_description_length: int = 200


@dataclass(frozen=True)
class MidiaConfig:
    """
    Configuration du score MÍDIA (20 points max).

    LOGIQUE:
    - Photos: 6+ → 10 pts, 3-5 → 5 pts
    - Clip: +10 UNIQUEMENT si présence confirmée (jamais sur inconnu)
    """
    max_points: int = 20

    picture_thresholds: Tuple[Tuple[int, int], ...] = (
        (6, 10),
        (3, 5),
    )
    picture_max_points: int = 10
    clip_points: int = 10


@dataclass(frozen=True)
class PerformanceConfig:
    """
    Configuration du score PERFORMANCE (30 points max).

    LOGIQUE:
    - Visites > 0: 10 pts
    - Commandes > 0: 10 pts
    - Conversion vs baseline 2%: ≥2% → 10, ≥1% → 5, >0 → 2
    """
    max_points: int = 30
    visits_points: int = 10
    orders_points: int = 10

    conversion_thresholds: Tuple[Tuple[float, int], ...] = (
        (0.02, 10),
        (0.01, 5),
    )
    conversion_positive_points: int = 2


@dataclass(frozen=True)
class SeoConfig:
    """
    Configuration du score SEO (20 points max).

    LOGIQUE:
    - CTR: ≥2% → 10, ≥1% → 5, >0 → 2
    - Score sémantique: placeholder fixe de 10 pts
    """
    max_points: int = 20

    ctr_thresholds: Tuple[Tuple[float, int], ...] = (
        (0.02, 10),
        (0.01, 5),
    )
    ctr_positive_points: int = 2
    semantic_placeholder_points: int = 10


@dataclass(frozen=True)
class CompetitividadeConfig:
    """
    Configuration du score COMPETITIVIDADE (10 points max).

    Placeholder fixe en attendant l'intégration du benchmark de catégorie.
    """
    max_points: int = 10
    placeholder_points: int = 5


@dataclass(frozen=True)
class CompletenessConfig:
    """Crédits de complétude des données (0-100)."""
    description_points: int = 30
    media_points: int = 30
    daily_metrics_points: int = 40
    aggregates_points: int = 20


@dataclass(frozen=True)
class ActionPlanConfig:
    """
    Configuration du plan d'action.

    PRIORITÉ:
    - lost ≥ 10 → high
    - 5 ≤ lost < 10 → medium
    - lost < 5 → low

    GATILHO PROMO AGRESSIVE + CONVERSION BASSE:
    Remise ≥ 30%, conversion ≤ 0.6%, au moins 150 visites.
    """
    high_priority_min_lost: int = 10
    medium_priority_min_lost: int = 5

    # Couverture de visites sous laquelle on signale des données partielles
    low_coverage_ratio: float = 0.5

    # Mídia "assez complète"
    media_complete_pictures_unknown_clip: int = 8
    media_complete_pictures_with_clip: int = 6

    promo_aggressive_discount_pct: float = 30.0
    low_conversion_threshold: float = 0.006
    min_visits_for_cr_confidence: int = 150


@dataclass(frozen=True)
class BenchmarkConfig:
    """
    Configuration du benchmark concurrentiel et de la baseline interne.

    BASELINE:
    - Disponible: ≥ 30 anúncios ET ≥ 1000 visites (30j)
    - high: ≥ 50 anúncios ET ≥ 5000 visites
    - medium: ≥ 30 anúncios ET ≥ 1000 visites
    """
    competitors_sample_size: int = 20

    min_baseline_sample_size: int = 30
    min_baseline_visits: int = 1000
    high_baseline_sample_size: int = 50
    high_baseline_visits: int = 5000

    # Confiance globale du benchmark
    high_confidence_sample: int = 15
    medium_confidence_sample: int = 10

    min_visits_for_cr_confidence: int = 150

    # Gaps
    title_deviation_ratio: float = 0.20
    video_majority_pct: float = 50.0
    promo_aggressive_discount_pct: float = 30.0
    low_conversion_threshold: float = 0.006

    # Prix
    price_above_median_ratio: float = 0.20
    price_below_median_ratio: float = -0.10

    # Commandes attendues vs réelles
    min_orders_gap: float = 1.0
    min_orders_gap_pct: float = 20.0

    max_gaps: int = 3
    max_wins: int = 4
    max_losses: int = 4
    max_recommendations: int = 5


@dataclass(frozen=True)
class HackConfig:
    """
    Configuration du moteur de hacks.

    - Cooldown après rejet: 30 jours
    - Niveau de confiance: ≥ 70 high, ≥ 40 medium, sinon low
    """
    cooldown_days: int = 30
    high_confidence_min: int = 70
    medium_confidence_min: int = 40


@dataclass(frozen=True)
class ScoringConfig:
    """
    Configuration globale du scoring SuperSeller.

    Agrège toutes les configurations de composantes.
    Point d'entrée unique pour la calibration.
    """
    cadastro: CadastroConfig = field(default_factory=CadastroConfig)
    midia: MidiaConfig = field(default_factory=MidiaConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    seo: SeoConfig = field(default_factory=SeoConfig)
    competitividade: CompetitividadeConfig = field(default_factory=CompetitividadeConfig)
    completeness: CompletenessConfig = field(default_factory=CompletenessConfig)
    action_plan: ActionPlanConfig = field(default_factory=ActionPlanConfig)
    benchmark: BenchmarkConfig = field(default_factory=BenchmarkConfig)
    hacks: HackConfig = field(default_factory=HackConfig)

    max_total_score: int = 100

    def max_by_dimension(self) -> dict:
        """Maximum de chaque dimension, dans l'ordre canonique."""
        return {
            "cadastro": self.cadastro.max_points,
            "midia": self.midia.max_points,
            "performance": self.performance.max_points,
            "seo": self.seo.max_points,
            "competitividade": self.competitividade.max_points,
        }

    def validate(self) -> bool:
        """Vérifie la cohérence de la configuration."""
        total_max = sum(self.max_by_dimension().values())
        assert total_max == self.max_total_score, \
            f"Somme des max ({total_max}) != max_total_score ({self.max_total_score})"
        assert self.action_plan.high_priority_min_lost > self.action_plan.medium_priority_min_lost, \
            "Seuil high doit être supérieur au seuil medium"
        return True


# Configuration par défaut
DEFAULT_CONFIG = ScoringConfig()
