"""
SuperSeller Signals Builder
===========================

Normalise un anúncio brut (+ pricing, shipping, métriques, benchmark) en un
enregistrement plat et immuable `Signals`, consommé par le HackEngine.

PHILOSOPHIE:
- 100% déterministe, uniquement des données auditables
- Entrée optionnelle absente → None/False, jamais une valeur inventée
- Le clip vient EXCLUSIVEMENT de has_clips (tri-état); has_video est un
  drapeau legacy conservé mais jamais consulté pour une affirmation
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from ..data.config import get_settings
from ..data.data_models import (
    CategoryBenchmark,
    ConfidenceTier,
    ListingRecord,
    ListingStatus,
    MetricsWindow,
    PricingInput,
    ShippingInput,
)
from ..media.media_verdict import ClipStatus

logger = logging.getLogger(__name__)


# =============================================================================
# LEXIQUE KIT / COMBO
# =============================================================================

KIT_KEYWORDS = ("kit", "combo", "conjunto", "c/")

# Recherche par sous-chaîne: "e" matche la plupart des titres, ce qui rend la
# seconde branche quasi systématique dès 2 variations.
MULTI_ITEM_KEYWORDS = ("+", "e", "com", "pack", "pacote", "lote")


class ShippingMode(str, Enum):
    FULL = "full"
    FLEX = "flex"
    ME2 = "me2"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "ShippingMode":
        """Extrait le mode depuis le texte libre renvoyé par la marketplace."""
        if not raw:
            return cls.UNKNOWN
        normalized = raw.lower()
        if "full" in normalized or "fulfillment" in normalized:
            return cls.FULL
        if "flex" in normalized:
            return cls.FLEX
        if "me2" in normalized:
            return cls.ME2
        return cls.UNKNOWN


@dataclass(frozen=True)
class SignalMetrics:
    """Métriques 30 jours; chaque champ None quand inconnu."""
    visits: Optional[int] = None
    orders: Optional[int] = None
    revenue: Optional[float] = None
    conversion_rate: Optional[float] = None


@dataclass(frozen=True)
class SignalBenchmark:
    median_price: Optional[float] = None
    p25_price: Optional[float] = None
    p75_price: Optional[float] = None
    baseline_conversion_rate: Optional[float] = None
    baseline_conversion_confidence: Optional[ConfidenceTier] = None
    baseline_sample_size: Optional[int] = None


@dataclass(frozen=True)
class Signals:
    """
    Signaux plats d'un anúncio, construits une fois par évaluation.

    clip_status est la vérité sur le clip; has_video n'est qu'informatif.
    """
    listing_id: str
    listing_id_ext: Optional[str]
    title: str
    status: ListingStatus
    category_id: Optional[str]
    category_path: Optional[Tuple[str, ...]]
    is_catalog: bool

    price: float
    original_price: Optional[float]
    promotional_price: Optional[float]
    has_promotion: bool
    discount_percent: Optional[float]

    available_quantity: Optional[int]
    is_out_of_stock: bool

    shipping_mode: ShippingMode
    is_free_shipping: bool
    is_full_eligible: Optional[bool]

    pictures_count: int
    has_video: bool
    clip_status: ClipStatus

    variations_count: int
    has_variations: bool
    is_kit_heuristic: bool

    metrics_30d: Optional[SignalMetrics] = None
    benchmark: Optional[SignalBenchmark] = None
    currency: str = "BRL"

    @property
    def has_clips(self) -> Optional[bool]:
        return self.clip_status.as_flag()


def is_kit_heuristic(title: Optional[str], variations_count: Optional[int] = None) -> bool:
    """
    Détermine si un anúncio est un kit/combo.

    LOGIQUE:
    - Titre contient "kit", "combo", "conjunto" ou "c/" (insensible à la casse)
    - OU variations_count >= 2 et le titre suggère plusieurs articles
    """
    lowered = (title or "").lower()

    if any(keyword in lowered for keyword in KIT_KEYWORDS):
        return True

    if variations_count is not None and variations_count >= 2:
        return any(keyword in lowered for keyword in MULTI_ITEM_KEYWORDS)

    return False


def _build_metrics(metrics: Optional[MetricsWindow]) -> Optional[SignalMetrics]:
    if metrics is None:
        return None
    return SignalMetrics(
        visits=metrics.visits,
        orders=metrics.orders,
        revenue=metrics.revenue,
        conversion_rate=metrics.conversion_rate,
    )


def _build_benchmark(benchmark: Optional[CategoryBenchmark]) -> Optional[SignalBenchmark]:
    if benchmark is None:
        return None
    return SignalBenchmark(
        median_price=benchmark.median_price,
        p25_price=benchmark.p25_price,
        p75_price=benchmark.p75_price,
        baseline_conversion_rate=benchmark.baseline_conversion_rate,
        baseline_conversion_confidence=benchmark.baseline_conversion_confidence,
        baseline_sample_size=benchmark.baseline_sample_size,
    )


def build_signals(
    listing: ListingRecord,
    pricing: Optional[PricingInput] = None,
    shipping: Optional[ShippingInput] = None,
    metrics_30d: Optional[MetricsWindow] = None,
    benchmark: Optional[CategoryBenchmark] = None,
    category_path: Optional[Sequence[str]] = None,
) -> Signals:
    """
    Construit les signaux déterministes d'un anúncio.

    Args:
        listing: Enregistrement de l'anúncio
        pricing: État prix/promotion (sinon colonnes de l'anúncio)
        shipping: Mode d'envoi et éligibilité Full
        metrics_30d: Métriques agrégées sur 30 jours
        benchmark: Distribution de prix et baseline de la catégorie
        category_path: Breadcrumb textuel (jamais déduit de l'id de catégorie)

    Returns:
        Signals immuable.
    """
    if pricing is not None:
        original_price = pricing.original_price if pricing.original_price is not None else listing.original_price
        promotional_price = pricing.promotional_price
        has_promotion = pricing.has_promotion
        discount_percent = (
            pricing.discount_percent if pricing.discount_percent is not None else listing.discount_percent
        )
    else:
        original_price = listing.original_price
        promotional_price = None
        has_promotion = bool(listing.has_promotion)
        discount_percent = listing.discount_percent

    variations_count = listing.variations_count or 0
    clip_status = ClipStatus.from_flag(listing.has_clips)

    if listing.has_video is not None and listing.has_clips is not None and listing.has_video != listing.has_clips:
        logger.debug(
            "Legacy has_video=%s diverges from has_clips=%s on %s, clip status wins",
            listing.has_video, listing.has_clips, listing.id,
        )

    if get_settings().debug.log_signals:
        logger.info(
            "Signals clip tri-state for %s (%s): raw=%r status=%s",
            listing.id, listing.listing_id_ext, listing.has_clips, clip_status.value,
            extra={"listing_id": listing.id},
        )

    return Signals(
        listing_id=listing.id,
        listing_id_ext=listing.listing_id_ext,
        title=listing.title or "",
        status=ListingStatus.from_raw(listing.status),
        category_id=listing.category or None,
        category_path=tuple(category_path) if category_path else None,
        is_catalog=bool(listing.is_catalog),
        price=float(listing.price),
        original_price=original_price,
        promotional_price=promotional_price,
        has_promotion=has_promotion,
        discount_percent=discount_percent,
        available_quantity=listing.stock,
        is_out_of_stock=(listing.stock or 0) <= 0,
        shipping_mode=ShippingMode.parse(shipping.mode if shipping else None),
        is_free_shipping=bool(shipping and shipping.free_shipping),
        is_full_eligible=shipping.full_eligible if shipping else None,
        pictures_count=listing.pictures_count or 0,
        has_video=bool(listing.has_video),
        clip_status=clip_status,
        variations_count=variations_count,
        has_variations=variations_count > 0,
        is_kit_heuristic=is_kit_heuristic(listing.title, variations_count),
        metrics_30d=_build_metrics(metrics_30d),
        benchmark=_build_benchmark(benchmark),
    )
