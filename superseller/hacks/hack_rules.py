"""
Règles du moteur de hacks - une règle = {id, evaluate, build}.

PHILOSOPHIE:
- Chaque règle est un descripteur indépendant, testable isolément
- Score additif/soustractif puis borné à [0, 100]
- Gate "omit": jamais suggéré; gate "blocking": suggéré mais plafonné
- Aucune règle n'affirme la présence/absence d'un clip

UNITÉS:
Taux de conversion en FRACTION (0.02 == 2%), affiché ×100 dans les preuves.
Conversion inconnue → aucun bonus "conversion basse".
"""

import logging
import re
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional, Tuple

from ..data.config import get_settings
from ..signals.signals_builder import ShippingMode, Signals
from .hack_models import ConfidenceLevel, HackId, HackSuggestion, RuleOutcome

logger = logging.getLogger(__name__)


# =============================================================================
# CONTEXTE & OUTILS
# =============================================================================

@dataclass(frozen=True)
class HackContext:
    """Données de présentation partagées par toutes les règles."""
    edit_url: Optional[str] = None
    category_permalink: Optional[str] = None
    high_confidence_min: int = 70
    medium_confidence_min: int = 40

    def confidence_level(self, score: int) -> ConfidenceLevel:
        if score >= self.high_confidence_min:
            return ConfidenceLevel.HIGH
        if score >= self.medium_confidence_min:
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.LOW


@dataclass(frozen=True)
class HackRule:
    id: HackId
    evaluate: Callable[[Signals], RuleOutcome]
    build: Callable[[Signals, RuleOutcome, HackContext], HackSuggestion]


def _clamp(score: int) -> int:
    return max(0, min(100, score))


def _visits(signals: Signals) -> int:
    m = signals.metrics_30d
    return (m.visits or 0) if m else 0


def _orders(signals: Signals) -> int:
    m = signals.metrics_30d
    return (m.orders or 0) if m else 0


def _conversion(signals: Signals) -> Optional[float]:
    m = signals.metrics_30d
    return m.conversion_rate if m else None


def _conversion_below(signals: Signals, threshold: float) -> bool:
    rate = _conversion(signals)
    return rate is not None and rate < threshold


def _fmt_rate(rate: Optional[float]) -> str:
    return f"{rate * 100:.2f}%" if rate is not None else "N/A"


def normalize_mlb_id(listing_id_ext: Optional[str]) -> Optional[str]:
    """Extrait l'identifiant numérique MLB (plus longue suite de chiffres)."""
    if not listing_id_ext or not listing_id_ext.strip():
        return None
    cleaned = listing_id_ext.strip().replace("-", "")
    candidates = re.findall(r"\d{6,}", cleaned) or re.findall(r"\d+", cleaned)
    if not candidates:
        return None
    return max(candidates, key=len)


def build_edit_url(listing_id_ext: Optional[str]) -> Optional[str]:
    mlb_digits = normalize_mlb_id(listing_id_ext)
    if mlb_digits is None:
        return None
    template = get_settings().marketplace.edit_url_template
    return template.format(mlb_id=f"MLB{mlb_digits}")


def _base_evidence(signals: Signals) -> Tuple[str, str]:
    return (
        f"Visitas (30d): {_visits(signals)}",
        f"Taxa de conversão: {_fmt_rate(_conversion(signals))}",
    )


# =============================================================================
# HACK 1: ml_full_shipping
# =============================================================================

FULL_SHIPPING_CAP = 35


def evaluate_full_shipping(signals: Signals) -> RuleOutcome:
    """
    FRETE GRÁTIS FULL.

    GATES:
    - mode full → omit
    - mode inconnu et éligibilité non confirmée → omit
    - éligibilité refusée ou non renseignée → blocking, plafond 35
    - mode inconnu mais éligible → plafond 35

    POINTS: +25 visites ≥300, +20 CR <2%, +15 me2/inconnu, +10 sans frete
    grátis, +10 stock ≥5 ou inconnu; -20 visites <100, -15 rupture,
    -10 prix <30.
    """
    mode = signals.shipping_mode
    if mode is ShippingMode.FULL:
        return RuleOutcome(omit=True, debug={"reason": "already full"})
    if mode is ShippingMode.UNKNOWN and signals.is_full_eligible is not True:
        return RuleOutcome(omit=True, debug={"reason": "unknown mode, eligibility not confirmed"})

    qty = signals.available_quantity
    score = 0
    if _visits(signals) >= 300:
        score += 25
    if _conversion_below(signals, 0.02):
        score += 20
    if mode in (ShippingMode.ME2, ShippingMode.UNKNOWN):
        score += 15
    if not signals.is_free_shipping:
        score += 10
    if qty is None or qty >= 5:
        score += 10

    if _visits(signals) < 100:
        score -= 20
    if signals.is_out_of_stock or (qty or 0) == 0:
        score -= 15
    if signals.price < 30:
        score -= 10

    blocking = signals.is_full_eligible is not True
    if blocking or mode is ShippingMode.UNKNOWN:
        score = min(score, FULL_SHIPPING_CAP)

    return RuleOutcome(score=_clamp(score), blocking=blocking)


def build_full_shipping(signals: Signals, outcome: RuleOutcome, ctx: HackContext) -> HackSuggestion:
    return HackSuggestion(
        id=HackId.FULL_SHIPPING,
        title="Ativar Frete Grátis Full",
        summary="Ativar frete grátis Full pode aumentar significativamente a visibilidade e conversão do anúncio.",
        why=(
            "Frete grátis é um dos principais fatores de decisão de compra no Mercado Livre",
            "Anúncios com frete grátis aparecem em destaque nas buscas",
            "Aumenta a taxa de conversão e reduz o abandono de carrinho",
        ),
        impact="high",
        confidence=outcome.score,
        confidence_level=ctx.confidence_level(outcome.score),
        evidence=(f"Modo de envio atual: {signals.shipping_mode.value}",) + _base_evidence(signals),
        suggested_action_url=ctx.edit_url,
    )


# =============================================================================
# HACK 2: ml_bundle_kit
# =============================================================================

def evaluate_bundle_kit(signals: Signals) -> RuleOutcome:
    """
    KIT / COMBO.

    GATE: déjà un kit (heuristique) → omit.

    POINTS: +25 visites ≥200, +20 CR <1.5%, +15 prix ≤120, +10 stock ≥10,
    +10 variations ≥2, +10 remise ≥20%; -20 stock ≤2, -15 commandes ≥15 et
    CR ≥3%, -10 catalogue.
    """
    if signals.is_kit_heuristic:
        return RuleOutcome(omit=True, debug={"reason": "already a kit"})

    qty = signals.available_quantity or 0
    rate = _conversion(signals)
    score = 0
    if _visits(signals) >= 200:
        score += 25
    if _conversion_below(signals, 0.015):
        score += 20
    if signals.price <= 120:
        score += 15
    if qty >= 10:
        score += 10
    if signals.variations_count >= 2:
        score += 10
    if (signals.discount_percent or 0) >= 20:
        score += 10

    if qty <= 2:
        score -= 20
    if _orders(signals) >= 15 and rate is not None and rate >= 0.03:
        score -= 15
    if signals.is_catalog:
        score -= 10

    return RuleOutcome(score=_clamp(score))


def build_bundle_kit(signals: Signals, outcome: RuleOutcome, ctx: HackContext) -> HackSuggestion:
    return HackSuggestion(
        id=HackId.BUNDLE_KIT,
        title="Criar Kit/Combo",
        summary="Criar um kit ou combo pode aumentar o ticket médio e diferenciar o anúncio da concorrência.",
        why=(
            "Kits aumentam o valor médio do pedido",
            "Reduzem custos de frete por item",
            "Melhoram a percepção de valor pelo cliente",
        ),
        impact="high" if outcome.score >= 70 else "medium",
        confidence=outcome.score,
        confidence_level=ctx.confidence_level(outcome.score),
        evidence=_base_evidence(signals) + (f"Preço atual: R$ {signals.price:.2f}",),
        suggested_action_url=ctx.edit_url,
    )


# =============================================================================
# HACK 3: ml_smart_variations
# =============================================================================

def evaluate_smart_variations(signals: Signals) -> RuleOutcome:
    """
    VARIATIONS INTELLIGENTES.

    Aucun gate: toujours évaluable.

    POINTS: +25 visites ≥200, +20 CR <2%, +15 sans variations, +10 photos ≥6,
    +10 catégorie, +10 stock ≥5; -20 déjà 5+ variations, -15 photos <4,
    -15 visites <80.
    """
    score = 0
    if _visits(signals) >= 200:
        score += 25
    if _conversion_below(signals, 0.02):
        score += 20
    if not signals.has_variations:
        score += 15
    if signals.pictures_count >= 6:
        score += 10
    if signals.category_id:
        score += 10
    if (signals.available_quantity or 0) >= 5:
        score += 10

    if signals.variations_count >= 5:
        score -= 20
    if signals.pictures_count < 4:
        score -= 15
    if _visits(signals) < 80:
        score -= 15

    return RuleOutcome(score=_clamp(score))


def build_smart_variations(signals: Signals, outcome: RuleOutcome, ctx: HackContext) -> HackSuggestion:
    return HackSuggestion(
        id=HackId.SMART_VARIATIONS,
        title="Adicionar Variações Inteligentes",
        summary="Adicionar variações (tamanho, cor, modelo) pode aumentar significativamente as vendas.",
        why=(
            "Variações permitem que clientes encontrem exatamente o que procuram",
            "Aumentam o número de palavras-chave relevantes",
            "Melhoram a experiência de compra",
        ),
        impact="medium",
        confidence=outcome.score,
        confidence_level=ctx.confidence_level(outcome.score),
        evidence=_base_evidence(signals) + (f"Imagens: {signals.pictures_count}",),
        suggested_action_url=ctx.edit_url,
    )


# =============================================================================
# HACK 4: ml_category_adjustment
# =============================================================================

CATEGORY_CAP = 40


def _baseline_rate(signals: Signals) -> Optional[float]:
    bench = signals.benchmark
    if bench is None or bench.baseline_conversion_rate is None or bench.baseline_conversion_rate <= 0:
        return None
    return bench.baseline_conversion_rate


def evaluate_category_adjustment(signals: Signals) -> RuleOutcome:
    """
    AJUSTE DE CATÉGORIE.

    GATE: catégorie absente → blocking, plafond 40.

    POINTS: +30 visites ≥300 sans commande, +25 CR <1% et visites ≥200,
    +15 profondeur ≤2, +10 hors catalogue, +10 prix dans p25..p75.
    Baseline (visites ≥200): ratio <0.7 → +25, ratio ≥1 → -10.
    -20 commandes ≥10, -15 visites <100.
    """
    visits = _visits(signals)
    rate = _conversion(signals)
    bench = signals.benchmark
    score = 0

    if visits >= 300 and _orders(signals) == 0:
        score += 30
    if rate is not None and rate < 0.01 and visits >= 200:
        score += 25
    if signals.category_path and len(signals.category_path) <= 2:
        score += 15
    if not signals.is_catalog:
        score += 10
    if (
        bench is not None
        and bench.p25_price is not None
        and bench.p75_price is not None
        and bench.p25_price <= signals.price <= bench.p75_price
    ):
        score += 10

    baseline = _baseline_rate(signals)
    if rate is not None and baseline is not None and visits >= 200:
        ratio = rate / baseline
        if ratio < 0.7:
            score += 25
        if ratio >= 1.0:
            score -= 10

    if _orders(signals) >= 10:
        score -= 20
    if visits < 100:
        score -= 15

    blocking = not signals.category_id
    if blocking:
        score = min(score, CATEGORY_CAP)

    return RuleOutcome(score=_clamp(score), blocking=blocking)


def build_category_adjustment(signals: Signals, outcome: RuleOutcome, ctx: HackContext) -> HackSuggestion:
    rate = _conversion(signals)
    baseline = _baseline_rate(signals)

    if signals.category_path:
        category_text = " > ".join(signals.category_path)
    elif signals.category_id:
        category_text = f"Categoria não resolvida (ID: {signals.category_id})"
    else:
        category_text = "Não definida"

    why = [
        "Categoria influencia buscas, filtros e público que encontra o anúncio",
        "Uma categoria muito genérica pode reduzir relevância e conversão",
    ]
    if baseline is not None and rate is not None:
        delta_pct = round((baseline - rate) / baseline * 100)
        if delta_pct >= 30:
            why.append(f"Sua conversão está ~{delta_pct}% abaixo do baseline da categoria")
    elif baseline is None:
        why.append("Sem baseline de conversão disponível para comparar (ação preventiva)")

    evidence = [
        f"Categoria atual: {category_text}",
        f"Visitas (30d): {_visits(signals)}",
        f"Pedidos (30d): {_orders(signals)}",
    ]
    if rate is not None:
        evidence.append(f"Conversão atual: {_fmt_rate(rate)}")
    if baseline is not None:
        evidence.append(f"Baseline (categoria): {_fmt_rate(baseline)}")

    return HackSuggestion(
        id=HackId.CATEGORY_ADJUSTMENT,
        title="Revisar Categoria (baseado em conversão)" if baseline is not None else "Verificar Categoria Específica",
        summary=(
            "A conversão do anúncio está descolada do baseline da categoria. "
            "Vale revisar se a categoria está específica e correta."
            if baseline is not None else
            "Sem benchmark suficiente para afirmar erro. "
            "Vale validar se a categoria está específica e correta."
        ),
        why=tuple(why),
        impact="medium",
        confidence=outcome.score,
        confidence_level=ctx.confidence_level(outcome.score),
        evidence=tuple(evidence),
        suggested_action_url=ctx.edit_url,
        category_id=signals.category_id,
        category_permalink=ctx.category_permalink,
    )


# =============================================================================
# HACK 5: ml_psychological_pricing
# =============================================================================

PSYCHOLOGICAL_CENTS = frozenset({89, 90, 99})
ROUND_CENTS = frozenset({0, 50})
MIN_PRICE_FOR_PSYCHOLOGICAL = 20


def effective_price(signals: Signals) -> float:
    """Prix promotionnel s'il existe et diffère du prix, sinon le prix."""
    promo = signals.promotional_price
    if promo and promo != signals.price:
        return promo
    return signals.price


def price_cents(price: float) -> int:
    """Centimes en arithmétique entière (66.90 → 90, jamais 89.99…)."""
    quantized = Decimal(str(price)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return int(quantized * 100) % 100


def evaluate_psychological_pricing(signals: Signals) -> RuleOutcome:
    """
    PREÇO PSICOLÓGICO.

    GATES: prix effectif <20 → omit; finit déjà en .89/.90/.99 → omit;
    score nul → omit.

    POINTS: +25 visites ≥300, +20 CR <2%, +15 prix rond (.00/.50),
    +15 prix ≤ médiane×1.1, +10 sans promo; -20 remise ≥30%,
    -15 commandes ≥15, -15 visites <120.
    """
    price = effective_price(signals)
    debug_enabled = get_settings().debug.psychological_pricing

    if price < MIN_PRICE_FOR_PSYCHOLOGICAL:
        outcome = RuleOutcome(omit=True, debug={"price_used": price, "reason": "price < 20"})
    else:
        cents = price_cents(price)
        if cents in PSYCHOLOGICAL_CENTS:
            outcome = RuleOutcome(
                omit=True,
                debug={"price_used": price, "cents": cents, "reason": "already psychological"},
            )
        else:
            bench = signals.benchmark
            score = 0
            if _visits(signals) >= 300:
                score += 25
            if _conversion_below(signals, 0.02):
                score += 20
            if cents in ROUND_CENTS:
                score += 15
            if bench is not None and bench.median_price is not None and signals.price <= bench.median_price * 1.1:
                score += 15
            if not signals.has_promotion:
                score += 10

            if (signals.discount_percent or 0) >= 30:
                score -= 20
            if _orders(signals) >= 15:
                score -= 15
            if _visits(signals) < 120:
                score -= 15

            score = _clamp(score)
            outcome = RuleOutcome(
                score=score,
                omit=score == 0,
                debug={"price_used": price, "cents": cents, "reason": "scored"},
            )

    if debug_enabled:
        logger.info(
            "ml_psychological_pricing %s for %s: %s",
            "SUGGESTED" if outcome.triggered else "BLOCKED", signals.listing_id, outcome.debug,
            extra={"listing_id": signals.listing_id, "hack_id": HackId.PSYCHOLOGICAL_PRICING.value},
        )
    return outcome


def build_psychological_pricing(signals: Signals, outcome: RuleOutcome, ctx: HackContext) -> HackSuggestion:
    return HackSuggestion(
        id=HackId.PSYCHOLOGICAL_PRICING,
        title="Ajustar Preço Psicológico",
        summary="Preços que terminam em .90 ou .99 são percebidos como mais atrativos pelos consumidores.",
        why=(
            "Preços psicológicos aumentam a percepção de valor",
            "Melhoram a taxa de conversão",
            "Diferenciação visual na listagem de resultados",
        ),
        impact="medium" if outcome.score >= 70 else "low",
        confidence=outcome.score,
        confidence_level=ctx.confidence_level(outcome.score),
        evidence=(f"Preço atual: R$ {effective_price(signals):.2f}",) + _base_evidence(signals),
        suggested_action_url=ctx.edit_url,
    )


# =============================================================================
# REGISTRE (ordre d'évaluation fixe)
# =============================================================================

RULES: Tuple[HackRule, ...] = (
    HackRule(HackId.FULL_SHIPPING, evaluate_full_shipping, build_full_shipping),
    HackRule(HackId.BUNDLE_KIT, evaluate_bundle_kit, build_bundle_kit),
    HackRule(HackId.SMART_VARIATIONS, evaluate_smart_variations, build_smart_variations),
    HackRule(HackId.CATEGORY_ADJUSTMENT, evaluate_category_adjustment, build_category_adjustment),
    HackRule(HackId.PSYCHOLOGICAL_PRICING, evaluate_psychological_pricing, build_psychological_pricing),
)
