"""
SuperSeller Hack Engine
=======================

Réduction déterministe sur la liste ordonnée des règles de hacks.

DISCIPLINE D'HISTORIQUE (avant tout scoring, identique pour les 5 règles):
- hack "confirmed" → jamais re-suggéré pour cet anúncio
- hack "dismissed" → ignoré tant que (now_utc - dismissed_at) < 30 jours

META:
rules_evaluated = rules_triggered + skipped_by_history + skipped_by_requirements

UTILISATION:
    from superseller.hacks import HackEngineInput, generate_hacks

    output = generate_hacks(HackEngineInput(listing_id, signals, now_utc, history))
    print(output.hack_ids, output.meta)
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence

from ..data.data_models import HackHistoryEntry, HackHistoryStatus
from ..scoring.scoring_config import DEFAULT_CONFIG, ScoringConfig
from .hack_models import HackEngineInput, HackEngineMeta, HackEngineOutput, HackSuggestion
from .hack_rules import RULES, HackContext, HackRule, build_edit_url

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    """Les datetimes naïfs sont lus comme UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class HistoryIndex:
    """Historique indexé une fois par appel: confirmés + dernier rejet par hack."""
    confirmed: FrozenSet[str]
    last_dismissed_at: Dict[str, datetime]

    @classmethod
    def build(cls, history: Iterable[HackHistoryEntry]) -> "HistoryIndex":
        confirmed = set()
        last_dismissed: Dict[str, datetime] = {}
        for entry in history:
            if entry.status is HackHistoryStatus.CONFIRMED:
                confirmed.add(entry.hack_id)
            elif entry.status is HackHistoryStatus.DISMISSED and entry.dismissed_at is not None:
                dismissed_at = _as_utc(entry.dismissed_at)
                previous = last_dismissed.get(entry.hack_id)
                if previous is None or dismissed_at > previous:
                    last_dismissed[entry.hack_id] = dismissed_at
        return cls(confirmed=frozenset(confirmed), last_dismissed_at=last_dismissed)

    def is_confirmed(self, hack_id: str) -> bool:
        return hack_id in self.confirmed

    def is_in_cooldown(self, hack_id: str, now_utc: datetime, cooldown: timedelta) -> bool:
        dismissed_at = self.last_dismissed_at.get(hack_id)
        if dismissed_at is None:
            return False
        return _as_utc(now_utc) - dismissed_at < cooldown

    def suppresses(self, hack_id: str, now_utc: datetime, cooldown: timedelta) -> bool:
        return self.is_confirmed(hack_id) or self.is_in_cooldown(hack_id, now_utc, cooldown)


def generate_hacks(
    engine_input: HackEngineInput,
    rules: Sequence[HackRule] = RULES,
    config: Optional[ScoringConfig] = None,
) -> HackEngineOutput:
    """
    Évalue les règles de hacks pour un anúncio.

    Args:
        engine_input: Signaux, historique et instant d'évaluation
        rules: Règles à évaluer, dans l'ordre (par défaut les 5 règles)
        config: Configuration (cooldown, seuils de confiance)

    Returns:
        HackEngineOutput avec hacks suggérés et compteurs.
    """
    cfg = (config or DEFAULT_CONFIG).hacks
    cooldown = timedelta(days=cfg.cooldown_days)
    history = HistoryIndex.build(engine_input.history)
    context = HackContext(
        edit_url=build_edit_url(engine_input.listing_id_ext or engine_input.signals.listing_id_ext),
        category_permalink=engine_input.category_permalink,
        high_confidence_min=cfg.high_confidence_min,
        medium_confidence_min=cfg.medium_confidence_min,
    )

    hacks: List[HackSuggestion] = []
    triggered = 0
    skipped_history = 0
    skipped_requirements = 0

    for rule in rules:
        if history.suppresses(rule.id.value, engine_input.now_utc, cooldown):
            skipped_history += 1
            logger.debug(
                "Hack %s skipped by history for %s", rule.id.value, engine_input.listing_id,
                extra={"listing_id": engine_input.listing_id, "hack_id": rule.id.value},
            )
            continue

        outcome = rule.evaluate(engine_input.signals)
        if not outcome.triggered:
            skipped_requirements += 1
            logger.debug(
                "Hack %s not triggered (omit=%s score=%d)", rule.id.value, outcome.omit, outcome.score,
                extra={"listing_id": engine_input.listing_id, "hack_id": rule.id.value},
            )
            continue

        triggered += 1
        hacks.append(rule.build(engine_input.signals, outcome, context))

    meta = HackEngineMeta(
        rules_evaluated=len(rules),
        rules_triggered=triggered,
        skipped_by_history=skipped_history,
        skipped_by_requirements=skipped_requirements,
    )
    logger.info(
        "Hack engine for %s: %d/%d triggered", engine_input.listing_id, triggered, len(rules),
        extra={"listing_id": engine_input.listing_id, "stage": "hacks"},
    )

    return HackEngineOutput(
        version=engine_input.version,
        listing_id=engine_input.listing_id,
        generated_at_utc=engine_input.now_utc,
        hacks=hacks,
        meta=meta,
    )
