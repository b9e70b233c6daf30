"""
Data models for the hack engine.

Hacks are heuristic, rule-gated growth suggestions distinct from the
dimension-based action plan. Each carries a 0-100 confidence and is
suppressed by the listing's confirm/dismiss history.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..data.data_models import HackHistoryEntry
from ..signals.signals_builder import Signals


ENGINE_VERSION = "v1"
MARKETPLACE = "mercadolivre"


class HackId(str, Enum):
    """The five hack rules, in evaluation order."""
    FULL_SHIPPING = "ml_full_shipping"
    BUNDLE_KIT = "ml_bundle_kit"
    SMART_VARIATIONS = "ml_smart_variations"
    CATEGORY_ADJUSTMENT = "ml_category_adjustment"
    PSYCHOLOGICAL_PRICING = "ml_psychological_pricing"


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class RuleOutcome:
    """
    Result of scoring one rule.

    omit: hard gate, the hack must never be suggested.
    blocking: soft gate, the hack may be suggested but its score was capped.
    """
    score: int = 0
    omit: bool = False
    blocking: bool = False
    debug: Dict[str, Any] = field(default_factory=dict)

    @property
    def triggered(self) -> bool:
        return not self.omit and self.score > 0


@dataclass(frozen=True)
class HackSuggestion:
    """A single actionable hack."""
    id: HackId
    title: str
    summary: str
    why: Tuple[str, ...]
    impact: str
    confidence: int
    confidence_level: ConfidenceLevel
    evidence: Tuple[str, ...]
    suggested_action_url: Optional[str] = None
    category_id: Optional[str] = None
    category_permalink: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id.value,
            "title": self.title,
            "summary": self.summary,
            "why": list(self.why),
            "impact": self.impact,
            "confidence": self.confidence,
            "confidenceLevel": self.confidence_level.value,
            "evidence": list(self.evidence),
            "suggestedActionUrl": self.suggested_action_url,
        }
        if self.id is HackId.CATEGORY_ADJUSTMENT:
            data["categoryId"] = self.category_id
            data["categoryPermalink"] = self.category_permalink
        return data


@dataclass(frozen=True)
class HackEngineMeta:
    rules_evaluated: int = 0
    rules_triggered: int = 0
    skipped_by_history: int = 0
    skipped_by_requirements: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "rulesEvaluated": self.rules_evaluated,
            "rulesTriggered": self.rules_triggered,
            "skippedBecauseOfHistory": self.skipped_by_history,
            "skippedBecauseOfRequirements": self.skipped_by_requirements,
        }


@dataclass(frozen=True)
class HackEngineInput:
    """Everything the engine needs; now_utc is never read from the clock."""
    listing_id: str
    signals: Signals
    now_utc: datetime
    history: Tuple[HackHistoryEntry, ...] = ()
    listing_id_ext: Optional[str] = None
    category_permalink: Optional[str] = None
    tenant_id: Optional[str] = None
    marketplace: str = MARKETPLACE
    version: str = ENGINE_VERSION


@dataclass(frozen=True)
class HackEngineOutput:
    version: str
    listing_id: str
    generated_at_utc: datetime
    hacks: List[HackSuggestion]
    meta: HackEngineMeta

    @property
    def hack_ids(self) -> List[str]:
        return [h.id.value for h in self.hacks]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "listingId": self.listing_id,
            "generatedAtUtc": self.generated_at_utc.isoformat(),
            "hacks": [h.to_dict() for h in self.hacks],
            "meta": self.meta.to_dict(),
        }
