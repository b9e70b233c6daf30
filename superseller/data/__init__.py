"""
SuperSeller Data Module
=======================

Input records and runtime settings.

Components:
    - data_models: Pydantic records materialized by callers
    - config: Environment-driven settings (.env supported)
"""

from .data_models import (
    ListingStatus,
    ConfidenceTier,
    HackHistoryStatus,
    ListingRecord,
    PricingInput,
    ShippingInput,
    MetricsWindow,
    CategoryBenchmark,
    DailyMetric,
    CompetitorItem,
    BaselineMetricRow,
    CategoryBaselineInput,
    HackHistoryEntry,
    ListingSnapshot,
)
from .config import Settings, get_settings, reset_settings

__all__ = [
    "ListingStatus",
    "ConfidenceTier",
    "HackHistoryStatus",
    "ListingRecord",
    "PricingInput",
    "ShippingInput",
    "MetricsWindow",
    "CategoryBenchmark",
    "DailyMetric",
    "CompetitorItem",
    "BaselineMetricRow",
    "CategoryBaselineInput",
    "HackHistoryEntry",
    "ListingSnapshot",
    "Settings",
    "get_settings",
    "reset_settings",
]
