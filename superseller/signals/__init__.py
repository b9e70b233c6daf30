"""
SuperSeller Signals Module
==========================

Signaux plats et déterministes d'un anúncio.
"""

from .signals_builder import (
    Signals,
    SignalMetrics,
    SignalBenchmark,
    ShippingMode,
    build_signals,
    is_kit_heuristic,
)

__all__ = [
    "Signals",
    "SignalMetrics",
    "SignalBenchmark",
    "ShippingMode",
    "build_signals",
    "is_kit_heuristic",
]
