"""
SuperSeller Benchmark Module
============================

Comparaison concurrentielle d'un anúncio avec sa catégorie.

Components:
    - calculate_benchmark_stats / calculate_baseline_conversion
    - BenchmarkService: rapport gains/pertes
    - rank_gaps: Top 3 gaps critiques
    - normalize_benchmark_insights: insights + repli heuristique
"""

from .benchmark_service import (
    BenchmarkStats,
    BaselineConversion,
    BenchmarkListing,
    BenchmarkSummary,
    BenchmarkResult,
    BenchmarkService,
    calculate_benchmark_stats,
    calculate_baseline_conversion,
)
from .gap_ranker import (
    CriticalGap,
    BenchmarkInsights,
    rank_gaps,
    generate_fallback_gaps,
    normalize_benchmark_insights,
)

__all__ = [
    "BenchmarkStats",
    "BaselineConversion",
    "BenchmarkListing",
    "BenchmarkSummary",
    "BenchmarkResult",
    "BenchmarkService",
    "calculate_benchmark_stats",
    "calculate_baseline_conversion",
    "CriticalGap",
    "BenchmarkInsights",
    "rank_gaps",
    "generate_fallback_gaps",
    "normalize_benchmark_insights",
]
