"""
SuperSeller Listing Evaluation
==============================

Composes every stage for one listing snapshot:

    signals → IA score → action plan → explanations
            → benchmark → insights (critical gaps)
            → hacks

Pure: the snapshot carries now_utc, nothing is fetched, nothing is cached.
Independent snapshots can be evaluated concurrently.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..benchmark.benchmark_service import BenchmarkListing, BenchmarkResult, BenchmarkService
from ..benchmark.gap_ranker import BenchmarkInsights, normalize_benchmark_insights
from ..data.data_models import CategoryBenchmark, ListingSnapshot, MetricsWindow, PricingInput
from ..hacks.hack_engine import generate_hacks
from ..hacks.hack_models import HackEngineInput, HackEngineOutput
from ..scoring.action_engine import ActionPlanItem, generate_action_plan
from ..scoring.explanation import explain_score
from ..scoring.ia_score import IAScoreResult, IAScoreService
from ..scoring.scoring_config import DEFAULT_CONFIG, ScoringConfig
from ..signals.signals_builder import Signals, build_signals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListingEvaluation:
    """Complete, serializable result of one evaluation."""
    listing_id: str
    signals: Signals
    score: IAScoreResult
    action_plan: List[ActionPlanItem]
    explanations: List[str]
    benchmark: Optional[BenchmarkResult]
    insights: BenchmarkInsights
    hacks: HackEngineOutput

    def to_dict(self) -> Dict[str, Any]:
        return {
            "listingId": self.listing_id,
            **self.score.to_dict(),
            "actionPlan": [a.to_dict() for a in self.action_plan],
            "scoreExplanation": list(self.explanations),
            "benchmark": self.benchmark.to_dict() if self.benchmark else None,
            "benchmarkInsights": self.insights.to_dict(),
            "hacks": self.hacks.to_dict(),
        }


def _effective_metrics(snapshot: ListingSnapshot, score: IAScoreResult) -> MetricsWindow:
    """Caller-supplied 30d window, or the one aggregated by the score."""
    if snapshot.metrics_30d is not None:
        return snapshot.metrics_30d
    m = score.metrics_30d
    return MetricsWindow(
        visits=m.visits,
        orders=m.orders,
        revenue=m.revenue,
        conversion_rate=m.conversion_rate,
    )


def _effective_pricing(snapshot: ListingSnapshot) -> PricingInput:
    if snapshot.pricing is not None:
        return snapshot.pricing
    listing = snapshot.listing
    return PricingInput(
        original_price=listing.original_price,
        has_promotion=bool(listing.has_promotion),
        discount_percent=listing.discount_percent,
    )


def _merge_baseline(benchmark: Optional[CategoryBenchmark], result: Optional[BenchmarkResult]) -> Optional[CategoryBenchmark]:
    """Feed a computed baseline into the hack signals when the caller gave none."""
    if result is None or not result.summary.baseline_conversion.is_available:
        return benchmark
    baseline = result.summary.baseline_conversion
    base = benchmark or CategoryBenchmark()
    if base.baseline_conversion_rate is not None:
        return base
    return base.model_copy(update={
        "baseline_conversion_rate": baseline.conversion_rate,
        "baseline_conversion_confidence": baseline.confidence,
        "baseline_sample_size": baseline.sample_size,
    })


def evaluate_listing(snapshot: ListingSnapshot, config: Optional[ScoringConfig] = None) -> ListingEvaluation:
    """
    Evaluate one listing end to end.

    Args:
        snapshot: All inputs for the listing, including now_utc
        config: Scoring calibration (default: DEFAULT_CONFIG)

    Returns:
        ListingEvaluation bundle.
    """
    config = config or DEFAULT_CONFIG
    listing = snapshot.listing
    log_extra = {"listing_id": listing.id}

    score = IAScoreService(config).calculate_score(
        listing,
        daily_metrics=snapshot.daily_metrics,
        period_days=snapshot.period_days,
        now_utc=snapshot.now_utc,
        metrics_30d=snapshot.metrics_30d,
    )
    logger.info("Scored %s: %d/100", listing.id, score.final, extra={**log_extra, "stage": "score", "score": score.final})

    metrics = _effective_metrics(snapshot, score)
    pricing = _effective_pricing(snapshot)

    action_plan = generate_action_plan(
        score.breakdown,
        score.data_quality,
        potential_gain=score.potential_gain,
        media_info=score.media_info,
        pricing=pricing,
        metrics_30d=metrics,
        config=config,
    )
    explanations = explain_score(score.breakdown, score.data_quality, score.media_info, config)

    base_signals = build_signals(
        listing,
        pricing=snapshot.pricing,
        shipping=snapshot.shipping,
        metrics_30d=metrics,
        benchmark=snapshot.benchmark,
        category_path=snapshot.category_path,
    )
    bench_listing = BenchmarkListing.from_signals(base_signals)

    benchmark_result = None
    if snapshot.competitors:
        benchmark_result = BenchmarkService(config).build_benchmark(
            bench_listing,
            snapshot.competitors,
            snapshot.baseline_input,
            metrics,
            computed_at=snapshot.now_utc,
        )
    insights = normalize_benchmark_insights(
        benchmark_result,
        bench_listing,
        metrics,
        media_verdict=score.media_verdict,
        title_problem_hint=snapshot.title_problem_hint,
        description_diagnostic=snapshot.description_diagnostic,
        config=config,
    )
    logger.info(
        "Benchmark insights for %s: confidence=%s gaps=%d",
        listing.id, insights.confidence, len(insights.critical_gaps),
        extra={**log_extra, "stage": "benchmark", "category_id": listing.category},
    )

    merged = _merge_baseline(snapshot.benchmark, benchmark_result)
    signals = base_signals
    if merged is not snapshot.benchmark:
        signals = build_signals(
            listing,
            pricing=snapshot.pricing,
            shipping=snapshot.shipping,
            metrics_30d=metrics,
            benchmark=merged,
            category_path=snapshot.category_path,
        )

    hacks = generate_hacks(
        HackEngineInput(
            listing_id=listing.id,
            signals=signals,
            now_utc=snapshot.now_utc,
            history=tuple(snapshot.hack_history),
            listing_id_ext=listing.listing_id_ext,
            category_permalink=snapshot.category_permalink,
        ),
        config=config,
    )

    return ListingEvaluation(
        listing_id=listing.id,
        signals=signals,
        score=score,
        action_plan=action_plan,
        explanations=explanations,
        benchmark=benchmark_result,
        insights=insights,
        hacks=hacks,
    )
