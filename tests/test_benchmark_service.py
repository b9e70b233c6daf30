"""
Tests unitaires pour le benchmark concurrentiel.

Ces tests vérifient:
1. Les statistiques de l'échantillon (vidéo sur détectables uniquement)
2. Les paliers de la baseline de conversion
3. La confiance globale et le rapport "você ganha / você perde"

Utilisation:
    pytest tests/test_benchmark_service.py -v
"""

from datetime import datetime, timezone

from superseller.benchmark import (
    BenchmarkListing,
    BenchmarkService,
    BenchmarkStats,
    calculate_baseline_conversion,
    calculate_benchmark_stats,
)
from superseller.benchmark.benchmark_service import DEFAULT_LOSS, DEFAULT_WIN
from superseller.data import (
    BaselineMetricRow,
    CategoryBaselineInput,
    CompetitorItem,
    ConfidenceTier,
    MetricsWindow,
)
from superseller.media import ClipStatus


NOW = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)


def make_competitors(n, pictures=8, has_video=None, price=100.0, title_length=40, prefix="MLB9"):
    return [
        CompetitorItem(
            id=f"{prefix}{i:04d}",
            title="t" * title_length,
            price=price,
            pictures_count=pictures,
            has_video=has_video,
            category_id="MLB1055",
        )
        for i in range(n)
    ]


def make_baseline(listing_count, visits_total, orders_total, rows=10):
    per_row_visits = visits_total // rows
    per_row_orders = orders_total // rows
    return CategoryBaselineInput(
        category_id="MLB1055",
        listing_count=listing_count,
        metrics=[BaselineMetricRow(visits=per_row_visits, orders=per_row_orders) for _ in range(rows)],
    )


def make_listing(**overrides) -> BenchmarkListing:
    data = {
        "pictures_count": 8,
        "clip_status": ClipStatus.UNKNOWN,
        "title_length": 40,
        "price": 100.0,
        "has_promotion": False,
        "discount_percent": None,
        "listing_id": "lst-1",
        "listing_id_ext": "MLB123",
        "category_id": "MLB1055",
    }
    data.update(overrides)
    return BenchmarkListing(**data)


class TestBenchmarkStats:

    def test_empty_sample_all_zero(self):
        stats = calculate_benchmark_stats([])

        assert stats == BenchmarkStats()
        assert stats.sample_size == 0
        assert stats.percentage_with_video == 0.0

    def test_medians(self):
        competitors = make_competitors(3, pictures=4) + make_competitors(2, pictures=10, prefix="MLB8")
        stats = calculate_benchmark_stats(competitors)

        assert stats.median_pictures_count == 4
        assert stats.median_title_length == 40
        assert stats.sample_size == 5

    def test_video_only_over_detectable(self):
        competitors = [
            CompetitorItem(id="a", has_video=True),
            CompetitorItem(id="b", has_video=False),
            CompetitorItem(id="c", has_video=None),
            CompetitorItem(id="d", has_video=None),
        ]
        assert calculate_benchmark_stats(competitors).percentage_with_video == 50.0

    def test_no_detectable_video(self):
        assert calculate_benchmark_stats(make_competitors(5)).percentage_with_video == 0.0

    def test_median_price_ignores_non_positive(self):
        competitors = [
            CompetitorItem(id="a", price=0),
            CompetitorItem(id="b", price=50.0),
            CompetitorItem(id="c", price=70.0),
        ]
        assert calculate_benchmark_stats(competitors).median_price == 60.0


class TestBaselineConversion:

    def test_no_input(self):
        baseline = calculate_baseline_conversion(None)

        assert baseline.conversion_rate is None
        assert baseline.confidence is ConfidenceTier.UNAVAILABLE
        assert baseline.is_available is False

    def test_too_few_listings(self):
        baseline = calculate_baseline_conversion(make_baseline(29, 10000, 100))

        assert baseline.confidence is ConfidenceTier.UNAVAILABLE
        assert baseline.sample_size == 29

    def test_too_few_visits(self):
        baseline = calculate_baseline_conversion(make_baseline(40, 990, 10))

        assert baseline.confidence is ConfidenceTier.UNAVAILABLE
        assert baseline.total_visits == 990

    def test_medium(self):
        baseline = calculate_baseline_conversion(make_baseline(30, 1000, 10))

        assert baseline.confidence is ConfidenceTier.MEDIUM
        assert baseline.conversion_rate == 0.01

    def test_high(self):
        baseline = calculate_baseline_conversion(make_baseline(50, 5000, 100))

        assert baseline.confidence is ConfidenceTier.HIGH
        assert baseline.conversion_rate == 0.02

    def test_many_listings_medium_visits(self):
        baseline = calculate_baseline_conversion(make_baseline(80, 2000, 20))
        assert baseline.confidence is ConfidenceTier.MEDIUM

    def test_unfilled_visits_count_as_zero(self):
        data = CategoryBaselineInput(
            category_id="MLB1055",
            listing_count=35,
            metrics=[BaselineMetricRow(visits=None, orders=3), BaselineMetricRow(visits=1200, orders=9)],
        )
        baseline = calculate_baseline_conversion(data)

        assert baseline.total_visits == 1200
        assert baseline.conversion_rate == 0.01


class TestBuildBenchmark:

    def setup_method(self):
        self.service = BenchmarkService()

    def test_no_competitors(self):
        assert self.service.build_benchmark(make_listing(), [], None, None, NOW) is None

    def test_only_self_in_sample(self):
        own = [CompetitorItem(id="MLB123", pictures_count=5)]
        assert self.service.build_benchmark(make_listing(), own, None, None, NOW) is None

    def test_excludes_self_and_caps_sample(self):
        competitors = [CompetitorItem(id="MLB123", pictures_count=99)] + make_competitors(30)
        result = self.service.build_benchmark(make_listing(), competitors, None, None, NOW)

        assert result.summary.sample_size == 20
        assert result.summary.stats.median_pictures_count == 8
        assert result.summary.computed_at == NOW

    def test_confidence_high(self):
        result = self.service.build_benchmark(
            make_listing(), make_competitors(20), make_baseline(60, 6000, 60), None, NOW,
        )
        assert result.summary.confidence is ConfidenceTier.HIGH
        assert result.summary.notes is None

    def test_confidence_medium(self):
        result = self.service.build_benchmark(
            make_listing(), make_competitors(12), make_baseline(30, 1000, 10), None, NOW,
        )
        assert result.summary.confidence is ConfidenceTier.MEDIUM

    def test_confidence_low_without_baseline(self):
        result = self.service.build_benchmark(make_listing(), make_competitors(20), None, None, NOW)

        assert result.summary.confidence is ConfidenceTier.LOW
        assert result.summary.notes.startswith("Baseline de conversão indisponível")

    def test_to_dict(self):
        result = self.service.build_benchmark(make_listing(), make_competitors(5), None, None, NOW)
        data = result.to_dict()

        assert data["benchmarkSummary"]["sampleSize"] == 5
        assert data["benchmarkSummary"]["computedAt"] == NOW.isoformat()
        assert data["benchmarkSummary"]["baselineConversion"]["confidence"] == "unavailable"
        assert set(data) == {"benchmarkSummary", "youWinHere", "youLoseHere", "tradeoffs", "recommendations"}


class TestWinLose:

    def setup_method(self):
        self.service = BenchmarkService()
        self.stats = calculate_benchmark_stats(make_competitors(20, pictures=8, has_video=True))
        self.no_baseline = calculate_baseline_conversion(None)

    def test_fewer_pictures_is_a_loss(self):
        wins, losses, _, recs = self.service.generate_win_lose(
            make_listing(pictures_count=3), self.stats, self.no_baseline, MetricsWindow(),
        )

        assert "Você tem 3 imagens, 5 abaixo da média de 8 da categoria" in losses
        assert "Adicionar 5 imagens para alcançar a média da categoria" in recs

    def test_video_tri_state(self):
        _, present_losses, _, _ = self.service.generate_win_lose(
            make_listing(clip_status=ClipStatus.PRESENT), self.stats, self.no_baseline, MetricsWindow(),
        )
        _, absent_losses, _, _ = self.service.generate_win_lose(
            make_listing(clip_status=ClipStatus.ABSENT), self.stats, self.no_baseline, MetricsWindow(),
        )
        _, unknown_losses, _, _ = self.service.generate_win_lose(
            make_listing(clip_status=ClipStatus.UNKNOWN), self.stats, self.no_baseline, MetricsWindow(),
        )

        assert not any("vídeo" in loss for loss in present_losses)
        assert "100% dos concorrentes têm vídeo, você não" in absent_losses
        assert "100% dos concorrentes têm vídeo detectável" in unknown_losses
        assert not any("você não" in loss for loss in unknown_losses)

    def test_defaults_and_tradeoffs(self):
        stats = calculate_benchmark_stats(make_competitors(20, pictures=8))
        wins, losses, tradeoffs, _ = self.service.generate_win_lose(
            make_listing(), stats, self.no_baseline, MetricsWindow(),
        )

        assert losses == [DEFAULT_LOSS]
        assert DEFAULT_WIN not in wins
        assert tradeoffs == "Seu anúncio está competitivo em relação aos concorrentes da categoria."

    def test_no_real_win_gets_default(self):
        stats = calculate_benchmark_stats(make_competitors(20, pictures=10, title_length=60))
        wins, _, tradeoffs, _ = self.service.generate_win_lose(
            make_listing(pictures_count=2, title_length=20), stats, self.no_baseline, MetricsWindow(),
        )

        assert wins == [DEFAULT_WIN]
        assert tradeoffs.startswith("Seu anúncio está abaixo da média da categoria")

    def test_price_above_median(self):
        wins, losses, _, _ = self.service.generate_win_lose(
            make_listing(price=130.0), self.stats, self.no_baseline, MetricsWindow(),
        )
        assert "Seu preço está 30% acima da mediana da categoria (R$ 130.00 vs R$ 100.00)" in losses

    def test_price_below_median(self):
        wins, _, _, _ = self.service.generate_win_lose(
            make_listing(price=80.0), self.stats, self.no_baseline, MetricsWindow(),
        )
        assert "Seu preço está 20% abaixo da mediana da categoria" in wins

    def test_orders_below_expected(self):
        baseline = calculate_baseline_conversion(make_baseline(60, 6000, 120))
        _, losses, _, _ = self.service.generate_win_lose(
            make_listing(), self.stats, baseline, MetricsWindow(visits=500, orders=2, conversion_rate=0.004),
        )
        assert "Você está 80% abaixo do esperado em pedidos (2 vs 10 esperados)" in losses

    def test_promo_low_conversion_loss(self):
        listing = make_listing(has_promotion=True, discount_percent=47)
        _, losses, _, _ = self.service.generate_win_lose(
            listing, self.stats, self.no_baseline,
            MetricsWindow(visits=315, orders=1, conversion_rate=0.00317),
        )
        assert "Promoção forte (47% OFF) mas conversão ainda baixa (0.32%)" in losses

    def test_caps(self):
        for clip in ClipStatus:
            wins, losses, _, recs = self.service.generate_win_lose(
                make_listing(pictures_count=1, title_length=5, price=300.0, clip_status=clip,
                             has_promotion=True, discount_percent=50),
                self.stats,
                calculate_baseline_conversion(make_baseline(60, 6000, 120)),
                MetricsWindow(visits=1000, orders=1, conversion_rate=0.001),
            )
            assert len(wins) <= 4
            assert len(losses) <= 4
            assert len(recs) <= 5
