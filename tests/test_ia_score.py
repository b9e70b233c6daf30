"""
Tests unitaires pour le IA Score.

Ces tests vérifient:
1. Le déterminisme et les bornes (dimensions et score final)
2. La règle clip: points uniquement sur présence confirmée
3. L'agrégation des métriques (journalières vs agrégats 7j)
4. La qualité des données et les gains potentiels

Utilisation:
    pytest tests/test_ia_score.py -v
"""

from datetime import date, datetime, timedelta, timezone

from superseller.data import DailyMetric, ListingRecord, MetricsWindow
from superseller.scoring import DEFAULT_CONFIG, DIMENSIONS, IAScoreService


NOW = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)


def make_listing(**overrides) -> ListingRecord:
    data = {
        "id": "lst-1",
        "listing_id_ext": "MLB123456",
        "title": "Fone de ouvido bluetooth sem fio",
        "description": "x" * 250,
        "category": "MLB1055",
        "price": 99.9,
        "status": "active",
        "pictures_count": 8,
        "has_clips": None,
    }
    data.update(overrides)
    return ListingRecord(**data)


def daily_rows(days: int, visits=10, orders=0, ctr=None, gmv=0.0):
    return [
        DailyMetric(
            date=(NOW - timedelta(days=i)).date(),
            visits=visits,
            orders=orders,
            gmv=gmv,
            ctr=ctr,
        )
        for i in range(days)
    ]


class TestDeterminismAndBounds:
    """Le score est déterministe et borné."""

    def setup_method(self):
        self.service = IAScoreService()

    def test_same_input_same_output(self):
        listing = make_listing()
        rows = daily_rows(30, visits=20, orders=1, ctr=0.015)

        first = self.service.calculate_score(listing, rows, now_utc=NOW)
        for _ in range(20):
            result = self.service.calculate_score(listing, rows, now_utc=NOW)
            assert result.final == first.final
            assert result.breakdown == first.breakdown

    def test_dimensions_within_maxima(self):
        """Propriété: chaque dimension dans [0, max], final = somme ≤ 100."""
        maxima = DEFAULT_CONFIG.max_by_dimension()
        for pictures in (0, 2, 3, 5, 6, 12):
            for clip in (True, False, None):
                for rows in ([], daily_rows(30, visits=50, orders=2, ctr=0.05)):
                    result = self.service.calculate_score(
                        make_listing(pictures_count=pictures, has_clips=clip), rows, now_utc=NOW,
                    )
                    for name in DIMENSIONS:
                        assert 0 <= result.breakdown.get(name) <= maxima[name]
                    assert 0 <= result.final <= 100
                    assert result.final == result.breakdown.total

    def test_maximum_reachable(self):
        listing = make_listing(pictures_count=10, has_clips=True)
        rows = daily_rows(30, visits=100, orders=5, ctr=0.03)
        result = self.service.calculate_score(listing, rows, now_utc=NOW)

        assert result.breakdown.to_dict() == {
            "cadastro": 20,
            "midia": 20,
            "performance": 30,
            "seo": 20,
            "competitividade": 5,
        }
        assert result.final == 95


class TestCadastro:

    def setup_method(self):
        self.service = IAScoreService()

    def test_all_criteria(self):
        assert self.service.score_cadastro(make_listing()).score == 20

    def test_short_title_and_description(self):
        comp = self.service.score_cadastro(make_listing(title="Fone", description="curta"))

        assert comp.score == 10
        assert comp.details["checks"]["title"] is False
        assert comp.details["checks"]["description"] is False

    def test_thresholds_are_strict(self):
        """Titre de 10 caractères et description de 200: non comptés."""
        comp = self.service.score_cadastro(make_listing(title="a" * 10, description="d" * 200))
        assert comp.score == 10

    def test_inactive_without_category(self):
        comp = self.service.score_cadastro(make_listing(status="paused", category=None))
        assert comp.score == 10


class TestMidiaClipRule:
    """Le clip ne rapporte des points que sur présence confirmée."""

    def setup_method(self):
        self.service = IAScoreService()

    def test_unknown_clip_eight_pictures(self):
        result = self.service.calculate_score(make_listing(pictures_count=8, has_clips=None))

        assert result.breakdown.midia == 10
        assert result.potential_gain.midia is None
        assert result.media_verdict.can_suggest_clip is False
        assert "clip_status" in result.data_quality.missing
        assert result.data_quality.video_status_known is False

    def test_absent_clip_eight_pictures(self):
        result = self.service.calculate_score(make_listing(pictures_count=8, has_clips=False))

        assert result.breakdown.midia == 10
        assert result.potential_gain.midia == "+10 (clip)"
        assert result.media_verdict.can_suggest_clip is True
        assert result.data_quality.video_status_known is True

    def test_present_clip(self):
        result = self.service.calculate_score(make_listing(pictures_count=8, has_clips=True))

        assert result.breakdown.midia == 20
        assert result.potential_gain.midia is None

    def test_few_pictures_and_absent_clip(self):
        result = self.service.calculate_score(make_listing(pictures_count=4, has_clips=False))

        assert result.breakdown.midia == 5
        assert result.potential_gain.midia == "+5 (+10 clip)"

    def test_few_pictures_unknown_clip(self):
        result = self.service.calculate_score(make_listing(pictures_count=2, has_clips=None))

        assert result.breakdown.midia == 0
        assert result.potential_gain.midia == "+10"

    def test_potential_gain_never_mentions_clip_unless_absent(self):
        """Propriété: "clip" dans le gain ⇔ absence confirmée."""
        for pictures in range(0, 12):
            for clip in (True, False, None):
                gain = self.service.calculate_score(
                    make_listing(pictures_count=pictures, has_clips=clip),
                ).potential_gain.midia
                assert ("clip" in (gain or "")) is (clip is False)


class TestPerformanceAndSeo:

    def setup_method(self):
        self.service = IAScoreService()

    def test_conversion_thresholds(self):
        rows = daily_rows(30, visits=10, orders=0)
        # 300 visites; commandes sur un seul jour
        cases = [(0, 10), (1, 22), (3, 25), (6, 30)]
        for orders, expected in cases:
            day_rows = list(rows)
            day_rows[0] = DailyMetric(date=NOW.date(), visits=10, orders=orders)
            result = self.service.calculate_score(make_listing(), day_rows, now_utc=NOW)
            assert result.breakdown.performance == expected, orders

    def test_ctr_points(self):
        for ctr, expected in ((None, 10), (0.001, 12), (0.01, 15), (0.02, 20)):
            rows = daily_rows(1, visits=10, ctr=ctr)
            result = self.service.calculate_score(make_listing(), rows, now_utc=NOW)
            assert result.breakdown.seo == expected, ctr

    def test_competitividade_placeholder(self):
        assert self.service.calculate_score(make_listing()).breakdown.competitividade == 5


class TestMetricsAggregation:
    """Journalier vs agrégats 7 jours."""

    def setup_method(self):
        self.service = IAScoreService()

    def test_daily_sums(self):
        rows = daily_rows(30, visits=10, orders=1, gmv=50.0)
        result = self.service.calculate_score(make_listing(), rows, now_utc=NOW)

        assert result.metrics_30d.visits == 300
        assert result.metrics_30d.orders == 30
        assert result.metrics_30d.revenue == 1500.0
        assert result.metrics_30d.conversion_rate == 0.1
        assert result.data_quality.performance_source == "listing_metrics_daily"

    def test_rows_outside_window_ignored(self):
        rows = daily_rows(30, visits=10) + [DailyMetric(date=date(2025, 1, 1), visits=9999)]
        result = self.service.calculate_score(make_listing(), rows, now_utc=NOW)

        assert result.metrics_30d.visits == 300

    def test_no_window_without_now(self):
        rows = daily_rows(5, visits=10) + [DailyMetric(date=date(2025, 1, 1), visits=50)]
        result = self.service.calculate_score(make_listing(), rows)

        assert result.metrics_30d.visits == 100

    def test_fallback_to_aggregates(self):
        listing = make_listing(visits_last_7d=200, sales_last_7d=4)
        result = self.service.calculate_score(listing, [], now_utc=NOW)

        assert result.metrics_30d.visits == 200
        assert result.metrics_30d.orders == 4
        assert result.metrics_30d.revenue is None
        assert result.metrics_30d.conversion_rate == 0.02
        assert result.data_quality.performance_source == "listing_aggregates"
        assert "performance_from_aggregates" in result.data_quality.warnings

    def test_unfilled_days_fall_back(self):
        rows = [DailyMetric(date=NOW.date(), visits=None, orders=0)]
        listing = make_listing(visits_last_7d=70, sales_last_7d=0)
        result = self.service.calculate_score(listing, rows, now_utc=NOW)

        assert result.data_quality.performance_source == "listing_aggregates"
        assert result.metrics_30d.visits == 70

    def test_fallback_to_caller_window(self):
        listing = make_listing(visits_last_7d=70, sales_last_7d=0)
        window = MetricsWindow(visits=315, orders=1, revenue=89.9)
        result = self.service.calculate_score(listing, [], now_utc=NOW, metrics_30d=window)

        assert result.metrics_30d.visits == 315
        assert result.metrics_30d.orders == 1
        assert result.metrics_30d.revenue == 89.9
        assert result.metrics_30d.conversion_rate == 1 / 315
        assert result.data_quality.performance_available is True
        assert result.data_quality.performance_source == "listing_aggregates"

    def test_daily_rows_win_over_caller_window(self):
        window = MetricsWindow(visits=315, orders=1)
        result = self.service.calculate_score(make_listing(), daily_rows(30, visits=10), now_utc=NOW, metrics_30d=window)

        assert result.metrics_30d.visits == 300
        assert result.data_quality.performance_source == "listing_metrics_daily"

    def test_empty_caller_window_ignored(self):
        listing = make_listing(visits_last_7d=70, sales_last_7d=0)
        result = self.service.calculate_score(listing, [], now_utc=NOW, metrics_30d=MetricsWindow())

        assert result.metrics_30d.visits == 70

    def test_conversion_capped_when_visits_partial(self):
        rows = [
            DailyMetric(date=NOW.date(), visits=1, orders=0),
            DailyMetric(date=(NOW - timedelta(days=1)).date(), visits=None, orders=3),
        ]
        result = self.service.calculate_score(make_listing(), rows, now_utc=NOW)

        assert result.metrics_30d.orders == 3
        assert result.metrics_30d.conversion_rate == 1.0

    def test_zero_visits_conversion_none(self):
        result = self.service.calculate_score(make_listing(visits_last_7d=0, sales_last_7d=0))

        assert result.metrics_30d.conversion_rate is None
        assert result.data_quality.performance_available is False
        assert "metrics" in result.data_quality.missing


class TestDataQuality:

    def setup_method(self):
        self.service = IAScoreService()

    def test_coverage(self):
        rows = daily_rows(10, visits=10)
        dq = self.service.calculate_score(make_listing(), rows, now_utc=NOW).data_quality

        assert dq.visits_coverage.filled_days == 10
        assert dq.visits_coverage.total_days == 30
        assert "low_visits_coverage" in dq.warnings

    def test_completeness(self):
        full = self.service.calculate_score(make_listing(), daily_rows(30), now_utc=NOW)
        empty = self.service.calculate_score(make_listing(description=None, pictures_count=0))

        assert full.data_quality.completeness_score == 100
        assert empty.data_quality.completeness_score == 0
        assert "description" in empty.data_quality.missing
        assert "pictures" in empty.data_quality.missing

    def test_performance_gain_only_when_available(self):
        no_data = self.service.calculate_score(make_listing())
        with_data = self.service.calculate_score(make_listing(), daily_rows(30, visits=10), now_utc=NOW)

        assert no_data.potential_gain.performance is None
        assert with_data.potential_gain.performance == "+20"
        assert "competitividade" not in with_data.potential_gain.to_dict()

    def test_to_dict_contract(self):
        data = self.service.calculate_score(make_listing()).to_dict()

        assert set(data["score"]) == {"final", "breakdown", "potential_gain"}
        assert data["dataQuality"]["sources"]["performance"] == "listing_aggregates"
        assert data["mediaVerdict"]["canSuggestClip"] is False

    def test_explanation_trace(self):
        text = self.service.calculate_score(make_listing()).get_explanation()

        assert "=== IA SCORE ===" in text
        assert "MIDIA" in text
