"""
Tests unitaires pour le moteur de hacks.

Ces tests vérifient:
1. La discipline d'historique (confirmed permanent, cooldown 30 jours)
2. Les compteurs meta (evaluated = triggered + history + requirements)
3. L'ordre d'évaluation et la sérialisation

Utilisation:
    pytest tests/test_hack_engine.py -v
"""

from datetime import datetime, timedelta, timezone

from superseller.data import HackHistoryEntry, ListingRecord, MetricsWindow, ShippingInput
from superseller.hacks import HackEngineInput, HackId, HistoryIndex, RULES, generate_hacks
from superseller.signals import build_signals


NOW = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)
ALL_IDS = [h.value for h in HackId]


def make_signals(**overrides):
    data = {
        "id": "lst-1",
        "listing_id_ext": "MLB123456789",
        "title": "Fone bluetooth",
        "category": "MLB1055",
        "price": 100.0,
        "stock": 10,
        "status": "active",
        "pictures_count": 6,
    }
    data.update(overrides)
    return build_signals(
        ListingRecord(**data),
        shipping=ShippingInput(mode="me2", full_eligible=True),
        metrics_30d=MetricsWindow(visits=400, orders=4, conversion_rate=0.01),
    )


def dismissed(hack_id, days_ago, now=NOW):
    return HackHistoryEntry(hack_id=hack_id, status="dismissed", dismissed_at=now - timedelta(days=days_ago))


def confirmed(hack_id):
    return HackHistoryEntry(hack_id=hack_id, status="confirmed", confirmed_at=NOW - timedelta(days=400))


def run(history=(), signals=None, **kwargs):
    return generate_hacks(HackEngineInput(
        listing_id="lst-1",
        signals=signals or make_signals(),
        now_utc=NOW,
        history=tuple(history),
        **kwargs,
    ))


class TestAllRulesTriggered:

    def test_all_five_in_order(self):
        output = run()

        assert output.hack_ids == ALL_IDS
        assert output.meta.rules_evaluated == 5
        assert output.meta.rules_triggered == 5

    def test_scores(self):
        by_id = {h.id.value: h for h in run().hacks}

        assert by_id["ml_full_shipping"].confidence == 80
        assert by_id["ml_bundle_kit"].confidence == 70
        assert by_id["ml_smart_variations"].confidence == 90
        assert by_id["ml_category_adjustment"].confidence == 10
        assert by_id["ml_psychological_pricing"].confidence == 70

    def test_edit_url_from_signals(self):
        for hack in run().hacks:
            assert hack.suggested_action_url == (
                "https://www.mercadolivre.com.br/anuncios/MLB123456789/modificar/bomni"
            )

    def test_edit_url_override(self):
        output = run(listing_id_ext="MLB-555555555")
        assert output.hacks[0].suggested_action_url.endswith("/MLB555555555/modificar/bomni")

    def test_no_edit_url_without_external_id(self):
        output = run(signals=make_signals(listing_id_ext=None))
        assert all(h.suggested_action_url is None for h in output.hacks)


class TestHistoryDiscipline:
    """Confirmed: jamais re-suggéré. Dismissed: ignoré pendant 30 jours."""

    def test_confirmed_suppressed_forever(self):
        output = run(history=[confirmed("ml_bundle_kit")])

        assert "ml_bundle_kit" not in output.hack_ids
        assert output.meta.skipped_by_history == 1

    def test_dismissed_29_days_ago_suppressed(self):
        output = run(history=[dismissed("ml_full_shipping", 29)])
        assert "ml_full_shipping" not in output.hack_ids

    def test_dismissed_30_days_ago_eligible(self):
        output = run(history=[dismissed("ml_full_shipping", 30)])
        assert "ml_full_shipping" in output.hack_ids

    def test_cooldown_boundary_seconds(self):
        just_inside = HackHistoryEntry(
            hack_id="ml_full_shipping",
            status="dismissed",
            dismissed_at=NOW - timedelta(days=30) + timedelta(seconds=1),
        )
        assert "ml_full_shipping" not in run(history=[just_inside]).hack_ids

    def test_latest_dismissal_wins(self):
        history = [dismissed("ml_smart_variations", 90), dismissed("ml_smart_variations", 5)]
        assert "ml_smart_variations" not in run(history=history).hack_ids

    def test_dismissed_without_date_ignored(self):
        entry = HackHistoryEntry(hack_id="ml_smart_variations", status="dismissed")
        assert "ml_smart_variations" in run(history=[entry]).hack_ids

    def test_naive_datetimes_are_utc(self):
        entry = HackHistoryEntry(
            hack_id="ml_full_shipping",
            status="dismissed",
            dismissed_at=(NOW - timedelta(days=10)).replace(tzinfo=None),
        )
        assert "ml_full_shipping" not in run(history=[entry]).hack_ids

    def test_history_applies_before_scoring(self):
        """Un hack omis par ses gates mais confirmé compte dans l'historique."""
        signals = make_signals(title="Kit fones")
        output = run(history=[confirmed("ml_bundle_kit")], signals=signals)

        assert output.meta.skipped_by_history == 1
        assert output.meta.skipped_by_requirements == 0

    def test_cooldown_property(self):
        """Propriété: supprimé ⇔ (now - dismissed_at) < 30 jours."""
        for days in range(0, 60):
            output = run(history=[dismissed("ml_smart_variations", days)])
            assert ("ml_smart_variations" in output.hack_ids) is (days >= 30)

    def test_history_index(self):
        index = HistoryIndex.build([confirmed("a"), dismissed("b", 3), dismissed("b", 40)])

        assert index.is_confirmed("a") is True
        assert index.last_dismissed_at["b"] == NOW - timedelta(days=3)
        assert index.suppresses("b", NOW, timedelta(days=30)) is True
        assert index.suppresses("c", NOW, timedelta(days=30)) is False


class TestMeta:

    def test_requirements_skips(self):
        signals = make_signals(title="Kit fones", price=15.0)
        output = run(signals=signals)

        assert "ml_bundle_kit" not in output.hack_ids
        assert "ml_psychological_pricing" not in output.hack_ids
        assert output.meta.skipped_by_requirements == 2

    def test_counters_sum(self):
        """Propriété: evaluated = triggered + history + requirements."""
        histories = [
            [],
            [confirmed("ml_full_shipping")],
            [dismissed(i, 1) for i in ALL_IDS],
            [confirmed("ml_bundle_kit"), dismissed("ml_category_adjustment", 45)],
        ]
        signal_sets = [make_signals(), make_signals(title="Kit", price=10.0, category=None)]
        for history in histories:
            for signals in signal_sets:
                meta = run(history=history, signals=signals).meta
                assert meta.rules_evaluated == len(RULES)
                assert meta.rules_evaluated == (
                    meta.rules_triggered + meta.skipped_by_history + meta.skipped_by_requirements
                )

    def test_everything_dismissed(self):
        output = run(history=[dismissed(i, 1) for i in ALL_IDS])

        assert output.hacks == []
        assert output.meta.skipped_by_history == 5


class TestSerialization:

    def test_to_dict(self):
        data = run().to_dict()

        assert data["version"] == "v1"
        assert data["listingId"] == "lst-1"
        assert data["generatedAtUtc"] == NOW.isoformat()
        assert data["meta"] == {
            "rulesEvaluated": 5,
            "rulesTriggered": 5,
            "skippedBecauseOfHistory": 0,
            "skippedBecauseOfRequirements": 0,
        }
        first = data["hacks"][0]
        assert first["id"] == "ml_full_shipping"
        assert first["confidenceLevel"] == "high"
        assert "categoryId" not in first
        category = next(h for h in data["hacks"] if h["id"] == "ml_category_adjustment")
        assert category["categoryId"] == "MLB1055"

    def test_deterministic(self):
        history = [dismissed("ml_full_shipping", 12)]
        assert run(history=history).to_dict() == run(history=history).to_dict()
