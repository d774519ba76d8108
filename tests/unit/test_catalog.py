"""Unit tests for catalog filtering and sorting."""

from datetime import datetime, timezone

from src.planner.catalog import all_tags, filter_devices, gateway_candidates, sort_devices
from tests.factories import GatewayFactory, LightingFactory, SensorFactory, VoiceAssistantFactory


def _at(day):
    return datetime(2026, 1, day, tzinfo=timezone.utc)


class TestFilterDevices:
    def test_by_category(self):
        sensor, lamp = SensorFactory(), LightingFactory()
        assert filter_devices([sensor, lamp], category="lighting") == [lamp]

    def test_by_tag(self):
        tagged = SensorFactory(tags=["kitchen", "motion"])
        assert filter_devices([tagged, SensorFactory()], tag="kitchen") == [tagged]

    def test_search_matches_name_or_brand(self):
        aqara = SensorFactory(name="Motion P1", brand="Aqara")
        hue = LightingFactory(name="Bulb", brand="Philips")

        assert filter_devices([aqara, hue], search="aqara") == [aqara]
        assert filter_devices([aqara, hue], search=" BULB ") == [hue]


class TestSortDevices:
    def test_newest_first_missing_dates_last(self):
        old = SensorFactory(created_at=_at(1))
        new = SensorFactory(created_at=_at(5))
        undated = SensorFactory(created_at=None)
        assert sort_devices([undated, old, new]) == [new, old, undated]

    def test_naive_dates_treated_as_utc(self):
        naive = SensorFactory(created_at=datetime(2026, 1, 3))
        aware = SensorFactory(created_at=_at(2))
        assert sort_devices([aware, naive]) == [naive, aware]

    def test_by_score_then_name(self):
        a = SensorFactory(name="Beta", score=7.0)
        b = SensorFactory(name="alpha", score=7.0)
        c = SensorFactory(name="Gamma", score=9.5)
        assert sort_devices([a, b, c], "score") == [c, b, a]

    def test_by_price(self):
        cheap = SensorFactory(price=5.0)
        pricey = SensorFactory(price=50.0)
        assert sort_devices([pricey, cheap], "price") == [cheap, pricey]


def test_all_tags_distinct_and_sorted():
    devices = [SensorFactory(tags=["z", "a"]), LightingFactory(tags=["a", "m", "a"])]
    assert all_tags(devices) == ["a", "m", "z"]


def test_gateway_candidates_exclude_assistants():
    gateway = GatewayFactory()
    devices = [gateway, VoiceAssistantFactory(is_gateway=True), SensorFactory()]
    assert gateway_candidates(devices) == [gateway]
