from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path

import pytest

from church_discovery.errors import PreferenceStoreError
from church_discovery.journal.actions import check_in, record_visit, toggle_saved, update_preferences
from church_discovery.journal.models import PreferencesUpdate, UserPreferences, UserProfile
from church_discovery.journal.store import InMemoryPreferenceStore, JsonPreferenceStore
from church_discovery.schedule.predictor import ServiceTimePredictor

from .conftest import make_venue

SUNDAY_MORNING = datetime(2026, 10, 18, 9, 45)

predictor = ServiceTimePredictor()


def test_record_visit_learns_category_without_mutating():
    profile = UserProfile()
    updated = record_visit(profile, make_venue("a", category="Anglican"), SUNDAY_MORNING)
    assert profile.history == []
    assert profile.preferences.visited_venues == set()
    assert updated.preferences.visited_venues == {"a"}
    assert updated.preferences.preferred_categories == {"Anglican"}
    assert updated.history[0].arrived_at is None
    assert updated.history[0].on_time is None


def test_check_in_records_arrival():
    venue = make_venue("a", schedule="Sunday 10:00 AM")
    updated = check_in(UserProfile(), venue, SUNDAY_MORNING, predictor)
    visit = updated.history[-1]
    assert visit.arrived_at == SUNDAY_MORNING
    assert visit.on_time is True
    assert updated.preferences.typical_attendance_day == 1
    assert "a" in updated.preferences.saved_venues
    assert "a" in updated.preferences.visited_venues


def test_check_in_late_arrival():
    venue = make_venue("a", schedule="Sunday 9:00 AM")
    assert check_in(UserProfile(), venue, SUNDAY_MORNING, predictor).history[-1].on_time is False


def test_check_in_vigil_on_saturday():
    venue = make_venue("a", category="Catholic", schedule="Sunday 8:00 AM")
    updated = check_in(UserProfile(), venue, datetime(2026, 10, 17, 16, 50), predictor)
    assert updated.history[-1].on_time is True
    assert updated.preferences.typical_attendance_day == 7


def test_check_in_without_service_that_day():
    venue = make_venue("a", schedule="Sunday 10:00 AM")
    assert check_in(UserProfile(), venue, datetime(2026, 10, 21, 19, 0), predictor).history[-1].on_time is None


def test_check_in_uses_supplied_predictor():
    class EarlyService(ServiceTimePredictor):
        def predict_next(self, venue, reference):
            return reference.replace(hour=9, minute=0)

    venue = make_venue("a", schedule="Sunday 10:00 AM")
    updated = check_in(UserProfile(), venue, SUNDAY_MORNING, EarlyService())
    assert updated.history[-1].on_time is False


def test_toggle_saved():
    profile = toggle_saved(UserProfile(), "a")
    assert profile.preferences.saved_venues == {"a"}
    assert toggle_saved(profile, "a").preferences.saved_venues == set()


def test_update_preferences_partial():
    profile = UserProfile(preferences=UserPreferences(typical_attendance_day=1, prep_time_minutes=20))
    updated = update_preferences(profile, PreferencesUpdate(max_preferred_distance=4.0))
    assert updated.preferences.max_preferred_distance == 4.0
    assert updated.preferences.prep_time_minutes == 20
    assert updated.preferences.typical_attendance_day == 1

    cleared = update_preferences(updated, PreferencesUpdate(typical_attendance_day=None))
    assert cleared.preferences.typical_attendance_day is None


class TestStores:
    def test_in_memory_defaults_and_round_trip(self):
        store = InMemoryPreferenceStore()
        assert store.load("u1") == UserProfile()
        store.update("u1", lambda p: record_visit(p, make_venue("a"), SUNDAY_MORNING))
        assert store.load("u1").preferences.visited_venues == {"a"}
        assert store.load("u2") == UserProfile()

    def test_json_store_writes_file(self, tmp_path: Path):
        store = JsonPreferenceStore(tmp_path)
        store.update("user/1", lambda p: check_in(p, make_venue("a"), SUNDAY_MORNING, predictor))
        assert (tmp_path / "user_1.json").is_file()
        reloaded = JsonPreferenceStore(tmp_path).load("user/1")
        assert reloaded.history[0].arrived_at == SUNDAY_MORNING
        assert reloaded.preferences.saved_venues == {"a"}

    def test_json_store_corrupt_file(self, tmp_path: Path):
        (tmp_path / "broken.json").write_text("{not json")
        with pytest.raises(PreferenceStoreError):
            JsonPreferenceStore(tmp_path).load("broken")

    def test_concurrent_updates_are_not_lost(self):
        store = InMemoryPreferenceStore()
        venues = [make_venue(str(i)) for i in range(20)]

        def worker(venue):
            store.update("u1", lambda p: check_in(p, venue, SUNDAY_MORNING, predictor))

        threads = [threading.Thread(target=worker, args=(v,)) for v in venues]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        profile = store.load("u1")
        assert len(profile.history) == 20
        assert profile.preferences.visited_venues == {str(i) for i in range(20)}
