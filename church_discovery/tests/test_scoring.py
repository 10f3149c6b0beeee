from __future__ import annotations

import math
import random
from datetime import datetime

import pytest

from church_discovery.journal.models import UserPreferences, VisitRecord
from church_discovery.recommendations.scoring import WEIGHTS, ScoringEngine

from .conftest import make_venue

engine = ScoringEngine()


def _visits(venue_id: str, count: int) -> list[VisitRecord]:
    return [
        VisitRecord(venue_id=venue_id, visited_at=datetime(2026, 10, day, 10, 0))
        for day in range(1, count + 1)
    ]


def test_weights_sum_to_one():
    assert math.isclose(sum(WEIGHTS.values()), 1.0, rel_tol=1e-12)
    assert set(WEIGHTS) == {"proximity", "category", "familiarity", "schedule_day", "distance_budget"}


def test_engine_rejects_bad_weights():
    with pytest.raises(ValueError):
        ScoringEngine({**WEIGHTS, "proximity": 0.5})


def test_full_breakdown():
    venue = make_venue("a", category="Baptist", schedule="Sunday 10:00 AM", distance=5.0)
    prefs = UserPreferences(
        preferred_categories={"Baptist"},
        typical_attendance_day=1,
        visited_venues={"a"},
    )
    scored = engine.score_breakdown(venue, prefs, _visits("a", 2))
    assert scored.proximity == pytest.approx(8.0)
    assert scored.category == 7.5
    assert scored.familiarity == 4.0
    assert scored.schedule_day == 6.0
    assert scored.distance_budget == 5.0
    assert scored.score == pytest.approx(0.3 * 8.0 + 0.25 * 7.5 + 0.2 * 4.0 + 0.15 * 6.0 + 0.1 * 5.0)


class TestFactors:
    def test_proximity_zero_beyond_range(self):
        scored = engine.score_breakdown(make_venue(distance=30.0), UserPreferences(), [])
        assert scored.proximity == 0.0

    def test_category_levels(self):
        venue = make_venue(category="Methodist", distance=1.0)
        assert engine.score_breakdown(venue, UserPreferences(), []).category == 5.0
        other = UserPreferences(preferred_categories={"Catholic"})
        assert engine.score_breakdown(venue, other, []).category == 2.0

    def test_familiarity_capped(self):
        prefs = UserPreferences(visited_venues={"a"})
        scored = engine.score_breakdown(make_venue("a"), prefs, _visits("a", 9))
        assert scored.familiarity == 8.0

    def test_familiarity_zero_for_history_outside_visited_set(self):
        scored = engine.score_breakdown(make_venue("a"), UserPreferences(), _visits("a", 2))
        assert scored.familiarity == 0.0

    def test_familiarity_zero_when_visited_set_and_history_disagree(self):
        prefs = UserPreferences(visited_venues={"a"})
        scored = engine.score_breakdown(make_venue("a"), prefs, _visits("other", 3))
        assert scored.familiarity == 0.0

    def test_schedule_day_levels(self):
        venue = make_venue(schedule="Saturday 5:00 PM")
        assert engine.score_breakdown(venue, UserPreferences(), []).schedule_day == 4.0
        saturday = UserPreferences(typical_attendance_day=7)
        assert engine.score_breakdown(venue, saturday, []).schedule_day == 6.0
        sunday = UserPreferences(typical_attendance_day=1)
        assert engine.score_breakdown(venue, sunday, []).schedule_day == 2.0
        wednesday = UserPreferences(typical_attendance_day=4)
        assert engine.score_breakdown(venue, wednesday, []).schedule_day == 2.0

    def test_distance_budget_boundary_is_inclusive(self):
        prefs = UserPreferences(max_preferred_distance=10.0)
        scored = engine.score_breakdown(make_venue(distance=10.0), prefs, [])
        assert scored.distance_budget == 5.0

    def test_distance_budget_decays_over_five_miles(self):
        prefs = UserPreferences(max_preferred_distance=10.0)
        assert engine.score_breakdown(make_venue(distance=12.5), prefs, []).distance_budget == pytest.approx(2.5)
        assert engine.score_breakdown(make_venue(distance=15.0), prefs, []).distance_budget == 0.0
        assert engine.score_breakdown(make_venue(distance=40.0), prefs, []).distance_budget == 0.0

    def test_unknown_distance_is_neutral(self):
        scored = engine.score_breakdown(make_venue(distance=None), UserPreferences(), [])
        assert scored.proximity == 5.0
        assert scored.distance_budget == 5.0


def test_score_bounds_over_generated_inputs():
    rng = random.Random(2026)
    categories = ["Catholic", "Baptist", "Methodist", "Anglican", ""]
    schedules = ["Sunday 10:00 AM", "Saturday 5:00 PM", "", "Daily Mass", "sun 99:99"]
    for _ in range(500):
        venue_id = str(rng.randint(0, 5))
        venue = make_venue(
            venue_id,
            category=rng.choice(categories),
            schedule=rng.choice(schedules),
            distance=rng.choice([None, 0.0, rng.uniform(0, 60)]),
        )
        prefs = UserPreferences(
            preferred_categories=set(rng.sample(categories, rng.randint(0, 3))),
            typical_attendance_day=rng.choice([None, 1, 4, 7]),
            max_preferred_distance=rng.uniform(0, 30),
            visited_venues={str(i) for i in range(rng.randint(0, 5))},
        )
        history = _visits(str(rng.randint(0, 5)), rng.randint(0, 9))
        score = engine.score(venue, prefs, history)
        assert 0.0 <= score <= 10.0
        assert not math.isnan(score)


class TestRank:
    def test_orders_by_score_and_limits(self):
        venues = [make_venue(str(i), distance=float(d)) for i, d in enumerate([20, 1, 10, 5])]
        ranked = engine.rank(venues, UserPreferences(), [], limit=3)
        assert [s.venue.id for s in ranked] == ["1", "3", "2"]
        scores = [s.score for s in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_ties_keep_input_order(self):
        venues = [make_venue(venue_id, distance=3.0) for venue_id in ["c", "a", "b", "d"]]
        ranked = engine.rank(venues, UserPreferences(), [], limit=10)
        assert [s.venue.id for s in ranked] == ["c", "a", "b", "d"]

    def test_empty_candidates(self):
        assert engine.rank([], UserPreferences(), [], limit=5) == []

    def test_does_not_mutate_inputs(self):
        venues = [make_venue("a", distance=2.0)]
        prefs = UserPreferences(preferred_categories={"Baptist"})
        before = (venues[0].model_dump(), prefs.model_dump())
        engine.rank(venues, prefs, [])
        assert (venues[0].model_dump(), prefs.model_dump()) == before
