"""Tests for the twelve-week plan generator."""

from __future__ import annotations

from collections import Counter
from datetime import date, timedelta

from core.services.planning import (
    FULL_PLAN_WEEKS,
    HALF_MARATHON_DISTANCE,
    WEEKLY_TEMPLATES,
    generate_plan,
    plan_length,
    template_for_week,
)

RACE = date(2026, 3, 15)


def _week(plan, week_number):
    return {w.day_of_week: w for w in plan if w.week_number == week_number}


def test_templates_cover_every_day_once():
    assert sorted(WEEKLY_TEMPLATES) == list(range(1, 13))
    for week, templates in WEEKLY_TEMPLATES.items():
        assert sorted(t.day_of_week for t in templates) == list(range(7)), week


def test_full_plan_has_84_workouts():
    plan = generate_plan(RACE, force_full_plan=True)
    assert len(plan) == 84
    assert Counter(w.week_number for w in plan) == {week: 7 for week in range(1, 13)}


def test_race_day_is_final_long_run():
    plan = generate_plan(RACE, force_full_plan=True)
    race_day = _week(plan, 12)[0]
    assert race_day.type == "long"
    assert race_day.distance == HALF_MARATHON_DISTANCE
    assert race_day.description == "RACE DAY! Half Marathon"


def test_rest_days_have_no_distance():
    plan = generate_plan(RACE, force_full_plan=True)
    rests = [w for w in plan if w.type == "rest"]
    assert len(rests) == 36
    assert all(w.distance is None for w in rests)


def test_short_lead_keeps_last_templates():
    five_weeks_out = RACE - timedelta(weeks=5)
    plan = generate_plan(RACE, current_date=five_weeks_out)
    assert max(w.week_number for w in plan) == 6
    assert len(plan) == 42

    first = _week(plan, 1)
    assert first[0].distance == 16  # template week 7 long run
    assert first[3].description == "6x800m intervals"

    last = _week(plan, 6)
    template_12 = {t.day_of_week: t for t in template_for_week(12)}
    for dow, workout in last.items():
        assert workout.type == template_12[dow].type
        assert workout.distance == template_12[dow].distance


def test_plan_never_shorter_than_four_weeks():
    assert plan_length(RACE, RACE - timedelta(weeks=1)) == 4
    assert plan_length(RACE, RACE + timedelta(weeks=3)) == 4
    plan = generate_plan(RACE, current_date=RACE)
    assert max(w.week_number for w in plan) == 4
    assert _week(plan, 1)[0].distance == 18  # template week 9


def test_plan_capped_at_twelve_weeks():
    assert plan_length(RACE, RACE - timedelta(weeks=30)) == FULL_PLAN_WEEKS


def test_force_full_plan_ignores_current_date():
    plan = generate_plan(RACE, current_date=RACE - timedelta(weeks=2), force_full_plan=True)
    assert max(w.week_number for w in plan) == 12


def test_generation_is_deterministic():
    today = RACE - timedelta(weeks=8)
    assert generate_plan(RACE, today) == generate_plan(RACE, today)


def test_unknown_template_week_falls_back_to_first():
    assert template_for_week(99) == template_for_week(1)


def test_to_dict_matches_columns():
    data = generate_plan(RACE, force_full_plan=True)[0].to_dict()
    assert set(data) == {"week_number", "day_of_week", "type", "description", "distance", "duration"}
