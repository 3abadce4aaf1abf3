from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional

from core.services.plan_calendar import weeks_until_race

HALF_MARATHON_DISTANCE = 21.1
FULL_PLAN_WEEKS = 12
MIN_PLAN_WEEKS = 4


@dataclass(frozen=True)
class WorkoutTemplate:
    day_of_week: int
    type: str
    distance: Optional[float]
    description: str
    duration: Optional[int] = None


@dataclass
class PlannedWorkoutData:
    week_number: int
    day_of_week: int
    type: str
    description: str
    distance: Optional[float] = None
    duration: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)


# (day_of_week, type, distance_km, description); Monday first, long run on Sunday.
_RAW_TEMPLATES: dict[int, tuple[tuple, ...]] = {
    1: (
        (1, "easy", 4, "Easy run - conversational pace"),
        (2, "rest", None, "Rest or cross-training"),
        (3, "easy", 5, "Easy run with light strides at end"),
        (4, "rest", None, "Rest day"),
        (5, "tempo", 4, "Tempo run - comfortably hard pace"),
        (6, "rest", None, "Rest or light walk"),
        (0, "long", 8, "Long run - easy pace, build endurance"),
    ),
    2: (
        (1, "easy", 5, "Easy run - conversational pace"),
        (2, "rest", None, "Rest or cross-training"),
        (3, "interval", 5, "4x400m intervals with recovery jogs"),
        (4, "rest", None, "Rest day"),
        (5, "easy", 5, "Easy recovery run"),
        (6, "rest", None, "Rest or light walk"),
        (0, "long", 10, "Long run - steady easy pace"),
    ),
    3: (
        (1, "easy", 5, "Easy run"),
        (2, "rest", None, "Rest or cross-training"),
        (3, "tempo", 6, "Tempo run with warm-up and cool-down"),
        (4, "rest", None, "Rest day"),
        (5, "easy", 5, "Easy run"),
        (6, "rest", None, "Rest or light walk"),
        (0, "long", 11, "Long run - focus on consistent pace"),
    ),
    4: (
        (1, "recovery", 4, "Recovery week - easy run"),
        (2, "rest", None, "Rest"),
        (3, "easy", 4, "Easy run with strides"),
        (4, "rest", None, "Rest day"),
        (5, "easy", 4, "Easy run"),
        (6, "rest", None, "Rest"),
        (0, "long", 8, "Recovery long run - easy effort"),
    ),
    5: (
        (1, "easy", 6, "Easy run"),
        (2, "rest", None, "Rest or cross-training"),
        (3, "interval", 6, "5x800m intervals at 5K pace"),
        (4, "rest", None, "Rest day"),
        (5, "tempo", 6, "Tempo run"),
        (6, "rest", None, "Rest or light walk"),
        (0, "long", 13, "Long run - building distance"),
    ),
    6: (
        (1, "easy", 6, "Easy run"),
        (2, "rest", None, "Rest or cross-training"),
        (3, "tempo", 7, "Progressive tempo run"),
        (4, "rest", None, "Rest day"),
        (5, "easy", 6, "Easy run"),
        (6, "rest", None, "Rest"),
        (0, "long", 14, "Long run - practice race nutrition"),
    ),
    7: (
        (1, "easy", 6, "Easy run"),
        (2, "rest", None, "Rest or cross-training"),
        (3, "interval", 7, "6x800m intervals"),
        (4, "rest", None, "Rest day"),
        (5, "tempo", 7, "Tempo run at half-marathon effort"),
        (6, "rest", None, "Rest"),
        (0, "long", 16, "Long run - longest training run"),
    ),
    8: (
        (1, "recovery", 5, "Recovery week - easy run"),
        (2, "rest", None, "Rest"),
        (3, "easy", 5, "Easy run"),
        (4, "rest", None, "Rest day"),
        (5, "easy", 5, "Easy run"),
        (6, "rest", None, "Rest"),
        (0, "long", 10, "Recovery long run"),
    ),
    9: (
        (1, "easy", 6, "Easy run"),
        (2, "rest", None, "Rest or cross-training"),
        (3, "interval", 8, "4x1600m at goal pace"),
        (4, "rest", None, "Rest day"),
        (5, "tempo", 8, "Tempo run at race pace"),
        (6, "rest", None, "Rest"),
        (0, "long", 18, "Peak long run"),
    ),
    10: (
        (1, "easy", 6, "Easy run"),
        (2, "rest", None, "Rest or cross-training"),
        (3, "tempo", 10, "Race pace practice"),
        (4, "rest", None, "Rest day"),
        (5, "easy", 6, "Easy run"),
        (6, "rest", None, "Rest"),
        (0, "long", 19, "Last big long run"),
    ),
    11: (
        (1, "easy", 5, "Easy run - taper begins"),
        (2, "rest", None, "Rest"),
        (3, "interval", 6, "Short intervals, maintain sharpness"),
        (4, "rest", None, "Rest day"),
        (5, "tempo", 5, "Short tempo run"),
        (6, "rest", None, "Rest"),
        (0, "long", 13, "Moderate long run"),
    ),
    12: (
        (1, "easy", 4, "Easy shakeout run"),
        (2, "rest", None, "Rest"),
        (3, "easy", 3, "Short easy run with strides"),
        (4, "rest", None, "Rest - stay off feet"),
        (5, "easy", 2, "Light 15-min shakeout"),
        (6, "rest", None, "Rest - prepare gear and nutrition"),
        (0, "long", HALF_MARATHON_DISTANCE, "RACE DAY! Half Marathon"),
    ),
}

WEEKLY_TEMPLATES: dict[int, tuple[WorkoutTemplate, ...]] = {
    week: tuple(
        WorkoutTemplate(day_of_week=dow, type=kind, distance=float(km) if km is not None else None, description=text)
        for dow, kind, km, text in rows
    )
    for week, rows in _RAW_TEMPLATES.items()
}


def template_for_week(template_week: int) -> tuple[WorkoutTemplate, ...]:
    # Out-of-range requests fall back to the first base week.
    return WEEKLY_TEMPLATES.get(template_week, WEEKLY_TEMPLATES[1])


def plan_length(race_date: date, current_date: Optional[date] = None) -> int:
    """Number of plan weeks that fit before the race (race week included)."""
    remaining = weeks_until_race(race_date, current_date)
    return min(FULL_PLAN_WEEKS, max(MIN_PLAN_WEEKS, remaining + 1))


def generate_plan(
    race_date: date,
    current_date: Optional[date] = None,
    force_full_plan: bool = False,
) -> list[PlannedWorkoutData]:
    """Build the ordered workout list for a race.

    With less than twelve weeks to go the plan keeps only the *last* templates,
    so the peak and taper weeks always land right before the race. The result
    is a pure function of its inputs; callers persist it.
    """
    plan_weeks = FULL_PLAN_WEEKS if force_full_plan else plan_length(race_date, current_date)
    start_template = FULL_PLAN_WEEKS - plan_weeks + 1

    workouts: list[PlannedWorkoutData] = []
    for template_week in range(start_template, FULL_PLAN_WEEKS + 1):
        week_number = template_week - start_template + 1
        for tpl in template_for_week(template_week):
            workouts.append(
                PlannedWorkoutData(
                    week_number=week_number,
                    day_of_week=tpl.day_of_week,
                    type=tpl.type,
                    description=tpl.description,
                    distance=tpl.distance,
                    duration=tpl.duration,
                )
            )
    return workouts
