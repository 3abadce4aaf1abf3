"""Adaptive plan modification: scales future weeks from recent adherence.

Looks at the last week containing a completed workout and adjusts the volume
of everything still ahead:
- Low completion (< 50% / < 75%): reduce distance and duration
- Rising heart rate with incomplete training: flag a recovery day, cap volume
- Running more than planned with near-perfect completion: small increase

Past weeks and completed workouts are never touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from core.models import Activity, PlannedWorkout
from core.repositories import ActivityStore, SettingsStore, WorkoutStore

logger = logging.getLogger(__name__)

LOW_COMPLETION = 0.50
PARTIAL_COMPLETION = 0.75
STRONG_COMPLETION = 0.90
HR_RISE_BPM = 5
DISTANCE_OVERAGE = 1.10
MAX_MULTIPLIER = 1.15
RECOVERY_CAP = 0.85


@dataclass
class WeeklyStats:
    """Completion and heart-rate summary for one plan week."""

    planned_workouts: int = 0
    completed_workouts: int = 0
    completion_rate: float = 0.0
    total_planned_distance: float = 0.0
    total_actual_distance: float = 0.0
    avg_heart_rate: Optional[float] = None
    previous_week_avg_hr: Optional[float] = None


@dataclass
class AdaptationResult:
    adjustments: list[str] = field(default_factory=list)
    volume_multiplier: float = 1.0
    add_recovery_day: bool = False

    @property
    def changes_volume(self) -> bool:
        return self.volume_multiplier != 1.0


def _average_hr(activities: list[Activity]) -> Optional[float]:
    readings = [a.avg_heart_rate for a in activities if a.avg_heart_rate is not None]
    if not readings:
        return None
    return sum(readings) / len(readings)


def _linked_activities(activities: ActivityStore, week_workouts: list[PlannedWorkout]) -> list[Activity]:
    ids = [w.activity_id for w in week_workouts if w.completed and w.activity_id is not None]
    return activities.get_many(ids)


def weekly_stats(
    week_number: int,
    workouts: WorkoutStore,
    activities: ActivityStore,
    settings: SettingsStore,
) -> WeeklyStats:
    if settings.get() is None:
        return WeeklyStats()

    week = workouts.list(week_number=week_number)
    runs = [w for w in week if not w.is_rest]
    done = [w for w in runs if w.completed]
    linked = _linked_activities(activities, week)

    previous_linked: list[Activity] = []
    if week_number > 1:
        previous_linked = _linked_activities(activities, workouts.list(week_number=week_number - 1))

    return WeeklyStats(
        planned_workouts=len(runs),
        completed_workouts=len(done),
        completion_rate=(len(done) / len(runs)) if runs else 0.0,
        total_planned_distance=sum(w.distance or 0.0 for w in week),
        total_actual_distance=sum(a.distance_km for a in linked),
        avg_heart_rate=_average_hr(linked),
        previous_week_avg_hr=_average_hr(previous_linked),
    )


def evaluate_adaptation(stats: WeeklyStats) -> AdaptationResult:
    """Apply the adjustment rules, in order, to one week's stats.

    Every rule reads the same stats; only the multiplier carries from one rule
    to the next.
    """
    result = AdaptationResult()

    if stats.planned_workouts > 0 and stats.completion_rate < LOW_COMPLETION:
        result.volume_multiplier = 0.80
        result.adjustments.append("Reduced volume by 20% due to low completion rate (<50%)")
    elif stats.planned_workouts > 0 and stats.completion_rate < PARTIAL_COMPLETION:
        result.volume_multiplier = 0.90
        result.adjustments.append("Slightly reduced volume by 10% due to completion rate (<75%)")

    if stats.avg_heart_rate is not None and stats.previous_week_avg_hr is not None:
        hr_increase = stats.avg_heart_rate - stats.previous_week_avg_hr
        if hr_increase > HR_RISE_BPM and stats.completion_rate < PARTIAL_COMPLETION:
            result.add_recovery_day = True
            result.volume_multiplier = min(result.volume_multiplier, RECOVERY_CAP)
            result.adjustments.append("Recovery day added due to elevated heart rate trend and incomplete training")

    if (
        stats.total_actual_distance > stats.total_planned_distance * DISTANCE_OVERAGE
        and stats.completion_rate >= STRONG_COMPLETION
    ):
        result.volume_multiplier = min(result.volume_multiplier * 1.05, MAX_MULTIPLIER)
        result.adjustments.append("Slight volume increase due to strong performance")

    return result


def analyze_and_adapt(
    week_number: int,
    workouts: WorkoutStore,
    activities: ActivityStore,
    settings: SettingsStore,
) -> AdaptationResult:
    stats = weekly_stats(week_number, workouts, activities, settings)
    result = evaluate_adaptation(stats)
    logger.info(
        "Week %s adaptation: completion=%.2f multiplier=%.3f recovery_day=%s",
        week_number,
        stats.completion_rate,
        result.volume_multiplier,
        result.add_recovery_day,
    )
    return result


def scale_workout(workout: PlannedWorkout, volume_multiplier: float) -> None:
    if workout.distance:
        workout.distance = round(workout.distance * volume_multiplier, 1)
    if workout.duration:
        workout.duration = int(round(workout.duration * volume_multiplier))


def apply_adaptations(workouts: list[PlannedWorkout], adaptation: AdaptationResult) -> int:
    """Scale distance and duration of the given workouts in place.

    Rest days and completed workouts are skipped. Returns how many were scaled.
    """
    scaled = 0
    for workout in workouts:
        if workout.is_rest or workout.completed:
            continue
        scale_workout(workout, adaptation.volume_multiplier)
        scaled += 1
    return scaled


def last_completed_week(workouts: WorkoutStore) -> int:
    completed = workouts.list(completed=True)
    return max((w.week_number for w in completed), default=0)


def regenerate_plan(
    workouts: WorkoutStore,
    activities: ActivityStore,
    settings: SettingsStore,
) -> Optional[AdaptationResult]:
    """Adapt every future, uncompleted run to the latest completed week.

    Multipliers are applied to the distance and duration currently stored, so
    repeated regenerations compound. Returns ``None`` when there is nothing to
    adapt (no settings, an empty plan, or no completed workout yet).
    """
    if settings.get() is None or workouts.count() == 0:
        return None

    last_week = last_completed_week(workouts)
    if last_week == 0:
        logger.debug("No completed workouts yet; plan left untouched")
        return None

    adaptation = analyze_and_adapt(last_week, workouts, activities, settings)
    if not adaptation.changes_volume:
        return adaptation

    future = [w for w in workouts.list(completed=False, exclude_rest=True) if w.week_number > last_week]
    scaled = apply_adaptations(future, adaptation)
    workouts.session.flush()
    logger.info(
        "Scaled %s future workouts after week %s by %.3f",
        scaled,
        last_week,
        adaptation.volume_multiplier,
    )
    return adaptation
