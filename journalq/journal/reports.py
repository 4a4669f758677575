"""
Period health reports (week / month / quarter).

Filters stored journal entries and meals to the period, then combines the
health score with sleep and exercise pattern analyses. render_text_report()
produces the plain-text export.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Any

from journalq.config import (
    EXERCISE_TARGET_MINUTES,
    REPORT_PERIOD_DAYS,
    SLEEP_TARGET_HOURS,
    WEEKLY_EXERCISE_GOAL_MINUTES,
)
from journalq.journal.health_score import (
    DEFAULT_LABEL_SCORE,
    EXERCISE_INTENSITY_SCORES,
    SLEEP_QUALITY_SCORES,
    calculate_health_score,
    consistency_score,
    label_average,
    weekly_exercise_average,
)
from journalq.journal.models import (
    HabitRecord,
    HealthRecord,
    HealthScore,
    as_number,
    parse_timestamp,
)
from journalq.utils.validators import ValidationError

__all__ = [
    "ExercisePatterns",
    "PeriodReport",
    "SleepPatterns",
    "analyze_exercise_patterns",
    "analyze_sleep_patterns",
    "average_calories",
    "build_period_report",
    "consistency_score",
    "period_bounds",
    "render_text_report",
]


@dataclass(frozen=True)
class SleepPatterns:
    average: float = 0.0
    consistency: int = 0
    quality_score: int = 0
    insights: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "average": f"{self.average:.1f}",
            "consistency": self.consistency,
            "qualityScore": self.quality_score,
            "insights": list(self.insights),
        }


@dataclass(frozen=True)
class ExercisePatterns:
    weekly_average: int = 0
    most_active_day: str = "N/A"
    consistency: int = 0
    intensity_score: int = 0
    insights: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "weeklyAverage": self.weekly_average,
            "mostActiveDay": self.most_active_day,
            "consistency": self.consistency,
            "intensityScore": self.intensity_score,
            "insights": list(self.insights),
        }


@dataclass(frozen=True)
class PeriodReport:
    period: str
    start: date
    end: date
    total_entries: int
    completed_goals: int
    active_habits: int
    average_calories: int
    health_score: HealthScore
    sleep: SleepPatterns
    exercise: ExercisePatterns
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "startDate": self.start.isoformat(),
            "endDate": self.end.isoformat(),
            "overview": {
                "totalEntries": self.total_entries,
                "completedGoals": self.completed_goals,
                "activeHabits": self.active_habits,
                "avgCalories": self.average_calories,
            },
            "healthScore": self.health_score.value,
            "scoreComponents": self.health_score.components.to_dict(),
            "sleepAnalysis": self.sleep.to_dict(),
            "exerciseAnalysis": self.exercise.to_dict(),
            "generatedAt": self.generated_at.isoformat(),
        }


def _sleep_duration_insight(average: float) -> str:
    if average < 6:
        return "Critical: You're significantly under-sleeping. Aim for 7-9 hours."
    if average < 7:
        return "Warning: You're getting less than recommended sleep (7-9 hours)."
    if average > 9:
        return "Note: You might be oversleeping. Try adjusting your sleep schedule."
    return "Great! Your sleep duration is within the recommended range."


def _sleep_consistency_insight(consistency: int) -> str:
    if consistency >= 90:
        return "Excellent sleep schedule consistency! Keep it up!"
    if consistency >= 70:
        return "Good sleep consistency with minor variations."
    if consistency >= 50:
        return "Your sleep schedule shows some irregularity. Try to maintain consistent sleep times."
    return "Your sleep schedule is quite irregular. Consider setting a consistent sleep routine."


def _sleep_quality_insight(quality: int) -> str:
    if quality >= 80:
        return "You're experiencing good quality sleep overall."
    if quality >= 60:
        return "Your sleep quality is moderate. Consider factors that might be affecting your sleep."
    return (
        "Your sleep quality needs improvement. Consider factors like room temperature, "
        "noise, and pre-sleep routine."
    )


def analyze_sleep_patterns(records: Sequence[HealthRecord]) -> SleepPatterns:
    if not records:
        return SleepPatterns()

    hours = [r.sleep_hours for r in records]
    average = sum(hours) / len(hours)
    consistency = consistency_score(hours, SLEEP_TARGET_HOURS)
    quality = label_average(
        [r.sleep_quality for r in records], SLEEP_QUALITY_SCORES, DEFAULT_LABEL_SCORE
    )

    return SleepPatterns(
        average=round(average, 1),
        consistency=consistency,
        quality_score=quality,
        insights=(
            _sleep_duration_insight(average),
            _sleep_consistency_insight(consistency),
            _sleep_quality_insight(quality),
        ),
    )


def _exercise_volume_insight(weekly: int) -> str:
    if weekly >= WEEKLY_EXERCISE_GOAL_MINUTES:
        return "Excellent! Meeting or exceeding weekly exercise recommendations."
    if weekly >= 100:
        return "Good progress! Try to reach 150 minutes of exercise per week."
    if weekly > 0:
        return "You're making a start! Aim to gradually increase to 150 minutes per week."
    return "No exercise recorded. Try to incorporate some physical activity into your routine."


def _exercise_consistency_insight(consistency: int) -> str:
    if consistency >= 80:
        return "You're maintaining a very consistent exercise routine!"
    if consistency >= 60:
        return "Your exercise routine is fairly consistent. Try to maintain regular sessions."
    return "Your exercise pattern is irregular. Consider scheduling regular workout times."


def _exercise_intensity_insight(intensity: int) -> str:
    if intensity >= 80:
        return "You're maintaining good exercise intensity. Remember to include recovery periods."
    if intensity >= 60:
        return "Moderate intensity exercise is good. Consider including some high-intensity sessions."
    return "Try to gradually increase your exercise intensity for better health benefits."


def analyze_exercise_patterns(records: Sequence[HealthRecord]) -> ExercisePatterns:
    if not records:
        return ExercisePatterns()

    weekly = weekly_exercise_average(records)
    consistency = consistency_score([r.exercise_minutes for r in records], EXERCISE_TARGET_MINUTES)
    intensity = label_average(
        [r.exercise_intensity for r in records], EXERCISE_INTENSITY_SCORES, DEFAULT_LABEL_SCORE
    )

    # First record wins ties
    most_active = records[0]
    for record in records[1:]:
        if record.exercise_minutes > most_active.exercise_minutes:
            most_active = record

    return ExercisePatterns(
        weekly_average=weekly,
        most_active_day=most_active.date.date().isoformat() if most_active.date else "N/A",
        consistency=consistency,
        intensity_score=intensity,
        insights=(
            _exercise_volume_insight(weekly),
            _exercise_consistency_insight(consistency),
            _exercise_intensity_insight(intensity),
        ),
    )


def period_bounds(period: str, today: date) -> tuple[date, date]:
    """
    Inclusive (start, end) dates for a named period ending today.

    Raises:
        ValidationError: If period is not week, month or quarter
    """
    days = REPORT_PERIOD_DAYS.get(period)
    if days is None:
        raise ValidationError(
            "Invalid report period", f"Period must be one of: {', '.join(REPORT_PERIOD_DAYS)}"
        )
    return today - timedelta(days=days), today


def _in_period(value: Any, start: date, end: date) -> bool:
    parsed = parse_timestamp(value)
    return parsed is not None and start <= parsed.date() <= end


def average_calories(meals: Sequence[dict[str, Any]]) -> int:
    """Rounded mean calories per logged meal; 0 when there are none."""
    if not meals:
        return 0
    return round(sum(as_number(meal.get("calories")) for meal in meals) / len(meals))


def build_period_report(
    entries: Sequence[dict[str, Any]],
    habits: Sequence[dict[str, Any]] = (),
    goals: Sequence[dict[str, Any]] = (),
    meals: Sequence[dict[str, Any]] = (),
    period: str = "month",
    clock: Callable[[], datetime] | None = None,
) -> PeriodReport:
    """
    Build the report for one period.

    Entries and meals are filtered by calendar date, inclusive at both ends.
    Goals count as completed when their "completed" flag is truthy; habits are
    active when their streak is positive.

    Raises:
        ValidationError: If period is unknown
    """
    now = clock() if clock else datetime.now(UTC)
    start, end = period_bounds(period, now.date())

    # Stored lists are untyped JSON; non-object items are skipped
    entries = [e for e in entries if isinstance(e, dict)]
    habits = [h for h in habits if isinstance(h, dict)]
    goals = [g for g in goals if isinstance(g, dict)]
    meals = [m for m in meals if isinstance(m, dict)]

    in_period = [e for e in entries if _in_period(e.get("date") or e.get("timestamp"), start, end)]
    period_meals = [m for m in meals if _in_period(m.get("date"), start, end)]

    records = [HealthRecord.from_dict(entry) for entry in in_period]
    habit_records = [HabitRecord.from_dict(habit) for habit in habits]

    return PeriodReport(
        period=period,
        start=start,
        end=end,
        total_entries=len(in_period),
        completed_goals=sum(1 for goal in goals if goal.get("completed")),
        active_habits=sum(1 for habit in habit_records if habit.streak > 0),
        average_calories=average_calories(period_meals),
        health_score=calculate_health_score(records, habit_records),
        sleep=analyze_sleep_patterns(records),
        exercise=analyze_exercise_patterns(records),
        generated_at=now,
    )


def render_text_report(report: PeriodReport) -> str:
    """Plain-text export of a period report."""
    sleep_insights = "\n".join(f"- {line}" for line in report.sleep.insights)
    exercise_insights = "\n".join(f"- {line}" for line in report.exercise.insights)

    return (
        f"Health Report ({report.period})\n"
        f"Generated on: {report.generated_at.date().isoformat()}\n"
        "\n"
        "Overview:\n"
        f"- Total Journal Entries: {report.total_entries}\n"
        f"- Completed Goals: {report.completed_goals}\n"
        f"- Active Habits: {report.active_habits}\n"
        f"- Average Daily Calories: {report.average_calories}\n"
        "\n"
        f"Health Score: {report.health_score.value}%\n"
        "\n"
        "Sleep Analysis:\n"
        f"- Average Sleep: {report.sleep.average:.1f} hours\n"
        f"- Sleep Consistency: {report.sleep.consistency}%\n"
        f"- Sleep Quality: {report.sleep.quality_score}%\n"
        "Insights:\n"
        f"{sleep_insights}\n"
        "\n"
        "Exercise Analysis:\n"
        f"- Weekly Average: {report.exercise.weekly_average} minutes\n"
        f"- Most Active Day: {report.exercise.most_active_day}\n"
        f"- Exercise Consistency: {report.exercise.consistency}%\n"
        f"- Exercise Intensity: {report.exercise.intensity_score}%\n"
        "Insights:\n"
        f"{exercise_insights}\n"
    )
