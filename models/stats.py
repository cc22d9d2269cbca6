from datetime import date
from typing import Optional

from pydantic import BaseModel

from core.streaks import StatsResult, StreakResult


class HabitStreak(BaseModel):
    habit_id: str
    current_streak: int = 0
    longest_streak: int = 0

    @classmethod
    def from_result(cls, habit_id: str, result: StreakResult) -> "HabitStreak":
        return cls(habit_id=habit_id, current_streak=result.current_streak, longest_streak=result.longest_streak)


class HabitStreakSummary(HabitStreak):
    """Row of the per-user habits overview."""
    name: str


class HabitStats(BaseModel):
    habit_id: str
    name: str
    kind: str
    total_check_ins: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    completion_rate: float = 0.0
    first_check_in: Optional[date] = None
    last_check_in: Optional[date] = None

    @classmethod
    def from_result(cls, habit_id: str, name: str, kind: str, result: StatsResult) -> "HabitStats":
        return cls(
            habit_id=habit_id,
            name=name,
            kind=kind,
            total_check_ins=result.total_check_ins,
            current_streak=result.current_streak,
            longest_streak=result.longest_streak,
            completion_rate=result.completion_rate,
            first_check_in=result.first_check_in,
            last_check_in=result.last_check_in,
        )
