import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from core.time_utils import DayLike, day_difference, is_consecutive, is_same_day, to_calendar_day, today as current_day


@dataclass(frozen=True)
class StreakResult:
    current_streak: int = 0
    longest_streak: int = 0


@dataclass(frozen=True)
class StatsResult:
    total_check_ins: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    completion_rate: float = 0.0
    first_check_in: Optional[str] = None
    last_check_in: Optional[str] = None


def _normalize(dates: Iterable[DayLike]) -> List[date]:
    return sorted(to_calendar_day(d) for d in dates)


def _current_streak(days: set, today: date) -> int:
    # No partial credit for yesterday: the streak has to include today
    if today not in days:
        return 0
    streak = 0
    cursor = today.toordinal()
    while date.fromordinal(cursor) in days:
        streak += 1
        cursor -= 1
    return streak


def _longest_streak(ordered: List[date]) -> int:
    if not ordered:
        return 0
    longest = 1
    run = 1
    for prev, curr in zip(ordered, ordered[1:]):
        if is_consecutive(prev, curr):
            run += 1
        elif not is_same_day(prev, curr):
            run = 1
        # A duplicate day leaves the run as is
        longest = max(longest, run)
    return longest


def compute_streak(dates: Iterable[DayLike], today: Optional[DayLike] = None) -> StreakResult:
    """
    Calculates the current and longest streak from a habit's check-in dates.

    Args:
        dates: Check-in days in any order (date, datetime or ISO string).
        today: Reference day for the current streak. Defaults to the
            current calendar day.

    Returns:
        StreakResult: current streak counts back from today and is 0 when
        today has no check-in; longest streak is the longest run of
        consecutive days ever recorded.
    """
    ordered = _normalize(dates)
    if not ordered:
        return StreakResult(0, 0)

    ref = to_calendar_day(today) if today is not None else current_day()
    return StreakResult(
        current_streak=_current_streak(set(ordered), ref),
        longest_streak=_longest_streak(ordered),
    )


def compute_completion_rate(dates: Iterable[DayLike], first_date: Optional[DayLike], today: Optional[DayLike] = None) -> float:
    """
    Share of days since the first check-in (inclusive) that have a check-in.

    Clamped to 1.0 and rounded half-up to two decimals. 0.0 without check-ins.
    """
    total = len(set(_normalize(dates)))
    if total == 0 or first_date is None:
        return 0.0

    ref = to_calendar_day(today) if today is not None else current_day()
    days_since_first = abs(day_difference(ref, first_date)) + 1
    rate = min(total / days_since_first, 1.0)
    return math.floor(rate * 100 + 0.5) / 100


def compute_stats(dates: Iterable[DayLike], today: Optional[DayLike] = None) -> StatsResult:
    ordered = _normalize(dates)
    if not ordered:
        return StatsResult()

    ref = to_calendar_day(today) if today is not None else current_day()
    streak = compute_streak(ordered, ref)
    return StatsResult(
        total_check_ins=len(set(ordered)),
        current_streak=streak.current_streak,
        longest_streak=streak.longest_streak,
        completion_rate=compute_completion_rate(ordered, ordered[0], ref),
        first_check_in=ordered[0].isoformat(),
        last_check_in=ordered[-1].isoformat(),
    )
