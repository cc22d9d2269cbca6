"""
Cache key builders and TTLs.

Keys are colon-delimited so a user's or a habit's entries can be removed
with a single glob pattern. Streak and stats entries carry the calendar day
they were computed for, so a cached value from yesterday is never read today.
"""

from datetime import date

USER = "user"
HABIT = "habit"
CHECKIN = "checkin"
STREAK = "streak"
STATS = "stats"
SYSTEM = "system"

# Seconds
TTL_HABITS_LIST = 300
TTL_HABIT_SINGLE = 600
TTL_STATS = 300
TTL_STREAK = 300
TTL_CHECKINS = 600
TTL_USER_PROFILE = 1800
TTL_HEALTH_CHECK = 30


def user_habits(user_id: str) -> str:
    return f"{USER}:{user_id}:habits"

def user_habits_stats(user_id: str, day: date) -> str:
    return f"{USER}:{user_id}:habits:stats:{day.isoformat()}"

def user_profile(user_id: str) -> str:
    return f"{USER}:{user_id}:profile"

def habit_details(user_id: str, habit_id: str) -> str:
    return f"{HABIT}:{habit_id}:{USER}:{user_id}"

def habit_stats(user_id: str, habit_id: str, day: date) -> str:
    return f"{STATS}:{USER}:{user_id}:{HABIT}:{habit_id}:{day.isoformat()}"

def habit_streak(user_id: str, habit_id: str, day: date) -> str:
    return f"{STREAK}:{USER}:{user_id}:{HABIT}:{habit_id}:{day.isoformat()}"

def habit_checkins(user_id: str, habit_id: str) -> str:
    return f"{CHECKIN}:{USER}:{user_id}:{HABIT}:{habit_id}"

def health_status() -> str:
    return f"{SYSTEM}:health"


# Deletion patterns

def all_user_keys(user_id: str) -> str:
    return f"*{USER}:{user_id}:*"

def all_user_habit_details(user_id: str) -> str:
    # Detail keys end with the user id, so all_user_keys does not reach them
    return f"{HABIT}:*:{USER}:{user_id}"

def all_habit_keys(user_id: str, habit_id: str) -> str:
    return f"*:{USER}:{user_id}:{HABIT}:{habit_id}*"

def user_aggregate_keys(user_id: str) -> str:
    # Matches both the habits list and the habits overview
    return f"{USER}:{user_id}:habits*"

def user_list_keys(user_id: str) -> str:
    return f"*:{USER}:{user_id}:list*"
