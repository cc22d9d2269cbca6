from fastapi import APIRouter, Depends, Response, status
from typing import List

from core.dependencies import get_habit_service
from models.checkin import CheckIn, CheckInCreated
from models.habit import Habit, HabitCreate, HabitUpdate
from models.stats import HabitStats, HabitStreak, HabitStreakSummary
from routes.auth import get_current_user_id
from services.habits import HabitService

router = APIRouter(prefix="/habits", tags=["Habits"])


@router.post("/", response_model=Habit, status_code=status.HTTP_201_CREATED)
async def create_habit(
    habit_in: HabitCreate,
    user_id: str = Depends(get_current_user_id),
    service: HabitService = Depends(get_habit_service),
):
    return await service.create_habit(user_id, habit_in)

@router.get("/", response_model=List[Habit])
async def get_habits(user_id: str = Depends(get_current_user_id), service: HabitService = Depends(get_habit_service)):
    return await service.list_habits(user_id)

# Declared before /{habit_id} so 'stats' is not read as an id
@router.get("/stats", response_model=List[HabitStreakSummary])
async def get_habits_overview(user_id: str = Depends(get_current_user_id), service: HabitService = Depends(get_habit_service)):
    """Current and longest streak of every habit the user owns."""
    return await service.get_overview(user_id)

@router.get("/{habit_id}", response_model=Habit)
async def get_habit(habit_id: str, user_id: str = Depends(get_current_user_id), service: HabitService = Depends(get_habit_service)):
    return await service.get_habit(user_id, habit_id)

@router.put("/{habit_id}", response_model=Habit)
async def update_habit(
    habit_id: str,
    habit_update: HabitUpdate,
    user_id: str = Depends(get_current_user_id),
    service: HabitService = Depends(get_habit_service),
):
    """Only the fields present in the body are changed."""
    return await service.update_habit(user_id, habit_id, habit_update)

@router.delete("/{habit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_habit(habit_id: str, user_id: str = Depends(get_current_user_id), service: HabitService = Depends(get_habit_service)):
    """Deletes the habit and all of its check-ins."""
    await service.delete_habit(user_id, habit_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/{habit_id}/checkin", response_model=CheckInCreated, status_code=status.HTTP_201_CREATED)
async def check_in(habit_id: str, user_id: str = Depends(get_current_user_id), service: HabitService = Depends(get_habit_service)):
    """Marks the habit done for today. A second check-in on the same day is rejected."""
    created = await service.check_in(user_id, habit_id)
    return CheckInCreated(check_in=created)

@router.get("/{habit_id}/checkins", response_model=List[CheckIn])
async def get_check_ins(habit_id: str, user_id: str = Depends(get_current_user_id), service: HabitService = Depends(get_habit_service)):
    return await service.list_check_ins(user_id, habit_id)

@router.get("/{habit_id}/streak", response_model=HabitStreak)
async def get_streak(habit_id: str, user_id: str = Depends(get_current_user_id), service: HabitService = Depends(get_habit_service)):
    return await service.get_streak(user_id, habit_id)

@router.get("/{habit_id}/stats", response_model=HabitStats)
async def get_stats(habit_id: str, user_id: str = Depends(get_current_user_id), service: HabitService = Depends(get_habit_service)):
    return await service.get_stats(user_id, habit_id)
