from datetime import date as CalendarDay, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.common import PyObjectId, id_field
from core.time_utils import get_current_time


class CheckIn(BaseModel):
    """One calendar day on which a habit was done (or, for 'break' habits, avoided)."""
    id: Optional[PyObjectId] = id_field()
    habit_id: str
    user_id: str
    date: CalendarDay
    created_at: datetime = Field(default_factory=get_current_time)

    model_config = ConfigDict(populate_by_name=True)


class CheckInCreated(BaseModel):
    message: str = "Check-in successful!"
    check_in: CheckIn
