from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from typing import Literal, Optional
from datetime import datetime
from models.common import PyObjectId, id_field
from core.time_utils import get_current_time

HabitKind = Literal["build", "break"]

# Fields an update may touch. Anything else is never written by an update.
UPDATABLE_FIELDS = ("name", "description", "kind", "frequency")


class Habit(BaseModel):
    """
    Represents a Habit in the system.

    Kinds:
    - 'build': something the user wants to do every day.
    - 'break': something the user wants to stop, a check-in means "avoided today".

    Streaks are not stored here; they are derived from the habit's check-ins.
    """
    id: Optional[PyObjectId] = id_field()
    user_id: Optional[str] = None
    name: str = Field(..., max_length=100)
    description: str = ""
    kind: HabitKind = "build"
    frequency: str = "daily"
    created_at: datetime = Field(default_factory=get_current_time)

    model_config = ConfigDict(populate_by_name=True)


class HabitCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    kind: HabitKind = Field(default="build", validation_alias=AliasChoices("kind", "type"))
    frequency: str = Field(default="daily", min_length=1)


class HabitUpdate(BaseModel):
    """
    Partial update. A field is either present (in the request body) or absent;
    only present fields are written.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    kind: Optional[HabitKind] = Field(default=None, validation_alias=AliasChoices("kind", "type"))
    frequency: Optional[str] = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        for field in ("name", "kind", "frequency"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def changes(self) -> dict:
        """Present fields only, restricted to UPDATABLE_FIELDS."""
        changes = {field: getattr(self, field) for field in UPDATABLE_FIELDS if field in self.model_fields_set}
        if "description" in changes and changes["description"] is None:
            changes["description"] = ""
        return changes
