from pydantic import BaseModel, ConfigDict, Field, EmailStr
from typing import Optional
from models.common import PyObjectId, id_field
from datetime import datetime

from core.time_utils import get_current_time

class User(BaseModel):
    id: Optional[PyObjectId] = id_field()
    email: EmailStr
    name: str
    # Null for accounts created through Google sign-in
    password_hash: Optional[str] = None
    google_id: Optional[str] = None
    created_at: datetime = Field(default_factory=get_current_time)

    model_config = ConfigDict(populate_by_name=True)

    def public(self) -> "UserPublic":
        return UserPublic(id=self.id, email=self.email, name=self.name, created_at=self.created_at)

class UserPublic(BaseModel):
    id: Optional[str] = None
    email: EmailStr
    name: str
    created_at: datetime
