from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from core.time_utils import get_current_time


class RefreshTokenRecord(BaseModel):
    token: str
    user_id: str
    expires_at: datetime
    created_at: datetime = Field(default_factory=get_current_time)


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshVerification(BaseModel):
    valid: bool
    user_id: Optional[str] = None
    reason: Optional[str] = None  # 'not_found' or 'expired'
