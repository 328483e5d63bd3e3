from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, model_validator


ChallengeStatus = Literal["upcoming", "active", "past"]


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class ChallengeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = Field(None, max_length=2000)
    start_date: datetime
    end_date: datetime

    @model_validator(mode="after")
    def _end_not_before_start(self) -> "ChallengeCreate":
        if _aware(self.end_date) < _aware(self.start_date):
            raise ValueError("End date must be after start date")
        return self


class Challenge(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    def status_at(self, now: datetime) -> ChallengeStatus:
        """Lifecycle state of the challenge at ``now``."""
        now = _aware(now)
        if _aware(self.start_date) > now:
            return "upcoming"
        if _aware(self.end_date) < now:
            return "past"
        return "active"

    def contains(self, moment: datetime) -> bool:
        """True when ``moment`` falls inside the challenge window."""
        moment = _aware(moment)
        return _aware(self.start_date) <= moment <= _aware(self.end_date)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Challenge":
        return cls.model_validate(row)


class ProgressUpdate(BaseModel):
    progress: int = Field(..., ge=0, le=100)
