from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


InvitationStatus = Literal["pending", "accepted", "dismissed"]
FriendRequestStatus = Literal["pending", "accepted", "rejected"]


class ChallengeInvitationCreate(BaseModel):
    receiver_ids: List[str] = Field(..., min_length=1)


class InvitationResponse(BaseModel):
    status: Literal["accepted", "dismissed"]


class FriendRequestCreate(BaseModel):
    receiver_id: str


class FriendRequestResponse(BaseModel):
    status: Literal["accepted", "rejected"]


class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=1, max_length=50)
    full_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=500)

    @field_validator("username")
    @classmethod
    def _username_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("Username must not be blank")
        return value.strip() if value is not None else value


class Notification(BaseModel):
    id: str
    user_id: str
    type: str
    content: str
    related_id: Optional[str] = None
    is_read: bool = False
    created_at: Optional[datetime] = None
