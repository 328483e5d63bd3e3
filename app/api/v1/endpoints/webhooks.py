"""
Supabase Database Webhook Handler

Receives row change notifications from Supabase Database Webhooks and
refreshes the leaderboards they affect.

Events handled:
- challenge_participants INSERT/UPDATE: someone joined or updated progress
- challenge_invitations INSERT/UPDATE: invitation sent or answered
- workouts INSERT: a workout was logged outside this API

Delivery is at-least-once and may be delayed or dropped, so a refresh here
is only a freshness boost; every leaderboard view refreshes on its own.

Setup in the Supabase Dashboard:
1. Database > Webhooks > Create a new hook for each table above
2. URL: https://your-api.com/api/v1/webhooks/supabase
3. HTTP header: Authorization = the value of SUPABASE_WEBHOOK_SECRET
"""

import hmac
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Header, HTTPException
from pydantic import BaseModel, Field

from app.core.config import settings
from app.services.leaderboard import leaderboard_refresher
from app.services.leaderboard.refresh import WATCHED_EVENTS
from app.services.logger import logger

router = APIRouter(redirect_slashes=False)


class DatabaseChangeEvent(BaseModel):
    type: str  # INSERT, UPDATE or DELETE
    table: str
    schema_name: Optional[str] = Field(None, alias="schema")
    record: Optional[Dict[str, Any]] = None
    old_record: Optional[Dict[str, Any]] = None

    model_config = {"populate_by_name": True}


@router.post("/supabase")
async def supabase_webhook(
    event: DatabaseChangeEvent,
    background_tasks: BackgroundTasks,
    authorization: Optional[str] = Header(None),
):
    """
    Acknowledge a change notification and refresh affected leaderboards
    after the response is sent.
    """
    secret = settings.SUPABASE_WEBHOOK_SECRET
    if secret:
        if not authorization:
            logger.warning("Missing Authorization header")
            raise HTTPException(status_code=401, detail="Missing Authorization header")

        if not hmac.compare_digest(authorization, secret):
            logger.warning("Invalid Authorization header")
            raise HTTPException(status_code=401, detail="Unauthorized")
    else:
        logger.warning("SUPABASE_WEBHOOK_SECRET not configured, skipping auth check")

    if event.type.upper() not in WATCHED_EVENTS.get(event.table, set()):
        return {"status": "ignored", "table": event.table, "type": event.type}

    background_tasks.add_task(
        leaderboard_refresher.handle_change_event,
        {"type": event.type, "table": event.table, "record": event.record or {}},
    )
    return {"status": "accepted", "table": event.table, "type": event.type}
