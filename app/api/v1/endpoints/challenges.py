"""
Challenges API endpoints
"""

import asyncio
import json
from typing import List, Literal, Optional, Dict, Any

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from app.core.auth import get_current_user, verify_token
from app.core.config import settings
from app.models.challenge import ChallengeCreate, ProgressUpdate
from app.models.leaderboard import LeaderboardResponse
from app.models.social import ChallengeInvitationCreate
from app.services.challenge_service import challenge_service
from app.services.invitation_service import invitation_service
from app.services.leaderboard import (
    LatestRequestGuard,
    StoreUnavailableError,
    leaderboard_refresher,
)
from app.services.logger import logger

router = APIRouter(redirect_slashes=False)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_challenge(
    challenge: ChallengeCreate, current_user: dict = Depends(get_current_user)
):
    """Create a challenge; the creator joins it automatically"""
    try:
        return await challenge_service.create_challenge(current_user["id"], challenge)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(
            f"Failed to create challenge: {str(e)}",
            {"error": str(e), "user_id": current_user["id"]},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create challenge",
        )


@router.get("")
async def list_challenges(
    challenge_status: Literal["active", "upcoming", "past"] = Query(
        "active", alias="status"
    ),
    current_user: dict = Depends(get_current_user),
) -> List[Dict[str, Any]]:
    """List challenges by lifecycle state"""
    try:
        return await challenge_service.list_challenges(challenge_status)
    except Exception as e:
        logger.error(
            f"Failed to list {challenge_status} challenges",
            {"error": str(e), "status": challenge_status},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve challenges",
        )


@router.get("/mine")
async def list_my_active_challenges(current_user: dict = Depends(get_current_user)):
    """Active challenges the current user participates in"""
    try:
        return await challenge_service.list_active_for_user(current_user["id"])
    except Exception as e:
        logger.error(
            f"Failed to get user's challenges: {str(e)}",
            {"error": str(e), "user_id": current_user["id"]},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve challenges",
        )


@router.websocket("/leaderboard/ws")
async def leaderboard_stream(websocket: WebSocket, token: str = Query(...)):
    """
    Push standings for whichever challenge the client currently selects.

    The client sends ``{"challenge_id": ...}`` to switch selection. Results
    computed for a selection the client has already moved away from are
    dropped instead of being sent.
    """
    payload = verify_token(token)
    if not payload or not payload.get("sub"):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    viewer_id = payload["sub"]
    guard = LatestRequestGuard()
    pending = set()

    async def push(challenge_id: str, ticket: int) -> None:
        try:
            standings = await leaderboard_refresher.get_standings(challenge_id, viewer_id)
            message = standings.model_dump(mode="json")
        except StoreUnavailableError:
            message = {"challenge_id": challenge_id, "error": "Failed to load leaderboard"}
        except Exception as e:
            logger.error(
                f"Failed to stream leaderboard for challenge {challenge_id}",
                {"error": str(e), "challenge_id": challenge_id, "user_id": viewer_id},
            )
            message = {"challenge_id": challenge_id, "error": "Failed to load leaderboard"}

        if not guard.is_current(ticket):
            logger.info(
                f"Dropping leaderboard for deselected challenge {challenge_id}",
                {"challenge_id": challenge_id, "user_id": viewer_id},
            )
            return
        await websocket.send_json(message)

    await websocket.accept()
    try:
        while True:
            try:
                message = json.loads(await websocket.receive_text())
            except ValueError:
                await websocket.send_json({"error": "Message must be JSON"})
                continue
            challenge_id = message.get("challenge_id") if isinstance(message, dict) else None
            if not challenge_id:
                await websocket.send_json({"error": "challenge_id is required"})
                continue

            ticket = guard.begin(challenge_id)
            task = asyncio.create_task(push(challenge_id, ticket))
            pending.add(task)
            task.add_done_callback(pending.discard)
    except WebSocketDisconnect:
        logger.info(
            "Leaderboard stream closed", {"user_id": viewer_id, "pending": len(pending)}
        )
    finally:
        for task in list(pending):
            task.cancel()


@router.post("/{challenge_id}/join", status_code=status.HTTP_201_CREATED)
async def join_challenge(
    challenge_id: str, current_user: dict = Depends(get_current_user)
):
    """Join a challenge"""
    user_id = current_user["id"]
    try:
        return await challenge_service.join_challenge(challenge_id, user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(
            f"Failed to join challenge {challenge_id} for user {user_id}",
            {"error": str(e), "challenge_id": challenge_id, "user_id": user_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to join challenge",
        )


@router.put("/{challenge_id}/progress")
async def update_challenge_progress(
    challenge_id: str,
    update: ProgressUpdate,
    current_user: dict = Depends(get_current_user),
):
    """Set the current user's progress percentage"""
    user_id = current_user["id"]
    try:
        return await challenge_service.update_progress(
            challenge_id, user_id, update.progress
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(
            f"Failed to update progress for challenge {challenge_id}",
            {"error": str(e), "challenge_id": challenge_id, "user_id": user_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update progress",
        )


@router.get("/{challenge_id}/participants")
async def get_challenge_participants(
    challenge_id: str, current_user: dict = Depends(get_current_user)
):
    """Participants with profile info, highest progress first"""
    try:
        return await challenge_service.list_participants(challenge_id)
    except Exception as e:
        logger.error(
            f"Failed to get participants for challenge {challenge_id}",
            {"error": str(e), "challenge_id": challenge_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve participants",
        )


@router.get("/{challenge_id}/leaderboard", response_model=LeaderboardResponse)
async def get_challenge_leaderboard(
    challenge_id: str,
    current_user: dict = Depends(get_current_user),
    limit: Optional[int] = Query(None, ge=1, le=100),
):
    """Recompute and return the volume leaderboard for a challenge"""
    try:
        return await leaderboard_refresher.get_standings(
            challenge_id,
            viewer_id=current_user["id"],
            limit=limit or int(settings.LEADERBOARD_DEFAULT_LIMIT),
        )
    except StoreUnavailableError as e:
        logger.error(
            f"Failed to get leaderboard for challenge {challenge_id}",
            {"error": str(e), "challenge_id": challenge_id},
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to load leaderboard",
        )
    except Exception as e:
        logger.error(
            f"Unexpected error building leaderboard for challenge {challenge_id}",
            {"error": str(e), "challenge_id": challenge_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load leaderboard",
        )


@router.post("/{challenge_id}/invitations", status_code=status.HTTP_201_CREATED)
async def invite_friends(
    challenge_id: str,
    invite: ChallengeInvitationCreate,
    current_user: dict = Depends(get_current_user),
):
    """Invite friends to a challenge"""
    user_id = current_user["id"]
    try:
        return await invitation_service.send_invitations(
            challenge_id, user_id, invite.receiver_ids
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(
            f"Failed to send invitations for challenge {challenge_id}",
            {"error": str(e), "challenge_id": challenge_id, "user_id": user_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send invitations",
        )
