"""
Friends endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.auth import get_current_user
from app.models.social import FriendRequestCreate, FriendRequestResponse
from app.services.friend_service import friend_service
from app.services.logger import logger

router = APIRouter(redirect_slashes=False)


@router.get("")
async def list_friends(current_user: dict = Depends(get_current_user)):
    """Profiles of the current user's friends"""
    try:
        return await friend_service.list_friends(current_user["id"])
    except Exception as e:
        logger.error(
            f"Failed to get friends: {str(e)}",
            {"error": str(e), "user_id": current_user["id"]},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve friends",
        )


@router.get("/search")
async def search_users(
    q: str = Query(..., min_length=1, max_length=50),
    current_user: dict = Depends(get_current_user),
):
    """Find users by username"""
    return await friend_service.search_profiles(q, current_user["id"])


@router.get("/requests")
async def list_friend_requests(current_user: dict = Depends(get_current_user)):
    """Pending friend requests addressed to the current user"""
    return await friend_service.list_pending(current_user["id"])


@router.post("/requests", status_code=status.HTTP_201_CREATED)
async def send_friend_request(
    request: FriendRequestCreate, current_user: dict = Depends(get_current_user)
):
    """Send a friend request"""
    try:
        return await friend_service.send_request(current_user["id"], request.receiver_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(
            f"Failed to send friend request: {str(e)}",
            {"error": str(e), "user_id": current_user["id"]},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send friend request",
        )


@router.post("/requests/{request_id}/respond")
async def respond_to_friend_request(
    request_id: str,
    response: FriendRequestResponse,
    current_user: dict = Depends(get_current_user),
):
    """Accept or reject a friend request"""
    try:
        return await friend_service.respond(request_id, current_user["id"], response.status)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
