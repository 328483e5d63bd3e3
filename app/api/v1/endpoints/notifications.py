"""
In-app notification endpoints
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.auth import get_current_user
from app.models.social import Notification
from app.services.logger import logger
from app.services.notification_service import notification_service

router = APIRouter(redirect_slashes=False)


@router.get("", response_model=List[Notification])
async def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
):
    """The current user's notifications, newest first"""
    try:
        return await notification_service.list_notifications(
            current_user["id"], unread_only=unread_only, limit=limit
        )
    except Exception as e:
        logger.error(
            f"Failed to get notifications: {str(e)}",
            {"error": str(e), "user_id": current_user["id"]},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve notifications",
        )


@router.post("/read-all")
async def mark_all_notifications_read(current_user: dict = Depends(get_current_user)):
    """Mark every unread notification as read"""
    try:
        updated = await notification_service.mark_all_read(current_user["id"])
        return {"updated": updated}
    except Exception as e:
        logger.error(
            f"Failed to mark notifications read: {str(e)}",
            {"error": str(e), "user_id": current_user["id"]},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update notifications",
        )


@router.post("/{notification_id}/read", response_model=Notification)
async def mark_notification_read(
    notification_id: str, current_user: dict = Depends(get_current_user)
):
    """Mark a single notification as read"""
    try:
        return await notification_service.mark_read(notification_id, current_user["id"])
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error(
            f"Failed to mark notification {notification_id} read",
            {"error": str(e), "notification_id": notification_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update notification",
        )
