"""
Profile endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.auth import get_current_user
from app.models.social import ProfileUpdate
from app.services.logger import logger
from app.services.profile_service import profile_service

router = APIRouter(redirect_slashes=False)


@router.get("/me")
async def get_my_profile(current_user: dict = Depends(get_current_user)):
    """Get the current user's profile, creating it on first sign-in"""
    try:
        return await profile_service.get_or_create(
            current_user["id"], email=current_user.get("email")
        )
    except Exception as e:
        logger.error(
            f"Failed to load profile: {str(e)}",
            {"error": str(e), "user_id": current_user["id"]},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load profile",
        )


@router.put("/me")
async def update_my_profile(
    profile_data: ProfileUpdate, current_user: dict = Depends(get_current_user)
):
    """Update username, full name or avatar"""
    try:
        return await profile_service.update_profile(current_user["id"], profile_data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(
            f"Failed to update profile: {str(e)}",
            {"error": str(e), "user_id": current_user["id"]},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update profile",
        )
