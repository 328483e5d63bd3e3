"""
Challenge invitation endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.auth import get_current_user
from app.models.social import InvitationResponse
from app.services.invitation_service import invitation_service
from app.services.logger import logger

router = APIRouter(redirect_slashes=False)


@router.get("")
async def list_pending_invitations(current_user: dict = Depends(get_current_user)):
    """Pending challenge invitations addressed to the current user"""
    try:
        return await invitation_service.list_pending(current_user["id"])
    except Exception as e:
        logger.error(
            f"Failed to get invitations: {str(e)}",
            {"error": str(e), "user_id": current_user["id"]},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve invitations",
        )


@router.post("/{invitation_id}/respond")
async def respond_to_invitation(
    invitation_id: str,
    response: InvitationResponse,
    current_user: dict = Depends(get_current_user),
):
    """Accept (join the challenge) or dismiss an invitation"""
    user_id = current_user["id"]
    try:
        return await invitation_service.respond(invitation_id, user_id, response.status)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(
            f"Failed to respond to invitation {invitation_id}",
            {"error": str(e), "invitation_id": invitation_id, "user_id": user_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to respond to invitation",
        )
