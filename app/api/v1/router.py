from fastapi import APIRouter
from app.api.v1.endpoints import (
    challenges,
    friends,
    invitations,
    notifications,
    profiles,
    rpc,
    webhooks,
    workouts,
)

# Create main API router
api_router = APIRouter(
    redirect_slashes=False
)  # Disable redirects to preserve Authorization header

# Include all endpoint routers
api_router.include_router(challenges.router, prefix="/challenges", tags=["Challenges"])
api_router.include_router(
    invitations.router, prefix="/invitations", tags=["Challenge Invitations"]
)
api_router.include_router(friends.router, prefix="/friends", tags=["Friends"])
api_router.include_router(workouts.router, prefix="/workouts", tags=["Workouts"])
api_router.include_router(profiles.router, prefix="/profiles", tags=["Profiles"])
api_router.include_router(
    notifications.router, prefix="/notifications", tags=["Notifications"]
)
api_router.include_router(rpc.router, prefix="/rpc", tags=["Leaderboard Procedures"])
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
