"""
Workout logging endpoints
"""

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status

from app.core.auth import get_current_user
from app.models.workout import WorkoutCreate, WorkoutResponse
from app.services.leaderboard import leaderboard_refresher
from app.services.logger import logger
from app.services.workout_service import workout_service

router = APIRouter(redirect_slashes=False)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=WorkoutResponse)
async def log_workout(
    workout: WorkoutCreate,
    background_tasks: BackgroundTasks,
    current_user: dict = Depends(get_current_user),
):
    """
    Log a workout with its exercises and sets.

    Leaderboards of the active challenges the user takes part in are
    refreshed after the response is sent.
    """
    user_id = current_user["id"]
    try:
        created = await workout_service.create_workout(user_id, workout)
    except Exception as e:
        logger.error(
            f"Failed to log workout for user {user_id}",
            {"error": str(e), "user_id": user_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to log workout",
        )

    background_tasks.add_task(
        leaderboard_refresher.refresh_for_workout, user_id, created.created_at
    )
    return created


@router.get("", response_model=List[WorkoutResponse])
async def list_workouts(
    limit: int = Query(20, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
):
    """Workout history, newest first"""
    try:
        return await workout_service.list_workouts(current_user["id"], limit=limit)
    except Exception as e:
        logger.error(
            f"Failed to get workouts: {str(e)}",
            {"error": str(e), "user_id": current_user["id"]},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve workouts",
        )
