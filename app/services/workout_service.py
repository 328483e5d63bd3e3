"""
Workout Service

Logs workouts with their exercises and sets and reads workout history.
Payloads are validated by ``WorkoutCreate`` before they get here, so
negative reps or weights never reach the volume calculation.
"""

from typing import Dict, Any, List

from pydantic import ValidationError

from app.core.database import get_supabase_client
from app.models.workout import Workout, WorkoutCreate, WorkoutResponse
from app.services.leaderboard.aggregator import WORKOUT_COLUMNS
from app.services.leaderboard.volume import compute_volume
from app.services.logger import logger


class WorkoutService:
    def __init__(self, supabase=None) -> None:
        self._supabase = supabase

    @property
    def supabase(self):
        return self._supabase or get_supabase_client()

    async def create_workout(self, user_id: str, data: WorkoutCreate) -> WorkoutResponse:
        """
        Insert the workout, then its exercises, then their sets.

        If a nested insert fails the workout row is removed again so a
        half-written workout never counts toward a leaderboard.
        """
        result = (
            self.supabase.table("workouts")
            .insert(
                {
                    "user_id": user_id,
                    "challenge_id": data.challenge_id,
                    "name": data.name,
                    "notes": data.notes,
                }
            )
            .execute()
        )
        if not result.data:
            raise Exception("Failed to create workout")

        workout_row = result.data[0]
        workout_id = workout_row["id"]

        try:
            exercise_rows = (
                self.supabase.table("workout_exercises")
                .insert(
                    [
                        {"workout_id": workout_id, "name": exercise.name, "position": index}
                        for index, exercise in enumerate(data.exercises)
                    ]
                )
                .execute()
            ).data or []

            sets = []
            for exercise_row, exercise in zip(exercise_rows, data.exercises):
                for index, workout_set in enumerate(exercise.sets):
                    sets.append(
                        {
                            "workout_exercise_id": exercise_row["id"],
                            "reps": workout_set.reps,
                            "weight": workout_set.weight,
                            "position": index,
                        }
                    )
            if sets:
                self.supabase.table("workout_sets").insert(sets).execute()

        except Exception as e:
            logger.error(
                f"Failed to store exercises for workout {workout_id}, rolling back",
                {"error": str(e), "workout_id": workout_id, "user_id": user_id},
            )
            self.supabase.table("workouts").delete().eq("id", workout_id).execute()
            raise

        workout = Workout(
            id=workout_id,
            user_id=user_id,
            challenge_id=data.challenge_id,
            name=data.name,
            notes=data.notes,
            created_at=workout_row.get("created_at"),
            exercises=data.exercises,
        )
        logger.info(
            f"User {user_id} logged workout {workout_id}",
            {"workout_id": workout_id, "user_id": user_id},
        )
        return WorkoutResponse(**workout.model_dump(), volume=compute_volume(workout))

    async def list_workouts(self, user_id: str, limit: int = 20) -> List[WorkoutResponse]:
        """Workout history, newest first, with the volume of each workout."""
        result = (
            self.supabase.table("workouts")
            .select(WORKOUT_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        history = []
        for row in result.data or []:
            try:
                workout = Workout.from_row(row)
            except ValidationError as e:
                logger.warning(
                    f"Skipping invalid workout {row.get('id')} in history",
                    {"workout_id": row.get("id"), "user_id": user_id, "error": str(e)},
                )
                continue
            history.append(
                WorkoutResponse(**workout.model_dump(), volume=compute_volume(workout))
            )
        return history


workout_service = WorkoutService()
