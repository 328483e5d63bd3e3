from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class WorkoutSet(BaseModel):
    reps: int = Field(..., ge=0, description="Repetitions performed")
    weight: float = Field(..., ge=0, description="Load lifted per repetition")


class WorkoutExercise(BaseModel):
    name: str = Field(..., min_length=1)
    sets: List[WorkoutSet] = Field(default_factory=list)

    @field_validator("sets", mode="before")
    @classmethod
    def _missing_sets_are_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Exercise name must not be blank")
        return value.strip()


class Workout(BaseModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    challenge_id: Optional[str] = None
    name: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    exercises: List[WorkoutExercise] = Field(default_factory=list)

    @field_validator("exercises", mode="before")
    @classmethod
    def _missing_exercises_are_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Workout":
        """Build a Workout from a `workouts` row with embedded exercises/sets."""
        exercises = sorted(
            row.get("workout_exercises") or [],
            key=lambda e: e.get("position") or 0,
        )
        return cls(
            id=row.get("id"),
            user_id=row.get("user_id"),
            challenge_id=row.get("challenge_id"),
            name=row.get("name") or "",
            notes=row.get("notes"),
            created_at=row.get("created_at"),
            exercises=[
                {
                    "name": exercise.get("name") or "exercise",
                    "sets": sorted(
                        exercise.get("workout_sets") or [],
                        key=lambda s: s.get("position") or 0,
                    ),
                }
                for exercise in exercises
            ],
        )


class WorkoutCreate(BaseModel):
    """Payload for logging a workout with its exercises and sets in one go."""

    name: str = Field(..., min_length=1, max_length=200)
    notes: Optional[str] = Field(None, max_length=2000)
    challenge_id: Optional[str] = None
    exercises: List[WorkoutExercise] = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Workout name must not be blank")
        return value.strip()


class WorkoutResponse(Workout):
    volume: float = 0.0
