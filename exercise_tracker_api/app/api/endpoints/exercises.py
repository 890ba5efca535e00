"""
Exercise endpoints.

``POST /add`` records an exercise for an existing user and echoes it
back.  ``GET /log`` returns a user's exercises, optionally restricted to
a date range and a maximum count (see ``ExerciseService.get_log`` for
how ``from``, ``to`` and ``limit`` interact).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...schemas.exercise import ExerciseCreate, ExerciseLog, ExerciseRead
from ...services.exercise_service import ExerciseService
from ..deps import body_as, get_exercise_service

router = APIRouter()


@router.post("/add", response_model=ExerciseRead)
async def add_exercise(
    data: ExerciseCreate = Depends(body_as(ExerciseCreate)),
    service: ExerciseService = Depends(get_exercise_service),
) -> ExerciseRead:
    """Log an exercise.  ``date`` is optional and defaults to now."""
    return await service.add_exercise(data)


@router.get("/log", response_model=ExerciseLog)
async def get_log(
    user_id: Optional[str] = Query(None, alias="userId"),
    date_from: Optional[str] = Query(None, alias="from", examples=["2024-01-01"]),
    date_to: Optional[str] = Query(None, alias="to", examples=["2024-12-31"]),
    limit: Optional[str] = Query(None),
    service: ExerciseService = Depends(get_exercise_service),
) -> ExerciseLog:
    """Return the exercise log of a user."""
    return await service.get_log(user_id, date_from, date_to, limit)
