"""
Pydantic models for exercise data.

Request fields accept either strings (form posts) or numbers (JSON);
the exercise service and the collection schema do the actual
validation and casting.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, Field

Scalar = Union[int, float, str]


class ExerciseCreate(BaseModel):
    """Payload for ``POST /api/exercise/add``."""

    userId: Optional[Scalar] = Field(None, examples=["1"])
    description: Optional[Scalar] = Field(None, examples=["Morning run"])
    duration: Optional[Scalar] = Field(None, examples=["30"])
    date: Optional[str] = Field(None, examples=["2024-01-01"])


class ExerciseRead(BaseModel):
    """Echo of a stored exercise together with its owner."""

    id: int = Field(..., alias="_id")
    username: str
    description: str
    duration: int
    date: str = Field(..., examples=["Mon Jan 01 2024"])

    model_config = {
        "populate_by_name": True,
    }


class LogEntry(BaseModel):
    description: str
    duration: int
    date: str


class ExerciseLog(BaseModel):
    """Response of ``GET /api/exercise/log``."""

    id: int = Field(..., alias="_id")
    username: str
    count: int
    log: List[LogEntry]

    # ``_id`` on the wire, ``id`` when built by the service.
    model_config = {
        "populate_by_name": True,
    }
