"""
Pydantic models for user data.

``UserCreate`` is deliberately loose: the username length rule is
enforced by ``UserService`` so that the client gets the service's
message rather than a generic schema error.
"""

from typing import Optional

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    """Payload for ``POST /api/exercise/new-user``."""

    username: Optional[str] = Field(None, examples=["runner42"])


class UserCreated(BaseModel):
    """Response for a newly created user."""

    username: str
    id: int = Field(..., alias="_id")

    model_config = {
        "populate_by_name": True,
    }


class UserRead(BaseModel):
    """A stored user as listed by ``GET /api/exercise/users``."""

    id: int
    username: str
