"""
Shared FastAPI dependencies.

Request bodies arrive either as JSON or as HTML form posts from the
index page, so handlers do not declare a typed body.  ``body_as`` reads
whichever encoding was sent and validates it into the given pydantic
model.  The services are created once at startup and stored on
``app.state``; the ``get_*_service`` helpers hand them to handlers.
"""

from typing import Any, Callable, Dict, Type, TypeVar

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import ValidationError
from ..services.exercise_service import ExerciseService
from ..services.user_service import UserService

ModelT = TypeVar("ModelT", bound=BaseModel)


async def read_payload(request: Request) -> Dict[str, Any]:
    """Return the request body as a flat dict (JSON or form encoded)."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            raise ValidationError("Malformed JSON body") from None
        if not isinstance(data, dict):
            raise ValidationError("Request body must be an object")
        return data
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


def body_as(model: Type[ModelT]) -> Callable[[Request], Any]:
    """Build a dependency that parses the request body into ``model``."""

    async def dependency(request: Request) -> ModelT:
        payload = await read_payload(request)
        try:
            return model.model_validate(payload)
        except PydanticValidationError as exc:
            raise RequestValidationError(exc.errors()) from exc

    return dependency


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_exercise_service(request: Request) -> ExerciseService:
    return request.app.state.exercise_service
