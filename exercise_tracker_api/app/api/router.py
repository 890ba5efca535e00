"""
Top-level router for the exercise API.

Both domain routers share the ``/api/exercise`` prefix, which is applied
when this router is included in the application.
"""

from fastapi import APIRouter

from .endpoints import exercises, users

router = APIRouter()

router.include_router(users.router, tags=["users"])
router.include_router(exercises.router, tags=["exercises"])
