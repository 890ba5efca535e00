"""
User endpoints.

Sign up a new user and list every registered user.
"""

from typing import List

from fastapi import APIRouter, Depends

from ...schemas.user import UserCreate, UserCreated, UserRead
from ...services.user_service import UserService
from ..deps import body_as, get_user_service

router = APIRouter()


@router.post("/new-user", response_model=UserCreated)
async def create_user(
    data: UserCreate = Depends(body_as(UserCreate)),
    service: UserService = Depends(get_user_service),
) -> UserCreated:
    """Register a user.  Usernames need at least five characters and must be unique."""
    return await service.create_user(data.username)


@router.get("/users", response_model=List[UserRead])
async def list_users(service: UserService = Depends(get_user_service)) -> List[UserRead]:
    return await service.list_users()
