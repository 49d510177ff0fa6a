"""
app/routers/users.py

Perfis de usuário. As rotas `/me` vêm antes das rotas com parâmetro de path
para não serem capturadas por `/{username}`.
"""

from fastapi import APIRouter, Depends

from app.dependencies import get_current_user, get_user_service
from app.exceptions import ForbiddenError
from app.schemas import MessageResponse, PostCountResponse, UserRead, UserUpdate
from app.services.users import UserService

router = APIRouter()


def _ensure_self(current_user: UserRead, user_id: str) -> None:
    if current_user.id != user_id:
        raise ForbiddenError("You can only modify your own account")


@router.get("/me", response_model=UserRead)
async def get_me(current_user: UserRead = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=UserRead)
async def update_me(
    patch: UserUpdate,
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    return await users.update_user(current_user.id, patch)


@router.delete("/me", response_model=MessageResponse)
async def delete_me(
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    await users.delete_user(current_user.id)
    return MessageResponse(message="User deleted successfully")


@router.get("/{username}", response_model=UserRead)
async def get_user(username: str, users: UserService = Depends(get_user_service)):
    return await users.get_user_by_username(username)


@router.get("/{username}/post-count", response_model=PostCountResponse)
async def get_post_count(username: str, users: UserService = Depends(get_user_service)):
    user = await users.get_user_by_username(username)
    count = await users.get_user_post_count(user.id)
    return PostCountResponse(user_id=user.id, username=user.username, post_count=count)


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    patch: UserUpdate,
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    _ensure_self(current_user, user_id)
    return await users.update_user(user_id, patch)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    _ensure_self(current_user, user_id)
    await users.delete_user(user_id)
    return MessageResponse(message="User deleted successfully")


@router.post("/{user_id}/follow/{following_id}", response_model=UserRead)
async def follow(
    user_id: str,
    following_id: str,
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    _ensure_self(current_user, user_id)
    return await users.follow_user(user_id, following_id)


@router.delete("/{user_id}/unfollow/{following_id}", response_model=UserRead)
async def unfollow(
    user_id: str,
    following_id: str,
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    _ensure_self(current_user, user_id)
    return await users.unfollow_user(user_id, following_id)
