from fastapi import APIRouter, Depends

from app.dependencies import get_current_user, get_user_service
from app.pagination import Page, PageRequest, page_params
from app.schemas import FollowResponse, FollowStatus, UserRead
from app.services.users import UserService

router = APIRouter()


@router.get("/followers", response_model=list[UserRead])
async def get_followers(
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    return await users.get_followers(current_user.id)


@router.get("/following", response_model=list[UserRead])
async def get_following(
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    return await users.get_following(current_user.id)


@router.get("/followers/page", response_model=Page[UserRead])
async def get_followers_page(
    page: PageRequest = Depends(page_params),
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    return await users.get_followers_page(current_user.id, page)


@router.get("/following/page", response_model=Page[UserRead])
async def get_following_page(
    page: PageRequest = Depends(page_params),
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    return await users.get_following_page(current_user.id, page)


@router.get("/{user_id}/status", response_model=FollowStatus)
async def get_follow_status(
    user_id: str,
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    return await users.get_follow_status(current_user.id, user_id)


@router.post("/{following_id}", response_model=FollowResponse)
async def follow(
    following_id: str,
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    updated = await users.follow_user(current_user.id, following_id)
    return FollowResponse(following=updated.following_count, is_following=True)


@router.delete("/{following_id}", response_model=FollowResponse)
async def unfollow(
    following_id: str,
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    updated = await users.unfollow_user(current_user.id, following_id)
    return FollowResponse(following=updated.following_count, is_following=False)
