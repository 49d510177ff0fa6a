from fastapi import APIRouter, Depends

from app.dependencies import get_current_user, get_post_service
from app.schemas import LikeResponse, LikeStatus, UserRead
from app.services.posts import PostService

router = APIRouter()


@router.post("/posts/{post_id}", response_model=LikeResponse)
async def like_post(
    post_id: str,
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    post = await posts.like_post(post_id, current_user.id)
    return LikeResponse(like_count=post.like_count, is_liked=True)


@router.delete("/posts/{post_id}", response_model=LikeResponse)
async def unlike_post(
    post_id: str,
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    post = await posts.unlike_post(post_id, current_user.id)
    return LikeResponse(like_count=post.like_count, is_liked=False)


@router.get("/posts/{post_id}", response_model=LikeStatus)
async def get_like_status(
    post_id: str,
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    return await posts.get_like_status(post_id, current_user.id)


@router.get("/posts/{post_id}/users", response_model=list[UserRead])
async def get_liked_users(
    post_id: str,
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    return await posts.get_liked_users(post_id)
