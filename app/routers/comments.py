from fastapi import APIRouter, Depends

from app.dependencies import get_current_user, get_post_service
from app.schemas import CommentCreate, CommentRead, PostRead, UserRead
from app.services.posts import PostService

router = APIRouter()


@router.post("/posts/{post_id}", response_model=PostRead)
async def add_comment(
    post_id: str,
    payload: CommentCreate,
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    return await posts.add_comment(post_id, payload.content, current_user.id)


@router.get("/posts/{post_id}", response_model=list[CommentRead])
async def get_comments(
    post_id: str,
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    return await posts.get_comments_by_post_id(post_id)
