"""
app/routers/posts.py

CRUD de posts, mais atalhos de curtida/comentário sob /api/posts/{id}.
`/feed` e `/user/{user_id}` vêm antes de `/{post_id}`.
"""

from fastapi import APIRouter, Depends

from app.dependencies import get_current_user, get_feed_service, get_post_service
from app.pagination import Page, PageRequest, page_params
from app.schemas import CommentCreate, CommentRead, MessageResponse, PostCreate, PostRead, PostUpdate, UserRead
from app.services.feed import FeedService
from app.services.posts import PostService

router = APIRouter()


@router.post("", response_model=PostRead)
async def create_post(
    payload: PostCreate,
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    return await posts.create_post(payload.content, current_user.id)


@router.get("", response_model=Page[PostRead])
async def list_posts(
    page: PageRequest = Depends(page_params),
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    return await posts.get_all_posts(page)


@router.get("/feed", response_model=Page[PostRead])
async def get_feed(
    page: PageRequest = Depends(page_params),
    current_user: UserRead = Depends(get_current_user),
    feed: FeedService = Depends(get_feed_service),
):
    return await feed.get_personal_feed(current_user.id, page)


@router.get("/user/{user_id}", response_model=Page[PostRead])
async def get_posts_by_user(
    user_id: str,
    page: PageRequest = Depends(page_params),
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    return await posts.get_posts_by_user_id(user_id, page)


@router.get("/{post_id}", response_model=PostRead)
async def get_post(
    post_id: str,
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    return await posts.get_post_by_id(post_id)


@router.put("/{post_id}", response_model=PostRead)
async def update_post(
    post_id: str,
    payload: PostUpdate,
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    return await posts.update_post(post_id, payload.content, current_user.id)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: str,
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    await posts.delete_post(post_id, current_user.id)
    return MessageResponse(message="Post deleted successfully")


@router.post("/{post_id}/like", response_model=PostRead)
async def like_post(
    post_id: str,
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    return await posts.like_post(post_id, current_user.id)


@router.delete("/{post_id}/like", response_model=PostRead)
async def unlike_post(
    post_id: str,
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    return await posts.unlike_post(post_id, current_user.id)


@router.post("/{post_id}/comments", response_model=PostRead)
async def add_comment(
    post_id: str,
    payload: CommentCreate,
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    return await posts.add_comment(post_id, payload.content, current_user.id)


@router.get("/{post_id}/comments", response_model=list[CommentRead])
async def get_comments(
    post_id: str,
    current_user: UserRead = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
):
    return await posts.get_comments_by_post_id(post_id)
