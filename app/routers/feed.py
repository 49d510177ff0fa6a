from fastapi import APIRouter, Depends

from app.dependencies import get_current_user, get_feed_service, get_user_service
from app.pagination import Page, PageRequest, page_params
from app.schemas import PostRead, UserRead
from app.services.feed import FeedService
from app.services.users import UserService

router = APIRouter()


@router.get("", response_model=Page[PostRead])
async def get_personal_feed(
    page: PageRequest = Depends(page_params),
    current_user: UserRead = Depends(get_current_user),
    feed: FeedService = Depends(get_feed_service),
):
    return await feed.get_personal_feed(current_user.id, page)


@router.get("/discover", response_model=Page[PostRead])
async def get_discovery_feed(
    page: PageRequest = Depends(page_params),
    current_user: UserRead = Depends(get_current_user),
    feed: FeedService = Depends(get_feed_service),
):
    return await feed.get_discovery_feed(page)


@router.get("/users/{username}", response_model=Page[PostRead])
async def get_user_feed(
    username: str,
    page: PageRequest = Depends(page_params),
    current_user: UserRead = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
    feed: FeedService = Depends(get_feed_service),
):
    target = await users.get_user_by_username(username)
    return await feed.get_user_feed(target.id, page)
