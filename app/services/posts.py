"""
app/services/posts.py

Regras de negócio de posts: CRUD com checagem de autoria, curtidas e
comentários.

Só o autor altera ou apaga um post. Curtir e comentar é livre para qualquer
usuário autenticado, inclusive no próprio post. Toda escrita invalida os
buckets de feed e de contagem de posts.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ForbiddenError, NotFoundError
from app.models.post import Comment, Post
from app.models.user import new_id, utcnow
from app.pagination import Page, PageRequest
from app.repositories.posts import PostRepository
from app.repositories.users import UserRepository
from app.schemas import CommentRead, LikeStatus, PostRead, UserRead
from app.services.cache import FEED_BUCKETS, POST_COUNT, CacheManager
from app.services.users import UserService

log = logging.getLogger(__name__)


class PostService:
    def __init__(self, session: AsyncSession, cache: CacheManager, user_service: UserService):
        self.session = session
        self.posts = PostRepository(session)
        self.users = UserRepository(session)
        self.user_service = user_service
        self.cache = cache

    async def _load(self, post_id: str) -> Post:
        post = await self.posts.get(post_id)
        if post is None:
            raise NotFoundError(f"Post not found with id: {post_id}")
        return post

    async def _save(self, post: Post) -> PostRead:
        await self.posts.save(post)
        self._evict()
        return PostRead.model_validate(post)

    def _evict(self) -> None:
        self.cache.invalidate_on_commit(self.session, *FEED_BUCKETS, POST_COUNT)

    @staticmethod
    def _page(items: list[Post], request: PageRequest, total: int) -> Page[PostRead]:
        return Page[PostRead].of([PostRead.model_validate(p) for p in items], request, total)

    # -----------------------------------------------------------------------
    # CRUD
    # -----------------------------------------------------------------------

    async def create_post(self, content: str, author_id: str) -> PostRead:
        author = await self.user_service.get_user_by_id(author_id)
        now = utcnow()
        post = Post(
            id=new_id(),
            content=content,
            author_id=author.id,
            author_username=author.username,
            likes=[],
            like_count=0,
            comments=[],
            created_at=now,
            updated_at=now,
        )
        result = await self._save(post)
        log.info(f"Post {post.id} criado por {author.username}")
        return result

    async def get_post_by_id(self, post_id: str) -> PostRead:
        return PostRead.model_validate(await self._load(post_id))

    async def get_posts_by_user_id(self, user_id: str, request: PageRequest) -> Page[PostRead]:
        await self.user_service.get_user_by_id(user_id)
        items, total = await self.posts.find_page_by_author(user_id, request)
        return self._page(items, request, total)

    async def get_all_posts(self, request: PageRequest) -> Page[PostRead]:
        items, total = await self.posts.find_all_page(request)
        return self._page(items, request, total)

    async def update_post(self, post_id: str, content: str, requester_id: str) -> PostRead:
        post = await self._load(post_id)

        if post.author_id != requester_id:
            raise ForbiddenError("You can only update your own posts")

        post.content = content
        post.updated_at = utcnow()
        return await self._save(post)

    async def delete_post(self, post_id: str, requester_id: str) -> None:
        post = await self._load(post_id)

        if post.author_id != requester_id:
            raise ForbiddenError("You can only delete your own posts")

        await self.posts.delete(post)
        self._evict()
        log.info(f"Post {post_id} removido pelo autor")

    # -----------------------------------------------------------------------
    # Curtidas
    # -----------------------------------------------------------------------

    async def like_post(self, post_id: str, user_id: str) -> PostRead:
        post = await self._load(post_id)
        post.add_like(user_id)
        return await self._save(post)

    async def unlike_post(self, post_id: str, user_id: str) -> PostRead:
        post = await self._load(post_id)
        post.remove_like(user_id)
        return await self._save(post)

    async def get_like_status(self, post_id: str, user_id: str) -> LikeStatus:
        post = await self._load(post_id)
        return LikeStatus(like_count=post.like_count, is_liked=post.is_liked_by(user_id))

    async def get_liked_users(self, post_id: str) -> list[UserRead]:
        """Ids que não resolvem mais para um usuário são ignorados."""
        post = await self._load(post_id)
        return [UserRead.model_validate(u) for u in await self.users.find_by_ids(post.likes)]

    # -----------------------------------------------------------------------
    # Comentários
    # -----------------------------------------------------------------------

    async def add_comment(self, post_id: str, content: str, author_id: str) -> PostRead:
        post = await self._load(post_id)
        author = await self.user_service.get_user_by_id(author_id)

        post.comments.append(
            Comment(
                id=str(uuid.uuid4()),
                content=content,
                author_id=author.id,
                author_username=author.username,
                created_at=utcnow(),
            )
        )
        return await self._save(post)

    async def get_comments_by_post_id(self, post_id: str) -> list[CommentRead]:
        post = await self._load(post_id)
        return [CommentRead.model_validate(c) for c in post.comments]
