"""
app/repositories/posts.py

Acesso a dados de posts. Todas as consultas paginadas ordenam, por padrão,
do mais novo para o mais antigo (`createdAt,desc`), com o id como desempate.
"""

from typing import Collection

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.post import Post
from app.pagination import PageRequest, SortOrder

POST_SORT_FIELDS = {
    "createdAt": Post.created_at,
    "updatedAt": Post.updated_at,
    "likeCount": Post.like_count,
}
DEFAULT_POST_SORT = SortOrder("createdAt", descending=True)


class PostRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, post_id: str) -> Post | None:
        return await self.session.get(Post, post_id)

    async def save(self, post: Post) -> Post:
        self.session.add(post)
        await self.session.flush()
        return post

    async def delete(self, post: Post) -> None:
        await self.session.delete(post)
        await self.session.flush()

    async def _find_page(self, criteria: list, request: PageRequest) -> tuple[list[Post], int]:
        column, descending = request.resolve_sort(POST_SORT_FIELDS, DEFAULT_POST_SORT)

        total = await self.session.scalar(select(func.count()).select_from(Post).where(*criteria))
        result = await self.session.scalars(
            select(Post)
            .where(*criteria)
            .order_by(column.desc() if descending else column.asc(), Post.id)
            .offset(request.offset)
            .limit(request.size)
        )
        return list(result.all()), total or 0

    async def find_page_by_author(self, author_id: str, request: PageRequest):
        return await self._find_page([Post.author_id == author_id], request)

    async def find_page_by_author_ids(self, author_ids: Collection[str], request: PageRequest):
        return await self._find_page([Post.author_id.in_(list(author_ids))], request)

    async def find_popular_page(self, request: PageRequest):
        """Posts com pelo menos uma curtida."""
        return await self._find_page([Post.like_count > 0], request)

    async def find_all_page(self, request: PageRequest):
        return await self._find_page([], request)

    async def count_by_author(self, author_id: str) -> int:
        return await self.session.scalar(
            select(func.count()).select_from(Post).where(Post.author_id == author_id)
        ) or 0

    async def count(self) -> int:
        return await self.session.scalar(select(func.count()).select_from(Post)) or 0
