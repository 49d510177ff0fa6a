"""
Testes para app/services/posts.py

Cobre:
- criação guarda autor e username; autor inexistente → NotFound
- atualização e remoção só pelo autor (Forbidden para os demais)
- curtir duas vezes conta uma vez; descurtir (mesmo sem curtida prévia); status de curtida
- lista de quem curtiu ignora ids sem usuário
- comentários em ordem de inserção; post inexistente → NotFound
- listagens paginadas (todos os posts, posts de um usuário)
"""

import pytest

from app.exceptions import ForbiddenError, NotFoundError
from app.pagination import PageRequest


@pytest.fixture
def two_users(make_user):
    async def _make():
        return await make_user("alice"), await make_user("bob")

    return _make


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_post(make_user, post_service):
    alice = await make_user("alice")

    post = await post_service.create_post("olá mundo", alice.id)

    assert post.content == "olá mundo"
    assert post.author_id == alice.id
    assert post.author_username == "alice"
    assert post.like_count == 0
    assert post.comments == []


@pytest.mark.asyncio
async def test_create_post_unknown_author(post_service):
    with pytest.raises(NotFoundError):
        await post_service.create_post("olá", "nao-existe")


@pytest.mark.asyncio
async def test_update_post_by_author(two_users, post_service):
    alice, _ = await two_users()
    post = await post_service.create_post("v1", alice.id)

    updated = await post_service.update_post(post.id, "v2", alice.id)

    assert updated.content == "v2"
    assert updated.updated_at >= post.created_at


@pytest.mark.asyncio
async def test_update_post_by_other_user_is_forbidden(two_users, post_service):
    alice, bob = await two_users()
    post = await post_service.create_post("v1", alice.id)

    with pytest.raises(ForbiddenError, match="You can only update your own posts"):
        await post_service.update_post(post.id, "hack", bob.id)

    assert (await post_service.get_post_by_id(post.id)).content == "v1"


@pytest.mark.asyncio
async def test_delete_post(two_users, post_service):
    alice, bob = await two_users()
    post = await post_service.create_post("tchau", alice.id)

    with pytest.raises(ForbiddenError):
        await post_service.delete_post(post.id, bob.id)

    await post_service.delete_post(post.id, alice.id)

    with pytest.raises(NotFoundError):
        await post_service.get_post_by_id(post.id)


# ---------------------------------------------------------------------------
# Curtidas
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_like_twice_counts_once(two_users, post_service):
    alice, bob = await two_users()
    post = await post_service.create_post("curta", alice.id)

    await post_service.like_post(post.id, bob.id)
    liked = await post_service.like_post(post.id, bob.id)

    assert liked.like_count == 1
    assert liked.likes == [bob.id]


@pytest.mark.asyncio
async def test_unlike(two_users, post_service):
    alice, bob = await two_users()
    post = await post_service.create_post("curta", alice.id)
    await post_service.like_post(post.id, bob.id)

    result = await post_service.unlike_post(post.id, bob.id)

    assert result.like_count == 0
    assert not (await post_service.get_like_status(post.id, bob.id)).is_liked


@pytest.mark.asyncio
async def test_unlike_without_like_is_noop(two_users, post_service):
    alice, bob = await two_users()
    post = await post_service.create_post("nunca curtida", alice.id)

    result = await post_service.unlike_post(post.id, bob.id)

    assert result.like_count == 0
    assert result.likes == []


@pytest.mark.asyncio
async def test_like_own_post_is_allowed(make_user, post_service):
    alice = await make_user("alice")
    post = await post_service.create_post("eu mesma", alice.id)

    status_before = await post_service.get_like_status(post.id, alice.id)
    await post_service.like_post(post.id, alice.id)
    status_after = await post_service.get_like_status(post.id, alice.id)

    assert not status_before.is_liked
    assert status_after.is_liked
    assert status_after.like_count == 1


@pytest.mark.asyncio
async def test_liked_users_skips_unknown_ids(two_users, post_service):
    alice, bob = await two_users()
    post = await post_service.create_post("curta", alice.id)
    await post_service.like_post(post.id, bob.id)
    await post_service.like_post(post.id, "fantasma")

    users = await post_service.get_liked_users(post.id)

    assert [u.username for u in users] == ["bob"]


@pytest.mark.asyncio
async def test_like_missing_post(make_user, post_service):
    alice = await make_user("alice")

    with pytest.raises(NotFoundError):
        await post_service.like_post("nao-existe", alice.id)


# ---------------------------------------------------------------------------
# Comentários
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_comments_keep_order(two_users, post_service):
    alice, bob = await two_users()
    post = await post_service.create_post("comente", alice.id)

    await post_service.add_comment(post.id, "primeiro", bob.id)
    result = await post_service.add_comment(post.id, "segundo", alice.id)

    assert result.comment_count == 2
    comments = await post_service.get_comments_by_post_id(post.id)
    assert [c.content for c in comments] == ["primeiro", "segundo"]
    assert [c.author_username for c in comments] == ["bob", "alice"]
    assert comments[0].id != comments[1].id


@pytest.mark.asyncio
async def test_comment_on_missing_post(make_user, post_service):
    alice = await make_user("alice")

    with pytest.raises(NotFoundError):
        await post_service.add_comment("nao-existe", "oi", alice.id)


@pytest.mark.asyncio
async def test_delete_post_removes_comments(two_users, post_service, session):
    from sqlalchemy import func, select

    from app.models.post import Comment

    alice, bob = await two_users()
    post = await post_service.create_post("comente", alice.id)
    await post_service.add_comment(post.id, "oi", bob.id)

    await post_service.delete_post(post.id, alice.id)

    assert await session.scalar(select(func.count()).select_from(Comment)) == 0


# ---------------------------------------------------------------------------
# Listagens
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_all_posts_paginates(make_user, post_service):
    alice = await make_user("alice")
    for i in range(5):
        await post_service.create_post(f"post {i}", alice.id)

    page = await post_service.get_all_posts(PageRequest(page=0, size=2))

    assert page.total_elements == 5
    assert page.total_pages == 3
    assert page.number_of_elements == 2
    assert page.first and not page.last


@pytest.mark.asyncio
async def test_get_posts_by_user_id(two_users, post_service):
    alice, bob = await two_users()
    await post_service.create_post("da alice", alice.id)
    await post_service.create_post("do bob", bob.id)

    page = await post_service.get_posts_by_user_id(bob.id, PageRequest())

    assert [p.content for p in page.content] == ["do bob"]


@pytest.mark.asyncio
async def test_get_posts_by_unknown_user(post_service):
    with pytest.raises(NotFoundError):
        await post_service.get_posts_by_user_id("nao-existe", PageRequest())
