# tests/integration/test_repositories.py
# Repository and publish-flow tests against a containerized Postgres.

import asyncio

import pytest
from sqlalchemy import update

from sitegen.db.base import get_session
from sitegen.middleware.error_handler import ConflictError, NotFoundOrForbidden, PersistenceError
from sitegen.models.users_table import users
from sitegen.repositories.generation_repository import GenerationRepository
from sitegen.repositories.user_repository import UserRepository
from sitegen.services.history_service import HistoryService
from sitegen.services.publish_service import PublishCoordinator
from tests.fakes import FakeHostingTarget

pytestmark = [pytest.mark.integration, pytest.mark.usefixtures("clean_db")]


async def _user(repo: UserRepository, email: str = "sari@example.com") -> int:
    return await repo.create("Sari", email, "hash")


@pytest.mark.asyncio
async def test_duplicate_email_is_conflict():
    repo = UserRepository()
    await _user(repo)

    with pytest.raises(ConflictError):
        await _user(repo)


@pytest.mark.asyncio
async def test_profile_starts_unpublished():
    repo = UserRepository()
    user_id = await _user(repo)

    profile = await repo.get_profile(user_id)

    assert profile["published_url"] is None
    assert profile["published_generation_id"] is None
    assert (await repo.get_by_email("sari@example.com"))["id"] == user_id


@pytest.mark.asyncio
async def test_history_is_ordered_and_scoped():
    user_repo = UserRepository()
    repo = GenerationRepository()
    history = HistoryService(repo)
    owner = await _user(user_repo)
    other = await _user(user_repo, "budi@example.com")
    ids = [await repo.append(owner, f"<html>{n}</html>" + "x" * 200) for n in range(3)]
    await repo.append(other, "<html>other</html>")

    items = await history.list(owner)

    assert [i["id"] for i in items] == list(reversed(ids))
    assert [i["version_number"] for i in items] == [3, 2, 1]
    assert all(len(i["preview"]) == 100 for i in items)

    with pytest.raises(NotFoundOrForbidden):
        await history.get(other, ids[0])


@pytest.mark.asyncio
async def test_delete_is_scoped_to_owner():
    user_repo = UserRepository()
    repo = GenerationRepository()
    owner = await _user(user_repo)
    other = await _user(user_repo, "budi@example.com")
    generation_id = await repo.append(owner, "<html></html>")

    with pytest.raises(NotFoundOrForbidden):
        await repo.delete(other, generation_id)

    await repo.delete(owner, generation_id)
    with pytest.raises(NotFoundOrForbidden):
        await repo.get_html(owner, generation_id)


@pytest.mark.asyncio
async def test_publish_pointer_pair_is_enforced():
    user_id = await _user(UserRepository())

    with pytest.raises(PersistenceError):
        async with get_session() as session:
            await session.execute(update(users).where(users.c.id == user_id).values(published_url="http://x/"))
            await session.commit()


@pytest.mark.asyncio
async def test_publish_and_delete_published_generation():
    user_repo = UserRepository()
    repo = GenerationRepository()
    hosting = FakeHostingTarget()
    publisher = PublishCoordinator(user_repo, hosting)
    user_id = await _user(user_repo)
    generation_id = await repo.append(user_id, "<html>live</html>")

    url = await publisher.publish(user_id, generation_id)

    profile = await user_repo.get_profile(user_id)
    assert profile["published_url"] == url
    assert profile["published_generation_id"] == generation_id

    with pytest.raises(ConflictError):
        await repo.delete(user_id, generation_id)

    await publisher.unpublish(user_id)
    await repo.delete(user_id, generation_id)
    assert (await user_repo.get_profile(user_id))["published_url"] is None


@pytest.mark.asyncio
async def test_concurrent_publishes_are_serialized():
    user_repo = UserRepository()
    repo = GenerationRepository()
    hosting = FakeHostingTarget()
    publisher = PublishCoordinator(user_repo, hosting)
    user_id = await _user(user_repo)
    first = await repo.append(user_id, "<html>a</html>")
    second = await repo.append(user_id, "<html>b</html>")

    results = await asyncio.gather(
        publisher.publish(user_id, first),
        publisher.publish(user_id, second),
        return_exceptions=True,
    )

    assert sum(isinstance(r, str) for r in results) == 1
    assert sum(isinstance(r, ConflictError) for r in results) == 1
    assert hosting.writes == [user_id]
    profile = await user_repo.get_profile(user_id)
    assert hosting.pages[user_id] == await repo.get_html(user_id, profile["published_generation_id"])


@pytest.mark.asyncio
async def test_pointer_lock_for_unknown_user():
    with pytest.raises(NotFoundOrForbidden):
        async with UserRepository().locked_pointer(999):
            pass


@pytest.mark.asyncio
@pytest.mark.usefixtures("single_connection_pool")
async def test_publish_needs_only_one_pooled_connection():
    user_repo = UserRepository()
    repo = GenerationRepository()
    hosting = FakeHostingTarget()
    publisher = PublishCoordinator(user_repo, hosting)
    user_id = await _user(user_repo)
    generation_id = await repo.append(user_id, "<html>live</html>")

    url = await asyncio.wait_for(publisher.publish(user_id, generation_id), timeout=3)

    assert url == hosting.url_for(user_id)
    assert hosting.pages[user_id] == "<html>live</html>"
    await publisher.unpublish(user_id)
    assert (await user_repo.get_profile(user_id))["published_url"] is None


@pytest.mark.asyncio
@pytest.mark.usefixtures("single_connection_pool")
async def test_concurrent_publishes_on_single_connection_pool():
    user_repo = UserRepository()
    repo = GenerationRepository()
    hosting = FakeHostingTarget()
    publisher = PublishCoordinator(user_repo, hosting)
    sari = await _user(user_repo)
    budi = await _user(user_repo, "budi@example.com")
    sari_a = await repo.append(sari, "<html>a</html>")
    sari_b = await repo.append(sari, "<html>b</html>")
    budi_a = await repo.append(budi, "<html>budi</html>")

    results = await asyncio.wait_for(
        asyncio.gather(
            publisher.publish(sari, sari_a),
            publisher.publish(sari, sari_b),
            publisher.publish(budi, budi_a),
            return_exceptions=True,
        ),
        timeout=4,
    )

    assert sum(isinstance(r, str) for r in results[:2]) == 1
    assert sum(isinstance(r, ConflictError) for r in results[:2]) == 1
    assert results[2] == hosting.url_for(budi)
    assert sorted(hosting.writes) == sorted([sari, budi])
