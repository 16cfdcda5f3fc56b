import asyncio
import json

import pytest

from bakebook.client.api_client import ApiError
from bakebook.client.session import BakeBookSession, OfflineLoginError

from fake_server import FakeServer


PIE = {"title": "Pie", "ingredients": ["apples"], "directions": "Bake"}


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def session(server):
    return BakeBookSession.create(base_url="http://test", store_url="sqlite://", transport=server.transport())


def test_login_caches_session(session):
    async def scenario():
        user = await session.login("Nonna", "applepie")
        return user, await session.store.get_token()

    user, token = asyncio.run(scenario())
    assert user["username"] == "nonna"
    assert token == "token-1"


def test_login_rejected_by_server(session):
    with pytest.raises(ApiError):
        asyncio.run(session.login("nonna", "wrong"))


def test_offline_login_uses_cached_session(session, server):
    async def scenario():
        await session.login("nonna", "applepie")
        server.down = True
        return await session.login("nonna", "anything")

    assert asyncio.run(scenario())["username"] == "nonna"
    assert session.connectivity.online is False


def test_offline_login_without_cache_fails(session):
    async def scenario():
        await session.connectivity.set_online(False)
        await session.login("nonna", "applepie")

    with pytest.raises(OfflineLoginError):
        asyncio.run(scenario())


def test_restore_validates_token(session, server):
    async def scenario():
        assert await session.restore() is None
        await session.login("nonna", "applepie")
        restored = await session.restore()
        await session.store.save_token("stale")
        expired = await session.restore()
        return restored, expired, await session.store.get_user()

    restored, expired, cached_user = asyncio.run(scenario())
    assert restored == {"id": 1, "username": "nonna"}
    assert expired is None
    assert cached_user is None


def test_online_create_goes_straight_to_server(session, server):
    async def scenario():
        await session.login("nonna", "applepie")
        recipe = await session.create_recipe(PIE)
        return recipe, await session.store.get_recipes(), await session.pending_changes()

    recipe, cached, pending = asyncio.run(scenario())
    assert recipe["id"] == 1
    assert server.recipes[1]["title"] == "Pie"
    assert [r["id"] for r in cached] == [1]
    assert pending == 0


def test_offline_edits_sync_when_back_online(session, server):
    async def scenario():
        await session.login("nonna", "applepie")
        await session.connectivity.set_online(False)

        draft = await session.create_recipe(PIE)
        await session.update_recipe(draft["id"], {"cook_time": "1 hour"})
        pending = await session.pending_changes()
        cached_while_offline = await session.store.get_recipe(draft["id"])

        # Going online triggers a sync pass through the listener
        await session.connectivity.set_online(True)
        return draft, pending, cached_while_offline, await session.store.get_recipes()

    draft, pending, cached_while_offline, recipes = asyncio.run(scenario())
    assert draft["id"].startswith("temp_")
    assert draft["user_id"] == 1
    assert pending == 1  # the update was merged into the queued create
    assert cached_while_offline["cook_time"] == "1 hour"

    assert server.recipes[1]["cook_time"] == "1 hour"
    assert "created_at" not in server.recipes[1]
    assert [r["id"] for r in recipes] == [1]
    assert session.last_sync.synced == 1


def test_server_failure_falls_back_to_queue(session, server):
    async def scenario():
        await session.login("nonna", "applepie")
        server.status_override = 503
        recipe = await session.create_recipe(PIE)
        return recipe, await session.outbox.items()

    recipe, items = asyncio.run(scenario())
    assert recipe["id"].startswith("temp_")
    assert len(items) == 1
    assert items[0].operation == "create"


def test_validation_errors_are_not_queued(session, server):
    async def scenario():
        await session.login("nonna", "applepie")
        server.status_override = 422
        await session.create_recipe({"title": ""})

    with pytest.raises(ApiError):
        asyncio.run(scenario())


def test_offline_delete_of_draft_queues_nothing(session):
    async def scenario():
        await session.login("nonna", "applepie")
        await session.connectivity.set_online(False)
        draft = await session.create_recipe(PIE)
        await session.delete_recipe(draft["id"])
        return await session.outbox.items(), await session.store.get_recipes()

    items, recipes = asyncio.run(scenario())
    assert items == []
    assert recipes == []


def test_offline_update_and_delete_of_server_recipe(session, server):
    async def scenario():
        await session.login("nonna", "applepie")
        recipe = await session.create_recipe(PIE)
        await session.connectivity.set_online(False)

        await session.update_recipe(recipe["id"], {"title": "Apple Pie"})
        await session.delete_recipe(recipe["id"])
        items = await session.outbox.items()

        result = await session.sync()  # still offline
        await session.connectivity.set_online(True)
        return items, result

    items, offline_result = asyncio.run(scenario())
    assert [item.operation for item in items] == ["delete"]
    assert offline_result.synced == 0 and offline_result.errors == 0
    assert server.recipes == {}


def test_logout_clears_session_and_drafts(session):
    async def scenario():
        await session.login("nonna", "applepie")
        saved = await session.create_recipe(PIE)
        await session.connectivity.set_online(False)
        await session.create_recipe({**PIE, "title": "Draft"})
        await session.logout()
        return saved, await session.store.get_recipes(), await session.outbox.items(), await session.current_user()

    saved, recipes, items, user = asyncio.run(scenario())
    assert recipes == [saved]
    assert items == []
    assert user is None


def _put_titles(server):
    return [
        json.loads(request.content)["title"]
        for request in server.requests
        if request.method == "PUT"
    ]


def test_online_update_waits_for_queued_edits(session, server):
    server.recipes[1] = {"id": 1, "title": "Soup", "user_id": 1}

    async def scenario():
        await session.login("nonna", "applepie")
        server.status_override = 503
        await session.update_recipe(1, {"title": "A"})
        failed = await session.sync()

        server.status_override = None
        recipe = await session.update_recipe(1, {"title": "B"})
        return failed, recipe, await session.outbox.items()

    failed, recipe, items = asyncio.run(scenario())
    assert failed.errors == 1
    assert items == []
    assert server.recipes[1]["title"] == "B"
    assert recipe["title"] == "B"
    # the 503 direct call, the failed replay, then both edits in order
    assert _put_titles(server) == ["A", "A", "A", "B"]


def test_online_delete_waits_for_queued_edits(session, server):
    server.recipes[1] = {"id": 1, "title": "Soup", "user_id": 1}

    async def scenario():
        await session.login("nonna", "applepie")
        server.status_override = 503
        await session.update_recipe(1, {"title": "A"})

        server.status_override = None
        await session.delete_recipe(1)
        return await session.outbox.items(), await session.store.get_recipes()

    items, recipes = asyncio.run(scenario())
    assert items == []
    assert recipes == []
    assert server.recipes == {}
    assert server.requests[-1].method == "DELETE"
